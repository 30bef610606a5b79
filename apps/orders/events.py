"""
Order Domain Events

Published on the message bus by :mod:`apps.orders.services` after the
state change has been written. Handlers run inside the same transaction.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class OrderPlaced(DomainEvent):
    order_id: int
    user_id: int
    code: str
    payment_method: str


@dataclass(kw_only=True)
class OrderStatusChanged(DomainEvent):
    """
    Event: order status moved

    Triggers:
    - Notify the owner (order_confirmed / order_shipping / ...)
    """
    order_id: int
    user_id: int
    code: str
    previous_status: str
    new_status: str
    note: str = ""


@dataclass(kw_only=True)
class OrderCancellationRequested(DomainEvent):
    """
    Event: the owner asked to cancel an order already in progress

    Triggers:
    - Notify every admin (order_return_request)
    """
    order_id: int
    user_id: int
    code: str
    reason: str = ""

