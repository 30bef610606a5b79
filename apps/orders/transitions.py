"""Allowed order status moves."""

from __future__ import annotations

from shared.domain.transitions import TransitionTable

from .models import Order

S = Order.Status

ORDER_TRANSITIONS = TransitionTable(
    "order",
    {
        S.PENDING: {S.PROCESSING, S.CANCELLED, S.CANCEL_REQUEST},
        S.PROCESSING: {S.CONFIRMED, S.CANCELLED, S.CANCEL_REQUEST},
        S.CONFIRMED: {S.SHIPPING, S.CANCELLED, S.CANCEL_REQUEST},
        S.SHIPPING: {S.DELIVERED, S.CANCELLED, S.CANCEL_REQUEST},
        S.DELIVERED: {S.COMPLETED},
        S.CANCEL_REQUEST: {S.CANCELLED},
    },
)
