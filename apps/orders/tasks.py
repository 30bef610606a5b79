"""Celery tasks for orders."""

from __future__ import annotations

from celery import shared_task  # type: ignore

from .sweeper import OrderExpirySweeper


@shared_task(name="orders.sweep_expired_orders")
def sweep_expired_orders() -> dict[str, int]:
    """Delete stale COD orders and cancel stale card orders, restoring stock."""
    return OrderExpirySweeper().sweep()
