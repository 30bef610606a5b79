"""Expiry of unpaid orders.

Cash on delivery checkouts start in processing. Any that are still
pending after ``ORDER_COD_TIMEOUT`` are deleted; card orders still unpaid after ``ORDER_CARD_TIMEOUT`` are
cancelled with a failed payment. Either way the reserved stock goes back.
Each order is handled in its own transaction so one bad row cannot stop
the sweep.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.models import Manager  # type: ignore
from django.utils import timezone  # type: ignore

from apps.catalog.services import restore_stock
from shared.application.message_bus import message_bus

from .events import OrderStatusChanged
from .models import Order, OrderHistoryEntry

logger = logging.getLogger(__name__)


class OrderExpirySweeper:
    def __init__(
        self,
        orders: Manager | None = None,
        *,
        cod_timeout: timedelta | None = None,
        card_timeout: timedelta | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.orders = orders if orders is not None else Order.objects
        self.cod_timeout = cod_timeout if cod_timeout is not None else settings.ORDER_COD_TIMEOUT
        self.card_timeout = card_timeout if card_timeout is not None else settings.ORDER_CARD_TIMEOUT
        self.clock = clock

    def _expired(self, payment_method: str, timeout: timedelta):  # type: ignore
        return self.orders.filter(
            payment_method=payment_method,
            payment_status=Order.PaymentStatus.PENDING,
            order_status=Order.Status.PENDING,
            created_at__lt=self.clock() - timeout,
        )

    def expired_cod_orders(self):  # type: ignore
        return self._expired(Order.PaymentMethod.COD, self.cod_timeout)

    def expired_card_orders(self):  # type: ignore
        return self._expired(Order.PaymentMethod.CARD, self.card_timeout)

    def _lock(self, queryset, pk: int) -> Order | None:  # type: ignore
        # Re-check the expiry conditions under lock; the order may have been
        # paid or confirmed since it was listed.
        return queryset.select_for_update().filter(pk=pk).first()

    def _delete_cod(self, pk: int) -> bool:
        with transaction.atomic():
            order = self._lock(self.expired_cod_orders(), pk)
            if order is None:
                return False
            restore_stock((item.product_id, item.quantity) for item in order.items.all())
            code = order.code
            order.delete()
        logger.info(f"Deleted unpaid COD order {code}")
        return True

    def _cancel_card(self, pk: int) -> bool:
        with transaction.atomic():
            order = self._lock(self.expired_card_orders(), pk)
            if order is None:
                return False
            restore_stock((item.product_id, item.quantity) for item in order.items.all())
            order.order_status = Order.Status.CANCELLED
            order.payment_status = Order.PaymentStatus.FAILED
            order.cancelled_at = self.clock()
            order.save(update_fields=["order_status", "payment_status", "cancelled_at", "updated_at"])
            OrderHistoryEntry.objects.create(
                order=order, status=Order.Status.CANCELLED, note="Payment window expired"
            )
            message_bus.publish(
                OrderStatusChanged(
                    aggregate_id=order.pk,
                    order_id=order.pk,
                    user_id=order.user_id,
                    code=order.code,
                    previous_status=Order.Status.PENDING,
                    new_status=Order.Status.CANCELLED,
                    note="Payment window expired",
                )
            )
        logger.info(f"Cancelled unpaid card order {order.code}")
        return True

    def sweep(self) -> dict[str, int]:
        result = {"deleted": 0, "cancelled": 0, "failed": 0}

        for pk in list(self.expired_cod_orders().values_list("pk", flat=True)):
            try:
                if self._delete_cod(pk):
                    result["deleted"] += 1
            except Exception as e:
                result["failed"] += 1
                logger.error(f"Error expiring COD order {pk}: {e}", exc_info=True)

        for pk in list(self.expired_card_orders().values_list("pk", flat=True)):
            try:
                if self._cancel_card(pk):
                    result["cancelled"] += 1
            except Exception as e:
                result["failed"] += 1
                logger.error(f"Error expiring card order {pk}: {e}", exc_info=True)

        if result["deleted"] or result["cancelled"] or result["failed"]:
            logger.info(
                f"Order sweep: {result['deleted']} deleted, "
                f"{result['cancelled']} cancelled, {result['failed']} failed"
            )
        return result
