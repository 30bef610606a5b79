"""Stock operations.

Stock is decremented with a single conditional UPDATE, so two checkouts
racing for the last unit cannot both succeed: the second one matches no
row and fails with :class:`~shared.exceptions.OutOfStockError`.
"""

from __future__ import annotations

import logging
from typing import Iterable

from django.db.models import F  # type: ignore

from shared.exceptions import OutOfStockError

from .models import Product

logger = logging.getLogger(__name__)


def reserve_stock(product: Product, quantity: int) -> None:
    """Decrement stock if at least ``quantity`` units are available."""

    if quantity <= 0:
        raise ValueError("Quantity must be positive.")
    updated = Product.objects.filter(
        pk=product.pk,
        is_active=True,
        stock__gte=quantity,
    ).update(stock=F("stock") - quantity)
    if not updated:
        raise OutOfStockError(
            f'"{product.name}" does not have enough stock.',
            details={"product": product.pk, "requested": quantity},
        )


def restore_stock(lines: Iterable[tuple[int | None, int]]) -> int:
    """Give ``(product_id, quantity)`` pairs back to stock; missing products are skipped."""

    restored = 0
    for product_id, quantity in lines:
        if product_id is None or quantity <= 0:
            continue
        restored += Product.objects.filter(pk=product_id).update(stock=F("stock") + quantity)
    return restored


def record_sales(lines: Iterable[tuple[int | None, int]]) -> None:
    for product_id, quantity in lines:
        if product_id is None:
            continue
        Product.objects.filter(pk=product_id).update(sold_count=F("sold_count") + quantity)
