"""Order lifecycle services.

Every mutation runs in one transaction: stock movements, the order row,
its history entry and the notifications produced by the published events
either all land or none do.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections import OrderedDict
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.carts.services import remove_products
from apps.catalog.models import Product
from apps.catalog.services import record_sales, reserve_stock, restore_stock
from shared.application.message_bus import message_bus
from shared.exceptions import ConflictError, DomainError, NotFoundError, PermissionDeniedError

from .events import OrderCancellationRequested, OrderPlaced, OrderStatusChanged
from .models import Order, OrderHistoryEntry, OrderItem
from .transitions import ORDER_TRANSITIONS

if TYPE_CHECKING:  # pragma: no cover
    from apps.users.models import CustomUser

logger = logging.getLogger(__name__)


# ============================================================================
# PRICING
# ============================================================================

def shipping_fee_for(method: str) -> Decimal:
    fees: Mapping[str, Decimal] = settings.ORDER_SHIPPING_FEES
    try:
        return Decimal(fees[method])
    except KeyError:
        raise DomainError(f'Unknown shipping method "{method}".', code="INVALID_SHIPPING_METHOD")


def tax_for(items_total: Decimal) -> Decimal:
    rate = Decimal(settings.ORDER_TAX_RATE)
    return (items_total * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def new_payment_reference() -> int:
    """Integer reference handed to the card payment provider."""
    return int(time.time() * 1000) * 1000 + secrets.randbelow(1000)


def stock_lines(order: Order) -> list[tuple[int | None, int]]:
    return [(item.product_id, item.quantity) for item in order.items.all()]


def _merge_lines(items: Iterable[Mapping[str, Any]]) -> "OrderedDict[int, int]":
    merged: "OrderedDict[int, int]" = OrderedDict()
    for item in items:
        product_id = int(item["product"])
        quantity = int(item["quantity"])
        if quantity < 1:
            raise DomainError("Quantity must be at least 1.", code="INVALID_QUANTITY")
        merged[product_id] = merged.get(product_id, 0) + quantity
    if not merged:
        raise DomainError("An order needs at least one item.", code="EMPTY_ORDER")
    # Lock rows in a stable order so concurrent checkouts do not deadlock.
    return OrderedDict(sorted(merged.items()))


def _append_history(order: Order, status: str, note: str = "", images: list[str] | None = None) -> OrderHistoryEntry:
    return OrderHistoryEntry.objects.create(order=order, status=status, note=note or "", images=images or [])


def _locked(order: Order) -> Order:
    return Order.objects.select_for_update().get(pk=order.pk)


# ============================================================================
# CHECKOUT
# ============================================================================

@transaction.atomic
def create_order(
    user: "CustomUser",
    *,
    items: Iterable[Mapping[str, Any]],
    address: Mapping[str, str],
    payment_method: str,
    shipping_method: str = Order.ShippingMethod.STANDARD,
    promo_code: str = "",
    order_note: str = "",
) -> Order:
    """Reserve stock for every line and persist the order.

    Raises :class:`~shared.exceptions.OutOfStockError` as soon as one line
    cannot be served; the surrounding transaction rolls back the
    decrements already made for earlier lines.
    """

    lines: list[tuple[Product, int, Decimal]] = []
    for product_id, quantity in _merge_lines(items).items():
        product = Product.objects.filter(pk=product_id, is_active=True).first()
        if product is None:
            raise NotFoundError(f"Product {product_id} not found.")
        reserve_stock(product, quantity)
        lines.append((product, quantity, product.unit_price))

    items_total = sum((price * quantity for _, quantity, price in lines), Decimal("0"))
    order = Order(
        user=user,
        full_name=address["full_name"],
        phone=address["phone"],
        address_line=address["address_line"],
        province=address["province"],
        district=address.get("district", ""),
        shipping_method=shipping_method,
        payment_method=payment_method,
        items_total=items_total,
        shipping_fee=shipping_fee_for(shipping_method),
        tax=tax_for(items_total),
        promo_code=promo_code or "",
        order_note=order_note or "",
    )
    if payment_method == Order.PaymentMethod.CARD:
        order.payment_reference = new_payment_reference()
    else:
        # Cash on delivery needs no payment step before fulfilment.
        order.order_status = Order.Status.PROCESSING
    order.save()

    for product, quantity, price in lines:
        OrderItem.objects.create(
            order=order,
            product=product,
            name=product.name,
            image=product.image,
            unit_price=price,
            quantity=quantity,
        )
    _append_history(order, order.order_status, "Order placed")
    remove_products(user, [product.pk for product, _, _ in lines])

    logger.info(
        f"Order {order.code} placed by user {user.id}: {len(lines)} lines, total {order.grand_total}"
    )
    message_bus.publish(
        OrderPlaced(
            aggregate_id=order.pk,
            order_id=order.pk,
            user_id=user.id,
            code=order.code,
            payment_method=order.payment_method,
        )
    )
    return order


# ============================================================================
# STATUS CHANGES
# ============================================================================

def _change_status(order: Order, new_status: str, *, note: str = "", images: list[str] | None = None) -> Order:
    """Validate and apply a status move on a locked order."""

    ORDER_TRANSITIONS.validate(order.order_status, new_status)
    previous = order.order_status
    order.order_status = new_status
    fields = ["order_status", "updated_at"]
    if new_status == Order.Status.CANCELLED:
        restore_stock(stock_lines(order))
        order.cancelled_at = timezone.now()
        fields.append("cancelled_at")
    order.save(update_fields=fields)
    _append_history(order, new_status, note, images)

    logger.info(f"Order {order.code} status changed {previous} -> {new_status}")
    message_bus.publish(
        OrderStatusChanged(
            aggregate_id=order.pk,
            order_id=order.pk,
            user_id=order.user_id,
            code=order.code,
            previous_status=previous,
            new_status=new_status,
            note=note or "",
        )
    )
    return order


@transaction.atomic
def update_status(order: Order, new_status: str, *, note: str = "", images: list[str] | None = None) -> Order:
    return _change_status(_locked(order), new_status, note=note, images=images)


@transaction.atomic
def cancel_order(order: Order, user: "CustomUser", *, reason: str = "") -> Order:
    """Owner cancels a pending order; stock goes back immediately."""

    order = _locked(order)
    if order.user_id != user.id:
        raise PermissionDeniedError("You can only cancel your own orders.")
    if order.order_status != Order.Status.PENDING:
        raise ConflictError(
            "Only pending orders can be cancelled directly, request a cancellation instead.",
            code="ORDER_NOT_PENDING",
        )
    return _change_status(order, Order.Status.CANCELLED, note=reason or "Cancelled by customer")


@transaction.atomic
def request_cancellation(order: Order, user: "CustomUser", *, reason: str = "") -> Order:
    order = _locked(order)
    if order.user_id != user.id:
        raise PermissionDeniedError("You can only cancel your own orders.")
    if order.order_status == Order.Status.PENDING:
        raise ConflictError(
            "Pending orders can be cancelled directly, no request is needed.",
            code="ORDER_PENDING",
        )
    order = _change_status(order, Order.Status.CANCEL_REQUEST, note=reason)
    message_bus.publish(
        OrderCancellationRequested(
            aggregate_id=order.pk,
            order_id=order.pk,
            user_id=order.user_id,
            code=order.code,
            reason=reason or "",
        )
    )
    return order


def status_before_request(order: Order) -> str:
    entry = (
        order.history.exclude(status=Order.Status.CANCEL_REQUEST)
        .order_by("-created_at", "-id")
        .first()
    )
    return entry.status if entry else Order.Status.PENDING


@transaction.atomic
def reject_cancellation(order: Order, *, note: str = "") -> Order:
    """Put a ``cancel_request`` order back where it was before the request.

    The return move is not part of the regular transition table, so it is
    handled here rather than through :func:`update_status`.
    """

    order = _locked(order)
    if order.order_status != Order.Status.CANCEL_REQUEST:
        raise ConflictError("Order has no pending cancellation request.", code="NO_CANCEL_REQUEST")
    restored = status_before_request(order)
    order.order_status = restored
    order.save(update_fields=["order_status", "updated_at"])
    _append_history(order, restored, note or "Cancellation request rejected")

    logger.info(f"Order {order.code} cancellation rejected, back to {restored}")
    message_bus.publish(
        OrderStatusChanged(
            aggregate_id=order.pk,
            order_id=order.pk,
            user_id=order.user_id,
            code=order.code,
            previous_status=Order.Status.CANCEL_REQUEST,
            new_status=restored,
            note=note or "",
        )
    )
    return order


@transaction.atomic
def adjust_totals(
    order: Order,
    *,
    shipping_fee: Decimal | None = None,
    tax: Decimal | None = None,
    discount: Decimal | None = None,
    order_note: str | None = None,
) -> Order:
    order = _locked(order)
    fields = ["updated_at"]
    for name, value in (("shipping_fee", shipping_fee), ("tax", tax), ("discount", discount)):
        if value is not None:
            setattr(order, name, Decimal(value))
            fields.append(name)
    if order_note is not None:
        order.order_note = order_note
        fields.append("order_note")
    if order.compute_grand_total() < 0:
        raise DomainError("Discount cannot exceed the order total.", code="INVALID_DISCOUNT")
    order.save(update_fields=fields)
    logger.info(f"Order {order.code} totals adjusted, grand total {order.grand_total}")
    return order


# ============================================================================
# PAYMENT WEBHOOK
# ============================================================================

@transaction.atomic
def apply_payment_result(reference: int, succeeded: bool) -> Order:
    """Settle a card order from the provider's webhook.

    Only an order still awaiting payment is touched. Replays of a settled
    order, or a result arriving after the order was cancelled, leave it as
    it is.
    """

    order = Order.objects.select_for_update().filter(payment_reference=reference).first()
    if order is None:
        raise NotFoundError(f"No order for payment reference {reference}.")

    if not order.is_unpaid:
        logger.info(
            f"Ignoring payment result for order {order.code}: "
            f"already {order.payment_status}/{order.order_status}"
        )
        return order

    if succeeded:
        order.payment_status = Order.PaymentStatus.PAID
        order.save(update_fields=["payment_status", "updated_at"])
        record_sales(stock_lines(order))
        _change_status(order, Order.Status.PROCESSING, note="Payment received")
    else:
        order.payment_status = Order.PaymentStatus.FAILED
        order.save(update_fields=["payment_status", "updated_at"])
        _change_status(order, Order.Status.CANCELLED, note="Payment failed")

    logger.info(f"Payment for order {order.code} {'succeeded' if succeeded else 'failed'}")
    return order
