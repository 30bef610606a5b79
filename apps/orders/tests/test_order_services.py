"""Service level tests for checkout, status changes and the unpaid order sweep."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.carts.models import CartItem
from apps.carts.services import add_item
from apps.catalog.models import Product
from apps.orders import services
from apps.orders.models import Order
from apps.orders.sweeper import OrderExpirySweeper
from apps.users.models import User
from shared.exceptions import ConflictError, InvalidTransitionError, OutOfStockError

ADDRESS = {
    "full_name": "Nguyen Van A",
    "phone": "0901234567",
    "address_line": "12 Le Loi",
    "province": "Lam Dong",
    "district": "Da Lat",
}


@pytest.fixture
def customer(db):
    return User.objects.create_user(email="buyer@example.com", password="BuyerPass123")


@pytest.fixture
def tent(db):
    return Product.objects.create(name="Tent", price=Decimal("1000000"), stock=5)


def place(user, product, quantity, payment_method=Order.PaymentMethod.COD):
    return services.create_order(
        user,
        items=[{"product": product.id, "quantity": quantity}],
        address=ADDRESS,
        payment_method=payment_method,
    )


@pytest.mark.django_db
def test_totals_are_computed_server_side(customer, tent):
    order = place(customer, tent, 2)

    assert order.items_total == Decimal("2000000")
    assert order.shipping_fee == Decimal("30000")
    assert order.tax == Decimal("200000")
    assert order.grand_total == order.items_total + order.shipping_fee + order.tax - order.discount
    assert order.code.startswith("HD")
    assert order.payment_status == Order.PaymentStatus.PENDING
    assert order.order_status == Order.Status.PROCESSING
    assert [entry.status for entry in order.history.all()] == ["processing"]


@pytest.mark.django_db
def test_card_orders_get_a_payment_reference(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)

    assert order.payment_reference is not None
    assert order.payment_status == Order.PaymentStatus.PENDING
    assert order.order_status == Order.Status.PENDING
    assert [entry.status for entry in order.history.all()] == ["pending"]


@pytest.mark.django_db
def test_ordering_exact_remaining_stock_succeeds(customer, tent):
    place(customer, tent, 5)

    tent.refresh_from_db()
    assert tent.stock == 0


@pytest.mark.django_db
def test_ordering_one_more_than_stock_fails(customer, tent):
    with pytest.raises(OutOfStockError):
        place(customer, tent, 6)

    tent.refresh_from_db()
    assert tent.stock == 5
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_failed_line_rolls_back_earlier_decrements(customer, tent):
    lamp = Product.objects.create(name="Lamp", price=Decimal("100000"), stock=1)

    with pytest.raises(OutOfStockError):
        services.create_order(
            customer,
            items=[{"product": tent.id, "quantity": 2}, {"product": lamp.id, "quantity": 2}],
            address=ADDRESS,
            payment_method=Order.PaymentMethod.COD,
        )

    tent.refresh_from_db()
    assert tent.stock == 5


@pytest.mark.django_db
def test_two_checkouts_for_the_last_unit(customer):
    last = Product.objects.create(name="Last lantern", price=Decimal("250000"), stock=1)
    other = User.objects.create_user(email="other@example.com", password="OtherPass123")

    place(customer, last, 1)
    with pytest.raises(OutOfStockError):
        place(other, last, 1)

    last.refresh_from_db()
    assert last.stock == 0
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_checkout_removes_ordered_products_from_cart(customer, tent):
    lamp = Product.objects.create(name="Lamp", price=Decimal("100000"), stock=3)
    add_item(customer, tent.id, 1)
    add_item(customer, lamp.id, 1)

    place(customer, tent, 1)

    assert list(CartItem.objects.values_list("product_id", flat=True)) == [lamp.id]


@pytest.mark.django_db
def test_status_change_appends_history(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)

    services.update_status(order, Order.Status.PROCESSING, note="Packed")

    order.refresh_from_db()
    assert order.order_status == Order.Status.PROCESSING
    assert [entry.status for entry in order.history.all()] == ["pending", "processing"]


@pytest.mark.django_db
def test_illegal_transition_is_rejected(customer, tent):
    order = place(customer, tent, 1)

    with pytest.raises(InvalidTransitionError):
        services.update_status(order, Order.Status.DELIVERED)

    order.refresh_from_db()
    assert order.order_status == Order.Status.PROCESSING


@pytest.mark.django_db
def test_cancelling_restores_stock(customer, tent):
    order = place(customer, tent, 3)

    services.update_status(order, Order.Status.CANCELLED)

    tent.refresh_from_db()
    order.refresh_from_db()
    assert tent.stock == 5
    assert order.cancelled_at is not None


@pytest.mark.django_db
def test_owner_cannot_cancel_directly_once_processing(customer, tent):
    order = place(customer, tent, 1)

    with pytest.raises(ConflictError):
        services.cancel_order(order, customer)


@pytest.mark.django_db
def test_rejected_cancellation_returns_to_previous_status(customer, tent):
    order = place(customer, tent, 1)
    services.update_status(order, Order.Status.CONFIRMED)
    services.request_cancellation(order, customer, reason="Changed my mind")

    order = services.reject_cancellation(order)

    assert order.order_status == Order.Status.CONFIRMED


@pytest.mark.django_db
def test_adjusting_totals_keeps_grand_total_consistent(customer, tent):
    order = place(customer, tent, 1)

    order = services.adjust_totals(order, discount=Decimal("50000"), shipping_fee=Decimal("0"))

    order.refresh_from_db()
    assert order.grand_total == Decimal("1000000") + Decimal("100000") - Decimal("50000")


@pytest.mark.django_db
def test_payment_success_moves_order_to_processing(customer, tent):
    order = place(customer, tent, 2, Order.PaymentMethod.CARD)

    services.apply_payment_result(order.payment_reference, True)

    order.refresh_from_db()
    tent.refresh_from_db()
    assert order.payment_status == Order.PaymentStatus.PAID
    assert order.order_status == Order.Status.PROCESSING
    assert tent.sold_count == 2


@pytest.mark.django_db
def test_payment_failure_cancels_and_restores_stock(customer, tent):
    order = place(customer, tent, 2, Order.PaymentMethod.CARD)

    services.apply_payment_result(order.payment_reference, False)

    order.refresh_from_db()
    tent.refresh_from_db()
    assert order.payment_status == Order.PaymentStatus.FAILED
    assert order.order_status == Order.Status.CANCELLED
    assert tent.stock == 5


@pytest.mark.django_db
def test_payment_replay_is_a_no_op(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)
    services.apply_payment_result(order.payment_reference, True)

    services.apply_payment_result(order.payment_reference, False)

    order.refresh_from_db()
    assert order.payment_status == Order.PaymentStatus.PAID
    assert order.order_status == Order.Status.PROCESSING


@pytest.mark.django_db
def test_pending_order_cannot_be_put_into_cancel_request(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)

    with pytest.raises(ConflictError) as info:
        services.request_cancellation(order, customer, reason="Too slow")

    order.refresh_from_db()
    assert info.value.code == "ORDER_PENDING"
    assert order.order_status == Order.Status.PENDING
    assert services.cancel_order(order, customer).order_status == Order.Status.CANCELLED


# ============================================================================
# SWEEP
# ============================================================================

def _age(order, delta):
    Order.objects.filter(pk=order.pk).update(created_at=timezone.now() - delta)


def _unconfirmed_cod(user, product, quantity, age=timedelta(0)):
    """A COD order left in pending/pending, the state the sweep targets."""

    order = place(user, product, quantity)
    Order.objects.filter(pk=order.pk).update(
        order_status=Order.Status.PENDING, created_at=timezone.now() - age
    )
    return order


@pytest.mark.django_db
def test_stale_cod_order_is_deleted_and_stock_restored(customer, tent):
    order = _unconfirmed_cod(customer, tent, 2, timedelta(minutes=16))

    result = OrderExpirySweeper().sweep()

    tent.refresh_from_db()
    assert result["deleted"] == 1
    assert not Order.objects.filter(pk=order.pk).exists()
    assert tent.stock == 5


@pytest.mark.django_db
def test_recent_cod_order_survives_the_sweep(customer, tent):
    order = _unconfirmed_cod(customer, tent, 2, timedelta(minutes=10))

    result = OrderExpirySweeper().sweep()

    assert result == {"deleted": 0, "cancelled": 0, "failed": 0}
    assert Order.objects.filter(pk=order.pk).exists()


@pytest.mark.django_db
def test_cod_checkout_is_not_swept(customer, tent):
    order = place(customer, tent, 2)
    later = timezone.now() + timedelta(minutes=16)

    result = OrderExpirySweeper(clock=lambda: later).sweep()

    tent.refresh_from_db()
    assert result == {"deleted": 0, "cancelled": 0, "failed": 0}
    assert Order.objects.filter(pk=order.pk).exists()
    assert tent.stock == 3


@pytest.mark.django_db
def test_stale_card_order_is_cancelled(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)
    _age(order, timedelta(hours=13))

    result = OrderExpirySweeper().sweep()

    order.refresh_from_db()
    tent.refresh_from_db()
    assert result["cancelled"] == 1
    assert order.order_status == Order.Status.CANCELLED
    assert order.payment_status == Order.PaymentStatus.FAILED
    assert tent.stock == 5


@pytest.mark.django_db
def test_paid_card_order_is_not_swept(customer, tent):
    order = place(customer, tent, 1, Order.PaymentMethod.CARD)
    services.apply_payment_result(order.payment_reference, True)
    _age(order, timedelta(hours=13))

    result = OrderExpirySweeper().sweep()

    order.refresh_from_db()
    assert result["cancelled"] == 0
    assert order.order_status == Order.Status.PROCESSING


@pytest.mark.django_db
def test_sweeper_uses_injected_clock_and_timeout(customer, tent):
    order = _unconfirmed_cod(customer, tent, 1)
    later = timezone.now() + timedelta(minutes=3)

    result = OrderExpirySweeper(cod_timeout=timedelta(minutes=2), clock=lambda: later).sweep()

    assert result["deleted"] == 1
    assert not Order.objects.filter(pk=order.pk).exists()
