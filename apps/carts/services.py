"""Cart operations."""

from __future__ import annotations

from typing import Iterable

from django.db import transaction  # type: ignore
from django.db.models import F  # type: ignore

from apps.catalog.models import Product
from shared.exceptions import NotFoundError

from .models import Cart, CartItem


def get_cart(user) -> Cart:  # type: ignore
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def _active_product(product_id: int) -> Product:
    try:
        return Product.objects.get(pk=product_id, is_active=True)
    except Product.DoesNotExist:
        raise NotFoundError("Product not found.")


@transaction.atomic
def add_item(user, product_id: int, quantity: int = 1) -> Cart:  # type: ignore
    """Add a product, merging with an existing line for the same product."""

    product = _active_product(product_id)
    cart = get_cart(user)
    item, created = CartItem.objects.select_for_update().get_or_create(
        cart=cart,
        product=product,
        defaults={"quantity": quantity},
    )
    if not created:
        CartItem.objects.filter(pk=item.pk).update(quantity=F("quantity") + quantity)
    cart.save(update_fields=["updated_at"])
    return cart


@transaction.atomic
def update_item(user, product_id: int, quantity: int) -> Cart:  # type: ignore
    """Set the quantity of a line; zero or less removes it."""

    cart = get_cart(user)
    items = CartItem.objects.filter(cart=cart, product_id=product_id)
    if not items.exists():
        raise NotFoundError("Product is not in the cart.")
    if quantity <= 0:
        items.delete()
    else:
        items.update(quantity=quantity)
    cart.save(update_fields=["updated_at"])
    return cart


def remove_item(user, product_id: int) -> Cart:  # type: ignore
    cart = get_cart(user)
    deleted, _ = CartItem.objects.filter(cart=cart, product_id=product_id).delete()
    if not deleted:
        raise NotFoundError("Product is not in the cart.")
    return cart


def clear_cart(user) -> Cart:  # type: ignore
    cart = get_cart(user)
    cart.items.all().delete()
    return cart


def remove_products(user, product_ids: Iterable[int]) -> None:  # type: ignore
    """Drop purchased products from the user's cart after checkout."""

    CartItem.objects.filter(cart__user=user, product_id__in=list(product_ids)).delete()
