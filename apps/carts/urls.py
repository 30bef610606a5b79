"""URL routing for the cart."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CartViewSet

cart_detail = CartViewSet.as_view({"get": "retrieve", "delete": "clear"})
cart_items = CartViewSet.as_view({"post": "add_item"})
cart_item_detail = CartViewSet.as_view({"patch": "update_item", "delete": "remove_item"})

urlpatterns = [
    path("", cart_detail, name="cart-detail"),
    path("items/", cart_items, name="cart-items"),
    path("items/<int:product_id>/", cart_item_detail, name="cart-item-detail"),
]
