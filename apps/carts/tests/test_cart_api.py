"""Integration tests for the cart endpoints."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.carts.models import CartItem
from apps.catalog.models import Product
from apps.users.models import User


class CartAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="shopper@example.com", password="ShopPass123")
        self.tent = Product.objects.create(name="Tent", price=Decimal("1500000"), stock=5)
        self.stove = Product.objects.create(
            name="Stove", price=Decimal("500000"), deal_price=Decimal("400000"), stock=5
        )
        self.client.force_authenticate(self.user)
        self.items_url = reverse("cart-items")

    def _item_url(self, product: Product) -> str:
        return reverse("cart-item-detail", args=[product.id])

    def test_cart_is_created_lazily(self) -> None:
        response = self.client.get(reverse("cart-detail"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["items"], [])
        self.assertEqual(response.data["data"]["subtotal"], "0.00")

    def test_adding_same_product_twice_merges_quantities(self) -> None:
        self.client.post(self.items_url, {"product": self.tent.id, "quantity": 1}, format="json")
        response = self.client.post(self.items_url, {"product": self.tent.id, "quantity": 2}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        items = response.data["data"]["items"]
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["quantity"], 3)
        self.assertEqual(CartItem.objects.count(), 1)

    def test_subtotal_uses_deal_price(self) -> None:
        self.client.post(self.items_url, {"product": self.stove.id, "quantity": 2}, format="json")

        response = self.client.get(reverse("cart-detail"))

        self.assertEqual(response.data["data"]["subtotal"], "800000.00")

    def test_update_to_zero_removes_line(self) -> None:
        self.client.post(self.items_url, {"product": self.tent.id}, format="json")

        response = self.client.patch(self._item_url(self.tent), {"quantity": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"]["items"], [])

    def test_update_missing_line_returns_not_found(self) -> None:
        response = self.client.patch(self._item_url(self.tent), {"quantity": 2}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "NOT_FOUND")

    def test_remove_and_clear(self) -> None:
        self.client.post(self.items_url, {"product": self.tent.id}, format="json")
        self.client.post(self.items_url, {"product": self.stove.id}, format="json")

        response = self.client.delete(self._item_url(self.tent))
        self.assertEqual(len(response.data["data"]["items"]), 1)

        response = self.client.delete(reverse("cart-detail"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Cart cleared")
        self.assertEqual(CartItem.objects.count(), 0)

    def test_inactive_product_cannot_be_added(self) -> None:
        self.tent.is_active = False
        self.tent.save()

        response = self.client.post(self.items_url, {"product": self.tent.id}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
