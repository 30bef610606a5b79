"""Tests for product listing and atomic stock operations."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Product
from apps.catalog.services import reserve_stock, restore_stock
from apps.users.models import User
from shared.exceptions import OutOfStockError


@pytest.mark.django_db
def test_reserve_exact_remaining_stock_leaves_zero():
    product = Product.objects.create(name="Tent", price=Decimal("1000000"), stock=3)

    reserve_stock(product, 3)

    product.refresh_from_db()
    assert product.stock == 0


@pytest.mark.django_db
def test_reserve_more_than_stock_fails_and_keeps_stock():
    product = Product.objects.create(name="Stove", price=Decimal("450000"), stock=2)

    with pytest.raises(OutOfStockError):
        reserve_stock(product, 3)

    product.refresh_from_db()
    assert product.stock == 2


@pytest.mark.django_db
def test_inactive_product_cannot_be_reserved():
    product = Product.objects.create(name="Lantern", price=Decimal("90000"), stock=5, is_active=False)

    with pytest.raises(OutOfStockError):
        reserve_stock(product, 1)


@pytest.mark.django_db
def test_restore_skips_deleted_products():
    product = Product.objects.create(name="Mat", price=Decimal("200000"), stock=1)

    restored = restore_stock([(product.pk, 2), (None, 4)])

    product.refresh_from_db()
    assert restored == 1
    assert product.stock == 3


@pytest.mark.django_db
def test_unit_price_prefers_lower_deal_price():
    product = Product(name="Chair", price=Decimal("300000"), deal_price=Decimal("250000"))
    assert product.unit_price == Decimal("250000")
    product.deal_price = Decimal("350000")
    assert product.unit_price == Decimal("300000")


class ProductAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.guest = User.objects.create_user(email="guest@example.com", password="GuestPass123")
        self.active = Product.objects.create(name="Sleeping bag", price=Decimal("700000"), stock=4)
        self.hidden = Product.objects.create(
            name="Old compass", price=Decimal("50000"), stock=1, is_active=False
        )
        self.list_url = reverse("product-list")

    def test_anonymous_list_hides_inactive_products(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        ids = [item["id"] for item in response.data["data"]]
        self.assertEqual(ids, [self.active.id])
        self.assertEqual(response.data["pagination"]["total"], 1)

    def test_guest_cannot_create_product(self) -> None:
        self.client.force_authenticate(self.guest)

        response = self.client.post(self.list_url, {"name": "Axe", "price": "100000"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data["success"])

    def test_admin_creates_product_with_envelope(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"name": "Camp Axe", "price": "100000", "stock": 10},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["message"], "Product created")
        self.assertEqual(response.data["data"]["slug"], "camp-axe")

    def test_deal_price_above_price_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"name": "Rope", "price": "100000", "deal_price": "120000"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertIn("deal_price: Deal price cannot exceed the price.", response.data["errors"])
