"""Integration tests for the order endpoints."""

from __future__ import annotations

import json
from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Product
from apps.orders.models import Order
from apps.orders.payments import sign_payload
from apps.users.models import User


class OrderAPITests(APITestCase):
    def setUp(self) -> None:
        self.customer = User.objects.create_user(email="customer@example.com", password="CustPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com", password="AdminPass123", role=User.RoleChoices.ADMIN
        )
        self.product = Product.objects.create(name="Sleeping bag", price=Decimal("800000"), stock=4)
        self.list_url = reverse("order-list")

    def _checkout(self, quantity: int = 1, payment_method: str = "cod"):
        self.client.force_authenticate(self.customer)
        return self.client.post(
            self.list_url,
            {
                "items": [{"product": self.product.id, "quantity": quantity}],
                "address": {
                    "full_name": "Tran Thi B",
                    "phone": "0912345678",
                    "address_line": "5 Tran Phu",
                    "province": "Ha Noi",
                },
                "payment_method": payment_method,
            },
            format="json",
        )

    def test_checkout_returns_envelope(self) -> None:
        response = self._checkout(2)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Order placed")
        self.assertEqual(len(response.data["data"]["items"]), 1)
        self.assertEqual(response.data["data"]["order_status"], "processing")

    def test_checkout_out_of_stock_returns_conflict(self) -> None:
        response = self._checkout(5)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["code"], "OUT_OF_STOCK")

    def test_checkout_validation_error_is_422(self) -> None:
        self.client.force_authenticate(self.customer)
        response = self.client.post(self.list_url, {"items": []}, format="json")

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.data["code"], "VALIDATION_ERROR")

    def test_customers_only_list_their_orders(self) -> None:
        self._checkout()
        stranger = User.objects.create_user(email="stranger@example.com", password="StrangerPass1")
        self.client.force_authenticate(stranger)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"], [])
        self.assertEqual(response.data["pagination"]["total"], 0)

    def test_admin_status_update_and_invalid_transition(self) -> None:
        order_id = self._checkout().data["data"]["id"]
        self.client.force_authenticate(self.admin)
        url = reverse("order-set-status", args=[order_id])

        ok = self.client.post(url, {"status": "confirmed"}, format="json")
        bad = self.client.post(url, {"status": "completed"}, format="json")

        self.assertEqual(ok.status_code, status.HTTP_200_OK, ok.data)
        self.assertEqual(ok.data["data"]["order_status"], "confirmed")
        self.assertEqual(bad.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(bad.data["code"], "INVALID_TRANSITION")

    def test_customer_cannot_set_status(self) -> None:
        order_id = self._checkout().data["data"]["id"]

        response = self.client.post(
            reverse("order-set-status", args=[order_id]), {"status": "processing"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_owner_cancels_pending_order(self) -> None:
        order_id = self._checkout(3, "card").data["data"]["id"]

        response = self.client.post(reverse("order-cancel", args=[order_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 4)

    def _webhook(self, payload: dict, signature: str | None = None):
        body = json.dumps(payload).encode()
        self.client.force_authenticate(None)
        return self.client.generic(
            "POST",
            reverse("order-payment-webhook"),
            body,
            content_type="application/json",
            HTTP_X_SIGNATURE=signature if signature is not None else sign_payload(body),
        )

    def test_signed_webhook_marks_order_paid(self) -> None:
        self._checkout(1, "card")
        order = Order.objects.get()

        response = self._webhook({"reference": order.payment_reference, "status": "PAID"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.PAID)
        self.assertEqual(order.order_status, Order.Status.PROCESSING)

    def test_webhook_with_bad_signature_is_rejected(self) -> None:
        self._checkout(1, "card")
        order = Order.objects.get()

        response = self._webhook({"reference": order.payment_reference, "status": "PAID"}, signature="deadbeef")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        order.refresh_from_db()
        self.assertEqual(order.payment_status, Order.PaymentStatus.PENDING)
