"""API views for orders."""

from __future__ import annotations

import json
import logging

from django.conf import settings  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import ParseError  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.users.permissions import IsAdminRole, is_admin
from shared.api.responses import EnvelopeMixin, success_response
from shared.exceptions import PermissionDeniedError

from .models import Order
from .payments import verify_signature
from .serializers import (
    CheckoutSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    OrderTotalsSerializer,
    PaymentWebhookSerializer,
    ReasonSerializer,
)
from . import services

logger = logging.getLogger(__name__)


class OrderViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Customers see their own orders, admins see all of them."""

    serializer_class = OrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["order_status", "payment_status", "payment_method"]
    envelope_messages = {
        "list": "Orders retrieved",
        "retrieve": "Order retrieved",
    }

    def get_queryset(self):  # type: ignore
        qs = Order.objects.prefetch_related("items", "history")
        if is_admin(self.request.user):
            return qs
        return qs.filter(user=self.request.user)

    def get_permissions(self):  # type: ignore
        if self.action in {"set_status", "adjust_totals", "reject_cancel"}:
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return super().get_permissions()

    def _order_response(self, order: Order, message: str, status_code: int = status.HTTP_200_OK):
        order = Order.objects.prefetch_related("items", "history").get(pk=order.pk)
        return success_response(OrderSerializer(order).data, message=message, status=status_code)

    def create(self, request):  # type: ignore
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = services.create_order(
            request.user,
            items=data["items"],
            address=data["address"],
            payment_method=data["payment_method"],
            shipping_method=data["shipping_method"],
            promo_code=data["promo_code"],
            order_note=data["order_note"],
        )
        return self._order_response(order, "Order placed", status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):  # type: ignore
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.update_status(
            self.get_object(),
            serializer.validated_data["status"],
            note=serializer.validated_data["note"],
            images=serializer.validated_data["images"],
        )
        return self._order_response(order, "Order status updated")

    @action(detail=True, methods=["patch"], url_path="totals")
    def adjust_totals(self, request, pk=None):  # type: ignore
        serializer = OrderTotalsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.adjust_totals(self.get_object(), **serializer.validated_data)
        return self._order_response(order, "Order totals updated")

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):  # type: ignore
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.cancel_order(self.get_object(), request.user, reason=serializer.validated_data["reason"])
        return self._order_response(order, "Order cancelled")

    @action(detail=True, methods=["post"], url_path="request-cancel")
    def request_cancel(self, request, pk=None):  # type: ignore
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.request_cancellation(
            self.get_object(), request.user, reason=serializer.validated_data["reason"]
        )
        return self._order_response(order, "Cancellation requested")

    @action(detail=True, methods=["post"], url_path="reject-cancel")
    def reject_cancel(self, request, pk=None):  # type: ignore
        serializer = ReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.reject_cancellation(self.get_object(), note=serializer.validated_data["reason"])
        return self._order_response(order, "Cancellation request rejected")


class PaymentWebhookView(APIView):
    """Card payment results pushed by the provider.

    The provider authenticates with an HMAC signature of the raw body, not
    with a JWT.
    """

    authentication_classes: list = []
    permission_classes = [permissions.AllowAny]

    def post(self, request):  # type: ignore
        body = request.body
        signature = request.META.get(settings.PAYMENT_SIGNATURE_HEADER)
        if not verify_signature(body, signature):
            logger.warning("Rejected payment webhook with an invalid signature")
            raise PermissionDeniedError("Invalid signature.", code="INVALID_SIGNATURE")
        try:
            payload = json.loads(body or b"{}")
        except ValueError:
            raise ParseError("Malformed JSON body.")
        serializer = PaymentWebhookSerializer(data=payload)
        serializer.is_valid(raise_exception=True)
        order = services.apply_payment_result(
            serializer.validated_data["reference"],
            serializer.validated_data["status"] == "PAID",
        )
        return success_response(
            {"code": order.code, "payment_status": order.payment_status, "order_status": order.order_status},
            message="Payment result processed",
        )
