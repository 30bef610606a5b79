"""URL routing for orders."""

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import OrderViewSet, PaymentWebhookView

router = SimpleRouter()
router.register(r"", OrderViewSet, basename="order")

urlpatterns = [
    path("payment-webhook/", PaymentWebhookView.as_view(), name="order-payment-webhook"),
    path("", include(router.urls)),
]
