"""API views for the catalog."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import viewsets  # type: ignore
from rest_framework.filters import OrderingFilter  # type: ignore

from apps.users.permissions import IsAdminOrReadOnly, is_admin
from shared.api.responses import EnvelopeMixin

from .filters import ProductFilterSet
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer


class CategoryViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):  # type: ignore
        qs = Category.objects.all()
        if is_admin(self.request.user):
            return qs
        return qs.filter(is_active=True)


class ProductViewSet(EnvelopeMixin, viewsets.ModelViewSet):
    """Public product listing; admins manage the catalog."""

    serializer_class = ProductSerializer
    permission_classes = [IsAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_class = ProductFilterSet
    ordering_fields = ["price", "created_at", "sold_count"]
    envelope_messages = {
        "create": "Product created",
        "update": "Product updated",
        "partial_update": "Product updated",
        "destroy": "Product deleted",
    }

    def get_queryset(self):  # type: ignore
        qs = Product.objects.select_related("category")
        if is_admin(self.request.user):
            return qs
        return qs.filter(is_active=True)
