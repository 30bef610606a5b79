"""API views for the shopping cart."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore

from shared.api.responses import success_response

from .models import Cart
from .serializers import CartItemWriteSerializer, CartQuantitySerializer, CartSerializer
from . import services


class CartViewSet(viewsets.ViewSet):
    """The authenticated user's cart."""

    permission_classes = [permissions.IsAuthenticated]

    def _render(self, cart: Cart, message: str, status_code: int = status.HTTP_200_OK):
        cart = Cart.objects.prefetch_related("items__product").get(pk=cart.pk)
        return success_response(CartSerializer(cart).data, message=message, status=status_code)

    def retrieve(self, request):  # type: ignore
        return self._render(services.get_cart(request.user), "Cart retrieved")

    def add_item(self, request):  # type: ignore
        serializer = CartItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = services.add_item(
            request.user,
            serializer.validated_data["product"],
            serializer.validated_data["quantity"],
        )
        return self._render(cart, "Item added to cart", status.HTTP_201_CREATED)

    def update_item(self, request, product_id=None):  # type: ignore
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = services.update_item(request.user, int(product_id), serializer.validated_data["quantity"])
        return self._render(cart, "Cart updated")

    def remove_item(self, request, product_id=None):  # type: ignore
        cart = services.remove_item(request.user, int(product_id))
        return self._render(cart, "Item removed from cart")

    def clear(self, request):  # type: ignore
        cart = services.clear_cart(request.user)
        return self._render(cart, "Cart cleared")
