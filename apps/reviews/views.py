"""API views for reviews."""

from __future__ import annotations

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore

from shared.api.responses import EnvelopeMixin, success_response

from .models import Review
from .serializers import ReviewCreateSerializer, ReviewReplySerializer, ReviewSerializer
from . import services


class ReviewViewSet(
    EnvelopeMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reviews are public; ``?property=<id>`` lists one property's reviews."""

    serializer_class = ReviewSerializer
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    queryset = Review.objects.select_related("guest", "property")
    filterset_fields = ["property", "rating", "host"]
    envelope_messages = {
        "list": "Reviews retrieved",
        "retrieve": "Review retrieved",
    }

    def create(self, request):  # type: ignore
        serializer = ReviewCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.create_review(
            request.user,
            serializer.validated_data["booking"],
            rating=serializer.validated_data["rating"],
            comment=serializer.validated_data["comment"],
        )
        return success_response(ReviewSerializer(review).data, message="Review created", status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def reply(self, request, pk=None):  # type: ignore
        serializer = ReviewReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = services.reply_to_review(self.get_object(), request.user, serializer.validated_data["reply"])
        return success_response(ReviewSerializer(review).data, message="Reply posted")
