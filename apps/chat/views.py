"""API views for direct messages."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from shared.api.responses import success_response

from .serializers import DirectMessageSerializer, SendMessageSerializer
from . import services


class DirectMessageViewSet(viewsets.GenericViewSet):
    """``GET ?with=<user id>`` returns the conversation with that user."""

    serializer_class = DirectMessageSerializer
    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):  # type: ignore
        other = request.query_params.get("with")
        if not other or not other.isdigit():
            raise ValidationError({"with": ["A user id is required."]})
        queryset = services.conversation(request.user, int(other))
        page = self.paginate_queryset(queryset)
        if page is not None:
            response = self.get_paginated_response(self.get_serializer(page, many=True).data)
            response.data["message"] = "Messages retrieved"
            return response
        return success_response(self.get_serializer(queryset, many=True).data, message="Messages retrieved")

    def create(self, request):  # type: ignore
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.send_message(
            request.user,
            recipient_id=serializer.validated_data["recipient"],
            body=serializer.validated_data["body"],
        )
        return success_response(
            DirectMessageSerializer(message).data, message="Message sent", status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["patch"], url_path="read")
    def mark_read(self, request, pk=None):  # type: ignore
        message = services.mark_message_read(request.user, int(pk))
        return success_response(DirectMessageSerializer(message).data, message="Message marked as read")
