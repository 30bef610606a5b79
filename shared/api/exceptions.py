"""DRF exception handler mapping every failure onto the error envelope."""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.http import Http404  # type: ignore
from rest_framework import exceptions, status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.serializers import as_serializer_error  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore
from rest_framework.views import set_rollback  # type: ignore

from shared.exceptions import DomainError

from .responses import error_body

logger = logging.getLogger(__name__)

NON_FIELD_KEYS = {"non_field_errors", "__all__"}


def flatten_errors(detail: Any, path: str = "") -> list[str]:
    """Turn nested DRF error details into ``"field: message"`` strings."""

    if isinstance(detail, dict):
        messages: list[str] = []
        for key, value in detail.items():
            if key in NON_FIELD_KEYS:
                child = path
            else:
                child = f"{path}.{key}" if path else str(key)
            messages.extend(flatten_errors(value, child))
        return messages
    if isinstance(detail, list):
        messages = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                messages.extend(flatten_errors(value, f"{path}.{index}" if path else str(index)))
            else:
                messages.extend(flatten_errors(value, path))
        return messages
    return [f"{path}: {detail}" if path else str(detail)]


def envelope_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    if isinstance(exc, DomainError):
        set_rollback()
        return Response(
            error_body(exc.message, code=exc.code, details=exc.details),
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()
    elif isinstance(exc, DjangoValidationError):
        exc = exceptions.ValidationError(detail=as_serializer_error(exc))

    if isinstance(exc, exceptions.ValidationError):
        set_rollback()
        return Response(
            error_body(
                "Validation failed",
                code="VALIDATION_ERROR",
                errors=flatten_errors(exc.detail),
            ),
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
            exc_info=exc,
        )
        set_rollback()
        return Response(
            error_body("Internal server error", code="INTERNAL_ERROR"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
    code = getattr(exc, "default_code", "error")
    if isinstance(exc, exceptions.APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes
    response.data = error_body(str(detail), code=str(code).upper())
    return response
