"""Uniform JSON response envelope.

Every endpoint answers with ``{success, message, timestamp, data?}``.
Failures use ``{success: false, message, code?, errors?, details?}``
and paginated lists add a ``pagination`` block next to ``data``.
"""

from __future__ import annotations

from typing import Any

from django.utils import timezone  # type: ignore
from rest_framework import status as http_status  # type: ignore
from rest_framework.response import Response  # type: ignore

_MISSING = object()


def envelope(data: Any = _MISSING, *, message: str = "OK", **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": True,
        "message": message,
        "timestamp": timezone.now().isoformat(),
    }
    if data is not _MISSING and data is not None:
        body["data"] = data
    body.update(extra)
    return body


def error_body(
    message: str,
    *,
    code: str | None = None,
    errors: list[str] | None = None,
    details: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": False,
        "message": message,
        "timestamp": timezone.now().isoformat(),
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = errors
    if details is not None:
        body["details"] = details
    return body


def is_envelope(data: Any) -> bool:
    return isinstance(data, dict) and "success" in data and "timestamp" in data


def success_response(
    data: Any = _MISSING,
    message: str = "OK",
    status: int = http_status.HTTP_200_OK,
    **extra: Any,
) -> Response:
    return Response(envelope(data, message=message, **extra), status=status)


class EnvelopeMixin:
    """Wraps successful viewset responses in the envelope.

    ``envelope_messages`` maps a viewset action to the human readable
    message; actions that already return an envelope are left alone.
    A ``204 No Content`` becomes ``200`` so the message can be delivered.
    """

    envelope_messages: dict[str, str] = {}

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore
        response = super().finalize_response(request, response, *args, **kwargs)  # type: ignore[misc]
        if not isinstance(response, Response) or response.status_code >= 400:
            return response
        if is_envelope(response.data):
            return response
        if response.status_code == http_status.HTTP_204_NO_CONTENT:
            response.status_code = http_status.HTTP_200_OK
        action = getattr(self, "action", None) or request.method.lower()
        message = self.envelope_messages.get(action, "OK")
        response.data = envelope(response.data, message=message)
        return response
