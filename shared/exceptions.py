"""Domain error taxonomy.

Services raise these exceptions for rule violations. The DRF exception
handler in :mod:`shared.api.exceptions` maps every subclass onto the error
envelope using the ``status_code`` and ``code`` attributes, so views never
have to translate them by hand.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Request could not be processed."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        details: Any = None,
    ) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found."


class PermissionDeniedError(DomainError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action."


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"
    default_message = "The resource is in a conflicting state."


class InvalidTransitionError(ConflictError):
    """Raised when a status change is not allowed from the current status."""

    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            f'Cannot change {entity} status from "{current}" to "{target}".',
            details={"current": current, "target": target},
        )
        self.current = current
        self.target = target


class OutOfStockError(ConflictError):
    code = "OUT_OF_STOCK"
    default_message = "Product is out of stock."


class CodeGenerationError(DomainError):
    """Raised when no free human-readable code could be allocated."""

    status_code = 503
    code = "CODE_GENERATION_FAILED"
    default_message = "Could not allocate a unique code, please retry."
