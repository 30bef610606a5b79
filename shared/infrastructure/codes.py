"""Human-readable reference codes.

Orders, tour bookings and campsite bookings carry codes such as
``HD171026417``: a prefix, the creation date as ``ddmmyy`` and a short
random suffix. The suffix space is small, so codes are backed by a unique
constraint and :func:`save_with_unique_code` retries on collision.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date
from typing import Callable

from django.conf import settings  # type: ignore
from django.db import IntegrityError, models, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.exceptions import CodeGenerationError

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 5


def dated_code(prefix: str, digits: int, *, today: date | None = None) -> str:
    """Return ``prefix + ddmmyy + <digits random digits>`` without a leading zero."""

    today = today or timezone.localdate()
    low = 10 ** (digits - 1)
    suffix = low + secrets.randbelow(9 * low)
    return f"{prefix}{today.strftime('%d%m%y')}{suffix}"


def save_with_unique_code(
    instance: models.Model,
    field: str,
    generate: Callable[[], str],
    persist: Callable[[], None],
    *,
    attempts: int | None = None,
) -> None:
    """Assign ``generate()`` to ``instance.<field>`` and persist, retrying on collisions.

    Each attempt runs inside its own savepoint so a clashing INSERT does not
    poison an outer transaction. Integrity errors unrelated to the code are
    re-raised untouched.
    """

    attempts = attempts or getattr(settings, "CODE_GENERATION_ATTEMPTS", DEFAULT_ATTEMPTS)
    model = type(instance)
    for attempt in range(1, attempts + 1):
        code = generate()
        setattr(instance, field, code)
        try:
            with transaction.atomic():
                persist()
            return
        except IntegrityError:
            if not model._default_manager.filter(**{field: code}).exists():
                raise
            logger.warning(
                f"{model.__name__} code collision on {code} (attempt {attempt}/{attempts})"
            )
    setattr(instance, field, "")
    raise CodeGenerationError(details={"model": model.__name__, "attempts": attempts})
