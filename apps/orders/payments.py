"""Card payment provider webhook signature."""

from __future__ import annotations

import hashlib
import hmac

from django.conf import settings  # type: ignore


def sign_payload(body: bytes, secret: str | None = None) -> str:
    secret = secret if secret is not None else settings.PAYMENT_WEBHOOK_SECRET
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: str | None) -> bool:
    """Compare the HMAC-SHA256 of the raw body with the provided hex digest."""

    if not signature:
        return False
    return hmac.compare_digest(sign_payload(body), signature.strip().lower())
