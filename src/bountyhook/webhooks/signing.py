"""HMAC-SHA256 signing for webhook payloads.

Receivers verify a delivery by recomputing the HMAC over the raw request
body with their shared secret and comparing it to the ``X-Signature``
header (``sha256=<hex_digest>``).
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign_payload(payload: str | bytes, secret: str | bytes) -> str:
    """Compute the hex HMAC-SHA256 digest of a payload.

    Args:
        payload: Exact bytes (or text) sent as the request body.
        secret: HMAC key.

    Returns:
        Lowercase hex digest.
    """
    return hmac.new(
        key=_as_bytes(secret),
        msg=_as_bytes(payload),
        digestmod=hashlib.sha256,
    ).hexdigest()


def compute_signature(payload: str | bytes, secret: str | bytes) -> str:
    """Compute the ``X-Signature`` header value for a payload.

    Returns:
        Signature in format "sha256=<hex_digest>".
    """
    return f"{SIGNATURE_PREFIX}{sign_payload(payload, secret)}"


def verify_signature(payload: str | bytes, secret: str | bytes, signature: str) -> bool:
    """Verify an ``X-Signature`` header value in constant time.

    Args:
        payload: Raw request body that was signed.
        secret: Shared secret for HMAC.
        signature: Header value to verify (format: "sha256=<hex_digest>").

    Returns:
        True if signature is valid, False otherwise.
    """
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected, signature)


def resolve_secret(endpoint_secret: str | None, default_secret: str) -> str:
    """Pick the signing key: the endpoint's own secret when set, else the default."""
    return endpoint_secret if endpoint_secret else default_secret
