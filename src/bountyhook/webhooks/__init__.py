"""Webhook delivery system for bountyhook.

Provides HMAC-signed webhook delivery with exponential backoff retry.

Example:
    ```python
    from bountyhook.webhooks import WebhookDispatcher, verify_signature

    dispatcher = WebhookDispatcher(state_store, default_secret=settings.hmac_secret)
    await dispatcher.dispatch_event(event, registry.snapshot())

    # Receiver side
    verify_signature(request_body, secret, request.headers["X-Signature"])
    ```
"""

from .delivery import DeliveryRecorder, WebhookDispatcher
from .signing import compute_signature, resolve_secret, sign_payload, verify_signature

__all__ = [
    "DeliveryRecorder",
    "WebhookDispatcher",
    "compute_signature",
    "resolve_secret",
    "sign_payload",
    "verify_signature",
]
