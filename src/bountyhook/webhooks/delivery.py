"""Webhook delivery with HMAC signatures and exponential backoff retry.

Each (event, endpoint) pair gets one delivery sequence:
- The event is serialized once; the same bytes are signed and sent on every attempt
- Non-2xx responses and transport errors are retried with exponential backoff
- Exactly one log entry is recorded when the sequence ends
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Protocol

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from bountyhook.exceptions import DeliveryError
from bountyhook.models import WebhookDelivery

from .signing import compute_signature, resolve_secret

if TYPE_CHECKING:
    from bountyhook.models import WebhookEndpoint, WebhookEvent

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class DeliveryRecorder(Protocol):
    """Sink for finished delivery sequences (the delivery log)."""

    def append_delivery(self, entry: WebhookDelivery) -> None: ...


def _log_retry(retry_state: RetryCallState) -> None:
    """Log the backoff before the next attempt."""
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "Retrying webhook delivery in %.1fs after attempt %d: %s",
        delay,
        retry_state.attempt_number,
        exc,
    )


class WebhookDispatcher:
    """Delivers lifecycle events to subscribed webhook endpoints.

    Handles:
    - Filtering endpoints by active flag and event subscription
    - Signing payloads with HMAC-SHA256 (endpoint secret or default key)
    - Delivering with bounded exponential backoff retry
    - Recording one delivery log entry per (event, endpoint)

    Deliveries for one event may run concurrently across endpoints, bounded
    by ``max_concurrent``. Retry state is local to each delivery sequence.

    Example:
        ```python
        dispatcher = WebhookDispatcher(state_store, default_secret="s3cret")

        entries = await dispatcher.dispatch_event(event, registry.snapshot())
        ```
    """

    def __init__(
        self,
        recorder: DeliveryRecorder,
        default_secret: str,
        *,
        max_attempts: int = 3,
        retry_base_seconds: float = 1.0,
        timeout_seconds: float = 30.0,
        max_concurrent: int = 1,
        client: httpx.AsyncClient | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the webhook dispatcher.

        Args:
            recorder: Delivery log that receives finished sequences.
            default_secret: HMAC key for endpoints without their own secret.
            max_attempts: Total attempts per delivery sequence.
            retry_base_seconds: Delay after the first failed attempt (doubles each time).
            timeout_seconds: HTTP request timeout.
            max_concurrent: Maximum concurrent deliveries.
            client: Shared HTTP client; a short-lived one is opened per attempt if None.
            sleep: Backoff sleep coroutine.
        """
        self._recorder = recorder
        self._default_secret = default_secret
        self._max_attempts = max_attempts
        self._retry_base = retry_base_seconds
        self._timeout = timeout_seconds
        self._max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._client = client
        self._sleep = sleep

    async def dispatch_event(
        self,
        event: WebhookEvent,
        endpoints: Sequence[WebhookEndpoint],
    ) -> list[WebhookDelivery]:
        """Deliver an event to every endpoint subscribed to its type.

        Args:
            event: Event to deliver.
            endpoints: Endpoint snapshot to filter (inactive ones are skipped).

        Returns:
            Delivery log entries, one per targeted endpoint.
        """
        targets = [endpoint for endpoint in endpoints if endpoint.subscribes_to(event.type)]

        if not targets:
            logger.debug("No webhooks subscribed to %s (event %s)", event.type, event.id)
            return []

        results = await asyncio.gather(
            *(self._deliver_limited(endpoint, event) for endpoint in targets),
            return_exceptions=True,
        )

        entries: list[WebhookDelivery] = []
        for result in results:
            if isinstance(result, BaseException):
                logger.error("Webhook delivery crashed for event %s: %s", event.id, result)
            else:
                entries.append(result)
        return entries

    async def _deliver_limited(
        self,
        endpoint: WebhookEndpoint,
        event: WebhookEvent,
    ) -> WebhookDelivery:
        async with self._semaphore:
            return await self.deliver(endpoint, event)

    async def deliver(
        self,
        endpoint: WebhookEndpoint,
        event: WebhookEvent,
    ) -> WebhookDelivery:
        """Run one delivery sequence for an endpoint.

        Never raises for delivery failures: the outcome is recorded in the
        delivery log and returned.

        Args:
            endpoint: Target endpoint.
            event: Event to deliver.

        Returns:
            The recorded delivery log entry.
        """
        payload = event.to_payload()
        signature = compute_signature(
            payload, resolve_secret(endpoint.secret, self._default_secret)
        )
        headers = {
            "Content-Type": "application/json",
            "X-Signature": signature,
            "X-Event-Type": event.type,
            "X-Event-Id": event.id,
            "X-Webhook-Id": endpoint.id,
        }

        attempts = 0
        status_code: int | None = None
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._retry_base),
            retry=retry_if_exception_type(DeliveryError),
            sleep=self._sleep,
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    status_code = await self._attempt(endpoint, event, payload, headers, attempts)
        except DeliveryError as exc:
            entry = WebhookDelivery(
                event_id=event.id,
                endpoint_id=endpoint.id,
                status="failed",
                attempts=attempts,
                status_code=exc.status_code,
            )
            logger.warning(
                "Webhook max retries exceeded: %s to %s after %d attempts",
                event.type,
                endpoint.url,
                attempts,
            )
        else:
            entry = WebhookDelivery(
                event_id=event.id,
                endpoint_id=endpoint.id,
                status="success",
                attempts=attempts,
                status_code=status_code,
            )
            logger.info(
                "Webhook delivered: %s to %s (attempt %d)",
                event.type,
                endpoint.url,
                attempts,
            )

        self._recorder.append_delivery(entry)
        return entry

    async def _attempt(
        self,
        endpoint: WebhookEndpoint,
        event: WebhookEvent,
        payload: bytes,
        headers: dict[str, str],
        attempt: int,
    ) -> int:
        """Send one signed POST.

        Returns:
            The 2xx status code.

        Raises:
            DeliveryError: On a non-2xx response or any transport failure.
        """
        url = str(endpoint.url)
        try:
            if self._client is not None:
                response = await self._client.post(url, content=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url, content=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(
                "Webhook timeout: %s to %s, attempt %d/%d",
                event.type,
                url,
                attempt,
                self._max_attempts,
            )
            raise DeliveryError(f"Request timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.warning(
                "Webhook transport error: %s to %s, attempt %d/%d: %s",
                event.type,
                url,
                attempt,
                self._max_attempts,
                e,
            )
            raise DeliveryError(str(e)) from e
        except Exception as e:
            logger.exception("Unexpected webhook delivery error: %s to %s", event.type, url)
            raise DeliveryError(f"Unexpected error: {e}") from e

        if 200 <= response.status_code < 300:
            return response.status_code

        logger.warning(
            "Webhook rejected: %s to %s returned %d, attempt %d/%d",
            event.type,
            url,
            response.status_code,
            attempt,
            self._max_attempts,
        )
        raise DeliveryError(f"HTTP {response.status_code}", status_code=response.status_code)
