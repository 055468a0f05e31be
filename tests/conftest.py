"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from bountyhook.config import Settings
from bountyhook.feed import BountyFeedClient
from bountyhook.models import WebhookEndpoint, WebhookEvent
from bountyhook.service import RelayService
from bountyhook.storage import StateStore, WebhookRegistry
from bountyhook.webhooks import WebhookDispatcher

# Add tests directory to path so helpers can be imported
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


def mock_client(handler: Handler) -> httpx.AsyncClient:
    """Create an AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingEndpoint:
    """Scripted webhook receiver.

    Answers each request with the next status from ``statuses`` (the last
    one repeats). A status of None raises a connection error instead.
    """

    def __init__(self, *statuses: int | None) -> None:
        self.statuses = list(statuses) or [200]
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.statuses)) - 1
        code = self.statuses[index]
        if code is None:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(code, text="ok" if code < 300 else "error")


class ListRecorder:
    """Delivery recorder that keeps entries in a list."""

    def __init__(self) -> None:
        self.entries: list[Any] = []

    def append_delivery(self, entry: Any) -> None:
        self.entries.append(entry)


@pytest.fixture
def sample_endpoint() -> WebhookEndpoint:
    """Create a sample webhook endpoint."""
    return WebhookEndpoint(
        id="wh_test123",
        url="https://hooks.example.com/bounty",
        events=["bounty.created", "bounty.claimed"],
        secret="endpoint_secret",
    )


@pytest.fixture
def sample_event() -> WebhookEvent:
    """Create a sample bounty.created event."""
    return WebhookEvent.for_bounty(
        "bounty.created",
        {"id": 42, "status": "open", "title": "Fix the parser"},
        timestamp=datetime(2025, 3, 1, 12, 0, tzinfo=UTC),
    )


class FakeFeed:
    """Scripted bounty feed: answers each poll with the next body or error status."""

    def __init__(self, *responses: list[dict[str, Any]] | int) -> None:
        self.responses = list(responses) or [[]]
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        response = self.responses[min(self.calls, len(self.responses) - 1)]
        self.calls += 1
        if isinstance(response, int):
            return httpx.Response(response)
        return httpx.Response(200, json=response)


def build_service(
    feed: FakeFeed,
    receiver: Handler,
    state: StateStore | None = None,
    registry: WebhookRegistry | None = None,
) -> RelayService:
    """Create a RelayService wired to mock HTTP transports and no-op backoff."""
    settings = Settings(env="test", api_base_url="https://bounty.example.com")
    # Explicit None checks: an empty registry is falsy
    if state is None:
        state = StateStore()
    if registry is None:
        registry = WebhookRegistry()
    return RelayService(
        settings=settings,
        state=state,
        registry=registry,
        feed=BountyFeedClient(settings.api_base_url, client=mock_client(feed)),
        dispatcher=WebhookDispatcher(
            state,
            "default_secret",
            client=mock_client(receiver),
            sleep=AsyncMock(),
        ),
    )
