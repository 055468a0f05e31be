"""Pydantic schemas for API request/response models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from bountyhook.models import CamelModel, EventType, WebhookEndpoint


class WebhookCreateRequest(BaseModel):
    """Request body for registering a webhook.

    Attributes:
        url: Endpoint that will receive event POSTs.
        events: Event types to subscribe to.
        secret: Optional per-endpoint HMAC secret.
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(min_length=1, description="Endpoint URL")
    events: list[str] = Field(description="Event types to subscribe to")
    secret: str | None = Field(default=None, description="Per-endpoint HMAC secret")


class WebhookUpdateRequest(BaseModel):
    """Request body for a partial webhook update.

    Only fields present in the request are changed. Sending
    ``"secret": null`` reverts the endpoint to the default key.
    """

    model_config = ConfigDict(extra="forbid")

    url: str | None = None
    events: list[str] | None = None
    active: bool | None = None
    secret: str | None = None


class WebhookResponse(CamelModel):
    """A registered webhook as returned by the API.

    The secret itself is never returned; ``hasSecret`` tells whether the
    endpoint signs with its own key.
    """

    id: str
    url: str
    events: list[EventType]
    active: bool
    has_secret: bool
    created_at: datetime

    @classmethod
    def from_endpoint(cls, endpoint: WebhookEndpoint) -> WebhookResponse:
        return cls(
            id=endpoint.id,
            url=str(endpoint.url),
            events=list(endpoint.events),
            active=endpoint.active,
            has_secret=bool(endpoint.secret),
            created_at=endpoint.created_at,
        )


class HealthResponse(CamelModel):
    """Response for the health endpoint.

    Attributes:
        status: "ok" once the relay is running, "unavailable" before startup.
        registered_webhooks: All registered endpoints.
        active_webhooks: Endpoints currently receiving deliveries.
        tracked_bounties: Bounties with a stored snapshot.
        total_deliveries: Entries in the delivery log.
    """

    status: Literal["ok", "unavailable"]
    registered_webhooks: int = 0
    active_webhooks: int = 0
    tracked_bounties: int = 0
    total_deliveries: int = 0


class PollResponse(CamelModel):
    """Summary of a manually triggered poll cycle."""

    ok: bool
    fetched: int
    events: int
    delivered: int
    failed: int
    persisted: bool
    error: str | None = None
