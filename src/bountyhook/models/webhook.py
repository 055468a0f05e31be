"""Webhook models for bounty lifecycle notifications.

Provides webhook endpoint registration, event payloads, and delivery
log entries. All three are persisted or sent with camelCase keys.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field, HttpUrl

from .base import CamelModel, epoch_millis, generate_webhook_id, utcnow

# Event types that can trigger webhooks
EventType = Literal[
    "bounty.created",
    "bounty.claimed",
    "bounty.submitted",
    "bounty.completed",
]

# All available event types for subscription
ALL_EVENT_TYPES: list[EventType] = [
    "bounty.created",
    "bounty.claimed",
    "bounty.submitted",
    "bounty.completed",
]

# Delivery outcome
DeliveryStatus = Literal["success", "failed"]


class WebhookEndpoint(CamelModel):
    """A registered webhook endpoint.

    Attributes:
        id: Unique identifier for this endpoint.
        url: Endpoint that receives event POSTs.
        events: Event types this endpoint subscribes to.
        active: Whether deliveries are sent to this endpoint.
        secret: Per-endpoint HMAC key; the relay default is used when unset.
        created_at: When the endpoint was registered.
    """

    id: str = Field(default_factory=generate_webhook_id)
    url: HttpUrl = Field(description="Endpoint to receive events")
    events: list[EventType] = Field(description="Event types to subscribe to")
    active: bool = Field(default=True, description="Whether endpoint is active")
    secret: str | None = Field(default=None, description="Per-endpoint HMAC secret")
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When the endpoint was registered",
    )

    def subscribes_to(self, event_type: EventType) -> bool:
        """Check if this endpoint is active and subscribed to the event type."""
        return self.active and event_type in self.events


class WebhookEvent(CamelModel):
    """Event payload sent to webhook endpoints.

    Attributes:
        id: Event identifier, ``evt_<bountyId>_<type>_<epochMillis>``.
        type: Event type.
        bounty_id: Bounty the event is about.
        data: The full bounty record as polled.
        timestamp: When the event was detected.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Event identifier")
    type: EventType = Field(description="Event type")
    bounty_id: int = Field(description="Bounty the event is about")
    data: dict[str, Any] = Field(default_factory=dict, description="Polled bounty record")
    timestamp: datetime = Field(default_factory=utcnow, description="When the event occurred")

    @classmethod
    def for_bounty(
        cls,
        event_type: EventType,
        record: dict[str, Any],
        timestamp: datetime | None = None,
    ) -> "WebhookEvent":
        """Create an event for a polled bounty record.

        The ID embeds the detection time in milliseconds, so two events of
        the same type for the same bounty within one millisecond share an ID.
        """
        moment = timestamp or utcnow()
        bounty_id = record["id"]
        return cls(
            id=f"evt_{bounty_id}_{event_type}_{epoch_millis(moment)}",
            type=event_type,
            bounty_id=bounty_id,
            data=dict(record),
            timestamp=moment,
        )

    def to_payload(self) -> bytes:
        """Serialize to the exact bytes sent (and signed) on the wire."""
        return self.model_dump_json(by_alias=True).encode("utf-8")


class WebhookDelivery(CamelModel):
    """Outcome of one delivery attempt sequence.

    Written once per (event, endpoint) when the sequence ends, never
    updated afterwards.

    Attributes:
        event_id: ID of the delivered event.
        endpoint_id: ID of the webhook endpoint.
        status: Final outcome (success or failed).
        attempts: Attempt number that succeeded, or total attempts made.
        last_attempt: When the last attempt finished.
        status_code: HTTP status of the last response (absent on transport errors).
    """

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(description="ID of the delivered event")
    endpoint_id: str = Field(description="ID of the webhook endpoint")
    status: DeliveryStatus = Field(description="Delivery outcome")
    attempts: int = Field(ge=1, description="Attempts made")
    last_attempt: datetime = Field(default_factory=utcnow, description="Last attempt time")
    status_code: int | None = Field(default=None, description="Last HTTP status code")

    @property
    def succeeded(self) -> bool:
        """Whether the delivery ended in success."""
        return self.status == "success"


__all__ = [
    "ALL_EVENT_TYPES",
    "DeliveryStatus",
    "EventType",
    "WebhookDelivery",
    "WebhookEndpoint",
    "WebhookEvent",
]
