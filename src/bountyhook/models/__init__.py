"""Models for bountyhook.

This module exports the relay's data types:

    - BountySnapshot: Last-observed state of an upstream bounty
    - WebhookEndpoint: Registered subscriber with an event filter
    - WebhookEvent: Lifecycle event payload sent to endpoints
    - WebhookDelivery: Delivery log entry
"""

from .base import CamelModel, epoch_millis, generate_webhook_id, to_base36, utcnow
from .bounty import (
    STATUS_CLAIMED,
    STATUS_COMPLETED,
    STATUS_OPEN,
    STATUS_SUBMITTED,
    BountySnapshot,
)
from .webhook import (
    ALL_EVENT_TYPES,
    DeliveryStatus,
    EventType,
    WebhookDelivery,
    WebhookEndpoint,
    WebhookEvent,
)

__all__ = [
    # Base types
    "CamelModel",
    "epoch_millis",
    "generate_webhook_id",
    "to_base36",
    "utcnow",
    # Bounties
    "STATUS_CLAIMED",
    "STATUS_COMPLETED",
    "STATUS_OPEN",
    "STATUS_SUBMITTED",
    "BountySnapshot",
    # Webhooks
    "ALL_EVENT_TYPES",
    "DeliveryStatus",
    "EventType",
    "WebhookDelivery",
    "WebhookEndpoint",
    "WebhookEvent",
]
