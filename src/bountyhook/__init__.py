"""bountyhook: bounty board webhook relay.

Polls a bounty board API, detects lifecycle events (created, claimed,
submitted, completed) by diffing each bounty against its last snapshot,
and delivers them to registered webhook endpoints as HMAC-signed POSTs
with exponential backoff retry.

Quick Start:
    from bountyhook.service import RelayService

    async with RelayService.create() as relay:
        result = await relay.poll_once()

Run the relay with its management API:
    python -m bountyhook
"""

__version__ = "0.1.0"

# Configuration
from .config import Settings

# Exceptions
from .exceptions import (
    BountyHookError,
    DeliveryError,
    FetchError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# Logging
from .logging import configure_logging, get_logger, log_context

# Models
from .models import (
    ALL_EVENT_TYPES,
    BountySnapshot,
    EventType,
    WebhookDelivery,
    WebhookEndpoint,
    WebhookEvent,
)

__all__ = [
    # Version
    "__version__",
    # Configuration
    "Settings",
    # Exceptions
    "BountyHookError",
    "ValidationError",
    "NotFoundError",
    "FetchError",
    "DeliveryError",
    "PersistenceError",
    # Logging
    "configure_logging",
    "get_logger",
    "log_context",
    # Models
    "ALL_EVENT_TYPES",
    "BountySnapshot",
    "EventType",
    "WebhookDelivery",
    "WebhookEndpoint",
    "WebhookEvent",
]
