"""Webhook endpoint registry.

Holds the registered endpoints in memory and writes the whole list to
its JSON file after every change. The poller reads an immutable snapshot
once per cycle, so edits made through the management API take effect
from the next cycle.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bountyhook.exceptions import NotFoundError, ValidationError
from bountyhook.models import ALL_EVENT_TYPES, WebhookEndpoint

from .files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

_ENDPOINT_LIST = TypeAdapter(list[WebhookEndpoint])

# Fields a PATCH may change
UPDATABLE_FIELDS = frozenset({"url", "events", "active", "secret"})


def _validation_error(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a bountyhook ValidationError."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "body"
    if field.startswith("events"):
        return ValidationError(
            "events",
            f"invalid event type; valid: {', '.join(ALL_EVENT_TYPES)}",
        )
    return ValidationError(field, first.get("msg", "invalid value"))


class WebhookRegistry:
    """In-memory webhook endpoint list backed by a JSON file.

    Without a path nothing is written to disk.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._endpoints: list[WebhookEndpoint] = []

    def load(self) -> None:
        """Load endpoints from disk; unreadable files load as an empty registry."""
        if self._path is None:
            return
        try:
            data = read_json(self._path)
            if data is None:
                return
            self._endpoints = _ENDPOINT_LIST.validate_python(data)
        except (OSError, ValueError) as e:
            # pydantic's ValidationError is a ValueError subclass
            logger.warning("Could not load webhooks from %s, starting empty: %s", self._path, e)
            self._endpoints = []
            return
        logger.info("Loaded %d webhook endpoints", len(self._endpoints))

    def save(self) -> None:
        """Write all endpoints to disk.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        if self._path is None:
            return
        write_json_atomic(
            self._path,
            [endpoint.to_json_dict() for endpoint in self._endpoints],
        )

    def list_webhooks(self) -> list[WebhookEndpoint]:
        """All endpoints in registration order."""
        return list(self._endpoints)

    def snapshot(self) -> tuple[WebhookEndpoint, ...]:
        """Immutable view of the current endpoints for one poll cycle."""
        return tuple(self._endpoints)

    @property
    def active_count(self) -> int:
        return sum(1 for endpoint in self._endpoints if endpoint.active)

    def __len__(self) -> int:
        return len(self._endpoints)

    def get(self, webhook_id: str) -> WebhookEndpoint:
        """Get an endpoint by ID.

        Raises:
            NotFoundError: If no endpoint has this ID.
        """
        return self._endpoints[self._index(webhook_id)]

    def create(
        self,
        url: str,
        events: Iterable[str],
        secret: str | None = None,
    ) -> WebhookEndpoint:
        """Register a new active endpoint and persist the registry.

        Raises:
            ValidationError: If the URL or an event type is invalid.
        """
        try:
            endpoint = WebhookEndpoint(url=url, events=list(events), secret=secret)
        except PydanticValidationError as e:
            raise _validation_error(e) from e
        self._endpoints.append(endpoint)
        self.save()
        logger.info("Registered webhook %s -> %s", endpoint.id, endpoint.url)
        return endpoint

    def update(self, webhook_id: str, **changes: Any) -> WebhookEndpoint:
        """Apply a partial update and persist the registry.

        Only ``url``, ``events``, ``active`` and ``secret`` may change.
        The stored object is replaced, never mutated, so cycle snapshots
        taken earlier keep their view.

        Raises:
            NotFoundError: If no endpoint has this ID.
            ValidationError: If a field is unknown or a value is invalid.
        """
        index = self._index(webhook_id)
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(sorted(unknown)[0], "field cannot be updated")

        current = self._endpoints[index]
        try:
            updated = WebhookEndpoint.model_validate(
                {**current.model_dump(), **changes},
            )
        except PydanticValidationError as e:
            raise _validation_error(e) from e

        self._endpoints[index] = updated
        self.save()
        return updated

    def delete(self, webhook_id: str) -> None:
        """Remove an endpoint and persist the registry.

        Raises:
            NotFoundError: If no endpoint has this ID.
        """
        removed = self._endpoints.pop(self._index(webhook_id))
        self.save()
        logger.info("Deleted webhook %s", removed.id)

    def _index(self, webhook_id: str) -> int:
        for index, endpoint in enumerate(self._endpoints):
            if endpoint.id == webhook_id:
                return index
        raise NotFoundError("webhook", webhook_id)
