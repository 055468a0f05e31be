"""Snapshot map and delivery log storage.

Both live in one JSON document so a poll cycle persists them together:

    {
        "knownBounties": {"42": {"id": 42, "status": "open", ...}},
        "deliveryLog": [{"eventId": "...", "endpointId": "...", ...}]
    }
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from bountyhook.models import BountySnapshot, CamelModel, WebhookDelivery

from .files import read_json, write_json_atomic

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 1000


class RelayState(CamelModel):
    """Persisted relay state."""

    known_bounties: dict[int, BountySnapshot] = Field(default_factory=dict)
    delivery_log: list[WebhookDelivery] = Field(default_factory=list)


class StateStore:
    """Owns the bounty snapshot map and the delivery log.

    Without a path the store is purely in-memory and ``flush`` only trims
    the log.

    Example:
        ```python
        store = StateStore(Path("webhook-state.json"))
        store.load()
        store.put_snapshot(BountySnapshot(id=42, status="open"))
        store.flush()
        ```
    """

    def __init__(self, path: Path | None = None, log_limit: int = DEFAULT_LOG_LIMIT) -> None:
        self._path = path
        self._log_limit = log_limit
        self._state = RelayState()

    @property
    def path(self) -> Path | None:
        return self._path

    def load(self) -> None:
        """Load state from disk.

        A missing file leaves the store empty. An unreadable or corrupt
        file is logged and replaced by empty state on the next flush.
        """
        if self._path is None:
            return
        try:
            data = read_json(self._path)
        except (OSError, ValueError) as e:
            logger.warning("Could not read state file %s, starting empty: %s", self._path, e)
            self._state = RelayState()
            return
        if data is None:
            return
        try:
            self._state = RelayState.model_validate(data)
        except PydanticValidationError as e:
            logger.warning("Invalid state file %s, starting empty: %s", self._path, e)
            self._state = RelayState()
            return
        logger.info(
            "Loaded state: %d bounties, %d deliveries",
            len(self._state.known_bounties),
            len(self._state.delivery_log),
        )

    def get_snapshot(self, bounty_id: int) -> BountySnapshot | None:
        """Return the last snapshot of a bounty, or None if never seen."""
        return self._state.known_bounties.get(bounty_id)

    def put_snapshot(self, snapshot: BountySnapshot) -> None:
        """Store (overwrite) the snapshot of a bounty."""
        self._state.known_bounties[snapshot.id] = snapshot

    def append_delivery(self, entry: WebhookDelivery) -> None:
        """Append a finished delivery to the log."""
        self._state.delivery_log.append(entry)

    def recent_deliveries(self, limit: int = 50) -> list[WebhookDelivery]:
        """Return the most recent deliveries, oldest first."""
        if limit <= 0:
            return []
        return list(self._state.delivery_log[-limit:])

    @property
    def tracked_count(self) -> int:
        """Number of bounties with a stored snapshot."""
        return len(self._state.known_bounties)

    @property
    def delivery_count(self) -> int:
        """Number of entries currently in the delivery log."""
        return len(self._state.delivery_log)

    def trim(self) -> int:
        """Drop the oldest log entries beyond the limit.

        Returns:
            Number of entries dropped.
        """
        overflow = len(self._state.delivery_log) - self._log_limit
        if overflow <= 0:
            return 0
        del self._state.delivery_log[:overflow]
        return overflow

    def flush(self) -> None:
        """Trim the delivery log and write snapshots and log in one file.

        Raises:
            PersistenceError: If the file cannot be written. In-memory
                state is kept either way.
        """
        dropped = self.trim()
        if dropped:
            logger.debug("Trimmed %d delivery log entries", dropped)
        if self._path is None:
            return
        write_json_atomic(self._path, self._state.to_json_dict())
