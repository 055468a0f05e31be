"""Bounty lifecycle event detection.

Diffs a freshly polled bounty record against the previous snapshot and
returns the lifecycle events the transition implies. Each tracked status
is an independent one-way latch: an event fires when the status is
entered from an earlier stage, never when it is kept, left, or
re-entered by moving backwards.
"""

from __future__ import annotations

from typing import Any

from bountyhook.models import (
    STATUS_CLAIMED,
    STATUS_COMPLETED,
    STATUS_OPEN,
    STATUS_SUBMITTED,
    BountySnapshot,
    EventType,
)

# Status latches in emission order
# Format: (status entered, event emitted)
LIFECYCLE_TRANSITIONS: list[tuple[str, EventType]] = [
    (STATUS_CLAIMED, "bounty.claimed"),
    (STATUS_SUBMITTED, "bounty.submitted"),
    (STATUS_COMPLETED, "bounty.completed"),
]

# Position in the lifecycle; unknown statuses rank before open
LIFECYCLE_STAGES: dict[str, int] = {
    STATUS_OPEN: 0,
    STATUS_CLAIMED: 1,
    STATUS_SUBMITTED: 2,
    STATUS_COMPLETED: 3,
}


def _stage(status: Any) -> int:
    return LIFECYCLE_STAGES.get(status, -1) if isinstance(status, str) else -1


def detect_events(
    previous: BountySnapshot | None,
    current: dict[str, Any],
) -> list[EventType]:
    """Detect lifecycle events for one polled bounty record.

    A bounty seen for the first time always yields ``bounty.created``,
    followed by the event for its current status if that status is tracked.
    Intermediate states are not backfilled: a bounty first seen as
    ``completed`` yields ``created`` and ``completed`` only.

    For a known bounty an event fires only when the status moves forward
    into a tracked status. Unchanged, regressing (e.g. completed -> claimed)
    or unknown statuses yield nothing.

    This function is pure; the caller must read ``previous`` before
    overwriting the stored snapshot.

    Args:
        previous: Last stored snapshot, or None if the bounty is new.
        current: Raw bounty record from the feed.

    Returns:
        Event types in emission order (possibly empty).
    """
    status = current.get("status")
    events: list[EventType] = []

    if previous is None:
        events.append("bounty.created")
        for entered, event_type in LIFECYCLE_TRANSITIONS:
            if status == entered:
                events.append(event_type)
        return events

    for entered, event_type in LIFECYCLE_TRANSITIONS:
        if status == entered and _stage(previous.status) < _stage(entered):
            events.append(event_type)

    return events
