"""Bounty snapshot model.

A snapshot is the last-observed lifecycle state of one upstream bounty.
It is the only thing the relay remembers about a bounty between polls,
and the input the event detector diffs new records against.
"""

from __future__ import annotations

from typing import Any, Final

from pydantic import Field

from .base import CamelModel

STATUS_OPEN: Final = "open"
STATUS_CLAIMED: Final = "claimed"
STATUS_SUBMITTED: Final = "submitted"
STATUS_COMPLETED: Final = "completed"


def _optional_str(value: Any) -> str | None:
    # Upstream sends null or "" for unset fields; both mean absent.
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


class BountySnapshot(CamelModel):
    """Last-known lifecycle state of a bounty.

    Attributes:
        id: Upstream bounty ID.
        status: Raw status string (unknown values are kept as-is).
        claimed_by: Who claimed the bounty, if anyone.
        submitted_at: Upstream submission timestamp, if any.
        completed_at: Upstream completion timestamp, if any.
    """

    id: int = Field(description="Upstream bounty ID")
    status: str = Field(description="Raw upstream status")
    claimed_by: str | None = Field(default=None, description="Claimant, if claimed")
    submitted_at: str | None = Field(default=None, description="Submission time, if submitted")
    completed_at: str | None = Field(default=None, description="Completion time, if completed")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> BountySnapshot:
        """Build a snapshot from a raw polled bounty record."""
        return cls(
            id=record["id"],
            status=record["status"],
            claimed_by=_optional_str(record.get("claimedBy")),
            submitted_at=_optional_str(record.get("submittedAt")),
            completed_at=_optional_str(record.get("completedAt")),
        )


__all__ = [
    "STATUS_CLAIMED",
    "STATUS_COMPLETED",
    "STATUS_OPEN",
    "STATUS_SUBMITTED",
    "BountySnapshot",
]
