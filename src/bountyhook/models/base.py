"""Base model and shared helpers for bountyhook models."""

from __future__ import annotations

import secrets
import string
import time
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_BASE36 = string.digits + string.ascii_lowercase


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def epoch_millis(moment: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch for ``moment`` (now if None)."""
    if moment is None:
        return time.time_ns() // 1_000_000
    return int(moment.timestamp() * 1000)


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_webhook_id() -> str:
    """Generate a webhook endpoint ID.

    Examples:
        generate_webhook_id() -> "wh_lx2k9a1b_q7f3zc"
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"wh_{to_base36(epoch_millis())}_{suffix}"


class CamelModel(BaseModel):
    """Base for models persisted and sent on the wire with camelCase keys.

    Python attributes stay snake_case; JSON uses the camelCase alias.
    Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict[str, object]:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
