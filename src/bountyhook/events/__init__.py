"""Lifecycle event detection for polled bounties.

Example:
    ```python
    from bountyhook.events import detect_events

    detect_events(None, {"id": 42, "status": "completed"})
    # ["bounty.created", "bounty.completed"]
    ```
"""

from .detection import LIFECYCLE_TRANSITIONS, detect_events

__all__ = [
    "LIFECYCLE_TRANSITIONS",
    "detect_events",
]
