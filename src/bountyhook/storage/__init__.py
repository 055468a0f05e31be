"""Durable storage for bountyhook.

- StateStore: bounty snapshots and delivery log, flushed once per poll cycle
- WebhookRegistry: registered endpoints, written on every change
"""

from .files import read_json, write_json_atomic
from .registry import WebhookRegistry
from .state import RelayState, StateStore

__all__ = [
    "RelayState",
    "StateStore",
    "WebhookRegistry",
    "read_json",
    "write_json_atomic",
]
