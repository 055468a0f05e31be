"""Poll cycle orchestration for the bounty webhook relay.

One cycle fetches the bounty feed, diffs every record against its stored
snapshot, delivers the resulting events to subscribed endpoints, and
flushes snapshots and the delivery log to disk in one write.

Example:
    ```python
    from bountyhook.service import RelayService

    async with RelayService.create() as relay:
        result = await relay.poll_once()
        print(f"{result.events} events, {result.failed} failed deliveries")
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field
from typing import Any

from bountyhook.config import Settings
from bountyhook.events import detect_events
from bountyhook.exceptions import FetchError, PersistenceError
from bountyhook.feed import BountyFeedClient
from bountyhook.logging import get_logger, log_context
from bountyhook.models import BountySnapshot, WebhookEvent
from bountyhook.storage import StateStore, WebhookRegistry
from bountyhook.webhooks import WebhookDispatcher

logger = get_logger(__name__)


@dataclass
class CycleResult:
    """Summary of one poll cycle.

    Attributes:
        ok: False if the feed could not be fetched (nothing was processed).
        fetched: Bounty records returned by the feed.
        events: Lifecycle events detected.
        delivered: Deliveries that ended in success.
        failed: Deliveries that exhausted their retries.
        persisted: Whether the end-of-cycle flush succeeded.
        error: Fetch error message when ``ok`` is False.
    """

    ok: bool = True
    fetched: int = 0
    events: int = 0
    delivered: int = 0
    failed: int = 0
    persisted: bool = False
    error: str | None = None


@dataclass
class RelayService:
    """Polls the bounty feed and fans lifecycle events out to webhooks.

    Cycles never overlap: the background loop and manual triggers share
    one lock, and the loop waits a full interval after each cycle ends.
    Stopping never interrupts a cycle; it waits for the cycle in progress
    to finish and flush.

    Attributes:
        settings: Configuration settings.
        state: Snapshot map and delivery log.
        registry: Registered webhook endpoints.
        feed: Upstream bounty feed client.
        dispatcher: Signed webhook delivery engine.
    """

    settings: Settings
    state: StateStore
    registry: WebhookRegistry
    feed: BountyFeedClient
    dispatcher: WebhookDispatcher

    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)
    _stopping: asyncio.Event = field(default_factory=asyncio.Event, init=False, repr=False)
    _cycle: int = field(default=0, init=False, repr=False)
    _last_result: CycleResult | None = field(default=None, init=False, repr=False)

    @classmethod
    def create(cls, settings: Settings | None = None) -> RelayService:
        """Create a RelayService with file-backed stores.

        Args:
            settings: Optional settings. Uses environment if None.

        Returns:
            Configured RelayService (stores not yet loaded).
        """
        if settings is None:
            settings = Settings()

        state = StateStore(settings.state_file, log_limit=settings.delivery_log_limit)
        return cls(
            settings=settings,
            state=state,
            registry=WebhookRegistry(settings.config_file),
            feed=BountyFeedClient(
                settings.api_base_url,
                timeout_seconds=settings.feed_timeout_seconds,
            ),
            dispatcher=WebhookDispatcher(
                state,
                settings.hmac_secret,
                max_attempts=settings.max_retries,
                retry_base_seconds=settings.retry_base_seconds,
                timeout_seconds=settings.delivery_timeout_seconds,
                max_concurrent=settings.max_concurrent_deliveries,
            ),
        )

    def initialize(self) -> None:
        """Load persisted state and registered endpoints."""
        self.state.load()
        self.registry.load()
        logger.info(
            "Relay initialized",
            tracked_bounties=self.state.tracked_count,
            registered_webhooks=len(self.registry),
        )

    async def __aenter__(self) -> RelayService:
        self.initialize()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        """Whether the background poll loop is active."""
        return self._task is not None and not self._task.done()

    @property
    def last_result(self) -> CycleResult | None:
        return self._last_result

    def start(self) -> None:
        """Start the background poll loop (first cycle runs immediately)."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run_loop(), name="bountyhook-poller")
        logger.info(
            "Poller started",
            api_base_url=self.settings.api_base_url,
            interval_seconds=self.settings.poll_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop the background poll loop.

        A cycle in progress runs to completion, deliveries and flush
        included, before this returns. No further cycle starts.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self._stopping.set()
        await task
        logger.info("Poller stopped")

    async def _run_loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Poll cycle crashed")
            # Interval wait, cut short by stop()
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(
                    self._stopping.wait(),
                    timeout=self.settings.poll_interval_seconds,
                )

    async def trigger_poll(self) -> CycleResult:
        """Run a cycle now, waiting for any cycle in progress to finish first."""
        return await self.poll_once()

    async def poll_once(self) -> CycleResult:
        """Run one poll-detect-dispatch-persist cycle.

        Returns:
            Summary of the cycle. Fetch failures are reported, not raised.
        """
        async with self._lock:
            self._cycle += 1
            with log_context(cycle=self._cycle):
                result = await self._run_cycle()
            self._last_result = result
            return result

    async def _run_cycle(self) -> CycleResult:
        try:
            records = await self.feed.fetch_bounties()
        except FetchError as e:
            logger.error("Bounty fetch failed", error=e.message, status_code=e.status_code)
            return CycleResult(ok=False, error=e.message)

        # One consistent endpoint view for the whole dispatch pass
        endpoints = self.registry.snapshot()
        result = CycleResult(fetched=len(records))

        for record in records:
            previous = self.state.get_snapshot(record["id"])
            event_types = detect_events(previous, record)
            self.state.put_snapshot(BountySnapshot.from_record(record))

            for event_type in event_types:
                event = WebhookEvent.for_bounty(event_type, record)
                result.events += 1
                logger.info("Event detected", event_id=event.id, event_type=event_type)

                for entry in await self.dispatcher.dispatch_event(event, endpoints):
                    if entry.succeeded:
                        result.delivered += 1
                    else:
                        result.failed += 1

        result.persisted = await self._flush()
        logger.info(
            "Poll cycle complete",
            fetched=result.fetched,
            events=result.events,
            delivered=result.delivered,
            failed=result.failed,
        )
        return result

    async def _flush(self) -> bool:
        try:
            await asyncio.to_thread(self.state.flush)
        except PersistenceError as e:
            logger.error("State flush failed, keeping in-memory state", error=e.message)
            return False
        return True

    def health(self) -> dict[str, Any]:
        """Counts for health reporting."""
        return {
            "status": "ok",
            "registered_webhooks": len(self.registry),
            "active_webhooks": self.registry.active_count,
            "tracked_bounties": self.state.tracked_count,
            "total_deliveries": self.state.delivery_count,
        }
