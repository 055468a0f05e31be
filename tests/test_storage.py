"""Tests for state store and webhook registry persistence."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from bountyhook.exceptions import NotFoundError, PersistenceError, ValidationError
from bountyhook.models import BountySnapshot, WebhookDelivery
from bountyhook.storage import StateStore, WebhookRegistry, write_json_atomic


def delivery(n: int) -> WebhookDelivery:
    return WebhookDelivery(
        event_id=f"evt_{n}",
        endpoint_id="wh_1",
        status="success",
        attempts=1,
        status_code=200,
    )


class TestStateStore:
    """Tests for the snapshot map and delivery log."""

    def test_in_memory_roundtrip(self):
        """A store without a path keeps snapshots in memory."""
        store = StateStore()
        assert store.get_snapshot(42) is None

        store.put_snapshot(BountySnapshot(id=42, status="open"))
        store.put_snapshot(BountySnapshot(id=42, status="claimed", claimed_by="alice"))

        assert store.get_snapshot(42).status == "claimed"
        assert store.tracked_count == 1
        store.flush()  # no file, no error

    def test_flush_trims_to_most_recent(self):
        """After a flush the log holds at most the limit, newest kept."""
        store = StateStore(log_limit=1000)
        for n in range(1005):
            store.append_delivery(delivery(n))

        store.flush()

        assert store.delivery_count == 1000
        recent = store.recent_deliveries(1000)
        assert recent[0].event_id == "evt_5"
        assert recent[-1].event_id == "evt_1004"

    def test_recent_deliveries_limit(self):
        store = StateStore()
        for n in range(10):
            store.append_delivery(delivery(n))

        assert [d.event_id for d in store.recent_deliveries(3)] == ["evt_7", "evt_8", "evt_9"]
        assert store.recent_deliveries(0) == []

    def test_flush_writes_camel_case_document(self, tmp_path: Path):
        """Snapshots and log are written together in one JSON document."""
        path = tmp_path / "webhook-state.json"
        store = StateStore(path)
        store.put_snapshot(BountySnapshot(id=42, status="claimed", claimed_by="alice"))
        store.append_delivery(delivery(1))

        store.flush()

        data = json.loads(path.read_text())
        assert set(data) == {"knownBounties", "deliveryLog"}
        assert data["knownBounties"]["42"]["claimedBy"] == "alice"
        assert data["deliveryLog"][0]["eventId"] == "evt_1"
        assert data["deliveryLog"][0]["statusCode"] == 200

    def test_load_restores_flushed_state(self, tmp_path: Path):
        path = tmp_path / "webhook-state.json"
        store = StateStore(path)
        entry = delivery(1)
        store.put_snapshot(BountySnapshot(id=7, status="submitted"))
        store.append_delivery(entry)
        store.flush()

        reloaded = StateStore(path)
        reloaded.load()

        assert reloaded.get_snapshot(7) == BountySnapshot(id=7, status="submitted")
        assert reloaded.recent_deliveries(10) == [entry]

    def test_load_corrupt_file_starts_empty(self, tmp_path: Path):
        path = tmp_path / "webhook-state.json"
        path.write_text("{not json")
        store = StateStore(path)

        store.load()

        assert store.tracked_count == 0
        assert store.delivery_count == 0

    def test_load_missing_file_starts_empty(self, tmp_path: Path):
        store = StateStore(tmp_path / "missing.json")
        store.load()
        assert store.tracked_count == 0

    def test_flush_failure_keeps_memory(self, tmp_path: Path):
        """A failed write raises PersistenceError but keeps in-memory state."""
        store = StateStore(tmp_path / "webhook-state.json")
        store.put_snapshot(BountySnapshot(id=1, status="open"))

        with (
            patch("pathlib.Path.replace", side_effect=OSError("disk full")),
            pytest.raises(PersistenceError),
        ):
            store.flush()

        assert store.get_snapshot(1) is not None
        assert list(tmp_path.iterdir()) == []


class TestWriteJsonAtomic:
    """Tests for the atomic JSON writer."""

    def test_overwrites_whole_file(self, tmp_path: Path):
        path = tmp_path / "data.json"
        write_json_atomic(path, {"a": 1, "b": 2})
        write_json_atomic(path, {"a": 3})

        assert json.loads(path.read_text()) == {"a": 3}
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_unserializable_raises_persistence_error(self, tmp_path: Path):
        with pytest.raises(PersistenceError):
            write_json_atomic(tmp_path / "data.json", {"x": object()})


class TestWebhookRegistry:
    """Tests for webhook registration CRUD."""

    def test_create_defaults(self):
        registry = WebhookRegistry()

        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"])

        assert endpoint.id.startswith("wh_")
        assert endpoint.active is True
        assert endpoint.secret is None
        assert registry.get(endpoint.id) == endpoint
        assert len(registry) == 1

    def test_create_rejects_unknown_event(self):
        registry = WebhookRegistry()

        with pytest.raises(ValidationError) as exc_info:
            registry.create("https://hooks.example.com/x", ["bounty.deleted"])

        assert exc_info.value.field == "events"
        assert len(registry) == 0

    def test_create_rejects_bad_url(self):
        with pytest.raises(ValidationError):
            WebhookRegistry().create("not a url", ["bounty.created"])

    def test_update_replaces_object(self):
        """Updates swap in a new object; earlier snapshots keep their view."""
        registry = WebhookRegistry()
        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"])
        before = registry.snapshot()

        updated = registry.update(endpoint.id, active=False, events=["bounty.claimed"])

        assert updated.active is False
        assert updated.events == ["bounty.claimed"]
        assert updated.created_at == endpoint.created_at
        assert before[0].active is True
        assert registry.active_count == 0

    def test_update_can_clear_secret(self):
        registry = WebhookRegistry()
        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"], secret="s")

        assert registry.update(endpoint.id, secret=None).secret is None

    def test_update_unknown_field(self):
        registry = WebhookRegistry()
        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"])

        with pytest.raises(ValidationError):
            registry.update(endpoint.id, id="wh_other")

    def test_missing_webhook(self):
        registry = WebhookRegistry()
        with pytest.raises(NotFoundError):
            registry.get("wh_missing")
        with pytest.raises(NotFoundError):
            registry.update("wh_missing", active=False)
        with pytest.raises(NotFoundError):
            registry.delete("wh_missing")

    def test_delete(self):
        registry = WebhookRegistry()
        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"])

        registry.delete(endpoint.id)

        assert registry.list_webhooks() == []

    def test_every_change_is_persisted(self, tmp_path: Path):
        path = tmp_path / "webhooks.json"
        registry = WebhookRegistry(path)

        endpoint = registry.create("https://hooks.example.com/x", ["bounty.created"], secret="s")
        saved = json.loads(path.read_text())
        assert saved[0]["id"] == endpoint.id
        assert "createdAt" in saved[0]

        registry.update(endpoint.id, active=False)
        assert json.loads(path.read_text())[0]["active"] is False

        registry.delete(endpoint.id)
        assert json.loads(path.read_text()) == []

    def test_load_roundtrip(self, tmp_path: Path):
        path = tmp_path / "webhooks.json"
        registry = WebhookRegistry(path)
        endpoint = registry.create("https://hooks.example.com/x", ["bounty.completed"], secret="s")

        reloaded = WebhookRegistry(path)
        reloaded.load()

        assert reloaded.get(endpoint.id) == endpoint

    def test_load_invalid_file_starts_empty(self, tmp_path: Path):
        path = tmp_path / "webhooks.json"
        path.write_text(json.dumps([{"url": "nope"}]))
        registry = WebhookRegistry(path)

        registry.load()

        assert len(registry) == 0
