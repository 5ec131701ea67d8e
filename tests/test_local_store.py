"""Tests for the markdown journal cache."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

from eunoia.journal.entry import EntryNugget, JournalEntry, SyncStatus
from eunoia.journal.local_store import PENDING_DELETIONS_FILE, LocalJournalStore


def _entry(entry_id: str, day: int, **kwargs) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        user_id="u1",
        date=datetime(2025, 3, day, 9, 30, tzinfo=timezone.utc),
        **kwargs,
    )


def test_save_and_get_preserves_fields(local_store: LocalJournalStore) -> None:
    entry = _entry(
        "e1",
        10,
        gratitude="Sunny morning",
        highlight="Long walk",
        learning="Rest matters",
        learning_nugget=EntryNugget(category="health", content="Sleep 8h", is_added_to_journal=True),
        server_timestamp=datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc),
        title="Tuesday",
        content="Free text body",
        image_urls=["https://example.com/a.jpg"],
        local_image_paths=["/tmp/a.jpg"],
        sync_status=SyncStatus.SYNCED,
    )

    path = local_store.save(entry)
    loaded = local_store.get("u1", "e1")

    assert path.suffix == ".md"
    assert loaded is not None
    assert loaded.gratitude == "Sunny morning"
    assert loaded.learning_nugget == entry.learning_nugget
    assert loaded.date == entry.date
    assert loaded.server_timestamp == entry.server_timestamp
    assert loaded.content == "Free text body"
    assert loaded.image_urls == ["https://example.com/a.jpg"]
    assert loaded.local_image_paths == ["/tmp/a.jpg"]
    assert loaded.sync_status == SyncStatus.SYNCED


def test_get_missing_returns_none(local_store: LocalJournalStore) -> None:
    assert local_store.get("u1", "nope") is None


def test_list_entries_newest_first_and_skips_corrupt(local_store: LocalJournalStore, tmp_path: Path) -> None:
    local_store.save(_entry("old", 1))
    local_store.save(_entry("new", 5))
    (tmp_path / "journal" / "u1" / "broken.md").write_text("---\nid: [unclosed\n---\n", encoding="utf-8")

    entries = local_store.list_entries("u1")

    assert [e.id for e in entries] == ["new", "old"]


def test_users_are_isolated(local_store: LocalJournalStore) -> None:
    local_store.save(_entry("e1", 1))

    assert local_store.list_entries("someone-else") == []


def test_list_pending(local_store: LocalJournalStore) -> None:
    local_store.save(_entry("a", 1, sync_status=SyncStatus.SYNCED))
    local_store.save(_entry("b", 2, sync_status=SyncStatus.PENDING_UPDATE))

    assert [e.id for e in local_store.list_pending("u1")] == ["b"]


def test_delete(local_store: LocalJournalStore) -> None:
    local_store.save(_entry("a", 1))

    assert local_store.delete("u1", "a") is True
    assert local_store.delete("u1", "a") is False
    assert local_store.get("u1", "a") is None


def test_entry_for_day(local_store: LocalJournalStore) -> None:
    local_store.save(_entry("a", 3))
    local_store.save(_entry("gone", 4, sync_status=SyncStatus.PENDING_DELETE))

    assert local_store.entry_for_day("u1", datetime(2025, 3, 3).date()).id == "a"
    assert local_store.entry_for_day("u1", datetime(2025, 3, 4).date()) is None


def test_entry_for_day_in_local_timezone(local_store: LocalJournalStore) -> None:
    local_store.save(_entry("a", 3))
    hawaii = timezone(timedelta(hours=-10))

    assert local_store.entry_for_day("u1", datetime(2025, 3, 2).date(), hawaii).id == "a"
    assert local_store.entry_for_day("u1", datetime(2025, 3, 3).date(), hawaii) is None


def test_deletion_queue(local_store: LocalJournalStore, tmp_path: Path) -> None:
    local_store.queue_deletion("u1", "x")
    local_store.queue_deletion("u1", "x")
    local_store.queue_deletion("u1", "y")

    assert local_store.pending_deletions("u1") == ["x", "y"]
    assert (tmp_path / "journal" / "u1" / PENDING_DELETIONS_FILE).exists()

    local_store.clear_deletion("u1", "x")
    assert local_store.pending_deletions("u1") == ["y"]


def test_deletion_queue_survives_restart(tmp_path: Path) -> None:
    LocalJournalStore(tmp_path).queue_deletion("u1", "x")

    assert LocalJournalStore(tmp_path).pending_deletions("u1") == ["x"]
