"""Tests for JournalService against an in-memory cloud."""

from datetime import date, datetime, timedelta, timezone

import pytest

from eunoia.journal.entry import JournalEntry, SyncStatus
from eunoia.journal.local_store import LocalJournalStore
from eunoia.journal.service import JournalService
from eunoia.nuggets.models import LearningNugget, NuggetCategory
from eunoia.remote.base import JOURNAL_ENTRIES
from eunoia.remote.memory_store import InMemoryDocumentStore


def _entry(entry_id: str, day: int = 10, **kwargs) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        user_id="u1",
        date=datetime(2025, 3, day, 9, tzinfo=timezone.utc),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_save_entry_uploads_and_marks_synced(journal: JournalService, remote: InMemoryDocumentStore) -> None:
    entry = _entry("e1", gratitude="Coffee")

    saved = await journal.save_entry(entry)

    assert saved.sync_status == SyncStatus.SYNCED
    assert saved.server_timestamp is not None
    doc = await remote.get(JOURNAL_ENTRIES, "e1")
    assert doc["gratitude"] == "Coffee"
    assert doc["syncStatus"] == "synced"
    assert journal.local.get("u1", "e1").sync_status == SyncStatus.SYNCED


@pytest.mark.asyncio
async def test_save_entry_keeps_pending_when_upload_fails(
    journal: JournalService, remote: InMemoryDocumentStore
) -> None:
    remote.online = False

    saved = await journal.save_entry(_entry("e1"))

    assert saved.sync_status == SyncStatus.PENDING_UPLOAD
    assert journal.local.get("u1", "e1").sync_status == SyncStatus.PENDING_UPLOAD


@pytest.mark.asyncio
async def test_edit_of_synced_entry_becomes_pending_update(
    journal: JournalService, remote: InMemoryDocumentStore
) -> None:
    entry = await journal.save_entry(_entry("e1"))
    remote.online = False
    entry.highlight = "Edited"

    await journal.save_entry(entry)

    assert journal.local.get("u1", "e1").sync_status == SyncStatus.PENDING_UPDATE


@pytest.mark.asyncio
async def test_offline_save_does_not_touch_remote(
    local_store: LocalJournalStore, remote: InMemoryDocumentStore
) -> None:
    service = JournalService(local_store, remote, is_online=lambda: False)

    await service.save_entry(_entry("e1"))

    assert remote.calls == 0
    assert local_store.get("u1", "e1") is not None


@pytest.mark.asyncio
async def test_load_entries_merges_remote(journal: JournalService, remote: InMemoryDocumentStore) -> None:
    await remote.set(JOURNAL_ENTRIES, "r1", _entry("r1", day=11, sync_status=SyncStatus.SYNCED).to_document())
    journal.local.save(_entry("l1", day=9, sync_status=SyncStatus.PENDING_UPLOAD))

    entries = await journal.load_entries("u1")

    assert [e.id for e in entries] == ["r1", "l1"]
    assert journal.local.get("u1", "r1") is not None


@pytest.mark.asyncio
async def test_load_entries_drops_synced_entries_deleted_remotely(journal: JournalService) -> None:
    journal.local.save(_entry("gone", sync_status=SyncStatus.SYNCED))

    entries = await journal.load_entries("u1")

    assert entries == []
    assert journal.local.get("u1", "gone") is None


@pytest.mark.asyncio
async def test_load_entries_skips_malformed_documents(journal: JournalService, remote: InMemoryDocumentStore) -> None:
    await remote.set(JOURNAL_ENTRIES, "bad", {"userId": "u1", "gratitude": "no date"})
    await remote.set(JOURNAL_ENTRIES, "ok", _entry("ok").to_document())

    entries = await journal.load_entries("u1")

    assert [e.id for e in entries] == ["ok"]


@pytest.mark.asyncio
async def test_load_entries_retries_with_backoff(journal: JournalService, remote: InMemoryDocumentStore, fake_sleep) -> None:
    await remote.set(JOURNAL_ENTRIES, "r1", _entry("r1").to_document())
    remote.fail_next = 2

    entries = await journal.load_entries("u1")

    assert [e.id for e in entries] == ["r1"]
    assert fake_sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_edit_saved_during_fetch_backoff_is_not_overwritten(
    local_store: LocalJournalStore, remote: InMemoryDocumentStore
) -> None:
    written = datetime(2025, 3, 10, 9, tzinfo=timezone.utc)
    original = _entry(
        "e1", gratitude="v1", last_modified=written, server_timestamp=written, sync_status=SyncStatus.SYNCED
    )
    local_store.save(original)
    await remote.set(JOURNAL_ENTRIES, "e1", original.to_document())

    async def _edit_while_waiting(seconds: float) -> None:
        if service.local.get("u1", "e1").gratitude == "v1":
            edited = service.local.get("u1", "e1")
            edited.gratitude = "v2 edit"
            await service.save_entry(edited)

    service = JournalService(local_store, remote, sleep=_edit_while_waiting)
    # First failure hits the fetch, second hits the upload of the edit
    remote.fail_next = 2

    entries = await service.load_entries("u1")

    local = service.local.get("u1", "e1")
    assert local.gratitude == "v2 edit"
    assert local.sync_status == SyncStatus.PENDING_UPDATE
    assert [e.gratitude for e in entries] == ["v2 edit"]
    assert (await remote.get(JOURNAL_ENTRIES, "e1"))["gratitude"] == "v1"


@pytest.mark.asyncio
async def test_load_entries_falls_back_to_local_after_three_failures(
    journal: JournalService, remote: InMemoryDocumentStore, fake_sleep
) -> None:
    journal.local.save(_entry("l1", sync_status=SyncStatus.SYNCED))
    remote.fail_next = 3

    entries = await journal.load_entries("u1")

    assert [e.id for e in entries] == ["l1"]
    assert journal.local.get("u1", "l1") is not None
    assert len(fake_sleep.delays) == 2


@pytest.mark.asyncio
async def test_delete_entry_removes_both_copies(journal: JournalService, remote: InMemoryDocumentStore) -> None:
    await journal.save_entry(_entry("e1"))

    await journal.delete_entry("u1", "e1")

    assert journal.local.get("u1", "e1") is None
    assert await remote.get(JOURNAL_ENTRIES, "e1") is None
    assert journal.local.pending_deletions("u1") == []


@pytest.mark.asyncio
async def test_failed_delete_is_queued_and_processed_later(
    journal: JournalService, remote: InMemoryDocumentStore
) -> None:
    await journal.save_entry(_entry("e1"))
    remote.online = False

    await journal.delete_entry("u1", "e1")
    assert journal.local.pending_deletions("u1") == ["e1"]

    # Queued deletion keeps the remote copy from coming back on load
    remote.online = True
    assert await journal.load_entries("u1") == []

    done = await journal.process_pending_deletions("u1")
    assert done == ["e1"]
    assert journal.local.pending_deletions("u1") == []
    assert await remote.get(JOURNAL_ENTRIES, "e1") is None


@pytest.mark.asyncio
async def test_today_entry_returns_existing_or_new(journal: JournalService) -> None:
    journal.local.save(_entry("e1", day=10))

    assert journal.today_entry("u1", date(2025, 3, 10)).id == "e1"
    fresh = journal.today_entry("u1", date(2025, 3, 11))
    assert fresh.id != "e1"
    assert journal.local.get("u1", fresh.id) is None


@pytest.mark.asyncio
async def test_attach_nugget(journal: JournalService) -> None:
    nugget = LearningNugget.create("u1", NuggetCategory.HEALTH, "Sleep", "Sleep 8 hours.")

    entry = await journal.attach_nugget(_entry("e1"), nugget)

    assert entry.learning == "Sleep 8 hours."
    assert entry.learning_nugget.category == "health"
    assert entry.learning_nugget.is_added_to_journal is True
    assert entry.sync_status == SyncStatus.SYNCED


def test_today_and_streak_use_service_timezone(local_store: LocalJournalStore, remote: InMemoryDocumentStore) -> None:
    # 09:00 UTC on 10 March is still 9 March at UTC-10
    local_store.save(_entry("e1", sync_status=SyncStatus.SYNCED))
    service = JournalService(local_store, remote, tz=timezone(timedelta(hours=-10)))

    assert service.today_entry("u1", date(2025, 3, 9)).id == "e1"
    assert service.today_entry("u1", date(2025, 3, 10)).id != "e1"
    assert service.streak("u1", date(2025, 3, 9)) == (1, date(2025, 3, 9))
