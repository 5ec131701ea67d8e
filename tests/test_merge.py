"""Tests for local/remote journal reconciliation."""

from datetime import datetime, timedelta, timezone

from eunoia.journal.entry import JournalEntry, SyncStatus
from eunoia.journal.merge import apply_new_entries, merge_entries

BASE = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def _entry(
    entry_id: str,
    status: SyncStatus = SyncStatus.SYNCED,
    day_offset: int = 0,
    modified_offset_s: int = 0,
    server_offset_s: int | None = None,
    gratitude: str = "",
) -> JournalEntry:
    return JournalEntry(
        id=entry_id,
        user_id="u1",
        date=BASE + timedelta(days=day_offset),
        gratitude=gratitude,
        last_modified=BASE + timedelta(seconds=modified_offset_s),
        sync_status=status,
        server_timestamp=None if server_offset_s is None else BASE + timedelta(seconds=server_offset_s),
    )


def test_remote_wins_without_server_timestamps() -> None:
    local = [_entry("a", gratitude="local")]
    remote = [_entry("a", gratitude="remote")]

    merged = merge_entries(local, remote)

    assert len(merged) == 1
    assert merged[0].gratitude == "remote"


def test_newer_server_timestamp_wins() -> None:
    local = [_entry("a", server_offset_s=100, gratitude="local")]
    remote = [_entry("a", server_offset_s=50, gratitude="remote")]

    assert merge_entries(local, remote)[0].gratitude == "local"

    remote = [_entry("a", server_offset_s=200, gratitude="remote")]
    assert merge_entries(local, remote)[0].gratitude == "remote"


def test_pending_local_write_newer_than_remote_wins() -> None:
    local = [_entry("a", SyncStatus.PENDING_UPDATE, modified_offset_s=300, server_offset_s=10, gratitude="edited")]
    remote = [_entry("a", modified_offset_s=100, server_offset_s=20, gratitude="stale")]

    merged = merge_entries(local, remote)

    assert merged[0].gratitude == "edited"
    assert merged[0].sync_status == SyncStatus.PENDING_UPDATE


def test_pending_local_write_older_than_remote_loses() -> None:
    local = [_entry("a", SyncStatus.PENDING_UPDATE, modified_offset_s=10, gratitude="old edit")]
    remote = [_entry("a", modified_offset_s=100, gratitude="newer remote")]

    assert merge_entries(local, remote)[0].gratitude == "newer remote"


def test_local_only_pending_upload_is_kept() -> None:
    local = [_entry("new", SyncStatus.PENDING_UPLOAD)]

    merged = merge_entries(local, [])

    assert [e.id for e in merged] == ["new"]


def test_local_only_synced_entry_is_dropped() -> None:
    local = [_entry("gone", SyncStatus.SYNCED)]

    assert merge_entries(local, []) == []


def test_local_pending_delete_is_dropped_even_if_remote_has_it() -> None:
    local = [_entry("a", SyncStatus.PENDING_DELETE)]
    remote = [_entry("a")]

    assert merge_entries(local, remote) == []


def test_remote_only_entries_are_added_unless_queued_for_deletion() -> None:
    remote = [_entry("r1", day_offset=0), _entry("r2", day_offset=1)]

    merged = merge_entries([], remote, pending_deletions=["r1"])

    assert [e.id for e in merged] == ["r2"]


def test_result_sorted_newest_first() -> None:
    local = [_entry("old", SyncStatus.PENDING_UPLOAD, day_offset=-3)]
    remote = [_entry("mid", day_offset=-1), _entry("new", day_offset=2)]

    merged = merge_entries(local, remote)

    assert [e.id for e in merged] == ["new", "mid", "old"]


def test_apply_new_entries_keeps_pending_upload_status() -> None:
    existing = [_entry("a", SyncStatus.PENDING_UPLOAD, gratitude="mine")]
    incoming = [_entry("a", SyncStatus.SYNCED, gratitude="theirs"), _entry("b", day_offset=1)]

    result = apply_new_entries(existing, incoming)

    by_id = {e.id: e for e in result}
    assert by_id["a"].gratitude == "theirs"
    assert by_id["a"].sync_status == SyncStatus.PENDING_UPLOAD
    assert by_id["b"].sync_status == SyncStatus.SYNCED
    assert [e.id for e in result] == ["b", "a"]
