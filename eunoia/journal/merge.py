"""
Reconciliation of the local journal cache with the cloud copy.

Rules, per entry id:
- Present on both sides: a pending local write newer than the remote copy
  wins. Otherwise the newer server timestamp wins when both sides carry one,
  and the remote copy wins when they do not.
- Local only: kept while it is a pending upload/update, dropped when it was
  synced (deleted elsewhere) or is itself pending deletion.
- Remote only: added, unless it is waiting in the local deletion queue.
"""

from __future__ import annotations

from collections.abc import Iterable

from eunoia.journal.entry import JournalEntry, SyncStatus


def _pick(local: JournalEntry, remote: JournalEntry) -> JournalEntry:
    if local.sync_status.is_pending_write and local.last_modified > remote.last_modified:
        return local
    if local.server_timestamp is not None and remote.server_timestamp is not None:
        return local if local.server_timestamp > remote.server_timestamp else remote
    return remote


def merge_entries(
    local: list[JournalEntry],
    remote: list[JournalEntry],
    pending_deletions: Iterable[str] = (),
) -> list[JournalEntry]:
    """
    Merge local and remote entries.

    Args:
        local: Entries from the local cache.
        remote: Entries fetched from the cloud (already marked synced).
        pending_deletions: Ids deleted locally whose cloud deletion is queued.

    Returns:
        Merged entries sorted by date, newest first.
    """
    deleted = set(pending_deletions)
    remote_by_id = {entry.id: entry for entry in remote}
    merged: dict[str, JournalEntry] = {}

    for entry in local:
        if entry.sync_status == SyncStatus.PENDING_DELETE or entry.id in deleted:
            continue
        counterpart = remote_by_id.get(entry.id)
        if counterpart is not None:
            merged[entry.id] = _pick(entry, counterpart)
        elif entry.sync_status.is_pending_write:
            merged[entry.id] = entry

    local_ids = {entry.id for entry in local}
    for entry in remote:
        if entry.id not in local_ids and entry.id not in deleted:
            merged[entry.id] = entry

    return sorted(merged.values(), key=lambda e: e.date, reverse=True)


def apply_new_entries(existing: list[JournalEntry], new: list[JournalEntry]) -> list[JournalEntry]:
    """
    Fold freshly received entries into an existing list.

    An incoming entry replaces the existing one with the same id, but a
    pending upload keeps its pending status so it is still pushed.
    """
    by_id = {entry.id: entry for entry in existing}
    for entry in new:
        current = by_id.get(entry.id)
        if current is not None and current.sync_status == SyncStatus.PENDING_UPLOAD:
            entry.sync_status = SyncStatus.PENDING_UPLOAD
        by_id[entry.id] = entry
    return sorted(by_id.values(), key=lambda e: e.date, reverse=True)
