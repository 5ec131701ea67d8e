"""
Journal operations over the local cache and the cloud store.

The local cache is the source the user sees. Cloud reads are merged into it
and cloud writes are attempted after every local write; when the cloud is
unreachable, entries stay pending and the sync manager pushes them later.
"""

from __future__ import annotations

import asyncio
from datetime import date, tzinfo
from typing import TYPE_CHECKING, Awaitable, Callable

from loguru import logger

from eunoia.errors import EunoiaError
from eunoia.journal.entry import EntryNugget, JournalEntry, SyncStatus
from eunoia.journal.local_store import LocalJournalStore
from eunoia.journal.merge import merge_entries
from eunoia.journal.streak import calculate_streak, local_today
from eunoia.remote.base import JOURNAL_ENTRIES, SERVER_TIMESTAMP, DocumentStore, decode_timestamp
from eunoia.sync.retry import retry_with_backoff
from eunoia.utils.helpers import utcnow

if TYPE_CHECKING:
    from eunoia.nuggets.models import LearningNugget


def _always_online() -> bool:
    return True


class JournalService:
    """Local-first journal with cloud reconciliation."""

    def __init__(
        self,
        local: LocalJournalStore,
        remote: DocumentStore,
        is_online: Callable[[], bool] = _always_online,
        max_retries: int = 3,
        backoff_base_s: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        tz: tzinfo | None = None,
    ):
        """
        Initialize the service.

        Args:
            local: Local journal cache.
            remote: Cloud document store.
            is_online: Connectivity check consulted before any cloud call.
            max_retries: Fetch attempts in load_entries.
            backoff_base_s: Backoff base between fetch attempts.
            sleep: Sleep function (injectable for tests).
            tz: User timezone for "today" and streak days (UTC when None).
        """
        self.local = local
        self.remote = remote
        self.is_online = is_online
        self.max_retries = max_retries
        self.backoff_base_s = backoff_base_s
        self._sleep = sleep
        self.tz = tz

    # ---- Reads ----

    async def fetch_remote(self, user_id: str) -> list[JournalEntry]:
        """Fetch a user's entries from the cloud, skipping malformed documents."""
        docs = await self.remote.query(JOURNAL_ENTRIES, [("userId", user_id)])
        entries = []
        for doc in docs:
            try:
                entries.append(JournalEntry.from_document(doc, sync_status=SyncStatus.SYNCED))
            except ValueError as e:
                logger.error("Skipping malformed journal document {}: {}", doc.get("id"), e)
        logger.debug("Fetched {} remote entries for {}", len(entries), user_id)
        return entries

    async def load_entries(self, user_id: str) -> list[JournalEntry]:
        """
        Load entries, reconciling with the cloud when online.

        When online, fetch-and-merge is retried with backoff, and every attempt
        merges the local cache as it is at that moment. Before the merged result
        is written back, entries edited locally in the meantime are kept. If
        every attempt fails the local entries are returned unchanged.

        Returns:
            Entries sorted by date, newest first.
        """
        if not self.is_online():
            local_entries = self.local.list_entries(user_id)
            logger.info("Offline, using {} local entries", len(local_entries))
            return local_entries

        async def _fetch_and_merge() -> list[JournalEntry]:
            remote_entries = await self.fetch_remote(user_id)
            return merge_entries(
                self.local.list_entries(user_id),
                remote_entries,
                self.local.pending_deletions(user_id),
            )

        try:
            merged = await retry_with_backoff(
                _fetch_and_merge,
                max_attempts=self.max_retries,
                base_delay_s=self.backoff_base_s,
                retry_on=(EunoiaError,),
                sleep=self._sleep,
                label="Journal fetch",
            )
        except EunoiaError as e:
            logger.error("Falling back to local entries for {}: {}", user_id, e.message)
            return self.local.list_entries(user_id)

        return self._write_back(user_id, merged)

    def _write_back(self, user_id: str, merged: list[JournalEntry]) -> list[JournalEntry]:
        """Replace the local cache with merged entries, keeping newer local edits."""
        current = {entry.id: entry for entry in self.local.list_entries(user_id)}
        result = []
        for entry in merged:
            local = current.get(entry.id)
            if (
                local is not None
                and local.sync_status.is_pending_write
                and local.last_modified > entry.last_modified
            ):
                logger.debug("Keeping newer local edit of entry {}", entry.id)
                result.append(local)
                continue
            self.local.save(entry)
            result.append(entry)

        kept_ids = {entry.id for entry in result}
        for entry in current.values():
            if entry.id in kept_ids:
                continue
            if entry.sync_status.is_pending_write:
                result.append(entry)
            else:
                self.local.delete(user_id, entry.id)

        result.sort(key=lambda e: e.date, reverse=True)
        logger.info("Loaded {} journal entries for {}", len(result), user_id)
        return result

    def today_entry(self, user_id: str, today: date | None = None) -> JournalEntry:
        """Return today's entry, or a fresh unsaved one if none exists."""
        existing = self.local.entry_for_day(user_id, today or local_today(self.tz), self.tz)
        if existing is not None:
            return existing
        return JournalEntry.new(user_id)

    def streak(self, user_id: str, today: date | None = None) -> tuple[int, date | None]:
        return calculate_streak(self.local.list_entries(user_id), today, self.tz)

    # ---- Writes ----

    async def push_entry(self, entry: JournalEntry) -> JournalEntry:
        """
        Upload one entry and mark it synced.

        Raises:
            EunoiaError: If the cloud write fails; the entry stays pending.
        """
        doc = entry.to_document()
        doc["syncStatus"] = SyncStatus.SYNCED.value
        doc["serverTimestamp"] = SERVER_TIMESTAMP
        await self.remote.set(JOURNAL_ENTRIES, entry.id, doc)

        stored = await self.remote.get(JOURNAL_ENTRIES, entry.id)
        entry.server_timestamp = decode_timestamp(stored.get("serverTimestamp")) if stored else utcnow()
        entry.sync_status = SyncStatus.SYNCED
        self.local.save(entry)
        logger.info("Uploaded journal entry {}", entry.id)
        return entry

    async def _store_and_push(self, entry: JournalEntry) -> JournalEntry:
        self.local.save(entry)
        if not self.is_online():
            logger.info("Offline, entry {} stays {}", entry.id, entry.sync_status.value)
            return entry
        try:
            await self.push_entry(entry)
        except EunoiaError as e:
            logger.warning("Upload of entry {} failed, will retry later: {}", entry.id, e.message)
        return entry

    async def save_entry(self, entry: JournalEntry) -> JournalEntry:
        """Save locally, then try to upload."""
        entry.mark_pending()
        return await self._store_and_push(entry)

    async def attach_nugget(self, entry: JournalEntry, nugget: LearningNugget) -> JournalEntry:
        """Add a learning nugget to an entry and use it as the entry's learning."""
        entry.learning_nugget = EntryNugget(
            category=nugget.category.value,
            content=nugget.content,
            is_added_to_journal=True,
        )
        entry.learning = nugget.content
        entry.last_modified = utcnow()
        entry.sync_status = SyncStatus.PENDING_UPLOAD
        return await self._store_and_push(entry)

    async def delete_entry(self, user_id: str, entry_id: str) -> None:
        """
        Delete an entry locally, then in the cloud.

        A failed cloud deletion is queued and retried by the sync manager.
        """
        self.local.delete(user_id, entry_id)
        if not self.is_online():
            self.local.queue_deletion(user_id, entry_id)
            return
        try:
            await self.remote.delete(JOURNAL_ENTRIES, entry_id)
            logger.info("Deleted remote journal entry {}", entry_id)
        except EunoiaError as e:
            logger.warning("Remote deletion of {} failed: {}", entry_id, e.message)
            self.local.queue_deletion(user_id, entry_id)

    async def process_pending_deletions(self, user_id: str) -> list[str]:
        """Retry queued cloud deletions. Returns the ids that went through."""
        done = []
        for entry_id in self.local.pending_deletions(user_id):
            try:
                await self.remote.delete(JOURNAL_ENTRIES, entry_id)
            except EunoiaError as e:
                logger.warning("Queued deletion of {} still failing: {}", entry_id, e.message)
                continue
            self.local.clear_deletion(user_id, entry_id)
            done.append(entry_id)
        if done:
            logger.info("Processed {} queued deletions", len(done))
        return done
