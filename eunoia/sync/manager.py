"""Background journal sync: push pending writes, flush queued deletions, pull."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from loguru import logger

from eunoia.errors import EunoiaError
from eunoia.utils.helpers import utcnow

if TYPE_CHECKING:
    from eunoia.journal.service import JournalService


@dataclass
class SyncReport:
    """Outcome of one sync pass."""

    uploaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    pulled: int = 0
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return not self.failed and not self.skipped


class SyncManager:
    """
    Periodic sync for one user's journal.

    Each pass flushes queued cloud deletions, pushes pending entries (one
    delayed retry for failures), then pulls and merges the cloud copy.
    """

    def __init__(
        self,
        journal: JournalService,
        user_id: str,
        interval_s: float = 5 * 60,
        enabled: bool = True,
        push_retry_delay_s: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.journal = journal
        self.user_id = user_id
        self.interval_s = interval_s
        self.enabled = enabled
        self.push_retry_delay_s = push_retry_delay_s
        self._sleep = sleep
        self._running = False
        self._task: asyncio.Task | None = None
        self.last_sync: datetime | None = None
        self.last_error: str | None = None

    async def _push(self, entry_ids: list[str], report: SyncReport) -> list[str]:
        failed = []
        for entry_id in entry_ids:
            entry = self.journal.local.get(self.user_id, entry_id)
            if entry is None:
                continue
            try:
                await self.journal.push_entry(entry)
                report.uploaded.append(entry_id)
            except EunoiaError as e:
                logger.warning("Push of {} failed: {}", entry_id, e.message)
                failed.append(entry_id)
        return failed

    async def sync_pending(self, report: SyncReport | None = None) -> SyncReport:
        """Push every pending local entry, retrying failures once after a delay."""
        report = report or SyncReport()
        pending = [
            e.id for e in self.journal.local.list_pending(self.user_id)
            if e.sync_status.is_pending_write
        ]
        if not pending:
            return report

        logger.info("Syncing {} pending entries", len(pending))
        failed = await self._push(pending, report)
        if failed:
            await self._sleep(self.push_retry_delay_s)
            failed = await self._push(failed, report)
        report.failed.extend(failed)
        return report

    async def process_pending_deletions(self, report: SyncReport | None = None) -> SyncReport:
        report = report or SyncReport()
        report.deleted.extend(await self.journal.process_pending_deletions(self.user_id))
        return report

    async def sync_once(self) -> SyncReport:
        """Run one full sync pass."""
        report = SyncReport()
        if not self.journal.is_online():
            logger.info("Offline, skipping sync")
            report.skipped = True
            return report

        await self.process_pending_deletions(report)
        await self.sync_pending(report)
        report.pulled = len(await self.journal.load_entries(self.user_id))

        self.last_sync = utcnow()
        self.last_error = f"{len(report.failed)} entries failed to upload" if report.failed else None
        logger.info(
            "Sync done: {} uploaded, {} failed, {} deleted, {} entries",
            len(report.uploaded), len(report.failed), len(report.deleted), report.pulled,
        )
        return report

    async def start(self) -> None:
        """Start the auto-sync loop (no-op when disabled or already running)."""
        if not self.enabled:
            logger.info("Auto sync disabled")
            return
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Auto sync started (every {}s)", self.interval_s)

    def stop(self) -> None:
        """Stop the auto-sync loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            self._task = None
        logger.info("Auto sync stopped")

    async def shutdown(self) -> None:
        """Stop the auto-sync loop and wait for it to finish."""
        self._running = False
        task, self._task = self._task, None
        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("Auto sync shut down")

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_s)
                if self._running:
                    await self.sync_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.last_error = str(e)
                logger.error("Auto sync error: {}", e)

    @property
    def status(self) -> dict[str, Any]:
        return {
            "running": self._running,
            "last_sync": self.last_sync.isoformat() if self.last_sync else None,
            "last_error": self.last_error,
            "pending": len(self.journal.local.list_pending(self.user_id)),
            "queued_deletions": len(self.journal.local.pending_deletions(self.user_id)),
        }
