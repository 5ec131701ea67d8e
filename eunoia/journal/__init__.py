"""Journal entries, local cache, reconciliation and streaks."""

from eunoia.journal.entry import EntryNugget, JournalEntry, SyncStatus
from eunoia.journal.local_store import LocalJournalStore
from eunoia.journal.merge import apply_new_entries, merge_entries
from eunoia.journal.service import JournalService
from eunoia.journal.streak import calculate_streak, week_progress

__all__ = [
    "EntryNugget",
    "JournalEntry",
    "SyncStatus",
    "LocalJournalStore",
    "JournalService",
    "merge_entries",
    "apply_new_entries",
    "calculate_streak",
    "week_progress",
]
