"""Sync and retry utilities."""

from eunoia.sync.manager import SyncManager, SyncReport
from eunoia.sync.retry import retry_with_backoff

__all__ = ["SyncManager", "SyncReport", "retry_with_backoff"]
