"""Journaling streaks and weekly progress."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta, tzinfo

from eunoia.journal.entry import JournalEntry, SyncStatus
from eunoia.utils.helpers import utcnow


def _journaled_days(entries: Iterable[JournalEntry], tz: tzinfo | None) -> set[date]:
    return {e.local_day(tz) for e in entries if e.sync_status != SyncStatus.PENDING_DELETE}


def local_today(tz: tzinfo | None = None) -> date:
    """Today's date in ``tz`` (UTC when not given)."""
    now = utcnow()
    return now.astimezone(tz).date() if tz else now.date()


def calculate_streak(
    entries: Iterable[JournalEntry],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> tuple[int, date | None]:
    """
    Count consecutive journaled days ending today.

    The walk starts at today and stops at the first day without an entry,
    so a streak is 0 until today's entry exists. Days are calendar days in
    ``tz``, the user's timezone (UTC when not given).

    Returns:
        (streak length, first day of the streak or None).
    """
    days = _journaled_days(entries, tz)
    current = today or local_today(tz)
    streak = 0
    start: date | None = None
    while current in days:
        streak += 1
        start = current
        current -= timedelta(days=1)
    return streak, start


def week_progress(
    entries: Iterable[JournalEntry],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> list[int]:
    """Weekdays (Monday=1 .. Sunday=7) of the current week that have an entry."""
    today = today or local_today(tz)
    monday = today - timedelta(days=today.weekday())
    days = _journaled_days(entries, tz)
    return [offset + 1 for offset in range(7) if monday + timedelta(days=offset) in days]
