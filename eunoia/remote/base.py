"""
Document store abstraction for the cloud side of sync.

Documents are plain dicts grouped into named collections. Timestamps are
stored as ``{"seconds": int, "nanoseconds": int}`` maps, and the
``SERVER_TIMESTAMP`` sentinel is replaced by the store's clock on write.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any

JOURNAL_ENTRIES = "journalEntries"
VISION_BOARDS = "visionBoards"
LEARNING_NUGGETS = "learning_nuggets"
USER_NUGGETS = "user_nuggets"
LEGACY_NUGGETS = "learningNuggets"

Filter = tuple[str, Any]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class _ServerTimestamp:
    """Placeholder resolved to the store's current time on write."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def encode_timestamp(value: datetime) -> dict[str, int]:
    """Encode a datetime as a seconds/nanoseconds map."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return {
        "seconds": delta.days * 86400 + delta.seconds,
        "nanoseconds": delta.microseconds * 1000,
    }


def decode_timestamp(value: Any) -> datetime | None:
    """
    Decode a stored timestamp.

    Accepts seconds/nanoseconds maps, ISO-8601 strings, epoch numbers and
    datetimes. Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, dict) and "seconds" in value:
        return _EPOCH + timedelta(
            seconds=int(value["seconds"]),
            microseconds=int(value.get("nanoseconds", 0)) // 1000,
        )
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def matches(data: dict[str, Any], filters: list[Filter] | None) -> bool:
    """Check equality filters against a document."""
    if not filters:
        return True
    return all(data.get(key) == value for key, value in filters)


class DocumentStore(ABC):
    """
    Abstract cloud document store.

    Implementations raise ``NetworkError`` when the backend cannot be reached
    and ``DatabaseError`` when it answers with a failure.
    """

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch one document, or None if it does not exist."""
        pass

    @abstractmethod
    async def set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Create or replace a document (or update top-level keys when merge=True)."""
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: list[Filter] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Query documents by equality filters.

        Returned dicts always carry the document id under ``"id"``.
        """
        pass

    async def batch_set(self, collection: str, docs: list[tuple[str, dict[str, Any]]]) -> None:
        """Write several documents. Subclasses may make this atomic."""
        for doc_id, data in docs:
            await self.set(collection, doc_id, data)

    def now(self) -> datetime:
        """Store clock used for SERVER_TIMESTAMP."""
        return datetime.now(timezone.utc)

    def _resolve(self, data: dict[str, Any]) -> dict[str, Any]:
        """Deep-copy a document and replace SERVER_TIMESTAMP sentinels."""
        stamp = encode_timestamp(self.now())

        def _walk(value: Any) -> Any:
            if value is SERVER_TIMESTAMP:
                return dict(stamp)
            if isinstance(value, dict):
                return {k: _walk(v) for k, v in value.items()}
            if isinstance(value, list):
                return [_walk(v) for v in value]
            return copy.deepcopy(value)

        return _walk(data)
