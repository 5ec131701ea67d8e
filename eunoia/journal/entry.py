"""Journal entry record and its cloud document encoding."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date as date_type
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from eunoia.remote.base import decode_timestamp, encode_timestamp
from eunoia.utils.helpers import utcnow


class SyncStatus(str, Enum):
    """Where an entry stands relative to the cloud copy."""

    SYNCED = "synced"
    PENDING_UPLOAD = "pendingUpload"
    PENDING_UPDATE = "pendingUpdate"
    PENDING_DELETE = "pendingDelete"

    @property
    def is_pending_write(self) -> bool:
        """True for local writes not yet pushed."""
        return self in (SyncStatus.PENDING_UPLOAD, SyncStatus.PENDING_UPDATE)


@dataclass
class EntryNugget:
    """Learning nugget as embedded in a journal entry."""

    category: str
    content: str
    is_added_to_journal: bool = False

    def to_document(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "content": self.content,
            "isAddedToJournal": self.is_added_to_journal,
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> EntryNugget:
        return cls(
            category=str(data.get("category", "")),
            content=str(data.get("content", "")),
            is_added_to_journal=bool(data.get("isAddedToJournal", data.get("is_added_to_journal", False))),
        )


@dataclass
class JournalEntry:
    """A user's daily gratitude/highlight/learning record."""

    id: str
    user_id: str
    date: datetime
    gratitude: str = ""
    highlight: str = ""
    learning: str = ""
    learning_nugget: EntryNugget | None = None
    last_modified: datetime = field(default_factory=utcnow)
    sync_status: SyncStatus = SyncStatus.PENDING_UPLOAD
    server_timestamp: datetime | None = None
    title: str | None = None
    content: str | None = None
    location: str | None = None
    image_urls: list[str] = field(default_factory=list)
    local_image_paths: list[str] = field(default_factory=list)  # device-only, never uploaded

    @classmethod
    def new(cls, user_id: str, date: datetime | None = None) -> JournalEntry:
        """Create an empty entry for a user (defaults to now)."""
        now = utcnow()
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            date=date or now,
            last_modified=now,
        )

    @property
    def day(self) -> date_type:
        """Calendar day of the entry."""
        return self.date.date()

    def local_day(self, tz: tzinfo | None = None) -> date_type:
        """Calendar day of the entry in ``tz`` (stored timezone when not given)."""
        return self.date.astimezone(tz).date() if tz else self.date.date()

    @property
    def has_content(self) -> bool:
        return any(text.strip() for text in (self.gratitude, self.highlight, self.learning))

    def mark_pending(self) -> None:
        """Flag a local change; entries the cloud has seen become updates."""
        self.last_modified = utcnow()
        if self.server_timestamp is not None:
            self.sync_status = SyncStatus.PENDING_UPDATE
        else:
            self.sync_status = SyncStatus.PENDING_UPLOAD

    def to_document(self) -> dict[str, Any]:
        """Encode for the cloud store (camelCase keys, seconds/nanoseconds timestamps)."""
        doc: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "date": encode_timestamp(self.date),
            "gratitude": self.gratitude,
            "highlight": self.highlight,
            "learning": self.learning,
            "lastModified": encode_timestamp(self.last_modified),
            "syncStatus": self.sync_status.value,
        }
        if self.learning_nugget is not None:
            doc["learningNugget"] = self.learning_nugget.to_document()
        if self.server_timestamp is not None:
            doc["serverTimestamp"] = encode_timestamp(self.server_timestamp)
        if self.title is not None:
            doc["title"] = self.title
        if self.content is not None:
            doc["content"] = self.content
        if self.location is not None:
            doc["location"] = self.location
        if self.image_urls:
            doc["imageURLs"] = list(self.image_urls)
        return doc

    @classmethod
    def from_document(
        cls,
        data: dict[str, Any],
        sync_status: SyncStatus | None = None,
    ) -> JournalEntry:
        """
        Decode a cloud document.

        Args:
            data: Document dict (must carry ``id`` and ``userId``).
            sync_status: Override for the stored status; remote reads pass SYNCED.

        Raises:
            ValueError: If required fields are missing or the date is unreadable.
        """
        for key in ("id", "userId", "date"):
            if key not in data:
                raise ValueError(f"Missing required field '{key}' in journal entry")

        entry_date = decode_timestamp(data["date"])
        if entry_date is None:
            raise ValueError(f"Invalid date in journal entry {data['id']}")

        nugget_data = data.get("learningNugget")
        status = sync_status or SyncStatus(data.get("syncStatus", SyncStatus.SYNCED.value))

        return cls(
            id=str(data["id"]),
            user_id=str(data["userId"]),
            date=entry_date,
            gratitude=data.get("gratitude", "") or "",
            highlight=data.get("highlight", "") or "",
            learning=data.get("learning", "") or "",
            learning_nugget=EntryNugget.from_document(nugget_data) if nugget_data else None,
            last_modified=decode_timestamp(data.get("lastModified")) or entry_date,
            sync_status=status,
            server_timestamp=decode_timestamp(data.get("serverTimestamp")),
            title=data.get("title"),
            content=data.get("content"),
            location=data.get("location"),
            image_urls=list(data.get("imageURLs", [])),
        )
