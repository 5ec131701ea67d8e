"""
Learning nugget records.

- SharedNugget: one item in the shared pool (collection ``learning_nuggets``)
- UserNuggetRecord: which pool items a user has seen per category
  (collection ``user_nuggets``)
- LearningNugget: the personal copy handed to a user and attached to entries
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from eunoia.remote.base import decode_timestamp, encode_timestamp
from eunoia.utils.helpers import utcnow


class NuggetCategory(str, Enum):
    """Nugget topics."""

    PERSONAL_GROWTH = "personal_growth"
    RELATIONSHIPS = "relationships"
    HEALTH = "health"
    PRODUCTIVITY = "productivity"
    FINANCE = "finance"
    CREATIVITY = "creativity"
    MINDFULNESS = "mindfulness"
    CAREER = "career"
    AI_GENERATED = "ai_generated"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: str) -> NuggetCategory:
        """
        Resolve a category from its value, display name or legacy German label.

        Raises:
            ValueError: If the value names no category.
        """
        key = (value or "").strip()
        for category in cls:
            if key.lower() in (category.value, category.display_name.lower(), _LEGACY_LABELS[category].lower()):
                return category
        raise ValueError(f"Unknown nugget category: {value!r}")


_DISPLAY_NAMES = {
    NuggetCategory.PERSONAL_GROWTH: "Personal Growth",
    NuggetCategory.RELATIONSHIPS: "Relationships",
    NuggetCategory.HEALTH: "Health",
    NuggetCategory.PRODUCTIVITY: "Productivity",
    NuggetCategory.FINANCE: "Finance",
    NuggetCategory.CREATIVITY: "Creativity",
    NuggetCategory.MINDFULNESS: "Mindfulness",
    NuggetCategory.CAREER: "Career",
    NuggetCategory.AI_GENERATED: "AI Generated",
}

# Labels found in documents written by earlier app versions
_LEGACY_LABELS = {
    NuggetCategory.PERSONAL_GROWTH: "Persönliches Wachstum",
    NuggetCategory.RELATIONSHIPS: "Beziehungen",
    NuggetCategory.HEALTH: "Gesundheit",
    NuggetCategory.PRODUCTIVITY: "Produktivität",
    NuggetCategory.FINANCE: "Finanzen",
    NuggetCategory.CREATIVITY: "Kreativität",
    NuggetCategory.MINDFULNESS: "Achtsamkeit",
    NuggetCategory.CAREER: "Karriere",
    NuggetCategory.AI_GENERATED: "KI-generiert",
}


@dataclass
class SharedNugget:
    """A pool nugget shared by all users."""

    id: str
    category: NuggetCategory
    title: str
    content: str
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(cls, category: NuggetCategory, title: str, content: str) -> SharedNugget:
        return cls(id=str(uuid.uuid4()), category=category, title=title, content=content)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category.value,
            "title": self.title,
            "content": self.content,
            "created_at": encode_timestamp(self.created_at),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> SharedNugget:
        return cls(
            id=str(data["id"]),
            category=NuggetCategory.parse(data.get("category", "")),
            title=str(data.get("title", "")),
            content=str(data.get("content", "")),
            created_at=decode_timestamp(data.get("created_at", data.get("createdAt"))) or utcnow(),
        )


@dataclass
class UserNuggetRecord:
    """Seen-nugget bookkeeping for one user and category."""

    user_id: str
    category: NuggetCategory
    seen_nuggets: list[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)
    added_to_journal: list[str] = field(default_factory=list)

    @property
    def doc_id(self) -> str:
        return record_id(self.user_id, self.category)

    def add_seen(self, nugget_id: str) -> bool:
        """Record a nugget as seen. Returns False if it already was."""
        self.last_updated = utcnow()
        if nugget_id in self.seen_nuggets:
            return False
        self.seen_nuggets.append(nugget_id)
        return True

    def to_document(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "category": self.category.value,
            "seen_nuggets": list(self.seen_nuggets),
            "last_updated": encode_timestamp(self.last_updated),
            "added_to_journal": list(self.added_to_journal),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> UserNuggetRecord:
        added = data.get("added_to_journal", [])
        return cls(
            user_id=str(data["user_id"]),
            category=NuggetCategory.parse(data.get("category", "")),
            # dict.fromkeys drops duplicates left by older writers, keeping order
            seen_nuggets=list(dict.fromkeys(str(i) for i in data.get("seen_nuggets", []))),
            last_updated=decode_timestamp(data.get("last_updated")) or utcnow(),
            # older records stored a single boolean flag
            added_to_journal=[str(i) for i in added] if isinstance(added, list) else [],
        )


def record_id(user_id: str, category: NuggetCategory) -> str:
    """Document id of a user's seen-record for a category."""
    return f"{user_id}_{category.value}"


@dataclass
class LearningNugget:
    """A nugget as delivered to one user."""

    id: str
    user_id: str
    category: NuggetCategory
    title: str
    content: str
    date: datetime = field(default_factory=utcnow)
    is_added_to_journal: bool = False
    source_id: str | None = None  # pool nugget it was copied from

    @classmethod
    def create(cls, user_id: str, category: NuggetCategory, title: str, content: str) -> LearningNugget:
        return cls(id=str(uuid.uuid4()), user_id=user_id, category=category, title=title, content=content)

    @classmethod
    def from_shared(cls, shared: SharedNugget, user_id: str) -> LearningNugget:
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            category=shared.category,
            title=shared.title,
            content=shared.content,
            source_id=shared.id,
        )
