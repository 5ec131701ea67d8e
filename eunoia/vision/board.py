"""Vision board records: personal values, goals, lifestyle and personality vision."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from eunoia.journal.entry import SyncStatus
from eunoia.remote.base import decode_timestamp, encode_timestamp
from eunoia.utils.helpers import utcnow

MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 5


def _new_id() -> str:
    return str(uuid.uuid4())


class GoalCategory(str, Enum):
    """Life areas a goal can belong to."""

    HEALTH = "health"
    CAREER = "career"
    RELATIONSHIPS = "relationships"
    PERSONAL = "personal"
    FINANCIAL = "financial"
    SPIRITUAL = "spiritual"

    @property
    def description(self) -> str:
        return _GOAL_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: str) -> GoalCategory:
        key = (value or "").strip().lower()
        for category in cls:
            if key in (category.value, _LEGACY_GOAL_LABELS[category].lower()):
                return category
        raise ValueError(f"Unknown goal category: {value!r}")


_GOAL_DESCRIPTIONS = {
    GoalCategory.HEALTH: "Fitness, nutrition and general well-being",
    GoalCategory.CAREER: "Professional development and skills",
    GoalCategory.RELATIONSHIPS: "Family, friendships and social connections",
    GoalCategory.PERSONAL: "Personal development and hobbies",
    GoalCategory.FINANCIAL: "Financial goals and security",
    GoalCategory.SPIRITUAL: "Inner development and finding meaning",
}

_LEGACY_GOAL_LABELS = {
    GoalCategory.HEALTH: "Gesundheit",
    GoalCategory.CAREER: "Karriere",
    GoalCategory.RELATIONSHIPS: "Beziehungen",
    GoalCategory.PERSONAL: "Persönlich",
    GoalCategory.FINANCIAL: "Finanzen",
    GoalCategory.SPIRITUAL: "Spiritualität",
}


@dataclass
class PersonalValue:
    name: str
    description: str = ""
    importance: int = 3  # 1-5 scale
    id: str = field(default_factory=_new_id)

    def to_document(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description, "importance": self.importance}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> PersonalValue:
        return cls(
            id=str(data.get("id") or _new_id()),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            importance=int(data.get("importance", 3)),
        )


@dataclass
class Goal:
    title: str
    category: GoalCategory
    description: str = ""
    target_date: datetime | None = None
    priority: int = 1
    id: str = field(default_factory=_new_id)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "priority": self.priority,
        }
        if self.target_date is not None:
            doc["targetDate"] = encode_timestamp(self.target_date)
        return doc

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> Goal:
        return cls(
            id=str(data.get("id") or _new_id()),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            category=GoalCategory.parse(str(data.get("category", ""))),
            target_date=decode_timestamp(data.get("targetDate")),
            priority=int(data.get("priority", 1)),
        )


@dataclass
class LifestyleVision:
    daily_routine: str = ""
    living_environment: str = ""
    work_life: str = ""
    relationships: str = ""
    hobbies: str = ""
    health: str = ""

    _KEYS = {
        "daily_routine": "dailyRoutine",
        "living_environment": "livingEnvironment",
        "work_life": "workLife",
        "relationships": "relationships",
        "hobbies": "hobbies",
        "health": "health",
    }

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name).strip() for name in self._KEYS)

    def to_document(self) -> dict[str, Any]:
        return {key: getattr(self, name) for name, key in self._KEYS.items()}

    @classmethod
    def from_document(cls, data: dict[str, Any] | None) -> LifestyleVision:
        data = data or {}
        return cls(**{name: str(data.get(key, "")) for name, key in cls._KEYS.items()})


@dataclass
class DesiredPersonality:
    traits: str = ""
    mindset: str = ""
    behaviors: str = ""
    skills: str = ""
    habits: str = ""
    growth: str = ""

    _FIELDS = ("traits", "mindset", "behaviors", "skills", "habits", "growth")

    @property
    def is_empty(self) -> bool:
        return not any(getattr(self, name).strip() for name in self._FIELDS)

    def to_document(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self._FIELDS}

    @classmethod
    def from_document(cls, data: dict[str, Any] | None) -> DesiredPersonality:
        data = data or {}
        return cls(**{name: str(data.get(name, "")) for name in cls._FIELDS})


@dataclass
class VisionBoard:
    """A user's structured goal/values-visualization record."""

    user_id: str
    id: str = field(default_factory=_new_id)
    last_modified: datetime = field(default_factory=utcnow)
    personal_values: list[PersonalValue] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)
    lifestyle_vision: LifestyleVision = field(default_factory=LifestyleVision)
    desired_personality: DesiredPersonality = field(default_factory=DesiredPersonality)
    sync_status: SyncStatus = SyncStatus.PENDING_UPLOAD

    @property
    def is_empty(self) -> bool:
        return (
            not self.personal_values
            and not self.goals
            and self.lifestyle_vision.is_empty
            and self.desired_personality.is_empty
        )

    def validate(self) -> list[str]:
        """
        Validate the board.

        Returns:
            List of validation errors (empty if valid).
        """
        errors = []
        if not self.user_id:
            errors.append("Vision board has no user")

        value_names: set[str] = set()
        for value in self.personal_values:
            if not value.name.strip():
                errors.append("Personal value name cannot be empty")
            elif value.name.strip().lower() in value_names:
                errors.append(f"Duplicate personal value: {value.name}")
            else:
                value_names.add(value.name.strip().lower())
            if not MIN_IMPORTANCE <= value.importance <= MAX_IMPORTANCE:
                errors.append(
                    f"Importance of '{value.name}' must be between {MIN_IMPORTANCE} and {MAX_IMPORTANCE}"
                )

        for goal in self.goals:
            if not goal.title.strip():
                errors.append("Goal title cannot be empty")
            if goal.priority < 1:
                errors.append(f"Priority of '{goal.title}' must be at least 1")

        return errors

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "lastModified": encode_timestamp(self.last_modified),
            "personalValues": [v.to_document() for v in self.personal_values],
            "goals": [g.to_document() for g in self.goals],
            "lifestyleVision": self.lifestyle_vision.to_document(),
            "desiredPersonality": self.desired_personality.to_document(),
            "syncStatus": self.sync_status.value,
        }

    @classmethod
    def from_document(cls, data: dict[str, Any], sync_status: SyncStatus | None = None) -> VisionBoard:
        if "userId" not in data:
            raise ValueError("Missing required field 'userId' in vision board")
        return cls(
            id=str(data.get("id") or _new_id()),
            user_id=str(data["userId"]),
            last_modified=decode_timestamp(data.get("lastModified")) or utcnow(),
            personal_values=[PersonalValue.from_document(v) for v in data.get("personalValues", [])],
            goals=[Goal.from_document(g) for g in data.get("goals", [])],
            lifestyle_vision=LifestyleVision.from_document(data.get("lifestyleVision")),
            desired_personality=DesiredPersonality.from_document(data.get("desiredPersonality")),
            sync_status=sync_status or SyncStatus(data.get("syncStatus", SyncStatus.SYNCED.value)),
        )
