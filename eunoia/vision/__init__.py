"""Vision board module."""

from eunoia.vision.board import (
    DesiredPersonality,
    Goal,
    GoalCategory,
    LifestyleVision,
    PersonalValue,
    VisionBoard,
)
from eunoia.vision.service import VisionBoardService

__all__ = [
    "DesiredPersonality",
    "Goal",
    "GoalCategory",
    "LifestyleVision",
    "PersonalValue",
    "VisionBoard",
    "VisionBoardService",
]
