"""Learning nuggets: models, generation and the shared pool."""

from eunoia.nuggets.generator import NuggetGenerator
from eunoia.nuggets.models import LearningNugget, NuggetCategory, SharedNugget, UserNuggetRecord
from eunoia.nuggets.parser import parse_entry_nugget, parse_json_nuggets, parse_title_content
from eunoia.nuggets.pool import NuggetPool

__all__ = [
    "LearningNugget",
    "NuggetCategory",
    "SharedNugget",
    "UserNuggetRecord",
    "NuggetGenerator",
    "NuggetPool",
    "parse_title_content",
    "parse_json_nuggets",
    "parse_entry_nugget",
]
