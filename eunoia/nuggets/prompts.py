"""Fixed prompt templates for nugget generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from eunoia.nuggets.models import NuggetCategory

if TYPE_CHECKING:
    from eunoia.journal.entry import JournalEntry

SYSTEM_PROMPT = "You are an expert at writing short, informative learning nuggets."


def batch_prompt(category: NuggetCategory, count: int) -> str:
    """Prompt asking for a numbered Title/Content list."""
    return f"""Generate {count} unique, concise and educational learning nuggets on the topic "{category.display_name}".

Requirements:
- Each nugget should be fact-based and verifiable
- Use simple language and keep it easy to understand
- Each nugget should be at most 3 sentences long and create an "aha" moment
- Each nugget should have a short, concise title

Output format:
Format the output as a numbered list with a title and content for each nugget:

1. Title: [Title of the first nugget]
Content: [Content of the first nugget]

2. Title: [Title of the second nugget]
Content: [Content of the second nugget]

etc.
"""


def json_prompt(category: NuggetCategory, count: int) -> str:
    """Prompt asking for a JSON array of title/content objects."""
    return f"""Generate {count} short, informative learning nuggets for the category "{category.display_name}".

Each nugget should have a title and content. The content should be about 2-3 sentences and convey a valuable insight or piece of information.

Format the output as a JSON array of objects with the properties "title" and "content".

Example:
[
  {{
    "title": "The power of habit",
    "content": "Habits shape about 40% of our daily actions. Deliberately building good habits can noticeably raise productivity and well-being."
  }}
]"""


def entry_prompt(entry: JournalEntry, category: NuggetCategory) -> str:
    """Prompt for a single nugget inspired by a journal entry."""
    return f"""Based on this journal entry, write one learning nugget in the category "{category.display_name}".

Gratitude: {entry.gratitude}
Highlight: {entry.highlight}
Learning: {entry.learning}

The nugget should be at most 3 sentences, relate to the entry, and offer a practical insight.

Output format:
Content: [the nugget]
"""
