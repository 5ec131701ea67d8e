"""
Parsing of LLM output into (title, content) pairs.

Two output shapes are understood:
- A numbered list of "Title: ..." / "Content: ..." lines (German
  "Titel:" / "Inhalt:" markers are accepted too)
- A JSON array of {"title": ..., "content": ...} objects
"""

from __future__ import annotations

import re

import json_repair
from loguru import logger

_TITLE_RE = re.compile(r"\b(?:Title|Titel)\s*:\s*(.*)", re.IGNORECASE)
_CONTENT_RE = re.compile(r"\b(?:Content|Inhalt)\s*:\s*(.*)", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _clean(value: str) -> str:
    """Strip whitespace, markdown emphasis, quotes and template brackets."""
    value = value.strip().strip("*_").strip()
    if len(value) >= 2 and value[0] == "[" and value[-1] == "]":
        value = value[1:-1].strip()
    return value.strip("\"'“”„").strip()


def parse_title_content(text: str) -> list[tuple[str, str]]:
    """
    Parse a Title/Content list.

    A title line starts a new nugget; a content line completes the current
    one. Titles without content are dropped.
    """
    nuggets: list[tuple[str, str]] = []
    title: str | None = None
    content: str | None = None

    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            continue

        title_match = _TITLE_RE.search(line)
        if title_match:
            if title and content:
                nuggets.append((title, content))
            title = _clean(title_match.group(1)) or None
            content = None
            continue

        content_match = _CONTENT_RE.search(line)
        if content_match:
            content = _clean(content_match.group(1)) or None
            if title and content:
                nuggets.append((title, content))
                title = None
                content = None

    if title and content:
        nuggets.append((title, content))

    return nuggets


def parse_json_nuggets(text: str) -> list[tuple[str, str]]:
    """
    Parse a JSON array of title/content objects.

    The first bracketed span is repaired and loaded; if that yields nothing
    usable the text is parsed as a Title/Content list instead.
    """
    match = _ARRAY_RE.search(text or "")
    if match:
        try:
            data = json_repair.loads(match.group(0))
        except Exception as e:
            logger.warning("Could not parse nugget JSON: {}", e)
            data = None
        if isinstance(data, list):
            pairs = []
            for item in data:
                if not isinstance(item, dict):
                    continue
                title = _clean(str(item.get("title", "")))
                content = _clean(str(item.get("content", "")))
                if title and content:
                    pairs.append((title, content))
            if pairs:
                return pairs

    return parse_title_content(text)


def parse_entry_nugget(text: str) -> str:
    """Extract the content of a single nugget reply ("Content: ..." or plain text)."""
    for raw in (text or "").splitlines():
        match = _CONTENT_RE.search(raw)
        if match:
            cleaned = _clean(match.group(1))
            if cleaned:
                return cleaned
    return _clean(text or "")
