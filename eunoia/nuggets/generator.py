"""LLM-backed nugget generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from eunoia.errors import (
    AIGenerationError,
    InvalidResponseError,
    QuotaExceededError,
    ServiceUnavailableError,
)
from eunoia.nuggets.models import LearningNugget, NuggetCategory
from eunoia.nuggets.parser import parse_entry_nugget, parse_json_nuggets, parse_title_content
from eunoia.nuggets.prompts import SYSTEM_PROMPT, batch_prompt, entry_prompt, json_prompt
from eunoia.providers.base import LLMProvider, LLMResponse

if TYPE_CHECKING:
    from eunoia.journal.entry import JournalEntry

_QUOTA_MARKERS = ("rate limit", "ratelimit", "quota", "429", "insufficient_quota")
_UNAVAILABLE_MARKERS = ("503", "service unavailable", "overloaded")


class NuggetGenerator:
    """Turns a category (or a journal entry) into nuggets via an LLM provider."""

    def __init__(
        self,
        provider: LLMProvider,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
    ):
        self.provider = provider
        self.model = model or provider.get_default_model()
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def _complete(self, prompt: str) -> str:
        response: LLMResponse = await self.provider.chat(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        if response.is_error:
            detail = response.content or "unknown error"
            if any(marker in detail.lower() for marker in _QUOTA_MARKERS):
                raise QuotaExceededError()
            if any(marker in detail.lower() for marker in _UNAVAILABLE_MARKERS):
                raise ServiceUnavailableError()
            raise AIGenerationError(detail)
        if not response.content or not response.content.strip():
            raise InvalidResponseError("The AI service returned an empty response.")
        return response.content

    async def generate(
        self,
        category: NuggetCategory,
        count: int,
        as_json: bool = False,
    ) -> list[tuple[str, str]]:
        """
        Generate up to ``count`` (title, content) pairs.

        Args:
            category: Nugget topic.
            count: Number of nuggets to ask for.
            as_json: Ask for a JSON array instead of a Title/Content list.

        Raises:
            QuotaExceededError: Provider reported rate limiting or quota exhaustion.
            AIGenerationError: Provider call failed.
            InvalidResponseError: Nothing parseable came back.
        """
        prompt = json_prompt(category, count) if as_json else batch_prompt(category, count)
        text = await self._complete(prompt)
        pairs = parse_json_nuggets(text) if as_json else parse_title_content(text)
        if not pairs:
            logger.warning("No nuggets parsed from response for {}: {}", category.value, text[:200])
            raise InvalidResponseError()
        logger.info("Generated {} nuggets for {}", len(pairs[:count]), category.value)
        return pairs[:count]

    async def generate_for_entry(
        self,
        entry: JournalEntry,
        category: NuggetCategory = NuggetCategory.AI_GENERATED,
    ) -> LearningNugget:
        """Generate one personal nugget inspired by a journal entry."""
        text = await self._complete(entry_prompt(entry, category))
        content = parse_entry_nugget(text)
        if not content:
            raise InvalidResponseError()
        return LearningNugget.create(
            user_id=entry.user_id,
            category=category,
            title="Learning impulse",
            content=content,
        )
