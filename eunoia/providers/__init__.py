"""LLM provider abstraction module."""

from eunoia.providers.base import LLMProvider, LLMResponse
from eunoia.providers.litellm_provider import LiteLLMProvider, make_provider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider", "make_provider"]
