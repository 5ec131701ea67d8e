"""LiteLLM provider implementation for OpenAI and DeepSeek models."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import litellm
from litellm import acompletion
from loguru import logger

from eunoia.errors import AIServiceUnavailableError
from eunoia.providers.base import LLMProvider, LLMResponse

if TYPE_CHECKING:
    from eunoia.config.schema import Config

# Standard OpenAI chat-completion message keys; anything else is stripped.
_ALLOWED_MSG_KEYS = frozenset({"role", "content", "name"})

# provider name -> (litellm prefix, api key env var)
_PROVIDER_PREFIXES: dict[str, tuple[str, str]] = {
    "openai": ("", "OPENAI_API_KEY"),
    "deepseek": ("deepseek", "DEEPSEEK_API_KEY"),
}


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM.

    Model names are resolved to LiteLLM's ``provider/model`` form: DeepSeek
    models get the ``deepseek/`` prefix, OpenAI models are passed as is.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "gpt-4",
        extra_headers: dict[str, str] | None = None,
        provider_name: str | None = None,
    ):
        super().__init__(api_key, api_base)
        self.default_model = default_model
        self.extra_headers = extra_headers or {}
        self.provider_name = provider_name or self._detect_provider(default_model)

        if api_key:
            self._setup_env(api_key)

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        # Drop unsupported parameters for providers
        litellm.drop_params = True

    @staticmethod
    def _detect_provider(model: str) -> str:
        return "deepseek" if "deepseek" in model.lower() else "openai"

    def _setup_env(self, api_key: str) -> None:
        """Expose the key under the provider's env var without overriding an existing one."""
        _, env_key = _PROVIDER_PREFIXES.get(self.provider_name, ("", ""))
        if env_key:
            os.environ.setdefault(env_key, api_key)

    def _resolve_model(self, model: str) -> str:
        """Resolve model name by applying the provider prefix."""
        prefix, _ = _PROVIDER_PREFIXES.get(self._detect_provider(model), ("", ""))
        if prefix and not model.startswith(f"{prefix}/"):
            model = f"{prefix}/{model}"
        return model

    @staticmethod
    def _sanitize_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Strip non-standard keys."""
        return [{k: v for k, v in msg.items() if k in _ALLOWED_MSG_KEYS} for msg in messages]

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """
        Send a chat completion request via LiteLLM.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier (e.g., 'gpt-4', 'deepseek-chat').
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature.

        Returns:
            LLMResponse with content, or finish_reason "error" on failure.
        """
        model = self._resolve_model(model or self.default_model)

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": self._sanitize_messages(self._sanitize_empty_content(messages)),
            # LiteLLM rejects max_tokens below 1
            "max_tokens": max(1, max_tokens),
            "temperature": temperature,
        }

        # Pass api_key directly, more reliable than env vars alone
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.extra_headers:
            kwargs["extra_headers"] = self.extra_headers

        try:
            response = await acompletion(**kwargs)
            return self._parse_response(response)
        except Exception as e:
            logger.warning("LLM call to {} failed: {}", model, e)
            # Return error as content for graceful handling
            return LLMResponse(
                content=f"Error calling LLM: {str(e)}",
                finish_reason="error",
            )

    def _parse_response(self, response: Any) -> LLMResponse:
        """Parse LiteLLM response into our standard format."""
        choice = response.choices[0]

        usage = {}
        if hasattr(response, "usage") and response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
        )

    def get_default_model(self) -> str:
        """Get the default model."""
        return self.default_model


def make_provider(config: Config, choice: str = "openai") -> LiteLLMProvider:
    """
    Build a provider for a model choice ("openai" or "deepseek").

    Raises:
        AIServiceUnavailableError: If the choice is unknown or has no API key.
    """
    provider_config = config.get_provider(choice)
    if provider_config is None:
        raise AIServiceUnavailableError(f"Unknown model provider: {choice}")
    if not provider_config.api_key:
        raise AIServiceUnavailableError(f"No API key configured for {choice}")
    return LiteLLMProvider(
        api_key=provider_config.api_key,
        api_base=provider_config.api_base,
        default_model=config.get_model(choice),
        extra_headers=provider_config.extra_headers,
        provider_name=choice,
    )
