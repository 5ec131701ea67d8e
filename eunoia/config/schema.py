"""Configuration schema using Pydantic."""

from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoreConfig(Base):
    """Local-first storage configuration."""

    workspace: str = "~/.eunoia/workspace"
    timezone: str = ""  # IANA name for journal days, e.g. "Europe/Berlin"; empty means UTC


class RemoteConfig(Base):
    """Cloud document store configuration."""

    root: str = "~/.eunoia/cloud"  # FileDocumentStore directory


class SyncConfig(Base):
    """
    Journal sync behaviour.

    Retry delays grow as ``backoff_base_s ** attempt`` (2s, 4s with defaults).
    """

    max_retries: int = 3
    backoff_base_s: float = 2.0
    push_retry_delay_s: float = 5.0
    auto_sync_enabled: bool = True
    auto_sync_interval_s: int = 5 * 60  # 5 minutes


class NuggetsConfig(Base):
    """Learning nugget generation settings."""

    nuggets_per_category: int = 25  # Refill batch size when a user runs out
    callable_default_count: int = 5
    model: str = "gpt-4"
    deepseek_model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 2000


class ProviderConfig(Base):
    """LLM provider configuration."""

    api_key: str = ""
    api_base: str | None = None
    extra_headers: dict[str, str] | None = None


class ProvidersConfig(Base):
    """Configuration for LLM providers."""

    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    deepseek: ProviderConfig = Field(default_factory=ProviderConfig)


class FunctionsConfig(Base):
    """Serverless function host configuration."""

    host: str = "0.0.0.0"
    port: int = 8088
    default_model: Literal["openai", "deepseek"] = "openai"


class Config(BaseSettings):
    """Root configuration for eunoia."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    nuggets: NuggetsConfig = Field(default_factory=NuggetsConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    functions: FunctionsConfig = Field(default_factory=FunctionsConfig)

    @property
    def workspace_path(self) -> Path:
        """Get expanded workspace path."""
        return Path(self.store.workspace).expanduser()

    @property
    def timezone(self) -> ZoneInfo | None:
        """User timezone for journal days, or None for UTC."""
        return ZoneInfo(self.store.timezone) if self.store.timezone else None

    @property
    def remote_path(self) -> Path:
        """Get expanded cloud store path."""
        return Path(self.remote.root).expanduser()

    def get_provider(self, name: str) -> ProviderConfig | None:
        """Get provider config by name ("openai" or "deepseek")."""
        return getattr(self.providers, name, None)

    def get_model(self, name: str) -> str:
        """Get the model identifier used for a provider choice."""
        if name == "deepseek":
            return self.nuggets.deepseek_model
        return self.nuggets.model

    model_config = ConfigDict(env_prefix="EUNOIA_", env_nested_delimiter="__")
