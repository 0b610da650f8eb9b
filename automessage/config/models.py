from __future__ import annotations

from enum import Enum
from typing import Literal, NamedTuple

from pydantic import BaseModel, Field, model_validator


class Provider(str, Enum):
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    KIMI = "kimi"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


class ProviderDefaults(NamedTuple):
    base_url: str
    model: str
    api_key_env: str | None


PROVIDER_DEFAULTS: dict[Provider, ProviderDefaults] = {
    Provider.OPENAI: ProviderDefaults(
        "https://api.openai.com/v1", "gpt-4o-mini", "OPENAI_API_KEY"
    ),
    Provider.DEEPSEEK: ProviderDefaults(
        "https://api.deepseek.com/v1", "deepseek-chat", "DEEPSEEK_API_KEY"
    ),
    Provider.KIMI: ProviderDefaults(
        "https://api.moonshot.cn/v1", "moonshot-v1-8k", "MOONSHOT_API_KEY"
    ),
    Provider.ANTHROPIC: ProviderDefaults(
        "https://api.anthropic.com", "claude-haiku-4-5-20251001", "ANTHROPIC_API_KEY"
    ),
    Provider.OLLAMA: ProviderDefaults("http://localhost:11434", "llama3", None),
}


class LLMSettings(BaseModel):
    provider: Provider = Provider.OPENAI
    base_url: str | None = None
    model: str | None = None
    api_key: str | None = None
    api_key_env: str = "GAM_API_KEY"
    timeout: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)

    @model_validator(mode="after")
    def _fill_provider_defaults(self) -> LLMSettings:
        """Fill endpoint and model from the provider table when omitted."""
        defaults = PROVIDER_DEFAULTS[self.provider]
        if self.base_url is None:
            self.base_url = defaults.base_url
        if self.model is None:
            self.model = defaults.model
        return self


class ChangelogSettings(BaseModel):
    path: str = "CHANGELOG.md"
    commits: int = Field(default=10, gt=0)


class AutoMessageConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    language: str = "en-US"
    prompt: str | None = None
    emoji: bool = False
    multi_line: bool = False
    max_diff_chars: int = Field(default=12_000, gt=0)
    changelog: ChangelogSettings = Field(default_factory=ChangelogSettings)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"
    log_format: Literal["text", "json"] = "text"
