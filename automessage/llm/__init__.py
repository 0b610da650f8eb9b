"""LLM provider abstraction layer."""

import os
from urllib.parse import urlparse

from automessage.config.models import PROVIDER_DEFAULTS, LLMSettings, Provider
from automessage.errors import ConfigurationError
from automessage.llm.base import LLMProvider
from automessage.llm.claude import ClaudeProvider
from automessage.llm.client import GenerationClient, normalize_output
from automessage.llm.models import (
    GenerationRequest,
    LLMConfig,
    LLMError,
    LLMResponse,
    TokenUsage,
)
from automessage.llm.ollama import OllamaProvider
from automessage.llm.openai_adapter import OpenAIProvider

_PROVIDER_MAP: dict[Provider, type[LLMProvider]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.DEEPSEEK: OpenAIProvider,
    Provider.KIMI: OpenAIProvider,
    Provider.ANTHROPIC: ClaudeProvider,
    Provider.OLLAMA: OllamaProvider,
}


def resolve_api_key(settings: LLMSettings) -> str | None:
    """Inline key, then $api_key_env, then the provider's own variable."""
    if settings.api_key:
        return settings.api_key
    api_key = os.environ.get(settings.api_key_env)
    if api_key:
        return api_key
    native_env = PROVIDER_DEFAULTS[settings.provider].api_key_env
    return os.environ.get(native_env) if native_env else None


def _validate_base_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Malformed endpoint URL: {url!r}")
    if "\r" in url or "\n" in url:
        raise ConfigurationError("Endpoint URL contains line breaks")
    return url


def create_llm_provider(settings: LLMSettings) -> LLMProvider:
    """Create an LLM provider from app-level settings.

    Raises ConfigurationError when the endpoint or model is empty or the
    endpoint is malformed, or when a keyed provider has no credential.
    """
    if not settings.base_url:
        raise ConfigurationError("LLM endpoint URL is empty; set llm.base_url")
    if not settings.model:
        raise ConfigurationError("LLM model is empty; set llm.model")
    base_url = _validate_base_url(settings.base_url)

    api_key = resolve_api_key(settings)
    if settings.provider != Provider.OLLAMA and not api_key:
        raise ConfigurationError(
            f"Missing API key for {settings.provider.value}: set llm.api_key or "
            f"environment variable {settings.api_key_env!r}"
        )

    cls = _PROVIDER_MAP[settings.provider]
    llm_config = LLMConfig(
        provider=settings.provider,
        model=settings.model,
        base_url=base_url,
        api_key=api_key,
    )
    return cls(llm_config)


def create_generation_client(settings: LLMSettings) -> GenerationClient:
    """Build a GenerationClient with the timeout and retry policy from settings."""
    return GenerationClient(
        create_llm_provider(settings),
        timeout=settings.timeout,
        max_attempts=settings.max_attempts,
        retry_delay=settings.retry_delay,
    )


__all__ = [
    "ClaudeProvider",
    "GenerationClient",
    "GenerationRequest",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "LLMResponse",
    "OllamaProvider",
    "OpenAIProvider",
    "TokenUsage",
    "create_generation_client",
    "create_llm_provider",
    "normalize_output",
    "resolve_api_key",
]
