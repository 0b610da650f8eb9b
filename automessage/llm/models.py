"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from automessage.config.models import Provider


class LLMError(Exception):
    """Wraps provider-specific exceptions with context."""

    def __init__(self, provider: str, operation: str, cause: Exception) -> None:
        self.provider = provider
        self.operation = operation
        super().__init__(f"{provider} {operation} failed: {cause}")
        self.__cause__ = cause


class LLMConfig(BaseModel):
    """Resolved settings for one provider adapter."""

    provider: Provider
    model: str
    base_url: str
    api_key: str | None = None


class GenerationRequest(BaseModel):
    """One prompt, built fresh per call by the RequestComposer."""

    model_config = ConfigDict(frozen=True)

    system_instruction: str
    user_content: str
    max_output_tokens: int
    temperature: float


class TokenUsage(BaseModel):
    """Token usage stats from a single LLM call."""

    input_tokens: int
    output_tokens: int


class LLMResponse(BaseModel):
    """Structured response from an LLM provider."""

    content: str
    usage: TokenUsage
    model: str
