"""Abstract LLM interface for automessage."""

from __future__ import annotations

from abc import ABC, abstractmethod

from automessage.llm.models import LLMConfig, LLMResponse


class LLMProvider(ABC):
    """Provider-agnostic interface for one-shot text generation.

    Adapters make exactly one request per call. Retries and time budgets
    belong to GenerationClient, so SDK-level retries stay disabled.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abstractmethod
    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 512,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """Generate a complete response (one-shot)."""
        ...
