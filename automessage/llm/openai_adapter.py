"""OpenAI-compatible adapter (OpenAI, DeepSeek, Kimi) for automessage."""

from __future__ import annotations

from openai import APIError, AsyncOpenAI

from automessage.llm.base import LLMProvider
from automessage.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage


class OpenAIProvider(LLMProvider):
    """Chat-completions adapter using the OpenAI async SDK.

    DeepSeek and Kimi expose the same API, so they reuse this adapter with
    their own base_url.
    """

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            max_retries=0,
        )

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 512,
        temperature: float = 0.7,
    ) -> LLMResponse:
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
            )
        except APIError as e:
            raise LLMError(self.config.provider.value, "generate", e) from e

        content = response.choices[0].message.content if response.choices else None
        usage = response.usage
        return LLMResponse(
            content=content or "",
            usage=TokenUsage(
                input_tokens=usage.prompt_tokens if usage else 0,
                output_tokens=usage.completion_tokens if usage else 0,
            ),
            model=response.model,
        )
