"""Ollama adapter for automessage."""

from __future__ import annotations

import logging

import httpx

from automessage.llm.base import LLMProvider
from automessage.llm.models import LLMConfig, LLMError, LLMResponse, TokenUsage

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """Ollama adapter using its REST API via httpx."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._base_url = config.base_url.rstrip("/")

    async def generate(
        self,
        system: str,
        user: str,
        max_tokens: int = 512,
        temperature: float = 0.7,
    ) -> LLMResponse:
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "stream": False,
            "options": {"num_predict": max_tokens, "temperature": temperature},
        }
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    f"{self._base_url}/api/chat",
                    json=payload,
                    timeout=None,
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LLMError("ollama", "generate", e) from e

        content = data.get("message", {}).get("content", "")
        if not content:
            logger.debug("Ollama returned an empty message for model %s", self.config.model)
        return LLMResponse(
            content=content,
            usage=TokenUsage(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            ),
            model=self.config.model,
        )
