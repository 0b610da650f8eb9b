"""GenerationClient: one bounded, retrying call to an LLM provider."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable

import httpx

from automessage.errors import GenerationTimeout, TransportError
from automessage.llm.base import LLMProvider
from automessage.llm.models import GenerationRequest, LLMError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0

_OPENING_FENCE = re.compile(r"\A```[^\n`]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```\Z")

Sleep = Callable[[float], Awaitable[None]]


def normalize_output(text: str) -> str:
    """Trim whitespace and the outermost ``` fence markers, if any.

    Only a leading fence line (with its optional info string) and a trailing
    fence are removed; inner markdown is left untouched.
    """
    text = text.strip()
    if text.startswith("```"):
        if "\n" not in text:
            # ```inline answer```
            text = text[3:]
            if text.endswith("```"):
                text = text[:-3]
            return text.strip()
        text = _OPENING_FENCE.sub("", text, count=1)
        text = _CLOSING_FENCE.sub("", text, count=1)
        text = text.strip()
    return text


class GenerationClient:
    """Runs a GenerationRequest against a provider with timeout and retry.

    Each attempt gets its own `timeout` budget enforced with
    asyncio.wait_for, which cancels the in-flight HTTP request. Failed
    attempts are retried after `retry_delay` seconds up to `max_attempts`
    in total. A successful response is never retried, even when empty.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.provider = provider
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def generate(self, request: GenerationRequest) -> str:
        """Return the normalized completion text for `request`.

        Raises GenerationTimeout or TransportError (both GenerationFailed)
        once every attempt has failed.
        """
        last_error: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await asyncio.wait_for(
                    self.provider.generate(
                        system=request.system_instruction,
                        user=request.user_content,
                        max_tokens=request.max_output_tokens,
                        temperature=request.temperature,
                    ),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                last_error = e
                logger.warning(
                    "generation attempt %d/%d timed out after %.1fs",
                    attempt, self.max_attempts, self.timeout,
                )
            except (LLMError, httpx.HTTPError) as e:
                last_error = e
                logger.warning(
                    "generation attempt %d/%d failed: %s", attempt, self.max_attempts, e
                )
            else:
                if not response.content.strip():
                    logger.info("provider returned an empty completion")
                logger.debug(
                    "generation used %d input / %d output tokens (model %s)",
                    response.usage.input_tokens,
                    response.usage.output_tokens,
                    response.model,
                )
                return normalize_output(response.content)

            if attempt < self.max_attempts:
                await self._sleep(self.retry_delay)

        if isinstance(last_error, asyncio.TimeoutError):
            raise GenerationTimeout(
                f"Generation timed out after {self.max_attempts} attempt(s) "
                f"({self.timeout:.0f}s each)",
                attempts=self.max_attempts,
            ) from last_error
        raise TransportError(
            f"Generation failed after {self.max_attempts} attempt(s): {last_error}",
            attempts=self.max_attempts,
        ) from last_error
