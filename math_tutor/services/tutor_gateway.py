"""Chat-completion gateway for the tutor.

Sends a prompt pair to OpenAI and returns either the whole answer or an
ordered stream of `StreamEvent`s. Upstream failures are mapped to the status
codes the API exposes (401 / 429 / 500).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import AsyncGenerator

import openai
from openai import AsyncOpenAI

from math_tutor.core.config import get_settings
from math_tutor.schemas.tutor import StreamEvent
from math_tutor.services.prompt_builder import PromptPair

LOGGER = logging.getLogger(__name__)

FALLBACK_ANSWER = "Sorry, I could not generate a response."

AUTH_FAILED_MESSAGE = "Authentication failed. Please check your API key configuration."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."

_AUTH_MARKERS = ("api key", "api_key")
_RATE_LIMIT_MARKERS = ("rate limit", "rate_limit")


@dataclass(frozen=True)
class UpstreamFailure:
    """Caller-visible classification of an upstream error."""

    status_code: int
    message: str


def classify_upstream_error(exc: BaseException) -> UpstreamFailure:
    text = str(exc).lower()
    if isinstance(exc, openai.AuthenticationError) or any(m in text for m in _AUTH_MARKERS):
        return UpstreamFailure(401, AUTH_FAILED_MESSAGE)
    if isinstance(exc, openai.RateLimitError) or any(m in text for m in _RATE_LIMIT_MARKERS):
        return UpstreamFailure(429, RATE_LIMITED_MESSAGE)
    return UpstreamFailure(500, INTERNAL_ERROR_MESSAGE)


class TutorGateway:
    """OpenAI chat-completion client for tutor prompts."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> None:
        settings = get_settings()
        self.model = model or settings.OPENAI_MODEL
        self.max_tokens = max_tokens or settings.OPENAI_MAX_TOKENS
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        self._client = client or AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.OPENAI_TIMEOUT,
        )

    async def complete(self, prompt: PromptPair) -> str:
        """Return the whole answer; errors propagate for classification."""
        started = time.perf_counter()
        LOGGER.info("[OpenAI] request start model=%s stream=false", self.model)
        response = await self._client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            messages=prompt.messages(),
        )
        elapsed = time.perf_counter() - started

        content = response.choices[0].message.content if response.choices else None
        LOGGER.info(
            "[OpenAI] done model=%s elapsed=%.2fs chars=%d",
            self.model,
            elapsed,
            len(content or ""),
        )
        return content or FALLBACK_ANSWER

    async def stream(self, prompt: PromptPair) -> AsyncGenerator[StreamEvent, None]:
        """Yield content deltas in model order, then one `done` or `error` event.

        Never raises for upstream failures; the upstream stream is closed
        when the consumer stops early.
        """
        started = time.perf_counter()
        delivered = 0
        LOGGER.info("[OpenAI] request start model=%s stream=true", self.model)
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                messages=prompt.messages(),
                stream=True,
            )
            async with completion:
                async for chunk in completion:
                    if not chunk.choices:
                        continue
                    content = chunk.choices[0].delta.content
                    if content:
                        delivered += 1
                        yield StreamEvent.delta(content)
        except Exception as exc:
            failure = classify_upstream_error(exc)
            LOGGER.error(
                "[OpenAI] stream failed model=%s status=%d after %d chunks: %s",
                self.model,
                failure.status_code,
                delivered,
                exc,
                exc_info=True,
            )
            yield StreamEvent.failure(failure.message)
            return

        LOGGER.info(
            "[OpenAI] stream done model=%s chunks=%d elapsed=%.2fs",
            self.model,
            delivered,
            time.perf_counter() - started,
        )
        yield StreamEvent.done()


_instance: TutorGateway | None = None


def get_tutor_gateway() -> TutorGateway:
    """Return the shared gateway instance (FastAPI dependency)."""
    global _instance
    if _instance is None:
        _instance = TutorGateway()
    return _instance
