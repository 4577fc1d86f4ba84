"""Text-generation capability used by the extractor service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog
from google import genai

from pricelocator import config

logger = structlog.get_logger(__name__)


@runtime_checkable
class TextGenerator(Protocol):
    """Anything that turns a prompt into text with a named model.

    One attempt, no streaming; errors propagate to the caller.
    """

    async def generate(self, model_id: str, prompt: str) -> str: ...


class EmptyResponseError(Exception):
    """The model produced no text (blocked prompt, safety stop, no candidates)."""


class GeminiGenerator:
    """TextGenerator backed by the Gemini API."""

    def __init__(self, api_key: str, client: genai.Client | None = None):
        self._client = client or genai.Client(api_key=api_key)

    async def generate(self, model_id: str, prompt: str) -> str:
        logger.debug("Calling Gemini", model=model_id, prompt_chars=len(prompt))
        response = await self._client.aio.models.generate_content(model=model_id, contents=prompt)
        if response.text is None:
            feedback = getattr(response, "prompt_feedback", None)
            reason = getattr(feedback, "block_reason", None)
            raise EmptyResponseError(
                f"Gemini returned no text (block reason: {reason})" if reason else "Gemini returned no text"
            )
        return response.text


_generator: TextGenerator | None = None


def get_generator() -> TextGenerator:
    """Process-wide generator, created on first use from GEMINI_API_KEY."""
    global _generator
    if _generator is None:
        if not config.GEMINI_API_KEY:
            raise RuntimeError("GEMINI_API_KEY is not set")
        _generator = GeminiGenerator(config.GEMINI_API_KEY)
    return _generator


def set_generator(generator: TextGenerator | None) -> None:
    global _generator
    _generator = generator
