from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from openai import APITimeoutError, OpenAIError

from pkb.core.errors import GeneratorFailure, GeneratorTimeout, ValidationError
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from pkb.core.repositories.content_repository import ContentRepository

logger = get_logger(__name__)


class Summarizer(ABC):
    """Produces a short natural-language summary of a text."""

    @abstractmethod
    async def summarize(self, text: str) -> str:  # pragma: no cover - interface only
        """Return the summary or raise GeneratorFailure."""


class OpenAISummarizer(Summarizer):
    """Summarizer using the OpenAI Responses API."""

    INSTRUCTIONS = "You are a helpful assistant that summarizes text concisely."

    def __init__(self, client: AsyncOpenAI, *, model: str, max_tokens: int, timeout: float) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout

    async def summarize(self, text: str) -> str:
        if not text or not text.strip():
            raise ValidationError("Cannot summarize empty text")

        logger.info("Requesting summary - model: %s, text length: %d", self._model, len(text))
        try:
            response = await asyncio.wait_for(
                self._client.responses.create(
                    model=self._model,
                    instructions=self.INSTRUCTIONS,
                    input=f"Please summarize the following text in a few sentences:\n\n{text}",
                    max_output_tokens=self._max_tokens,
                ),
                timeout=self._timeout,
            )
        except (TimeoutError, APITimeoutError) as err:
            logger.warning("Summary request timed out after %.1fs", self._timeout)
            raise GeneratorTimeout(model=self._model) from err
        except OpenAIError as err:
            logger.warning("Failed to create summary: %s", err)
            raise GeneratorFailure(f"Failed to create summary: {err}", model=self._model) from err

        summary = (response.output_text or "").strip()
        if not summary:
            raise GeneratorFailure("No summary data returned", model=self._model)
        return summary


class SummarizeService:
    """Summarizes stored content on request."""

    def __init__(self, repo: ContentRepository, summarizer: Summarizer) -> None:
        self._repo = repo
        self._summarizer = summarizer

    async def summarize_content(self, content_id: int) -> str:
        content = await self._repo.get(content_id)
        if not content.body.strip():
            raise ValidationError("Content has no text to summarize", content_id=content_id)
        return await self._summarizer.summarize(content.body)
