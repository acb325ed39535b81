from __future__ import annotations

from functools import lru_cache

from openai import AsyncOpenAI

from pkb.config import settings
from pkb.utils.logging import get_logger


def create_openai_client(api_key: str | None, *, timeout: float) -> AsyncOpenAI:
    """Build an OpenAI client from explicit credentials.

    With no key the SDK falls back to OPENAI_API_KEY from the environment.
    Retries are left to the caller so a request deadline bounds the whole call.
    """
    logger = get_logger(__name__)
    if api_key:
        logger.debug("Initializing OpenAI client with APP_OPENAI_API_KEY")
        return AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
    logger.debug("Initializing OpenAI client with default OPENAI_API_KEY from environment")
    return AsyncOpenAI(timeout=timeout, max_retries=0)


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """Return the shared OpenAI client configured from settings."""
    return create_openai_client(settings.openai_api_key, timeout=settings.generator_timeout)
