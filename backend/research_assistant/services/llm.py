from __future__ import annotations

from functools import lru_cache

import httpx
from openai import OpenAI

from ..core.config import Settings, get_settings
from ..core.errors import ConfigurationError

MISSING_KEY_MESSAGE = (
    "Groq API key not configured. Please add GROQ_API_KEY to your environment or .env file"
)


def require_llm_credential(settings: Settings) -> str:
    if not settings.llm_configured:
        raise ConfigurationError(MISSING_KEY_MESSAGE)
    return settings.GROQ_API_KEY.strip()


def build_llm_client(settings: Settings, http_client: httpx.Client | None = None) -> OpenAI:
    """
    OpenAI-compatible client for the completion service (Groq by default).

    Retries are disabled: a failed synthesis call fails the request.
    """
    api_key = require_llm_credential(settings)
    return OpenAI(
        base_url=settings.LLM_BASE_URL,
        api_key=api_key,
        max_retries=0,
        http_client=http_client,
    )


@lru_cache(maxsize=1)
def get_llm_client() -> OpenAI:
    """
    Process-wide client built from the cached settings.

    Cached so all requests in a process share one connection pool.
    """
    return build_llm_client(get_settings())
