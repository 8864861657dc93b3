from __future__ import annotations

import asyncio
import logging
import textwrap
from typing import Dict, List

import openai
from openai import OpenAI

from .llm import build_llm_client, require_llm_credential
from ..core.config import Settings
from ..core.errors import (
    InvalidCredentialError,
    RateLimitedError,
    SynthesisServiceError,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional research assistant. Read the provided multi-source notes "
    "and respond in a concise, well-structured format that is easy to scan. Do not "
    "produce any empty or placeholder bullet points. If information is unavailable, "
    "omit that bullet rather than writing an empty bullet."
)

ANSWER_TEMPLATE = textwrap.dedent(
    """
    Format your answer EXACTLY as (use section numbers with a dot, and use dash bullets "- " for items):

    1. Detailed Analysis
    - A thorough, well-structured narrative that synthesizes the notes.
    - Use short paragraphs and subheadings if helpful.
    - Where relevant, mention the source names inline (e.g., Reddit/Wikipedia/News).

    2. Executive Summary
    - 2 to 4 short bullets that capture the most important takeaways. No empty bullets.

    3. Key Facts
    - 5 to 10 concise bullets with numbers, dates, names as available. No empty bullets or placeholders.

    4. Social Media Opinions
    - Summarize notable opinions/patterns from social sources. No empty bullets.

    5. Source Links
    - Bullet list with title and URL for the top links (e.g., "- Title - URL").

    Rules:
    - Provide the Detailed Analysis BEFORE the Executive Summary.
    - Never include an item like "1)" or "-" without content.
    - Omit bullets you cannot substantiate from the notes.
    - Do a final pass to remove any empty list items before returning.
    """
).strip()


def build_messages(query: str, corpus_text: str) -> List[Dict[str, str]]:
    user_prompt = (
        f"Research Topic: {query}\n\n"
        "You are given cleaned notes from multiple sources (news, blogs, Reddit, "
        "Wikipedia, YouTube).\n"
        "Use ONLY the provided notes to answer. If the notes don't contain something, "
        "say so.\n\n"
        f"Notes:\n{corpus_text}\n\n"
        f"{ANSWER_TEMPLATE}"
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


async def synthesize(
    query: str,
    corpus_text: str,
    settings: Settings,
    client: OpenAI | None = None,
) -> str:
    """
    Ask the completion service for the structured answer.

    Raises ConfigurationError before any network call when no key is set,
    and a SynthesisError subclass for any failed call. Never retries.
    """
    require_llm_credential(settings)
    client = client or build_llm_client(settings)
    messages = build_messages(query, corpus_text)

    def _call_sync() -> str:
        resp = client.chat.completions.create(
            model=settings.LLM_MODEL,
            messages=messages,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
        )
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    try:
        return await asyncio.to_thread(_call_sync)
    except openai.AuthenticationError as e:
        logger.error(
            "Completion service rejected the API key",
            extra={"status_code": e.status_code, "step": "synthesize"},
        )
        raise InvalidCredentialError() from e
    except openai.RateLimitError as e:
        logger.error(
            "Completion service rate limit hit",
            extra={"status_code": e.status_code, "step": "synthesize"},
        )
        raise RateLimitedError() from e
    except openai.APIStatusError as e:
        body = e.response.text
        logger.error(
            "Completion service error. Status: %s, Body preview: %s",
            e.status_code,
            body[:2000],
            extra={"status_code": e.status_code, "step": "synthesize"},
        )
        raise SynthesisServiceError(e.status_code, body) from e
    except openai.APIConnectionError as e:
        logger.error(
            "Completion service unreachable: %s", e, extra={"step": "synthesize"}
        )
        raise SynthesisServiceError(None, str(e)) from e
