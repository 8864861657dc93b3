from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

import httpx
from openai import OpenAI

from .connectors import ConnectorRunner
from .corpus import assemble_corpus, format_corpus
from .llm import require_llm_credential
from .sanitizer import sanitize_llm_output
from .synthesis import synthesize
from ..core.config import Settings
from ..core.errors import MissingQueryError
from ..schemas.research import SearchResponse, SourceCounts

logger = logging.getLogger(__name__)


async def run_search(
    query: str | None,
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    llm_client: OpenAI | None = None,
    runner: ConnectorRunner | None = None,
) -> SearchResponse:
    """
    Full request pipeline: fan out, assemble, synthesize, sanitize.

    Input and configuration problems are raised before any connector is
    built or called. Connector failures only shrink the corpus.
    """
    query = (query or "").strip()
    if not query:
        raise MissingQueryError()
    require_llm_credential(settings)

    request_id = str(uuid4())
    logger.info(
        "Search request received",
        extra={"request_id": request_id, "step": "search_start"},
    )

    runner = runner or ConnectorRunner(settings)

    owns_client = http_client is None
    if owns_client:
        http_client = httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True
        )
    try:
        fan_out = await runner.gather(query, http_client)
    finally:
        if owns_client:
            await http_client.aclose()

    corpus, total = assemble_corpus(
        fan_out.url_records,
        fan_out.topic_results,
        max_records=settings.CORPUS_MAX_RECORDS,
    )
    topic = fan_out.topic_results
    counts = SourceCounts(
        reddit=len(topic["reddit"]),
        hacker_news=len(topic["hacker_news"]),
        wikipedia=len(topic["wikipedia"]),
        youtube=len(topic["youtube"]),
        news=len(topic["news"]),
        total=total,
    )
    logger.info(
        "Corpus assembled: %d of %d records",
        len(corpus),
        total,
        extra={"request_id": request_id, "step": "corpus", "records": len(corpus)},
    )

    raw_answer = await synthesize(
        query, format_corpus(corpus), settings, client=llm_client
    )
    answer = sanitize_llm_output(raw_answer)

    logger.info(
        "Search request completed",
        extra={"request_id": request_id, "step": "search_done"},
    )

    return SearchResponse(
        result=answer,
        sources=corpus,
        counts=counts,
        query=query,
        timestamp=datetime.now(timezone.utc),
        model=settings.LLM_MODEL,
    )
