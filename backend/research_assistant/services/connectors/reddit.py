# backend/research_assistant/services/connectors/reddit.py

from __future__ import annotations

import logging

import httpx

from .base import BaseConnector, ConnectorResult, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class RedditConnector(BaseConnector):
    """
    Reddit public search (`/search.json`, no credential needed).

    Each post becomes one record; self-posts keep their body as the snippet,
    link posts fall back to the title.
    """

    name = "reddit"
    label = "Reddit"

    def __init__(self, settings: Settings) -> None:
        self.search_url = "https://www.reddit.com/search.json"
        self.max_results: int = settings.REDDIT_MAX_RESULTS

    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        body, error = await get_json(
            client,
            self.search_url,
            params={"q": query, "limit": self.max_results, "sort": "relevance"},
        )
        if error:
            logger.warning(
                "Reddit search failed: %s", error, extra={"connector": self.name}
            )
            return ConnectorResult.failed(self.name, error)

        listing = (body or {}).get("data") if isinstance(body, dict) else None
        children = (listing or {}).get("children") or []

        records: list[SourceRecord] = []
        for child in children:
            post = (child or {}).get("data") or {}
            title = post.get("title")
            permalink = post.get("permalink")
            records.append(
                SourceRecord(
                    source=self.label,
                    title=title,
                    snippet=clean_text(post.get("selftext") or title),
                    url=f"https://reddit.com{permalink}" if permalink else post.get("url"),
                )
            )

        return ConnectorResult(connector=self.name, records=records)
