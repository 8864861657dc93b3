# backend/research_assistant/services/connectors/hackernews.py

from __future__ import annotations

import logging

import httpx

from .base import BaseConnector, ConnectorResult, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class HackerNewsConnector(BaseConnector):
    """Hacker News stories via the Algolia search API."""

    name = "hacker_news"
    label = "Hacker News"

    def __init__(self, settings: Settings) -> None:
        self.search_url = "https://hn.algolia.com/api/v1/search"
        self.max_results: int = settings.HN_MAX_RESULTS

    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        body, error = await get_json(
            client,
            self.search_url,
            params={"query": query, "tags": "story", "hitsPerPage": self.max_results},
        )
        if error:
            logger.warning(
                "Hacker News search failed: %s", error, extra={"connector": self.name}
            )
            return ConnectorResult.failed(self.name, error)

        hits = (body.get("hits") if isinstance(body, dict) else None) or []

        records: list[SourceRecord] = []
        for hit in hits:
            hit = hit or {}
            object_id = hit.get("objectID")
            item_url = (
                f"https://news.ycombinator.com/item?id={object_id}" if object_id else None
            )
            records.append(
                SourceRecord(
                    source=self.label,
                    title=hit.get("title"),
                    snippet=clean_text(hit.get("story_text") or hit.get("title") or hit.get("url")),
                    url=hit.get("url") or item_url,
                )
            )

        return ConnectorResult(connector=self.name, records=records)
