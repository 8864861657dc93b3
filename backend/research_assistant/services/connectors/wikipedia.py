# backend/research_assistant/services/connectors/wikipedia.py

from __future__ import annotations

import logging
from urllib.parse import quote

import httpx

from .base import BaseConnector, ConnectorResult, clean_text, get_json, strip_html
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class WikipediaConnector(BaseConnector):
    name = "wikipedia"
    label = "Wikipedia"

    def __init__(self, settings: Settings) -> None:
        self.api_url = "https://en.wikipedia.org/w/api.php"
        self.article_base = "https://en.wikipedia.org/wiki/"
        self.max_results: int = settings.WIKIPEDIA_MAX_RESULTS

    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        body, error = await get_json(
            client,
            self.api_url,
            params={
                "action": "query",
                "list": "search",
                "srsearch": query,
                "format": "json",
                "origin": "*",
            },
        )
        if error:
            logger.warning(
                "Wikipedia search failed: %s", error, extra={"connector": self.name}
            )
            return ConnectorResult.failed(self.name, error)

        search = ((body.get("query") if isinstance(body, dict) else None) or {}).get("search") or []

        records: list[SourceRecord] = []
        for page in search[: self.max_results]:
            page = page or {}
            title = page.get("title")
            records.append(
                SourceRecord(
                    source=self.label,
                    title=title,
                    # search snippets carry <span class="searchmatch"> markup and entities
                    snippet=clean_text(strip_html(page.get("snippet"))),
                    url=f"{self.article_base}{quote(title, safe='')}" if title else None,
                )
            )

        return ConnectorResult(connector=self.name, records=records)
