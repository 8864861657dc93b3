# backend/research_assistant/services/connectors/news.py

from __future__ import annotations

import logging

import httpx

from .base import BaseConnector, ConnectorResult, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class NewsApiConnector(BaseConnector):
    """
    NewsAPI `/v2/everything`, newest first.

    Only registered when NEWS_API_KEY is configured. The key travels in the
    X-Api-Key header rather than the query string.
    """

    name = "news"
    label = "News"

    def __init__(self, settings: Settings) -> None:
        if not settings.NEWS_API_KEY:
            raise ValueError("NewsApiConnector requires NEWS_API_KEY")
        self.api_key: str = settings.NEWS_API_KEY.strip()
        self.search_url = "https://newsapi.org/v2/everything"
        self.language: str = settings.NEWS_LANGUAGE
        self.max_results: int = settings.NEWS_MAX_RESULTS

    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        body, error = await get_json(
            client,
            self.search_url,
            params={
                "q": query,
                "pageSize": self.max_results,
                "sortBy": "publishedAt",
                "language": self.language,
            },
            headers={"X-Api-Key": self.api_key},
        )
        if error:
            logger.warning(
                "NewsAPI search failed: %s", error, extra={"connector": self.name}
            )
            return ConnectorResult.failed(self.name, error)

        articles = (body.get("articles") if isinstance(body, dict) else None) or []

        records: list[SourceRecord] = []
        for article in articles:
            article = article or {}
            title = article.get("title")
            records.append(
                SourceRecord(
                    source=self.label,
                    title=title,
                    snippet=clean_text(article.get("description") or article.get("content") or title),
                    url=article.get("url"),
                )
            )

        return ConnectorResult(connector=self.name, records=records)
