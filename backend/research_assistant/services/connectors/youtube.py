# backend/research_assistant/services/connectors/youtube.py

from __future__ import annotations

import logging

import httpx

from .base import BaseConnector, ConnectorResult, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class YouTubeConnector(BaseConnector):
    """
    YouTube Data API v3 video search.

    Only registered when YOUTUBE_API_KEY is configured.
    """

    name = "youtube"
    label = "YouTube"

    def __init__(self, settings: Settings) -> None:
        if not settings.YOUTUBE_API_KEY:
            raise ValueError("YouTubeConnector requires YOUTUBE_API_KEY")
        self.api_key: str = settings.YOUTUBE_API_KEY.strip()
        self.search_url = "https://www.googleapis.com/youtube/v3/search"
        self.max_results: int = settings.YOUTUBE_MAX_RESULTS

    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        body, error = await get_json(
            client,
            self.search_url,
            params={
                "part": "snippet",
                "q": query,
                "maxResults": self.max_results,
                "type": "video",
                "key": self.api_key,
            },
        )
        if error:
            logger.warning(
                "YouTube search failed: %s", error, extra={"connector": self.name}
            )
            return ConnectorResult.failed(self.name, error)

        items = (body.get("items") if isinstance(body, dict) else None) or []

        records: list[SourceRecord] = []
        for item in items:
            item = item or {}
            snippet = item.get("snippet") or {}
            video_id = (item.get("id") or {}).get("videoId")
            records.append(
                SourceRecord(
                    source=self.label,
                    title=snippet.get("title"),
                    snippet=clean_text(snippet.get("description")),
                    url=f"https://www.youtube.com/watch?v={video_id}" if video_id else None,
                )
            )

        return ConnectorResult(connector=self.name, records=records)
