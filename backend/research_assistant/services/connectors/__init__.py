from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List
import logging

import httpx

from .base import BaseConnector, BaseUrlConnector, ConnectorResult
from .reddit import RedditConnector
from .hackernews import HackerNewsConnector
from .wikipedia import WikipediaConnector
from .youtube import YouTubeConnector
from .news import NewsApiConnector
from .stackoverflow import StackOverflowConnector
from .twitter import TwitterConnector
from .facebook import FacebookConnector
from .reader import ReaderConnector
from ..url_routing import UrlRouter, extract_urls
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)

# Fixed corpus order for topic connectors; also the keys of FanOutResult.topic_results
TOPIC_ORDER = ("reddit", "hacker_news", "wikipedia", "youtube", "news")


@dataclass
class FanOutResult:
    url_records: List[SourceRecord] = field(default_factory=list)
    topic_results: Dict[str, ConnectorResult] = field(default_factory=dict)


def build_topic_connectors(settings: Settings) -> Dict[str, BaseConnector]:
    """Topic connectors enabled by `settings`, in corpus order."""
    connectors: Dict[str, BaseConnector] = {
        "reddit": RedditConnector(settings),
        "hacker_news": HackerNewsConnector(settings),
        "wikipedia": WikipediaConnector(settings),
    }
    if settings.YOUTUBE_API_KEY:
        connectors["youtube"] = YouTubeConnector(settings)
    if settings.NEWS_API_KEY:
        connectors["news"] = NewsApiConnector(settings)
    return connectors


def build_profile_connectors(settings: Settings) -> List[BaseUrlConnector]:
    """Profile connectors enabled by `settings`, in routing priority order."""
    connectors: List[BaseUrlConnector] = [StackOverflowConnector(settings)]
    if settings.X_BEARER_TOKEN:
        connectors.append(TwitterConnector(settings))
    if settings.FB_GRAPH_TOKEN:
        connectors.append(FacebookConnector(settings))
    return connectors


class ConnectorRunner:
    """
    Registry + executor for all connectors of one request.

    - Connectors whose credential is absent are never instantiated.
    - URL lookups and topic searches run concurrently via asyncio.
    - Every launched call is awaited; failures contribute nothing.
    """

    def __init__(
        self,
        settings: Settings,
        topic_connectors: Dict[str, BaseConnector] | None = None,
        router: UrlRouter | None = None,
    ) -> None:
        self._connectors = (
            topic_connectors if topic_connectors is not None else build_topic_connectors(settings)
        )
        self.router = router or UrlRouter(
            build_profile_connectors(settings), ReaderConnector(settings)
        )

    @property
    def enabled(self) -> List[str]:
        return list(self._connectors)

    async def _run_connector(
        self, conn: BaseConnector, query: str, client: httpx.AsyncClient
    ) -> ConnectorResult:
        try:
            res = await conn.fetch(query, client)
        except Exception as e:
            logger.exception(
                "Connector '%s' failed: %s",
                conn.name,
                e,
                extra={"connector": conn.name, "step": "fetch"},
            )
            return ConnectorResult.failed(conn.name, f"unexpected error: {e.__class__.__name__}")

        logger.info(
            "Connector '%s' finished with status %s",
            conn.name,
            res.status,
            extra={"connector": conn.name, "step": "fetch", "records": len(res)},
        )
        return res

    async def _run_topics(
        self, query: str, client: httpx.AsyncClient
    ) -> Dict[str, ConnectorResult]:
        names = list(self._connectors)
        results = await asyncio.gather(
            *(self._run_connector(self._connectors[n], query, client) for n in names)
        )
        by_name = dict(zip(names, results))

        ordered: Dict[str, ConnectorResult] = {}
        for name in TOPIC_ORDER:
            ordered[name] = by_name.pop(name, None) or ConnectorResult.skipped(
                name, "not configured"
            )
        # connectors registered under other names keep registration order
        ordered.update(by_name)
        return ordered

    async def gather(self, query: str, client: httpx.AsyncClient) -> FanOutResult:
        urls = extract_urls(query)
        logger.info(
            "Fanning out to topic connectors [%s] and %d URLs",
            ", ".join(self.enabled),
            len(urls),
            extra={"step": "fan_out", "url_count": len(urls)},
        )

        url_records, topic_results = await asyncio.gather(
            self.router.resolve_all(urls, client),
            self._run_topics(query, client),
        )
        return FanOutResult(url_records=url_records, topic_results=topic_results)
