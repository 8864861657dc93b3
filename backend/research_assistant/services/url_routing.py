from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING, List, Sequence
from urllib.parse import urlparse

import httpx

from ..schemas.research import SourceRecord

if TYPE_CHECKING:
    from .connectors.base import BaseUrlConnector

logger = logging.getLogger(__name__)

URL_RE = re.compile(r"https?://[^\s)]+", re.IGNORECASE)


def _is_absolute_http_url(candidate: str) -> bool:
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return False
    return parsed.scheme.lower() in ("http", "https") and bool(parsed.hostname)


def extract_urls(text: str | None) -> List[str]:
    """
    Absolute http(s) URLs embedded in `text`, first-seen order, exact-string
    deduplicated. Matches that do not parse into scheme + host are dropped.
    """
    seen: set[str] = set()
    urls: List[str] = []
    for match in URL_RE.finditer(text or ""):
        url = match.group(0)
        if url in seen:
            continue
        seen.add(url)
        if _is_absolute_http_url(url):
            urls.append(url)
    return urls


class UrlRouter:
    """
    Resolve each embedded URL to at most one record.

    Profile connectors are tried in priority order when their hostname
    matches; the first record wins. Anything they do not answer for goes to
    the generic reader.
    """

    def __init__(
        self,
        profile_connectors: Sequence[BaseUrlConnector],
        fallback: BaseUrlConnector,
    ) -> None:
        self.profile_connectors = list(profile_connectors)
        self.fallback = fallback

    async def _attempt(
        self, conn: BaseUrlConnector, url: str, client: httpx.AsyncClient
    ) -> SourceRecord | None:
        try:
            return await conn.fetch_url(url, client)
        except Exception as e:
            logger.exception(
                "URL connector '%s' failed: %s",
                conn.name,
                e,
                extra={"connector": conn.name, "step": "resolve_url"},
            )
            return None

    async def resolve(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        for conn in self.profile_connectors:
            if not conn.matches(url):
                continue
            record = await self._attempt(conn, url, client)
            if record is not None:
                return record
            logger.info(
                "No profile record from '%s'; falling back to reader",
                conn.name,
                extra={"connector": conn.name, "step": "resolve_url"},
            )

        return await self._attempt(self.fallback, url, client)

    async def resolve_all(
        self, urls: Sequence[str], client: httpx.AsyncClient
    ) -> List[SourceRecord]:
        """Resolve all URLs concurrently; output keeps URL order and omits misses."""
        if not urls:
            return []
        results = await asyncio.gather(*(self.resolve(u, client) for u in urls))
        return [r for r in results if r is not None]
