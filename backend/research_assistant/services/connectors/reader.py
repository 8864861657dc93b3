# backend/research_assistant/services/connectors/reader.py

from __future__ import annotations

import logging
from urllib.parse import quote, urlparse

import httpx

from .base import PROFILE_SNIPPET_LIMIT, BaseUrlConnector, clean_text
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0"


class ReaderConnector(BaseUrlConnector):
    """
    Fallback for any URL: fetch a readable text rendition through a reader
    proxy (r.jina.ai by default) and keep the first chunk of it.
    """

    name = "reader"

    def __init__(self, settings: Settings) -> None:
        self.base_url: str = settings.READER_BASE_URL.rstrip("/")

    def matches(self, url: str) -> bool:
        return True

    async def fetch_url(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        host = urlparse(url).hostname or "link"
        try:
            resp = await client.get(
                f"{self.base_url}/{quote(url, safe=':/')}",
                headers={"User-Agent": BROWSER_USER_AGENT},
            )
        except httpx.HTTPError as e:
            logger.warning(
                "Reader fetch failed for %s: %s", host, e.__class__.__name__,
                extra={"connector": self.name},
            )
            return None

        if not resp.is_success:
            logger.warning(
                "Reader returned %s for %s", resp.status_code, host,
                extra={"connector": self.name, "status_code": resp.status_code},
            )
            return None

        text = clean_text(resp.text, PROFILE_SNIPPET_LIMIT)
        if not text:
            return None

        return SourceRecord(
            source=host,
            title=f"Content from {host}",
            snippet=text,
            url=url,
        )
