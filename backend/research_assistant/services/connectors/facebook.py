# backend/research_assistant/services/connectors/facebook.py

from __future__ import annotations

import logging
from urllib.parse import quote, urlparse

import httpx

from .base import PROFILE_SNIPPET_LIMIT, BaseUrlConnector, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)


class FacebookConnector(BaseUrlConnector):
    """
    Public Facebook page metadata and recent posts via the Graph API.

    Only registered when FB_GRAPH_TOKEN is configured. Personal profiles are
    not readable through the Graph API, so those lookups fail and the URL
    falls through to the generic reader.
    """

    name = "facebook"
    label = "Facebook"
    domains = ("facebook.com",)

    def __init__(self, settings: Settings) -> None:
        if not settings.FB_GRAPH_TOKEN:
            raise ValueError("FacebookConnector requires FB_GRAPH_TOKEN")
        self.token: str = settings.FB_GRAPH_TOKEN.strip()
        self.base_url = "https://graph.facebook.com/v19.0"
        self.max_items: int = settings.PROFILE_MAX_ITEMS

    async def fetch_url(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        parts = [p for p in urlparse(url).path.split("/") if p]
        if not parts:
            return None
        page_path = f"{self.base_url}/{quote(parts[0], safe='')}"

        page, error = await get_json(
            client,
            page_path,
            params={
                "fields": "name,about,fan_count,followers_count,link",
                "access_token": self.token,
            },
        )
        if error or not isinstance(page, dict):
            logger.warning(
                "Facebook page lookup failed: %s", error, extra={"connector": self.name}
            )
            return None

        posts_body, error = await get_json(
            client,
            f"{page_path}/posts",
            params={
                "fields": "message,created_time,permalink_url",
                "limit": self.max_items,
                "access_token": self.token,
            },
        )
        if error:
            logger.info(
                "Facebook posts lookup failed: %s", error, extra={"connector": self.name}
            )
        posts = (posts_body.get("data") if isinstance(posts_body, dict) else None) or []

        post_lines = [
            f"- {((p or {}).get('created_time') or '')[:10]}: {clean_text((p or {}).get('message'))}"
            for p in posts
        ]
        followers = page.get("followers_count") or page.get("fan_count") or ""
        snippet = "\n".join(
            [
                f"Name: {page.get('name')}",
                f"Followers: {followers}",
                f"About: {clean_text(page.get('about'))}",
                "Recent Posts:",
                *post_lines,
            ]
        )

        return SourceRecord(
            source=self.label,
            title=f"Facebook Page {page.get('name')}",
            snippet=clean_text(snippet, PROFILE_SNIPPET_LIMIT),
            url=url,
        )
