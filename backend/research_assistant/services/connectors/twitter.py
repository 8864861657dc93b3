# backend/research_assistant/services/connectors/twitter.py

from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from .base import PROFILE_SNIPPET_LIMIT, BaseUrlConnector, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)

# First path segments on twitter.com / x.com that are app routes, not handles
RESERVED_SEGMENTS = frozenset({"i", "home", "search", "explore", "hashtag", "intent"})


class TwitterConnector(BaseUrlConnector):
    """
    Twitter/X profile plus recent tweets via API v2.

    Only registered when X_BEARER_TOKEN is configured; without it the URL is
    handled by the generic reader.
    """

    name = "twitter"
    label = "Twitter"
    domains = ("twitter.com", "x.com")

    def __init__(self, settings: Settings) -> None:
        if not settings.X_BEARER_TOKEN:
            raise ValueError("TwitterConnector requires X_BEARER_TOKEN")
        self.token: str = settings.X_BEARER_TOKEN.strip()
        self.base_url = "https://api.twitter.com/2"
        self.max_items: int = settings.PROFILE_MAX_ITEMS

    @staticmethod
    def username_from_url(url: str) -> str | None:
        parts = [p for p in urlparse(url).path.split("/") if p]
        if not parts or parts[0].lower() in RESERVED_SEGMENTS:
            return None
        return parts[0]

    async def fetch_url(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        username = self.username_from_url(url)
        if not username:
            return None

        headers = {"Authorization": f"Bearer {self.token}"}

        body, error = await get_json(
            client,
            f"{self.base_url}/users/by/username/{username}",
            params={"user.fields": "public_metrics,description,location,verified"},
            headers=headers,
        )
        if error:
            logger.warning(
                "Twitter profile lookup failed: %s", error, extra={"connector": self.name}
            )
            return None
        user = (body.get("data") if isinstance(body, dict) else None) or {}
        if not user.get("id"):
            return None

        tweets_body, error = await get_json(
            client,
            f"{self.base_url}/users/{user['id']}/tweets",
            params={"max_results": self.max_items, "tweet.fields": "public_metrics,created_at"},
            headers=headers,
        )
        if error:
            logger.info(
                "Twitter timeline lookup failed: %s", error, extra={"connector": self.name}
            )
        tweets = (tweets_body.get("data") if isinstance(tweets_body, dict) else None) or []

        tweet_lines = []
        for tweet in tweets:
            tweet = tweet or {}
            likes = (tweet.get("public_metrics") or {}).get("like_count") or 0
            day = (tweet.get("created_at") or "")[:10]
            tweet_lines.append(f"- {day} ({likes} likes): {clean_text(tweet.get('text'))}")

        metrics = user.get("public_metrics") or {}
        handle = user.get("username") or username
        verified = " (verified)" if user.get("verified") else ""
        snippet = "\n".join(
            [
                f"Name: @{handle}{verified}",
                f"Bio: {clean_text(user.get('description'))}",
                f"Location: {user.get('location') or ''}",
                f"Followers: {metrics.get('followers_count') or 0}, "
                f"Following: {metrics.get('following_count') or 0}",
                "Recent Tweets:",
                *tweet_lines,
            ]
        )

        return SourceRecord(
            source=self.label,
            title=f"Twitter Profile @{handle}",
            snippet=clean_text(snippet, PROFILE_SNIPPET_LIMIT),
            url=url,
        )
