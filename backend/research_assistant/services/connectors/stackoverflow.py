# backend/research_assistant/services/connectors/stackoverflow.py

from __future__ import annotations

import logging
import re
from typing import Any, Dict
from urllib.parse import urlparse

import httpx

from .base import PROFILE_SNIPPET_LIMIT, BaseUrlConnector, clean_text, get_json
from ...core.config import Settings
from ...schemas.research import SourceRecord

logger = logging.getLogger(__name__)

_USER_PATH_RE = re.compile(r"/users/(\d+)")


class StackOverflowConnector(BaseUrlConnector):
    """
    StackOverflow user profile via the Stack Exchange API 2.3.

    Works anonymously; STACKEXCHANGE_KEY only raises the daily quota.
    """

    name = "stackoverflow"
    label = "StackOverflow"
    domains = ("stackoverflow.com",)

    def __init__(self, settings: Settings) -> None:
        self.base_url = "https://api.stackexchange.com/2.3"
        self.api_key: str | None = (settings.STACKEXCHANGE_KEY or "").strip() or None
        self.max_items: int = settings.PROFILE_MAX_ITEMS

    def _params(self, **extra: Any) -> Dict[str, Any]:
        params: Dict[str, Any] = {"site": "stackoverflow", **extra}
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def fetch_url(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        match = _USER_PATH_RE.search(urlparse(url).path)
        if not match:
            return None
        user_id = match.group(1)

        body, error = await get_json(
            client, f"{self.base_url}/users/{user_id}", params=self._params()
        )
        if error:
            logger.warning(
                "StackOverflow profile lookup failed: %s", error, extra={"connector": self.name}
            )
            return None
        items = (body.get("items") if isinstance(body, dict) else None) or []
        if not items:
            return None
        user = items[0] or {}

        answers_body, error = await get_json(
            client,
            f"{self.base_url}/users/{user_id}/answers",
            params=self._params(order="desc", sort="votes", pagesize=self.max_items),
        )
        if error:
            logger.info(
                "StackOverflow answers lookup failed: %s", error, extra={"connector": self.name}
            )
        answers = (answers_body.get("items") if isinstance(answers_body, dict) else None) or []

        badges = user.get("badge_counts") or {}
        answer_lines = [
            f"- Top Answer #{i + 1} (score: {(a or {}).get('score', 0)})"
            for i, a in enumerate(answers)
        ]
        snippet = "\n".join(
            [
                f"Display Name: {user.get('display_name')}",
                f"Reputation: {user.get('reputation')}",
                f"Badges: gold {badges.get('gold') or 0}, "
                f"silver {badges.get('silver') or 0}, bronze {badges.get('bronze') or 0}",
                f"Location: {user.get('location') or ''}",
                "Top Answers:",
                *answer_lines,
            ]
        )

        return SourceRecord(
            source=self.label,
            title=f"StackOverflow Profile of {user.get('display_name')}",
            snippet=clean_text(snippet, PROFILE_SNIPPET_LIMIT),
            url=url,
        )
