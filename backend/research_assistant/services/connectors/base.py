from __future__ import annotations

import html
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Literal
from urllib.parse import urlparse

import httpx

from ...schemas.research import SourceRecord

SEARCH_SNIPPET_LIMIT = 500
PROFILE_SNIPPET_LIMIT = 1200

_WHITESPACE_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]+>")


def clean_text(text: str | None, limit: int = SEARCH_SNIPPET_LIMIT) -> str:
    """Collapse all whitespace (newlines included) to single spaces and truncate."""
    return _WHITESPACE_RE.sub(" ", text or "").strip()[:limit]


def strip_html(text: str | None) -> str:
    return html.unescape(_TAG_RE.sub("", text or ""))


def hostname_matches(url: str, domains: tuple[str, ...]) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == d or host.endswith("." + d) for d in domains)


@dataclass
class ConnectorResult:
    """
    Outcome of one connector call.

    Connectors never raise for upstream problems; they report them here so
    the runner can log and count without exception plumbing.
    """

    connector: str
    records: List[SourceRecord] = field(default_factory=list)
    status: Literal["ok", "failed", "skipped"] = "ok"
    reason: str | None = None

    @classmethod
    def failed(cls, connector: str, reason: str) -> "ConnectorResult":
        return cls(connector=connector, status="failed", reason=reason)

    @classmethod
    def skipped(cls, connector: str, reason: str) -> "ConnectorResult":
        return cls(connector=connector, status="skipped", reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def __len__(self) -> int:
        return len(self.records)


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    **kwargs: Any,
) -> tuple[Any | None, str | None]:
    """
    GET `url` and decode JSON.

    Returns (body, None) on success or (None, reason) on transport error,
    non-2xx status or an undecodable body.
    """
    try:
        resp = await client.get(url, **kwargs)
    except httpx.HTTPError as e:
        return None, f"transport error: {e.__class__.__name__}"

    if not resp.is_success:
        return None, f"HTTP {resp.status_code}"

    try:
        return resp.json(), None
    except ValueError:
        return None, "malformed JSON body"


class BaseConnector(ABC):
    """Topic connector: searches one source for the literal query."""

    name: str
    label: str

    @abstractmethod
    async def fetch(self, query: str, client: httpx.AsyncClient) -> ConnectorResult:
        ...


class BaseUrlConnector(ABC):
    """Connector for one URL embedded in the query; yields at most one record."""

    name: str
    domains: tuple[str, ...] = ()

    def matches(self, url: str) -> bool:
        return hostname_matches(url, self.domains)

    @abstractmethod
    async def fetch_url(self, url: str, client: httpx.AsyncClient) -> SourceRecord | None:
        ...
