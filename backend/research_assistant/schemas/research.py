# backend/research_assistant/schemas/research.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_QUERY_LEN = 4000


class SearchRequest(BaseModel):
    # Optional at the schema level so a missing query maps to a 400 with the
    # same error body the client already understands, not a 422.
    query: str | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            stripped = v.strip()
            return stripped or None
        return v

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if len(v) > MAX_QUERY_LEN:
            raise ValueError(
                f"query is too long; maximum length is {MAX_QUERY_LEN} characters"
            )
        return v


class SourceRecord(BaseModel):
    """
    Uniform unit produced by every connector.

    `title` and `url` may be missing on raw connector output; records without
    them are dropped when the corpus is assembled.
    """

    source: str
    title: str | None = None
    snippet: str = ""
    url: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.title) and bool(self.url)


class SourceCounts(BaseModel):
    reddit: int = 0
    hacker_news: int = Field(default=0, alias="hackerNews")
    wikipedia: int = 0
    youtube: int = 0
    news: int = 0
    total: int = 0

    model_config = ConfigDict(populate_by_name=True)


class SearchResponse(BaseModel):
    result: str
    sources: list[SourceRecord]
    counts: SourceCounts
    query: str
    timestamp: datetime
    model: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
