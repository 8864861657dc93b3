from __future__ import annotations

from typing import Iterable, List, Mapping, Tuple

from .connectors.base import ConnectorResult
from ..schemas.research import SourceRecord

DEFAULT_MAX_RECORDS = 25


def assemble_corpus(
    url_records: Iterable[SourceRecord],
    topic_results: Mapping[str, ConnectorResult],
    max_records: int = DEFAULT_MAX_RECORDS,
) -> Tuple[List[SourceRecord], int]:
    """
    Merge URL-derived records and topic results into the prompt corpus.

    Order: URL records first, then topic results in mapping order. Records
    without a title or URL are dropped. Returns the capped list and the
    number of complete records before the cap.

    The cap is positional, not relevance-ranked: once earlier sources fill
    it, later ones are dropped.
    """
    merged: List[SourceRecord] = list(url_records)
    for result in topic_results.values():
        merged.extend(result.records)

    complete = [r for r in merged if r.is_complete]
    return complete[:max_records], len(complete)


def format_record(record: SourceRecord) -> str:
    return f"- ({record.source}) {record.title}\n  {record.snippet}\n  Link: {record.url}"


def format_corpus(records: Iterable[SourceRecord]) -> str:
    """Render records as prompt notes, one three-line block each, blank-line separated."""
    return "\n\n".join(format_record(r) for r in records)
