"""Data models for cached summaries and batch results."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CacheEntry:
    """One persisted summary.

    Attributes:
        content_hash: Fingerprint of content, query, length label and language.
        summary: Summary text returned by the model.
        created_at: Unix timestamp (seconds) when the entry was written.
        language: Language the summary was requested in.
        length_label: Length label the summary was requested with.
    """

    content_hash: str
    summary: str
    created_at: int
    language: str
    length_label: str


@dataclass(frozen=True)
class BatchSummaries:
    """Batch result holding one summary per file path."""

    summaries: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchAnswer:
    """Batch result holding a single free-text answer to a custom query."""

    text: str


BatchResult = BatchSummaries | BatchAnswer
