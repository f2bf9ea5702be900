"""Data models produced by file classification."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FileRecord:
    """Classification result for a single file.

    Attributes:
        size: File size in bytes, from filesystem metadata.
        is_text: Whether the file looks like text and may be summarized.
        interpreter: Inferred language/format tag (e.g. "python3", "config"),
            or None when nothing could be inferred.
    """

    size: int
    is_text: bool
    interpreter: str | None = None
