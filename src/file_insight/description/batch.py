"""Batch mode: collecting file snippets and parsing the combined reply."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

from file_insight.description.describer import truncate_utf8

logger = logging.getLogger(__name__)

DEFAULT_BATCH_CONTENT_BYTES = 2000

# Characters models wrap labels in ("- **a.py**: ...", "`a.py`: ...")
_LABEL_DECORATION = "*` "


class BatchCollector:
    """Thread-safe buffer of ``(path, truncated_content)`` pairs.

    The lock only guards the list itself; reading files and calling the
    model happen outside of it.
    """

    def __init__(self, max_content_bytes: int = DEFAULT_BATCH_CONTENT_BYTES) -> None:
        self._max_content_bytes = max_content_bytes
        self._lock = threading.Lock()
        self._buffer: list[tuple[str, str]] = []

    def add(self, path: str, content: str) -> None:
        """Append a file, keeping only the head of its content."""
        entry = (path, truncate_utf8(content, self._max_content_bytes))
        with self._lock:
            self._buffer.append(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def finalize(self) -> list[tuple[str, str]]:
        """Return the buffered pairs in insertion order and clear the buffer."""
        with self._lock:
            snapshot, self._buffer = self._buffer, []
        logger.debug("[finalize] batch finalized; file_count:%d", len(snapshot))
        return snapshot


def _clean_label(raw: str) -> str:
    label = raw.strip()
    if label.startswith("- "):
        label = label[2:]
    return label.strip(_LABEL_DECORATION)


def parse_batch_summaries(text: str) -> dict[str, str]:
    """Split a combined reply into per-file summaries.

    A line with no leading whitespace that contains a colon starts a new
    block: the text before the first colon is the label, the rest starts the
    summary. Following lines are appended, space-joined, until the next label
    line. Blank lines are skipped. Blocks without summary text and any text
    before the first label are dropped. Never raises.

    Example:
        ``"a.txt: first part\\nmore text\\nb.txt: second"`` parses to
        ``{"a.txt": "first part more text", "b.txt": "second"}``.
    """
    summaries: dict[str, str] = {}
    current_label: str | None = None
    current_parts: list[str] = []

    def flush() -> None:
        if current_label:
            summary = " ".join(current_parts)
            if summary:
                summaries[current_label] = summary

    for line in text.splitlines():
        if not line.strip():
            continue
        is_label_line = not line[0].isspace() and ":" in line
        if is_label_line:
            flush()
            label, _, rest = line.partition(":")
            current_label = _clean_label(label)
            current_parts = [rest.strip()] if rest.strip() else []
        elif current_label is not None:
            current_parts.append(line.strip())

    flush()
    return summaries


def match_summaries(
    paths: Iterable[str], parsed: Mapping[str, str]
) -> dict[str, str]:
    """Map parsed labels back onto buffered paths.

    Exact label matches win; otherwise a label equal to a path's base name is
    accepted when that base name is unique among ``paths``.
    """
    path_list = list(paths)
    by_name: dict[str, list[str]] = {}
    for path in path_list:
        by_name.setdefault(path.replace("\\", "/").rsplit("/", 1)[-1], []).append(path)

    matched: dict[str, str] = {}
    for path in path_list:
        if path in parsed:
            matched[path] = parsed[path]
    for label, summary in parsed.items():
        candidates = by_name.get(label, [])
        if len(candidates) == 1 and candidates[0] not in matched:
            matched[candidates[0]] = summary
    return matched
