"""Data models for directory exploration results."""

from __future__ import annotations

from dataclasses import dataclass, field

from file_insight.classification.models import FileRecord
from file_insight.description.models import BatchAnswer, BatchResult, BatchSummaries

_SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def format_size(size: int) -> str:
    """Format a byte count with binary units, at most two decimals (``1.5 KiB``, ``5.33 KiB``)."""
    value = float(size)
    for unit in _SIZE_UNITS:
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            if unit == "B":
                return f"{size} B"
            return f"{value:.2f}".rstrip("0").rstrip(".") + f" {unit}"
        value /= 1024
    raise AssertionError("unreachable")


@dataclass
class DirectoryEntry:
    """A directory visited during exploration."""

    path: str
    name: str
    depth: int


@dataclass
class FileEntry:
    """A file visited during exploration.

    Attributes:
        path: Path of the file as walked.
        name: Base name of the file.
        depth: Depth below the exploration root (root is 0).
        size: File size in bytes, or None if it could not be read.
        record: Classification result, None if ignored or unreadable.
        ignored: Whether the ignore rules excluded the file.
        summary: Summary text from single-file mode.
        error: Per-file failure message (I/O or summarization).
        link_target: Target of a symbolic link, which is listed but not followed.
    """

    path: str
    name: str
    depth: int
    size: int | None = None
    record: FileRecord | None = None
    ignored: bool = False
    summary: str | None = None
    error: str | None = None
    link_target: str | None = None


Entry = DirectoryEntry | FileEntry


@dataclass
class ExplorationReport:
    """Ordered result of one exploration run."""

    root: str
    entries: list[Entry] = field(default_factory=list)
    batch_result: BatchResult | None = None
    batch_error: str | None = None

    @property
    def total_dirs(self) -> int:
        return sum(1 for entry in self.entries if isinstance(entry, DirectoryEntry))

    @property
    def total_files(self) -> int:
        return sum(1 for entry in self.entries if isinstance(entry, FileEntry))

    def to_text(self) -> str:
        """Render the report as an indented tree followed by totals."""
        lines: list[str] = [f"Exploring: {self.root}", "=" * 80]
        for entry in self.entries:
            indent = "  " * entry.depth
            if isinstance(entry, DirectoryEntry):
                lines.append(f"{indent}{entry.name}/")
                continue
            if entry.link_target is not None:
                lines.append(f"{indent}{entry.name} -> {entry.link_target}")
            else:
                size = format_size(entry.size) if entry.size is not None else "?"
                lines.append(f"{indent}{entry.name} ({size})")
            if entry.summary is not None:
                lines.append(f"{indent}   Summary: {entry.summary}")
            if entry.error is not None:
                lines.append(f"{indent}   Error: {entry.error}")

        if isinstance(self.batch_result, BatchSummaries) and self.batch_result.summaries:
            lines.extend(["", "File Summaries:", "=" * 80])
            for path, summary in self.batch_result.summaries.items():
                lines.extend(["", f"{path}:", f"   {summary}"])
        elif isinstance(self.batch_result, BatchAnswer):
            lines.extend(["", self.batch_result.text])
        if self.batch_error is not None:
            lines.extend(["", f"Error processing files: {self.batch_error}"])

        lines.extend(
            [
                "",
                "Summary:",
                f"Total directories: {self.total_dirs}",
                f"Total files: {self.total_files}",
            ]
        )
        return "\n".join(lines) + "\n"
