"""Explorer: walks a tree, classifies files and collects summaries."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from file_insight.errors import OracleError
from file_insight.orchestration.models import DirectoryEntry, ExplorationReport, FileEntry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from file_insight.classification.classifier import FileClassifier
    from file_insight.description.summarizer import FileSummarizer
    from file_insight.filtering.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3
DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True)
class SummaryRequest:
    """What the explorer should ask the summarizer for.

    Attributes:
        batch: Collect files and answer them in one request after the walk.
        query: Custom question; per file in single mode, for the whole
            batch in batch mode.
    """

    batch: bool = False
    query: str | None = None


class Explorer:
    """Depth-first directory explorer with optional summarization.

    Entries are reported in traversal order. Single-file summaries run on a
    thread pool while the walk continues; each entry is filled in once its
    summary completes. A failure on one file is recorded on that file's entry
    and never stops the walk.
    """

    def __init__(
        self,
        classifier: FileClassifier,
        ignore_matcher: IgnoreMatcher,
        summarizer: FileSummarizer | None = None,
        request: SummaryRequest | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        """Initialise the explorer.

        Args:
            classifier: Classifier applied to every visited file.
            ignore_matcher: Matcher gating which files are processed.
            summarizer: Summarizer; when None only the listing is produced.
            request: Summary mode; defaults to plain single-file summaries.
            max_depth: Deepest level below the root that is visited.
            max_workers: Concurrent single-file summaries.
        """
        self._classifier = classifier
        self._ignore = ignore_matcher
        self._summarizer = summarizer
        self._request = request if request is not None else SummaryRequest()
        self._max_depth = max_depth
        self._max_workers = max(1, max_workers)

    def _walk(self, directory: Path, depth: int) -> Iterator[tuple[Path, int, bool, bool]]:
        """Yield ``(path, depth, is_dir, is_link)`` below ``directory`` depth-first in name order.

        Symbolic links are reported but never followed.
        """
        if depth >= self._max_depth:
            return
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda entry: entry.name)
        except OSError as exc:
            logger.warning("[walk] cannot list directory; path:%s;error:%s", directory, exc)
            return
        for child in children:
            child_path = Path(child.path)
            is_dir = child.is_dir(follow_symlinks=False)
            yield child_path, depth + 1, is_dir, child.is_symlink()
            if is_dir:
                yield from self._walk(child_path, depth + 1)

    def _link_entry(self, path: Path, depth: int) -> FileEntry:
        entry = FileEntry(path=str(path), name=path.name, depth=depth)
        try:
            entry.link_target = os.readlink(path)
        except OSError as exc:
            entry.error = str(exc)
        return entry

    def _visit_file(
        self,
        path: Path,
        depth: int,
        executor: ThreadPoolExecutor,
        pending: list[tuple[FileEntry, Future[str | None]]],
    ) -> FileEntry:
        entry = FileEntry(path=str(path), name=path.name, depth=depth)

        if self._ignore.should_ignore(path):
            entry.ignored = True
            try:
                entry.size = path.stat().st_size
            except OSError as exc:
                entry.error = str(exc)
            return entry

        try:
            entry.record = self._classifier.classify(path)
        except OSError as exc:
            logger.warning("[visit_file] classification failed; path:%s;error:%s", path, exc)
            entry.error = str(exc)
            return entry
        entry.size = entry.record.size

        if self._summarizer is None or not entry.record.is_text:
            return entry

        if self._request.batch:
            try:
                self._summarizer.collect_for_batch(path, record=entry.record)
            except OSError as exc:
                logger.warning("[visit_file] batch collection failed; path:%s;error:%s", path, exc)
                entry.error = str(exc)
            return entry

        future = executor.submit(
            self._summarizer.summarize_file, path, self._request.query, entry.record
        )
        pending.append((entry, future))
        return entry

    def _run_batch(self, summarizer: FileSummarizer, report: ExplorationReport) -> None:
        try:
            report.batch_result = summarizer.summarize_batch(self._request.query)
        except (OSError, OracleError) as exc:
            logger.error("[explore] batch request failed; error:%s", exc)
            report.batch_error = str(exc)

    def explore(self, path: str | Path) -> ExplorationReport:
        """Explore a file or directory.

        Args:
            path: Root of the exploration.

        Returns:
            ExplorationReport with entries in traversal order.
        """
        root = Path(path)
        report = ExplorationReport(root=str(root))
        pending: list[tuple[FileEntry, Future[str | None]]] = []
        logger.info(
            "[explore] starting; root:%s;max_depth:%d;summaries:%s;batch:%s",
            root,
            self._max_depth,
            self._summarizer is not None,
            self._request.batch,
        )

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            if root.is_dir():
                report.entries.append(
                    DirectoryEntry(path=str(root), name=root.name or str(root), depth=0)
                )
                for child, depth, is_dir, is_link in self._walk(root, 0):
                    if is_dir:
                        report.entries.append(
                            DirectoryEntry(path=str(child), name=child.name, depth=depth)
                        )
                    elif is_link:
                        report.entries.append(self._link_entry(child, depth))
                    else:
                        report.entries.append(self._visit_file(child, depth, executor, pending))
            else:
                report.entries.append(self._visit_file(root, 0, executor, pending))

            for entry, future in pending:
                try:
                    entry.summary = future.result()
                except (OSError, OracleError) as exc:
                    logger.warning(
                        "[explore] summary failed; path:%s;error:%s", entry.path, exc
                    )
                    entry.error = f"Failed to generate summary: {exc}"

        if self._summarizer is not None and self._request.batch:
            self._run_batch(self._summarizer, report)

        logger.info(
            "[explore] complete; dirs:%d;files:%d", report.total_dirs, report.total_files
        )
        return report
