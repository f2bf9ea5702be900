"""Summarization pipeline: single-file and batch paths with caching."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from file_insight.classification.signals import first_line
from file_insight.description.batch import (
    BatchCollector,
    match_summaries,
    parse_batch_summaries,
)
from file_insight.description.describer import (
    build_batch_query_prompt,
    build_batch_summary_prompt,
)
from file_insight.description.length import token_budget
from file_insight.description.models import BatchAnswer, BatchResult, BatchSummaries

if TYPE_CHECKING:
    from file_insight.classification.classifier import FileClassifier
    from file_insight.classification.models import FileRecord
    from file_insight.description.cache import SummaryCache
    from file_insight.description.describer import AnthropicDescriber
    from file_insight.description.length import LengthPolicySettings
    from file_insight.filtering.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
TOO_LARGE_SUMMARY = "File too large for summarization"
EMPTY_FILE_SUMMARY = "Empty file"

BATCH_ANSWER_TOKENS = 500
MAX_BATCH_SUMMARY_TOKENS = 8192


class FileSummarizer:
    """Produces cached summaries for files, one at a time or in one batch."""

    def __init__(
        self,
        describer: AnthropicDescriber,
        cache: SummaryCache,
        classifier: FileClassifier,
        ignore_matcher: IgnoreMatcher,
        settings: LengthPolicySettings,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        collector: BatchCollector | None = None,
    ) -> None:
        """Initialise the summarizer.

        Args:
            describer: Client for the text-generation service.
            cache: Summary cache, consulted before every request.
            classifier: Classifier deciding which files are text.
            ignore_matcher: Matcher excluding paths from summarization.
            settings: Run-wide summary length and language settings.
            max_file_size: Files above this size get a fixed placeholder summary.
            collector: Buffer for batch mode; a fresh one is created if omitted.
        """
        self._describer = describer
        self._cache = cache
        self._classifier = classifier
        self._ignore = ignore_matcher
        self._settings = settings
        self._max_file_size = max_file_size
        self._collector = collector if collector is not None else BatchCollector()

    @property
    def settings(self) -> LengthPolicySettings:
        return self._settings

    @property
    def collector(self) -> BatchCollector:
        return self._collector

    def _store(self, content_hash: str, summary: str) -> None:
        """Write a summary to the cache; a failed write only loses the cache entry."""
        try:
            self._cache.put(
                content_hash, summary, self._settings.language, self._settings.length_label
            )
        except OSError as exc:
            logger.warning(
                "[summarizer] cache write failed; hash:%s;error:%s", content_hash, exc
            )

    def _eligible(self, path: Path, record: FileRecord | None) -> FileRecord | None:
        """Return the file's record if it may be summarized, else None."""
        if self._ignore.should_ignore(path):
            logger.debug("[summarizer] ignored; path:%s", path)
            return None
        if record is None:
            record = self._classifier.classify(path)
        if not record.is_text:
            logger.info("[summarizer] binary file skipped; path:%s", path)
            return None
        return record

    def summarize_file(
        self,
        path: str | Path,
        query: str | None = None,
        record: FileRecord | None = None,
    ) -> str | None:
        """Summarize a single file, serving from the cache when possible.

        Args:
            path: File to summarize.
            query: Custom question replacing the default summary request.
            record: Classification of ``path`` if the caller already has it.

        Returns:
            The summary, a placeholder for oversized or empty files, or None
            when the file is ignored or binary.

        Raises:
            OSError: If the file cannot be read.
            OracleError: If the summary request fails.
        """
        file_path = Path(path)
        record = self._eligible(file_path, record)
        if record is None:
            return None

        if record.size > self._max_file_size:
            return TOO_LARGE_SUMMARY

        raw = file_path.read_bytes()
        content = raw.decode("utf-8", errors="replace")
        if not content.strip():
            return EMPTY_FILE_SUMMARY

        settings = self._settings
        content_hash = self._cache.content_hash(
            raw, query, settings.length_label, settings.language
        )
        cached = self._cache.get(content_hash, settings.language, settings.length_label)
        if cached is not None:
            return cached

        budget = token_budget(
            record.size,
            file_path,
            settings.language,
            settings,
            first_line=first_line(raw[:256]),
        )
        summary = self._describer.summarize_file(
            str(file_path),
            content,
            max_tokens=budget,
            language=settings.language,
            interpreter=record.interpreter,
            query=query,
        )
        self._store(content_hash, summary)
        return summary

    def collect_for_batch(self, path: str | Path, record: FileRecord | None = None) -> bool:
        """Add an eligible, non-empty file to the batch buffer.

        Returns:
            True if the file was buffered.

        Raises:
            OSError: If the file cannot be read.
        """
        file_path = Path(path)
        record = self._eligible(file_path, record)
        if record is None or record.size > self._max_file_size:
            return False

        content = file_path.read_bytes().decode("utf-8", errors="replace")
        if not content.strip():
            return False

        self._collector.add(str(file_path), content)
        return True

    def summarize_batch(self, query: str | None = None) -> BatchResult:
        """Finalize the batch buffer and answer it with a single request.

        With a query, every buffered file goes into one prompt and the raw
        answer is returned. Without one, cached summaries are served first and
        only the remaining files are sent; their parsed summaries are cached.

        Raises:
            OracleError: If the combined request fails.
        """
        files = self._collector.finalize()
        if not files:
            return BatchSummaries()

        settings = self._settings
        if query is not None:
            prompt = build_batch_query_prompt(query, files, settings.language)
            logger.info("[summarize_batch] answering query; file_count:%d", len(files))
            return BatchAnswer(text=self._describer.complete(prompt, BATCH_ANSWER_TOKENS))

        summaries: dict[str, str] = {}
        misses: list[tuple[str, str]] = []
        hashes: dict[str, str] = {}
        for path, content in files:
            content_hash = self._cache.content_hash(
                content.encode("utf-8"), None, settings.length_label, settings.language
            )
            cached = self._cache.get(content_hash, settings.language, settings.length_label)
            if cached is not None:
                summaries[path] = cached
            else:
                misses.append((path, content))
                hashes[path] = content_hash

        logger.info(
            "[summarize_batch] cache checked; hits:%d;misses:%d", len(summaries), len(misses)
        )
        if not misses:
            return BatchSummaries(summaries=summaries)

        prompt = build_batch_summary_prompt(
            misses, settings.length_label, settings.fixed_budget, settings.language
        )
        max_tokens = min(settings.fixed_budget * len(misses), MAX_BATCH_SUMMARY_TOKENS)
        response = self._describer.complete(prompt, max_tokens)

        parsed = match_summaries((path for path, _ in misses), parse_batch_summaries(response))
        for path, _ in misses:
            summary = parsed.get(path)
            if summary is None:
                logger.warning("[summarize_batch] no summary in response; path:%s", path)
                continue
            self._store(hashes[path], summary)
            summaries[path] = summary

        # report in buffer order
        ordered = {path: summaries[path] for path, _ in files if path in summaries}
        return BatchSummaries(summaries=ordered)
