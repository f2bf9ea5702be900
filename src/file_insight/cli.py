"""
Command-line entry point for file-insight.

High-level flow:

    walk → ignore rules → classify → (optional) summarize → print tree

Summaries are produced one request per file, or with --ai-whole in a single
combined request after the walk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from file_insight.classification.classifier import file_classifier_from_config
from file_insight.classification.config import load_classification_config
from file_insight.config import load_config, require_api_key
from file_insight.description.batch import BatchCollector
from file_insight.description.cache import summary_cache_from_config
from file_insight.description.describer import anthropic_describer_from_config
from file_insight.description.length import resolve_length_settings
from file_insight.description.summarizer import FileSummarizer
from file_insight.errors import ConfigError, MissingCredentialError
from file_insight.filtering.ignore import ignore_matcher_from_config
from file_insight.logging import configure_logging
from file_insight.orchestration.explorer import Explorer, SummaryRequest

app = typer.Typer(help="Explore a directory tree and summarize its files with Claude.")
logger = logging.getLogger(__name__)


@app.command()
def explore(
    path: Path = typer.Argument(
        Path("."),
        help="File or directory to explore.",
    ),
    ai: bool = typer.Option(
        False,
        "--ai",
        help="Summarize every text file.",
    ),
    ai_query: Optional[str] = typer.Option(
        None,
        "--ai-query",
        help="Ask this question about every text file instead of summarizing it.",
    ),
    ai_whole: Optional[str] = typer.Option(
        None,
        "--ai-whole",
        help="Process all files in one request; pass a question, or '' for per-file summaries.",
    ),
    max_depth: int = typer.Option(
        3,
        "--max-depth",
        min=0,
        help="Maximum directory depth to explore.",
    ),
    summary_length: str = typer.Option(
        "medium",
        "--summary-length",
        help="short, medium, long, super, smart, or a token count.",
    ),
    language: str = typer.Option(
        "english",
        "--language",
        help="Language of the summaries.",
    ),
    update: bool = typer.Option(
        False,
        "--update",
        help="Ignore cached summaries and regenerate them.",
    ),
    ignore: Optional[str] = typer.Option(
        None,
        "--ignore",
        help="Comma-separated patterns to skip (globs or substrings).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
) -> None:
    """
    Print the tree under PATH with sizes and, optionally, AI summaries.
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        config = load_config()
        classification_config = load_classification_config(config.classification_config_path)
        classifier = file_classifier_from_config(config, classification_config)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    ignore_matcher = ignore_matcher_from_config(config, ignore)

    summarizer = None
    wants_summaries = ai or ai_query is not None or ai_whole is not None
    if wants_summaries:
        try:
            api_key = require_api_key(config)
            cache = summary_cache_from_config(config, force_refresh=update)
        except (MissingCredentialError, ConfigError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        summarizer = FileSummarizer(
            describer=anthropic_describer_from_config(config, api_key),
            cache=cache,
            classifier=classifier,
            ignore_matcher=ignore_matcher,
            settings=resolve_length_settings(summary_length, language),
            max_file_size=config.max_file_size,
            collector=BatchCollector(config.batch_content_bytes),
        )

    if ai_whole is not None:
        request = SummaryRequest(batch=True, query=ai_whole.strip() or None)
    else:
        request = SummaryRequest(batch=False, query=ai_query)

    explorer = Explorer(
        classifier=classifier,
        ignore_matcher=ignore_matcher,
        summarizer=summarizer,
        request=request,
        max_depth=max_depth,
        max_workers=config.max_workers,
    )
    report = explorer.explore(path)
    typer.echo(report.to_text(), nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
