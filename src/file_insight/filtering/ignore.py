"""Ignore matching: project ignore file plus caller-supplied patterns."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import gitignore_parser

if TYPE_CHECKING:
    from file_insight.config import AppConfig

logger = logging.getLogger(__name__)

_WILDCARDS = ("*", "?")


def parse_patterns(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated pattern list, dropping blank entries."""
    if not raw:
        return ()
    return tuple(entry.strip() for entry in raw.split(",") if entry.strip())


def matches_custom_pattern(path: str, pattern: str) -> bool:
    """Match a single custom pattern against the full path string.

    Patterns with ``*`` or ``?`` are globs (``*`` also crosses ``/``);
    anything else is a plain substring test.
    """
    if any(wildcard in pattern for wildcard in _WILDCARDS):
        return fnmatch.fnmatchcase(path, pattern)
    return pattern in path


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Immutable pair of ignore sources.

    Attributes:
        project_rules: Matcher compiled from the project ignore file, or None.
        custom_patterns: Caller-supplied glob or substring patterns.
        base_dir: Absolute directory the project rules are relative to.
    """

    project_rules: Callable[[str], bool] | None = None
    custom_patterns: tuple[str, ...] = ()
    base_dir: Path | None = None


class IgnoreMatcher:
    """Decides whether a path is excluded from processing.

    The two rule sources are evaluated independently: a negation in the
    project ignore file cannot re-include a path hit by a custom pattern.
    """

    def __init__(self, rules: IgnoreRuleSet) -> None:
        self._rules = rules

    @property
    def rules(self) -> IgnoreRuleSet:
        return self._rules

    @staticmethod
    def _rule_matches(project_rules: Callable[[str], bool], path: Path) -> bool:
        try:
            return bool(project_rules(str(path)))
        except ValueError:
            # outside the ignore file's base directory
            return False

    def _project_ignores(self, path: Path) -> bool:
        """Apply the project rules to ``path`` and each ancestor below the base directory.

        Nothing under an excluded directory can be re-included, so the first
        matching ancestor decides.
        """
        project_rules = self._rules.project_rules
        if project_rules is None:
            return False
        target = path.absolute()
        base_dir = self._rules.base_dir
        if base_dir is None:
            return self._rule_matches(project_rules, target)
        if target == base_dir or base_dir not in target.parents:
            return False
        for candidate in (target, *target.parents):
            if candidate == base_dir:
                break
            if self._rule_matches(project_rules, candidate):
                return True
        return False

    def should_ignore(self, path: str | Path) -> bool:
        """Return True if either rule source excludes ``path``."""
        target = Path(path)
        if self._project_ignores(target):
            logger.debug("[should_ignore] matched project rules; path:%s", target)
            return True

        path_str = str(path)
        for pattern in self._rules.custom_patterns:
            if matches_custom_pattern(path_str, pattern):
                logger.debug(
                    "[should_ignore] matched custom pattern; path:%s;pattern:%s",
                    path_str,
                    pattern,
                )
                return True
        return False


def load_project_rules(ignore_file: str | Path | None) -> Callable[[str], bool] | None:
    """Compile the project ignore file, or return None if it is absent or unreadable."""
    if ignore_file is None:
        return None
    ignore_path = Path(ignore_file)
    if not ignore_path.is_file():
        return None
    try:
        return gitignore_parser.parse_gitignore(
            str(ignore_path.absolute()), base_dir=str(ignore_path.absolute().parent)
        )
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(
            "[load_project_rules] could not read ignore file; path:%s;error:%s",
            ignore_path,
            exc,
        )
        return None


def build_ignore_matcher(
    ignore_file: str | Path | None = None,
    custom_patterns: str | None = None,
) -> IgnoreMatcher:
    """Build an IgnoreMatcher from an ignore file path and a comma-separated pattern list."""
    project_rules = load_project_rules(ignore_file)
    rules = IgnoreRuleSet(
        project_rules=project_rules,
        custom_patterns=parse_patterns(custom_patterns),
        base_dir=(
            Path(ignore_file).absolute().parent
            if ignore_file is not None and project_rules is not None
            else None
        ),
    )
    logger.info(
        "[build_ignore_matcher] built; project_rules:%s;custom_patterns:%d",
        rules.project_rules is not None,
        len(rules.custom_patterns),
    )
    return IgnoreMatcher(rules)


def ignore_matcher_from_config(config: AppConfig, custom_patterns: str | None) -> IgnoreMatcher:
    """Construct an IgnoreMatcher from application configuration.

    Args:
        config: Application configuration instance.
        custom_patterns: Comma-separated caller patterns, or None.

    Returns:
        Configured IgnoreMatcher instance.
    """
    return build_ignore_matcher(config.ignore_file, custom_patterns)
