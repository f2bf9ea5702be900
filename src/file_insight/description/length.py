"""Summary length policy: token budgets from size, file type and language."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from file_insight.classification.signals import file_extension, parse_shebang
from file_insight.classification.signals import first_line as decode_first_line

logger = logging.getLogger(__name__)

SMART_LABEL = "smart"
DEFAULT_LENGTH_LABEL = "medium"

FIXED_BUDGETS: dict[str, int] = {
    "short": 50,
    "medium": 100,
    "long": 200,
    "super": 500,
}

# (inclusive upper bound in bytes, base budget); larger files use the last budget
SIZE_BUCKETS: tuple[tuple[int, int], ...] = (
    (1024, 75),
    (10 * 1024, 150),
    (100 * 1024, 250),
    (500 * 1024, 350),
)
VERY_LARGE_BUDGET = 500

# Fixed budget used for requests not tied to one file while in smart mode
SMART_FIXED_BUDGET = 250

FILE_TYPE_MULTIPLIERS: dict[str, float] = {
    # Documentation
    "md": 1.5,
    "txt": 1.3,
    "rst": 1.5,
    "adoc": 1.5,
    "pdf": 1.5,
    "doc": 1.5,
    "docx": 1.5,
    # Source code
    "rs": 1.2,
    "py": 1.2,
    "js": 1.2,
    "ts": 1.2,
    "tsx": 1.2,
    "jsx": 1.2,
    "java": 1.2,
    "cpp": 1.2,
    "c": 1.2,
    "go": 1.2,
    "rb": 1.2,
    "php": 1.2,
    "scala": 1.2,
    "swift": 1.2,
    "kt": 1.2,
    "vue": 1.2,
    "svelte": 1.2,
    # Markup and style
    "html": 1.1,
    "css": 1.1,
    "scss": 1.1,
    "sass": 1.1,
    "less": 1.1,
    "lock": 1.1,
    # Configuration and data
    "json": 1.3,
    "yaml": 1.3,
    "yml": 1.3,
    "toml": 1.3,
    "ini": 1.2,
    "env": 1.2,
    "conf": 1.2,
    "config": 1.2,
    "sql": 1.3,
    "pgsql": 1.3,
    "mysql": 1.3,
    "xml": 1.2,
    "gradle": 1.2,
    "pom": 1.2,
}

SHELL_MULTIPLIER = 1.4
SHELL_EXTENSIONS = frozenset({"sh", "bash", "zsh", "fish", "ksh", "dash"})
SHELL_INTERPRETERS = frozenset({"sh", "bash", "zsh", "fish", "ksh", "dash"})

DEFAULT_LANGUAGE_MULTIPLIERS: dict[str, float] = {
    "japanese": 1.5,
}


@dataclass(frozen=True)
class LengthPolicySettings:
    """Per-run summary length settings.

    Attributes:
        smart: Whether budgets adapt to file size, type and language.
        fixed_budget: Budget used when not smart, and for multi-file requests.
        language: Target language of the summaries.
        length_label: The caller's length argument, recorded in cache entries.
        language_multipliers: Lowercase language name to budget multiplier.
    """

    smart: bool
    fixed_budget: int
    language: str
    length_label: str
    language_multipliers: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_LANGUAGE_MULTIPLIERS))
    )


def resolve_length_settings(length: str, language: str) -> LengthPolicySettings:
    """Build settings from a length argument.

    ``length`` is one of the labels in FIXED_BUDGETS, ``smart``, or a literal
    integer token count. Unknown labels fall back to the medium budget.
    """
    label = length.strip().lower()
    if label == SMART_LABEL:
        return LengthPolicySettings(
            smart=True, fixed_budget=SMART_FIXED_BUDGET, language=language, length_label=label
        )
    if label.isdigit() and int(label) > 0:
        return LengthPolicySettings(
            smart=False, fixed_budget=int(label), language=language, length_label=label
        )
    if label not in FIXED_BUDGETS:
        logger.warning(
            "[resolve_length_settings] unknown length label, using medium; label:%s", length
        )
    return LengthPolicySettings(
        smart=False,
        fixed_budget=FIXED_BUDGETS.get(label, FIXED_BUDGETS[DEFAULT_LENGTH_LABEL]),
        language=language,
        length_label=label,
    )


def base_budget(size: int) -> int:
    """Return the size-bucket base budget for a file of ``size`` bytes."""
    for upper_bound, budget in SIZE_BUCKETS:
        if size <= upper_bound:
            return budget
    return VERY_LARGE_BUDGET


def _read_first_line(path: Path) -> str:
    try:
        with path.open("rb") as fh:
            return decode_first_line(fh.readline(256))
    except OSError:
        return ""


def is_shell_script(path: Path, first_line_text: str | None = None) -> bool:
    """Return True for shell extensions or a shell shebang on the first line."""
    if file_extension(path) in SHELL_EXTENSIONS:
        return True
    line = first_line_text if first_line_text is not None else _read_first_line(path)
    return parse_shebang(line) in SHELL_INTERPRETERS


def file_type_multiplier(path: Path, first_line_text: str | None = None) -> float:
    """Return the budget multiplier for the file's type."""
    if is_shell_script(path, first_line_text):
        return SHELL_MULTIPLIER
    return FILE_TYPE_MULTIPLIERS.get(file_extension(path), 1.0)


def language_multiplier(language: str, settings: LengthPolicySettings) -> float:
    return settings.language_multipliers.get(language.strip().lower(), 1.0)


def token_budget(
    size: int,
    path: str | Path,
    language: str,
    settings: LengthPolicySettings,
    first_line: str | None = None,
) -> int:
    """Compute the token budget for summarizing one file.

    Args:
        size: File size in bytes.
        path: File path; its extension selects the type multiplier.
        language: Target summary language.
        settings: Run-wide length settings.
        first_line: The file's first line, if already known. When omitted and
            the extension is not a shell extension, it is read from ``path``.

    Returns:
        Token budget, truncated to an integer.
    """
    if not settings.smart:
        return settings.fixed_budget

    file_path = Path(path)
    budget = (
        base_budget(size)
        * file_type_multiplier(file_path, first_line)
        * language_multiplier(language, settings)
    )
    # round away float noise first so that 75 * 1.2 yields 90, not 89
    return int(round(budget, 6))
