"""File type configuration: interpreter tags, dotfiles and binary signatures."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 512
DEFAULT_PRINTABLE_RATIO_THRESHOLD = 0.7
DEFAULT_DETECTOR = "signature"
# Names registered in backends.BACKENDS
DETECTOR_NAMES = frozenset({"signature", "mimetypes"})

DEFAULT_EXTENSION_TO_INTERPRETER: dict[str, str] = {
    # Web development
    "tsx": "typescript-react",
    "jsx": "javascript-react",
    "ts": "typescript",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "vue": "vue",
    "svelte": "svelte",
    "html": "html",
    "htm": "html",
    "css": "css",
    "scss": "scss",
    "sass": "scss",
    "less": "less",
    # Programming languages
    "rs": "rust",
    "py": "python3",
    "rb": "ruby",
    "php": "php",
    "go": "go",
    "java": "java",
    "scala": "scala",
    "kt": "kotlin",
    "swift": "swift",
    "c": "c",
    "cpp": "cpp",
    "h": "c",
    "hpp": "cpp",
    "cs": "csharp",
    "fs": "fsharp",
    "pl": "perl",
    "pm": "perl",
    "r": "r",
    "lua": "lua",
    "sql": "sql",
    # Shell and script files
    "sh": "bash",
    "bash": "bash",
    "zsh": "zsh",
    "fish": "fish",
    "ksh": "ksh",
    "dash": "dash",
    "tcl": "tcl",
    "awk": "awk",
    "sed": "sed",
    # Configuration files
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "toml": "toml",
    "ini": "ini",
}

DEFAULT_KNOWN_DOTFILES: frozenset[str] = frozenset(
    {
        ".gitignore",
        ".env",
        ".npmrc",
        ".yarnrc",
        ".bashrc",
        ".zshrc",
        ".vimrc",
        ".editorconfig",
    }
)

DEFAULT_BINARY_SIGNATURES: dict[str, bytes] = {
    "elf": b"\x7fELF",
    "dos_mz": b"MZ",
    "macho_32": b"\xfe\xed\xfa\xce",
    "macho_64": b"\xfe\xed\xfa\xcf",
    "macho_universal": b"\xca\xfe\xba\xbe",
    "coff": b"\x7fCOF",
}


@dataclass(frozen=True)
class ClassificationConfig:
    """Read-only file type tables shared by every classification call.

    Attributes:
        extension_to_interpreter: Lowercase extension (no dot) to interpreter tag.
        known_dotfiles: Exact file names tagged as ``config``.
        binary_signatures: Signature name to the byte prefix that marks a binary.
        sample_size: Bytes read from the head of each file.
        printable_ratio_threshold: Minimum printable share for a text file.
        detector: Name of the detection backend to use.
    """

    extension_to_interpreter: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_EXTENSION_TO_INTERPRETER))
    )
    known_dotfiles: frozenset[str] = DEFAULT_KNOWN_DOTFILES
    binary_signatures: Mapping[str, bytes] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_BINARY_SIGNATURES))
    )
    sample_size: int = DEFAULT_SAMPLE_SIZE
    printable_ratio_threshold: float = DEFAULT_PRINTABLE_RATIO_THRESHOLD
    detector: str = DEFAULT_DETECTOR


def _parse_signatures(table: Mapping[str, Any]) -> dict[str, bytes]:
    signatures: dict[str, bytes] = {}
    for name, values in table.items():
        # bytes() rejects ints outside 0..255 with ValueError
        signatures[name] = bytes(values)
    return signatures


def parse_classification_config(data: Mapping[str, Any]) -> ClassificationConfig:
    """Build a ClassificationConfig from a decoded TOML document.

    Tables missing from the document keep their built-in defaults.

    Raises:
        TypeError, ValueError: If a table has the wrong shape.
    """
    defaults = ClassificationConfig()

    overrides = data.get("mime_overrides")
    extension_to_interpreter = (
        {str(ext).lower(): str(tag) for ext, tag in overrides.items()}
        if overrides is not None
        else dict(defaults.extension_to_interpreter)
    )

    dotfiles = data.get("known_dotfiles", {}).get("patterns")
    known_dotfiles = frozenset(dotfiles) if dotfiles is not None else defaults.known_dotfiles

    signatures_table = data.get("binary_signatures")
    binary_signatures = (
        _parse_signatures(signatures_table)
        if signatures_table is not None
        else dict(defaults.binary_signatures)
    )

    detection = data.get("text_detection", {})
    sample_size = int(detection.get("sample_size", defaults.sample_size))
    threshold = float(
        detection.get("printable_ratio_threshold", defaults.printable_ratio_threshold)
    )
    if sample_size <= 0:
        raise ValueError(f"sample_size must be positive, got {sample_size}")

    detector = str(detection.get("detector", defaults.detector))
    if detector not in DETECTOR_NAMES:
        logger.warning(
            "[parse_classification_config] unknown detector, using default; detector:%s;default:%s",
            detector,
            defaults.detector,
        )
        detector = defaults.detector

    return ClassificationConfig(
        extension_to_interpreter=MappingProxyType(extension_to_interpreter),
        known_dotfiles=known_dotfiles,
        binary_signatures=MappingProxyType(binary_signatures),
        sample_size=sample_size,
        printable_ratio_threshold=threshold,
        detector=detector,
    )


def load_classification_config(path: str | Path | None) -> ClassificationConfig:
    """Load the classification document, falling back to the built-in default.

    A missing, unreadable or malformed document is never fatal: a warning is
    logged and the compiled-in tables are used instead.

    Args:
        path: Location of the TOML document, or None for the default.

    Returns:
        ClassificationConfig instance.
    """
    if path is None:
        return ClassificationConfig()

    config_path = Path(path)
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        logger.info(
            "[load_classification_config] config not found, using defaults; path:%s",
            config_path,
        )
        return ClassificationConfig()
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning(
            "[load_classification_config] unreadable config, using defaults; path:%s;error:%s",
            config_path,
            exc,
        )
        return ClassificationConfig()

    try:
        config = parse_classification_config(data)
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning(
            "[load_classification_config] malformed config, using defaults; path:%s;error:%s",
            config_path,
            exc,
        )
        return ClassificationConfig()

    logger.debug(
        "[load_classification_config] loaded; path:%s;extensions:%d;signatures:%d",
        config_path,
        len(config.extension_to_interpreter),
        len(config.binary_signatures),
    )
    return config
