"""Content and name signals used to infer a file's type."""

from __future__ import annotations

from pathlib import Path

from file_insight.classification.config import ClassificationConfig

SHEBANG_PREFIX = "#!"
BIN_DIRECTORY_MARKERS = ("/bin/", "/usr/bin/", "/usr/local/bin/")
DOTFILE_INTERPRETER = "config"

# ASCII graphic characters plus the ASCII whitespace set (space, \t, \n, \f, \r)
_PRINTABLE_BYTES = frozenset(range(0x21, 0x7F)) | frozenset(b" \t\n\x0c\r")


def printable_ratio(sample: bytes) -> float:
    """Return the share of printable ASCII bytes in ``sample``.

    An empty sample has no defined ratio and counts as fully printable.
    """
    if not sample:
        return 1.0
    printable = sum(1 for byte in sample if byte in _PRINTABLE_BYTES)
    return printable / len(sample)


def matching_signature(sample: bytes, config: ClassificationConfig) -> str | None:
    """Return the name of the first binary signature that prefixes ``sample``."""
    for name, signature in config.binary_signatures.items():
        if len(sample) >= len(signature) and sample.startswith(signature):
            return name
    return None


def first_line(sample: bytes) -> str:
    """Decode the first line of a byte sample, replacing undecodable bytes."""
    return sample.split(b"\n", 1)[0].decode("utf-8", errors="replace")


def parse_shebang(line: str) -> str | None:
    """Extract the interpreter named by a shebang line.

    Examples:
        ``#!/usr/bin/env python3`` -> ``python3``
        ``#!/bin/bash`` -> ``bash``
        ``#!ruby`` -> ``ruby``

    Returns:
        Lowercased interpreter name, or None if ``line`` is not a shebang or
        names no interpreter.
    """
    if not line.startswith(SHEBANG_PREFIX):
        return None

    command = line[len(SHEBANG_PREFIX) :].strip().lower()
    tokens = command.split()
    if not tokens:
        return None

    if "/env" in command:
        # env indirection: the interpreter is the first non-option argument
        for token in tokens[1:]:
            if not token.startswith("-"):
                return token
        return None

    if any(marker in command for marker in BIN_DIRECTORY_MARKERS):
        return tokens[0].rsplit("/", 1)[-1] or None

    return tokens[0]


def file_extension(path: Path) -> str:
    """Return the lowercased extension of ``path`` without the dot."""
    return path.suffix[1:].lower()


def infer_interpreter(path: Path, sample: bytes, config: ClassificationConfig) -> str | None:
    """Infer an interpreter tag for a file already known to be text.

    Priority: shebang, known dotfile name, extension table. First match wins.
    """
    interpreter = parse_shebang(first_line(sample))
    if interpreter is not None:
        return interpreter

    if path.name in config.known_dotfiles:
        return DOTFILE_INTERPRETER

    return config.extension_to_interpreter.get(file_extension(path))
