"""Interchangeable text/binary detection backends."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Protocol

from file_insight.classification.config import ClassificationConfig
from file_insight.classification.signals import (
    SHEBANG_PREFIX,
    file_extension,
    infer_interpreter,
    matching_signature,
    printable_ratio,
)
from file_insight.errors import ConfigError

logger = logging.getLogger(__name__)

# Non-"text/*" MIME subtypes that are still worth reading as text
_TEXT_LIKE_SUBTYPES = frozenset({"javascript", "json", "xml", "sql"})


class DetectionBackend(Protocol):
    """Decides whether a file is text and which interpreter it belongs to."""

    name: str

    def detect(self, path: Path, sample: bytes) -> tuple[bool, str | None]:
        """Return ``(is_text, interpreter)`` for ``path`` given its head bytes."""
        ...


class SignatureBackend:
    """Content-sniffing backend: signatures, printable ratio, then name hints."""

    name = "signature"

    def __init__(self, config: ClassificationConfig) -> None:
        self._config = config

    def detect(self, path: Path, sample: bytes) -> tuple[bool, str | None]:
        signature = matching_signature(sample, self._config)
        if signature is not None:
            logger.debug("[detect] binary signature; path:%s;signature:%s", path, signature)
            return False, None

        ratio = printable_ratio(sample)
        if sample and ratio < self._config.printable_ratio_threshold:
            logger.debug("[detect] low printable ratio; path:%s;ratio:%.2f", path, ratio)
            return False, None

        return True, infer_interpreter(path, sample, self._config)


class MimeTypesBackend:
    """Name-based backend using the standard MIME type registry.

    Files whose name maps to no MIME type are treated as binary unless they
    start with a shebang.
    """

    name = "mimetypes"

    def __init__(self, config: ClassificationConfig) -> None:
        self._config = config

    def _is_text_type(self, path: Path, sample: bytes) -> bool:
        if file_extension(path) == "sql":
            return True
        mime_type, _ = mimetypes.guess_type(path.name, strict=False)
        if mime_type is None:
            return sample.startswith(SHEBANG_PREFIX.encode())
        major, _, subtype = mime_type.partition("/")
        subtype = subtype.removeprefix("x-")
        return major == "text" or subtype in _TEXT_LIKE_SUBTYPES

    def detect(self, path: Path, sample: bytes) -> tuple[bool, str | None]:
        if not self._is_text_type(path, sample):
            return False, None
        return True, infer_interpreter(path, sample, self._config)


BACKENDS: dict[str, type[SignatureBackend] | type[MimeTypesBackend]] = {
    SignatureBackend.name: SignatureBackend,
    MimeTypesBackend.name: MimeTypesBackend,
}


def get_backend(name: str, config: ClassificationConfig) -> DetectionBackend:
    """Instantiate a detection backend by name.

    Raises:
        ConfigError: If no backend is registered under ``name``.
    """
    try:
        backend_cls = BACKENDS[name]
    except KeyError as exc:
        available = ", ".join(sorted(BACKENDS))
        raise ConfigError(f"Unknown detector {name!r}; available: {available}") from exc
    return backend_cls(config)
