"""File classifier: binary vs. text and interpreter inference."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from file_insight.classification.backends import DetectionBackend, get_backend
from file_insight.classification.config import ClassificationConfig
from file_insight.classification.models import FileRecord

if TYPE_CHECKING:
    from file_insight.config import AppConfig

logger = logging.getLogger(__name__)


class FileClassifier:
    """Classifies files using a configurable detection backend.

    The classifier itself only handles I/O: it stats the file, reads the
    configured sample from its head and hands both to the backend. Errors
    from either step propagate as ``OSError`` so callers can isolate them
    per file; a file that cannot be read is never reported as binary.
    """

    def __init__(
        self,
        config: ClassificationConfig,
        backend: DetectionBackend | None = None,
    ) -> None:
        """Initialise the classifier.

        Args:
            config: Classification tables shared by all calls.
            backend: Detection backend; defaults to the one named by ``config.detector``.
        """
        self._config = config
        self._backend = backend if backend is not None else get_backend(config.detector, config)

    @property
    def config(self) -> ClassificationConfig:
        return self._config

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def read_sample(self, path: Path) -> bytes:
        """Read up to ``sample_size`` bytes from the head of ``path``."""
        with path.open("rb") as fh:
            return fh.read(self._config.sample_size)

    def classify(self, path: str | Path) -> FileRecord:
        """Classify a single file.

        Args:
            path: File to classify.

        Returns:
            FileRecord with size, text flag and interpreter tag.

        Raises:
            OSError: If the file's metadata or content cannot be read.
        """
        file_path = Path(path)
        size = file_path.stat().st_size
        sample = self.read_sample(file_path)
        is_text, interpreter = self._backend.detect(file_path, sample)
        logger.debug(
            "[classify] classified; path:%s;size:%d;is_text:%s;interpreter:%s",
            file_path,
            size,
            is_text,
            interpreter,
        )
        return FileRecord(size=size, is_text=is_text, interpreter=interpreter)


def file_classifier_from_config(
    config: AppConfig,
    classification_config: ClassificationConfig,
) -> FileClassifier:
    """Construct a FileClassifier from application configuration.

    ``config.detector``, when set, overrides the backend named in the
    classification document.

    Raises:
        ConfigError: If the selected backend name is unknown.
    """
    detector = config.detector or classification_config.detector
    return FileClassifier(
        classification_config,
        backend=get_backend(detector, classification_config),
    )
