"""Unit tests for classification/classifier.py — FileClassifier behaviour."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from file_insight.classification.backends import MimeTypesBackend, SignatureBackend
from file_insight.classification.classifier import FileClassifier, file_classifier_from_config
from file_insight.classification.config import ClassificationConfig
from file_insight.classification.models import FileRecord
from file_insight.config import AppConfig
from file_insight.errors import ConfigError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write(tmp_path: Path, name: str, content: bytes) -> Path:
    path = tmp_path / name
    path.write_bytes(content)
    return path


@pytest.fixture
def classifier() -> FileClassifier:
    return FileClassifier(ClassificationConfig())


# ---------------------------------------------------------------------------
# Binary detection
# ---------------------------------------------------------------------------


class TestBinaryDetection:
    def test_elf_signature_is_binary(self, classifier: FileClassifier, tmp_path: Path) -> None:
        path = _write(tmp_path, "prog", bytes([0x7F, 0x45, 0x4C, 0x46, 0x01, 0x01, 0x01, 0x00]))
        record = classifier.classify(path)
        assert record == FileRecord(size=8, is_text=False, interpreter=None)

    def test_signature_wins_over_printable_content(
        self, classifier: FileClassifier, tmp_path: Path
    ) -> None:
        path = _write(tmp_path, "setup.py", b"MZ this looks like perfectly normal text")
        record = classifier.classify(path)
        assert record.is_text is False
        assert record.interpreter is None

    def test_mostly_unprintable_content_is_binary(
        self, classifier: FileClassifier, tmp_path: Path
    ) -> None:
        content = bytearray(b"Hello World!\n")
        content.extend(i % 256 for i in range(len(content), 512))
        path = _write(tmp_path, "blob", bytes(content))
        assert classifier.classify(path).is_text is False

    def test_file_shorter_than_signature_is_not_matched(
        self, classifier: FileClassifier, tmp_path: Path
    ) -> None:
        path = _write(tmp_path, "m.txt", b"M")
        assert classifier.classify(path).is_text is True

    def test_custom_threshold(self, tmp_path: Path) -> None:
        strict = FileClassifier(ClassificationConfig(printable_ratio_threshold=1.0))
        path = _write(tmp_path, "a.txt", b"caf\xc3\xa9")
        assert strict.classify(path).is_text is False

    def test_only_sample_is_inspected(self, tmp_path: Path) -> None:
        small_sample = FileClassifier(ClassificationConfig(sample_size=4))
        path = _write(tmp_path, "a.txt", b"text" + b"\x00" * 100)
        record = small_sample.classify(path)
        assert record.is_text is True
        assert record.size == 104


# ---------------------------------------------------------------------------
# Text and interpreter detection
# ---------------------------------------------------------------------------


class TestInterpreterDetection:
    def test_typescript_react(self, classifier: FileClassifier, tmp_path: Path) -> None:
        content = b"import React from 'react';\nexport const App = () => <div>Hello</div>;"
        record = classifier.classify(_write(tmp_path, "app.tsx", content))
        assert record.is_text is True
        assert record.interpreter == "typescript-react"

    def test_bash_shebang(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(_write(tmp_path, "run", b"#!/bin/bash\necho 'Hello'"))
        assert record.is_text is True
        assert record.interpreter == "bash"

    def test_env_shebang(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(
            _write(tmp_path, "tool", b"#!/usr/bin/env python3\nprint('Hello')")
        )
        assert record.interpreter == "python3"

    def test_extensionless_node_script(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(
            _write(tmp_path, "serve", b"#!/usr/bin/env node\nconsole.log('Hello');")
        )
        assert record.interpreter == "node"

    def test_bare_shebang(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(_write(tmp_path, "task", b"#!ruby\nputs 1"))
        assert record.interpreter == "ruby"

    def test_gitignore_dotfile(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(_write(tmp_path, ".gitignore", b'ignore_pattern = "*.log"'))
        assert record.is_text is True
        assert record.interpreter == "config"

    @pytest.mark.parametrize(
        ("content", "name", "expected"),
        [
            (b"fn main() {}", "main.rs", "rust"),
            (b"def hello(): pass", "hello.py", "python3"),
            (b"package main", "main.go", "go"),
            (b"public class Test {}", "Test.java", "java"),
            (b"console.log('test');", "index.js", "javascript"),
            (b'{"key": "value"}', "data.json", "json"),
            (b"key: value", "conf.yaml", "yaml"),
            (b'key = "value"', "conf.toml", "toml"),
            (b"[section]\nkey=value", "conf.ini", "ini"),
            (b"<html><body></body></html>", "index.html", "html"),
            (b".class { color: red; }", "site.css", "css"),
            (b"$color: red;", "site.scss", "scss"),
            (b"<template><div></div></template>", "App.vue", "vue"),
            (b"SELECT 1;", "query.SQL", "sql"),
        ],
    )
    def test_extension_mapping(
        self,
        classifier: FileClassifier,
        tmp_path: Path,
        content: bytes,
        name: str,
        expected: str,
    ) -> None:
        record = classifier.classify(_write(tmp_path, name, content))
        assert record.is_text is True
        assert record.interpreter == expected

    def test_unknown_extension_is_untagged_text(
        self, classifier: FileClassifier, tmp_path: Path
    ) -> None:
        record = classifier.classify(_write(tmp_path, "notes.xyz", b"plain words"))
        assert record == FileRecord(size=11, is_text=True, interpreter=None)

    def test_empty_file_is_text(self, classifier: FileClassifier, tmp_path: Path) -> None:
        record = classifier.classify(_write(tmp_path, "empty", b""))
        assert record.is_text is True
        assert record.size == 0


# ---------------------------------------------------------------------------
# Failures and backend selection
# ---------------------------------------------------------------------------


class TestFailures:
    def test_missing_file_raises_os_error(
        self, classifier: FileClassifier, tmp_path: Path
    ) -> None:
        with pytest.raises(OSError):
            classifier.classify(tmp_path / "missing.txt")

    def test_directory_raises_os_error(self, classifier: FileClassifier, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            classifier.classify(tmp_path)


class TestBackendSelection:
    def test_defaults_to_signature_backend(self, classifier: FileClassifier) -> None:
        assert classifier.backend_name == "signature"

    def test_uses_injected_backend(self, tmp_path: Path) -> None:
        backend = MagicMock()
        backend.detect.return_value = (False, None)
        classifier = FileClassifier(ClassificationConfig(), backend=backend)
        path = _write(tmp_path, "a.txt", b"hello")

        record = classifier.classify(path)

        backend.detect.assert_called_once_with(path, b"hello")
        assert record.is_text is False

    def test_app_config_detector_overrides_document(self) -> None:
        classifier = file_classifier_from_config(
            AppConfig(detector="mimetypes"), ClassificationConfig(detector="signature")
        )
        assert classifier.backend_name == MimeTypesBackend.name

    def test_document_detector_used_when_not_overridden(self) -> None:
        classifier = file_classifier_from_config(AppConfig(), ClassificationConfig())
        assert classifier.backend_name == SignatureBackend.name

    def test_unknown_detector_raises_config_error(self) -> None:
        with pytest.raises(ConfigError, match="libmagic"):
            file_classifier_from_config(AppConfig(detector="libmagic"), ClassificationConfig())
