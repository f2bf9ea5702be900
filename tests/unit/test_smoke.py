"""Smoke tests — validate the command line works end-to-end."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from file_insight.cli import app
from file_insight.description.describer import AnthropicDescriber

runner = CliRunner()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A two-file project, with the working directory and environment isolated."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "FI_ANTHROPIC_API_KEY",
        "FI_MAX_WORKERS",
        "FI_CACHE_DIR",
        "FI_CLASSIFICATION_CONFIG",
        "FI_DETECTOR",
    ):
        monkeypatch.delenv(name, raising=False)
    root = tmp_path / "proj"
    root.mkdir()
    (root / "hello.py").write_text("print('hello')\n")
    (root / "notes.txt").write_text("remember the milk\n")
    return root


def _mock_describer() -> MagicMock:
    describer = MagicMock(spec=AnthropicDescriber)
    describer.summarize_file.return_value = "Says hello."
    return describer


def test_listing_without_summaries(project: Path) -> None:
    """Plain exploration prints the tree and totals without any credential."""
    result = runner.invoke(app, [str(project)])

    assert result.exit_code == 0
    assert f"Exploring: {project}" in result.output
    assert "  hello.py (15 B)" in result.output
    assert "Total directories: 1\nTotal files: 2" in result.output


def test_summaries_require_api_key(project: Path) -> None:
    """Asking for summaries without a credential fails before any work."""
    result = runner.invoke(app, [str(project), "--ai"])

    assert result.exit_code == 1
    assert "FI_ANTHROPIC_API_KEY" in result.output


def test_invalid_numeric_setting_fails(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FI_MAX_WORKERS", "many")

    result = runner.invoke(app, [str(project)])

    assert result.exit_code == 1
    assert "FI_MAX_WORKERS" in result.output


def test_unknown_detector_in_document_falls_back(
    project: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A bad detector name in the classification document is not fatal."""
    document = tmp_path / "filetypes.toml"
    document.write_text("[text_detection]\ndetector = \"libmagic\"\n")
    monkeypatch.setenv("FI_CLASSIFICATION_CONFIG", str(document))

    result = runner.invoke(app, [str(project)])

    assert result.exit_code == 0
    assert "Total files: 2" in result.output


def test_unknown_detector_setting_fails(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FI_DETECTOR", "libmagic")

    result = runner.invoke(app, [str(project)])

    assert result.exit_code == 1
    assert "Unknown detector 'libmagic'" in result.output


def test_per_file_summaries(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """--ai summarizes every text file and caches the results."""
    monkeypatch.setenv("FI_ANTHROPIC_API_KEY", "sk-test")
    describer = _mock_describer()

    with patch("file_insight.cli.anthropic_describer_from_config", return_value=describer):
        result = runner.invoke(app, [str(project), "--ai", "--summary-length", "short"])

    assert result.exit_code == 0
    assert result.output.count("Summary: Says hello.") == 2
    assert describer.summarize_file.call_args.kwargs["max_tokens"] == 50
    assert len(list(Path(".cache").glob("*.json"))) == 2


def test_whole_project_summaries(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """--ai-whole '' produces one combined request with per-file summaries."""
    monkeypatch.setenv("FI_ANTHROPIC_API_KEY", "sk-test")
    describer = _mock_describer()
    describer.complete.return_value = (
        f"{project / 'hello.py'}: Prints a greeting.\n{project / 'notes.txt'}: A reminder."
    )

    with patch("file_insight.cli.anthropic_describer_from_config", return_value=describer):
        result = runner.invoke(app, [str(project), "--ai-whole", ""])

    assert result.exit_code == 0
    describer.complete.assert_called_once()
    describer.summarize_file.assert_not_called()
    assert "File Summaries:" in result.output
    assert "   Prints a greeting." in result.output


def test_whole_project_query(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FI_ANTHROPIC_API_KEY", "sk-test")
    describer = _mock_describer()
    describer.complete.return_value = "It greets and reminds."

    with patch("file_insight.cli.anthropic_describer_from_config", return_value=describer):
        result = runner.invoke(app, [str(project), "--ai-whole", "What is this?"])

    assert result.exit_code == 0
    assert "It greets and reminds." in result.output
    assert describer.complete.call_args.args[0].startswith("What is this?")


def test_ignore_option_skips_files(project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FI_ANTHROPIC_API_KEY", "sk-test")
    describer = _mock_describer()

    with patch("file_insight.cli.anthropic_describer_from_config", return_value=describer):
        result = runner.invoke(app, [str(project), "--ai", "--ignore", "*.txt"])

    assert result.exit_code == 0
    assert describer.summarize_file.call_count == 1
    assert describer.summarize_file.call_args.args[0].endswith("hello.py")
