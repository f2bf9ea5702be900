"""Unit tests for config.py — AppConfig, load_config() and require_api_key()."""

import os
from unittest.mock import patch

import pytest

from file_insight.config import AppConfig, load_config, require_api_key
from file_insight.errors import ConfigError, MissingCredentialError

# ---------------------------------------------------------------------------
# AppConfig tests
# ---------------------------------------------------------------------------


class TestAppConfig:
    def test_api_key_defaults_to_none(self) -> None:
        config = AppConfig()
        assert config.anthropic_api_key is None

    def test_anthropic_model_has_default(self) -> None:
        config = AppConfig()
        assert config.anthropic_model == "claude-haiku-4-5-20251001"

    def test_domain_defaults(self) -> None:
        config = AppConfig()
        assert config.cache_dir == ".cache"
        assert config.cache_hash_algorithm == "sha256"
        assert config.max_file_size == 1024 * 1024
        assert config.batch_content_bytes == 2000
        assert config.detector is None

    def test_is_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.cache_dir = "/tmp"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# load_config tests
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_works_with_empty_environment(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config()
        assert config == AppConfig()

    def test_reads_api_key_from_env(self) -> None:
        with patch.dict(os.environ, {"FI_ANTHROPIC_API_KEY": "sk-ant-test"}, clear=True):
            config = load_config()
        assert config.anthropic_api_key == "sk-ant-test"

    def test_empty_api_key_is_treated_as_missing(self) -> None:
        with patch.dict(os.environ, {"FI_ANTHROPIC_API_KEY": ""}, clear=True):
            config = load_config()
        assert config.anthropic_api_key is None

    def test_reads_overrides_from_env(self) -> None:
        env = {
            "FI_ANTHROPIC_MODEL": "claude-3-opus-20240229",
            "FI_CACHE_DIR": "/var/cache/fi",
            "FI_DETECTOR": "mimetypes",
            "FI_MAX_WORKERS": "8",
            "FI_ANTHROPIC_REQUEST_DELAY": "0.5",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config()
        assert config.anthropic_model == "claude-3-opus-20240229"
        assert config.cache_dir == "/var/cache/fi"
        assert config.detector == "mimetypes"
        assert config.max_workers == 8
        assert config.anthropic_request_delay == 0.5

    def test_raises_config_error_on_bad_integer(self) -> None:
        with (
            patch.dict(os.environ, {"FI_MAX_FILE_SIZE": "lots"}, clear=True),
            pytest.raises(ConfigError, match="FI_MAX_FILE_SIZE"),
        ):
            load_config()

    def test_raises_config_error_on_bad_float(self) -> None:
        with (
            patch.dict(os.environ, {"FI_ANTHROPIC_REQUEST_DELAY": "soon"}, clear=True),
            pytest.raises(ConfigError, match="FI_ANTHROPIC_REQUEST_DELAY"),
        ):
            load_config()


# ---------------------------------------------------------------------------
# require_api_key tests
# ---------------------------------------------------------------------------


class TestRequireApiKey:
    def test_returns_key_when_configured(self) -> None:
        assert require_api_key(AppConfig(anthropic_api_key="sk-test")) == "sk-test"

    def test_raises_when_missing(self) -> None:
        with pytest.raises(MissingCredentialError, match="FI_ANTHROPIC_API_KEY"):
            require_api_key(AppConfig())
