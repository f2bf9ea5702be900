"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from file_insight.errors import ConfigError, MissingCredentialError

API_KEY_ENV = "FI_ANTHROPIC_API_KEY"


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Every field has a default so that classification, ignore matching and
    cache inspection work without any environment. The API key is only
    checked when a summarization feature is requested (see require_api_key).
    """

    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-haiku-4-5-20251001"
    anthropic_max_retries: int = 3
    anthropic_request_delay: float = 0.0

    cache_dir: str = ".cache"
    cache_hash_algorithm: str = "sha256"

    classification_config_path: str = "config/filetypes.toml"
    # None lets the classification document choose the backend
    detector: str | None = None
    ignore_file: str = ".gitignore"

    max_file_size: int = 1024 * 1024
    max_file_content_bytes: int = 8192
    batch_content_bytes: int = 2000
    max_workers: int = 4


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Optional environment variables (with defaults):
        FI_ANTHROPIC_API_KEY: Anthropic API key, needed only for summaries.
        FI_ANTHROPIC_MODEL: Anthropic model identifier.
        FI_ANTHROPIC_MAX_RETRIES: SDK built-in retry count (default: 3).
        FI_ANTHROPIC_REQUEST_DELAY: Seconds to sleep before each API call (default: 0).
        FI_CACHE_DIR: Directory holding one JSON document per summary (default: .cache).
        FI_CACHE_HASH_ALGORITHM: hashlib algorithm for cache keys (default: sha256).
        FI_CLASSIFICATION_CONFIG: Path to the file type TOML document.
        FI_DETECTOR: Classification backend name, overrides the document.
        FI_IGNORE_FILE: Project ignore file (default: .gitignore).
        FI_MAX_FILE_SIZE: Files larger than this are not summarized (default: 1 MiB).
        FI_MAX_FILE_CONTENT_BYTES: Max bytes of content per prompt (default: 8192).
        FI_BATCH_CONTENT_BYTES: Max bytes kept per file in batch mode (default: 2000).
        FI_MAX_WORKERS: Concurrent single-file summaries (default: 4).

    Returns:
        Configured AppConfig instance.

    Raises:
        ConfigError: If a numeric variable cannot be parsed.
    """
    defaults = AppConfig()
    return AppConfig(
        anthropic_api_key=os.environ.get(API_KEY_ENV) or None,
        anthropic_model=os.environ.get("FI_ANTHROPIC_MODEL", defaults.anthropic_model),
        anthropic_max_retries=_int_env("FI_ANTHROPIC_MAX_RETRIES", defaults.anthropic_max_retries),
        anthropic_request_delay=_float_env(
            "FI_ANTHROPIC_REQUEST_DELAY", defaults.anthropic_request_delay
        ),
        cache_dir=os.environ.get("FI_CACHE_DIR", defaults.cache_dir),
        cache_hash_algorithm=os.environ.get(
            "FI_CACHE_HASH_ALGORITHM", defaults.cache_hash_algorithm
        ),
        classification_config_path=os.environ.get(
            "FI_CLASSIFICATION_CONFIG", defaults.classification_config_path
        ),
        detector=os.environ.get("FI_DETECTOR") or None,
        ignore_file=os.environ.get("FI_IGNORE_FILE", defaults.ignore_file),
        max_file_size=_int_env("FI_MAX_FILE_SIZE", defaults.max_file_size),
        max_file_content_bytes=_int_env(
            "FI_MAX_FILE_CONTENT_BYTES", defaults.max_file_content_bytes
        ),
        batch_content_bytes=_int_env("FI_BATCH_CONTENT_BYTES", defaults.batch_content_bytes),
        max_workers=_int_env("FI_MAX_WORKERS", defaults.max_workers),
    )


def require_api_key(config: AppConfig) -> str:
    """Return the configured API key or fail the run.

    Raises:
        MissingCredentialError: If no key is configured.
    """
    if not config.anthropic_api_key:
        raise MissingCredentialError(
            f"{API_KEY_ENV} environment variable is not set; it is required for summaries"
        )
    return config.anthropic_api_key
