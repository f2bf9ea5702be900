"""Exception hierarchy shared across file-insight components."""


class FileInsightError(Exception):
    """Base class for all file-insight errors."""


class ConfigError(FileInsightError):
    """Raised when configuration values are invalid and cannot be defaulted."""


class MissingCredentialError(FileInsightError):
    """Raised when a summarization feature is requested without an API key."""


class OracleError(FileInsightError):
    """Raised when the text-generation service fails or returns unusable data."""


class CacheCorruptionError(FileInsightError):
    """Raised when a persisted cache entry cannot be decoded."""
