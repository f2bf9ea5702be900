"""Per-file summary cache backed by one JSON document per content hash."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

from file_insight.description.models import CacheEntry
from file_insight.errors import CacheCorruptionError, ConfigError

if TYPE_CHECKING:
    from file_insight.config import AppConfig

logger = logging.getLogger(__name__)

# Named constants for cache configuration defaults
DEFAULT_CACHE_DIR = ".cache"
DEFAULT_HASH_ALGORITHM = "sha256"
CACHE_FILE_SUFFIX = ".json"


def content_hash(
    content: bytes,
    query: str | None,
    length_label: str,
    language: str,
    algorithm: str = DEFAULT_HASH_ALGORITHM,
) -> str:
    """Compute the cache fingerprint of a summary request.

    Each field is length-prefixed before hashing so that moving bytes from
    one field to the next always changes the digest. A missing query hashes
    the same as an empty one.

    Args:
        content: Raw file content bytes.
        query: Custom query text, or None for a plain summary.
        length_label: Summary length label of the request.
        language: Target language of the request.
        algorithm: Any ``hashlib`` algorithm name.

    Returns:
        Lowercase hex digest.
    """
    hasher = hashlib.new(algorithm)
    for part in (content, (query or "").encode(), length_label.encode(), language.encode()):
        hasher.update(len(part).to_bytes(8, "big"))
        hasher.update(part)
    return hasher.hexdigest()


def decode_entry(raw: str) -> CacheEntry:
    """Decode a persisted cache document.

    Raises:
        CacheCorruptionError: If the document is not valid JSON or lacks fields.
    """
    try:
        data: dict[str, Any] = json.loads(raw)
        return CacheEntry(
            content_hash=str(data["content_hash"]),
            summary=str(data["summary"]),
            created_at=int(data["timestamp"]),
            language=str(data["language"]),
            length_label=str(data["length_label"]),
        )
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise CacheCorruptionError(f"Malformed cache entry: {exc}") from exc


def encode_entry(entry: CacheEntry) -> str:
    return json.dumps(
        {
            "content_hash": entry.content_hash,
            "summary": entry.summary,
            "timestamp": entry.created_at,
            "language": entry.language,
            "length_label": entry.length_label,
        },
        indent=2,
        ensure_ascii=False,
    )


class SummaryCache:
    """Per-file summary cache stored as JSON documents on the local filesystem.

    Each entry lives in ``<cache_dir>/<content_hash>.json``. An entry is only
    served when it was produced for the caller's language and length label.
    There is no eviction; entries accumulate until removed by hand.
    """

    def __init__(
        self,
        cache_dir: str | Path = DEFAULT_CACHE_DIR,
        force_refresh: bool = False,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> None:
        """Initialise the summary cache.

        Args:
            cache_dir: Directory holding the cache documents; created on first write.
            force_refresh: When True every lookup misses, writes still happen.
            hash_algorithm: ``hashlib`` algorithm used by content_hash.

        Raises:
            ConfigError: If ``hash_algorithm`` is not available in hashlib.
        """
        # shake digests need an explicit length, so they cannot be used here
        if hash_algorithm not in hashlib.algorithms_available or hash_algorithm.startswith(
            "shake"
        ):
            raise ConfigError(f"Unsupported cache hash algorithm {hash_algorithm!r}")
        self._cache_dir = Path(cache_dir)
        self._force_refresh = force_refresh
        self._hash_algorithm = hash_algorithm

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @property
    def force_refresh(self) -> bool:
        return self._force_refresh

    def content_hash(
        self,
        content: bytes,
        query: str | None,
        length_label: str,
        language: str,
    ) -> str:
        """Compute a fingerprint with this cache's hash algorithm."""
        return content_hash(content, query, length_label, language, self._hash_algorithm)

    def entry_path(self, content_hash: str) -> Path:
        return self._cache_dir / f"{content_hash}{CACHE_FILE_SUFFIX}"

    def load(self, content_hash: str) -> CacheEntry | None:
        """Load the raw entry for a hash regardless of request settings.

        Returns:
            The stored CacheEntry, or None if absent, unreadable or malformed.
        """
        path = self.entry_path(content_hash)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "[summary_cache] unreadable entry; hash:%s;error:%s", content_hash, exc
            )
            return None

        try:
            return decode_entry(raw)
        except CacheCorruptionError as exc:
            logger.warning("[summary_cache] corrupt entry; hash:%s;error:%s", content_hash, exc)
            return None

    def get(self, content_hash: str, language: str, length_label: str) -> str | None:
        """Retrieve a cached summary by content hash.

        Args:
            content_hash: Fingerprint from content_hash().
            language: Caller's current summary language.
            length_label: Caller's current summary length label.

        Returns:
            Cached summary string, or None on a miss.
        """
        if self._force_refresh:
            logger.debug("[summary_cache] refresh forced; hash:%s", content_hash)
            return None

        entry = self.load(content_hash)
        if entry is None:
            logger.info("[summary_cache] cache miss; hash:%s", content_hash)
            return None

        if entry.language != language or entry.length_label != length_label:
            logger.info(
                "[summary_cache] settings mismatch; hash:%s;language:%s;length_label:%s",
                content_hash,
                entry.language,
                entry.length_label,
            )
            return None

        logger.info("[summary_cache] cache hit; hash:%s", content_hash)
        return entry.summary

    def put(self, content_hash: str, summary: str, language: str, length_label: str) -> None:
        """Store a summary in the cache, replacing any existing entry.

        The document is written to a temporary file and renamed over the
        target, so readers never observe a partial entry.

        Args:
            content_hash: Fingerprint from content_hash().
            summary: Summary text to cache.
            language: Language the summary was produced in.
            length_label: Length label the summary was produced for.
        """
        entry = CacheEntry(
            content_hash=content_hash,
            summary=summary,
            created_at=int(time.time()),
            language=language,
            length_label=length_label,
        )
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{content_hash}.", suffix=".tmp", dir=self._cache_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(encode_entry(entry))
            os.replace(tmp_name, self.entry_path(content_hash))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("[summary_cache] stored; hash:%s", content_hash)


def summary_cache_from_config(config: AppConfig, force_refresh: bool = False) -> SummaryCache:
    """Construct a SummaryCache from application configuration.

    Args:
        config: Application configuration instance.
        force_refresh: Whether lookups should always miss.

    Returns:
        Configured SummaryCache instance.
    """
    return SummaryCache(
        cache_dir=config.cache_dir,
        force_refresh=force_refresh,
        hash_algorithm=config.cache_hash_algorithm,
    )
