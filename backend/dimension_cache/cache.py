"""
Dimension Cache Implementation

Thread-safe in-memory store for previously resolved image dimensions,
used to avoid repeated metadata lookups against the resizing backend.

Features:
- Thread-safe operations with Lock
- TTL-based expiration, checked lazily on read
- Oldest-inserted eviction when max entries reached
- Keys normalized to the URL path
"""

import os
import time
import logging
from dataclasses import dataclass, replace
from threading import Lock
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DimensionsRecord:
    """
    Cached dimensions of an image.

    aspect_ratio is recomputed from width/height whenever the record is
    written to the cache.
    """
    width: int
    height: int
    aspect_ratio: float = 0.0
    format: Optional[str] = None
    last_fetched: Optional[float] = None  # Unix timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
            "format": self.format,
            "last_fetched": self.last_fetched,
        }


class DimensionCache:
    """
    Bounded map from normalized image path to DimensionsRecord.

    Eviction follows insertion order, not access recency: a record that is
    read often but never rewritten is evicted as early as one never read.
    """

    def __init__(
        self,
        max_size: int = 100,
        ttl: float = 86400.0,
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize dimension cache

        Args:
            max_size: Maximum number of entries to keep
            ttl: Time-to-live of an entry in seconds (24h)
            clock: Source of the current Unix time
            logger: Logger to use instead of the module logger
        """
        self._store: Dict[str, DimensionsRecord] = {}
        self._lock = Lock()
        self._max_size = max_size
        self._ttl = ttl
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)

        self._logger.debug(f"[DimensionCache] Initialized (max_size={max_size}, ttl={ttl}s)")

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> Optional[DimensionsRecord]:
        """
        Get cached dimensions

        Returns:
            DimensionsRecord if found and not expired, None otherwise
        """
        normalized = self.normalize_key(key)

        with self._lock:
            record = self._store.get(normalized)
            if record is None:
                self._logger.debug(f"[DimensionCache] Miss: {normalized}")
                return None

            age = self._clock() - record.last_fetched
            if age > self._ttl:
                del self._store[normalized]
                self._logger.debug(f"[DimensionCache] Expired: {normalized} (age {round(age)}s)")
                return None

            self._logger.debug(
                f"[DimensionCache] Hit: {normalized} "
                f"({record.width}x{record.height}, ratio {record.aspect_ratio:.3f})"
            )
            return record

    def set(self, key: str, record: DimensionsRecord) -> bool:
        """
        Store dimensions for an image

        Args:
            key: Image URL or path
            record: Dimensions to store; last_fetched defaults to now

        Returns:
            True if stored, False if the record has invalid dimensions
        """
        if record.width <= 0 or record.height <= 0:
            self._logger.warning(
                f"[DimensionCache] Rejected invalid dimensions {record.width}x{record.height} for {key}"
            )
            return False

        normalized = self.normalize_key(key)
        stored = replace(
            record,
            aspect_ratio=record.width / record.height,
            last_fetched=record.last_fetched or self._clock(),
        )

        with self._lock:
            # Rewriting a key moves it to the back of the insertion order
            self._store.pop(normalized, None)

            if len(self._store) >= self._max_size:
                oldest = next(iter(self._store))
                del self._store[oldest]
                self._logger.debug(f"[DimensionCache] Evicted oldest entry: {oldest}")

            self._store[normalized] = stored

        self._logger.debug(
            f"[DimensionCache] Set: {normalized} "
            f"({stored.width}x{stored.height}, ratio {stored.aspect_ratio:.3f})"
        )
        return True

    def clear(self) -> int:
        """
        Clear all entries

        Returns:
            Number of entries removed
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
        self._logger.debug(f"[DimensionCache] Cleared {count} entries")
        return count

    def size(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            return {
                "total_entries": len(self._store),
                "max_size": self._max_size,
                "ttl_seconds": self._ttl,
            }

    @staticmethod
    def normalize_key(key: str) -> str:
        """
        Reduce a key to a canonical path.

        Absolute URLs keep only their path so the same image reached through
        different hosts or query strings shares one entry.
        """
        normalized = key
        if key.startswith("http"):
            try:
                normalized = urlparse(key).path
            except ValueError:
                normalized = key

        while normalized.startswith("//"):
            normalized = normalized[1:]

        if not normalized.startswith("/") and not normalized.startswith("http"):
            normalized = "/" + normalized

        return normalized


# Global singleton instance
dimension_cache = DimensionCache(
    max_size=int(os.getenv("DIMENSION_CACHE_MAX_SIZE", "100")),
    ttl=float(os.getenv("DIMENSION_CACHE_TTL_SECONDS", "86400")),
)
