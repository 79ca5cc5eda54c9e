"""
Dimension Fetcher

Resolves image dimensions through the resizing backend's
format=json metadata response, backed by the DimensionCache.

No retries: a failed lookup is reported as None and the next
request simply tries again.
"""

import os
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .cache import DimensionCache, DimensionsRecord, dimension_cache

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = float(os.getenv("DIMENSION_FETCH_TIMEOUT", "10"))


class DimensionFetcher:
    """
    Looks up image dimensions, caching successful results.

    Usage:
        fetcher = DimensionFetcher()
        record = await fetcher.get_dimensions("https://cdn.example.com/a.jpg")
    """

    def __init__(
        self,
        cache: Optional[DimensionCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.cache = cache or dimension_cache
        self.http_client = client or httpx.AsyncClient(
            timeout=FETCH_TIMEOUT,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self._logger = logger or logging.getLogger(__name__)

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def get_dimensions(self, url: str) -> Optional[DimensionsRecord]:
        """
        Get dimensions for an image URL.

        Returns:
            DimensionsRecord from cache or backend, None if unavailable.
        """
        cached = self.cache.get(url)
        if cached is not None:
            return cached

        metadata = await self._fetch_metadata(url)
        if metadata is None:
            return None

        dimensions = self._extract_dimensions(metadata)
        if dimensions is None:
            self._logger.warning(f"[DimensionFetcher] No dimensions in metadata for: {url[:60]}...")
            return None

        width, height, image_format = dimensions
        record = DimensionsRecord(width=width, height=height, format=image_format)
        if not self.cache.set(url, record):
            return None
        return self.cache.get(url)

    async def _fetch_metadata(self, url: str) -> Optional[Dict[str, Any]]:
        try:
            self._logger.info(f"[DimensionFetcher] Fetching metadata: {url[:80]}...")
            response = await self.http_client.get(url, params={"format": "json"})
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException:
            self._logger.error(f"[DimensionFetcher] Timeout: {url[:60]}...")
            return None
        except httpx.HTTPStatusError as e:
            self._logger.error(f"[DimensionFetcher] HTTP error {e.response.status_code}: {url[:60]}...")
            return None
        except (httpx.HTTPError, ValueError) as e:
            self._logger.error(f"[DimensionFetcher] Fetch error: {e}")
            return None

        if not isinstance(data, dict):
            self._logger.warning(f"[DimensionFetcher] Unexpected metadata payload for: {url[:60]}...")
            return None
        return data

    @staticmethod
    def _extract_dimensions(metadata: Dict[str, Any]) -> Optional[Tuple[int, int, Optional[str]]]:
        # The "original" block carries the source dimensions; top-level
        # width/height describe the transformed output.
        for source in (metadata.get("original"), metadata):
            if not isinstance(source, dict):
                continue
            width, height = source.get("width"), source.get("height")
            if isinstance(width, (int, float)) and isinstance(height, (int, float)) and width > 0 and height > 0:
                image_format = source.get("format") or metadata.get("format")
                return int(width), int(height), image_format
        return None
