"""
Dimension Cache Module

Caches previously observed image dimensions so the backend's
metadata endpoint is not queried again for the same image.
"""

from .cache import DimensionCache, DimensionsRecord, dimension_cache
from .fetcher import DimensionFetcher
from .routes import router as dimensions_router, dimension_fetcher

__all__ = [
    "DimensionCache",
    "DimensionsRecord",
    "dimension_cache",
    "DimensionFetcher",
    "dimensions_router",
    "dimension_fetcher",
]
