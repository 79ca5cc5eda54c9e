"""
Dimension Cache API Routes

Provides HTTP endpoints for cache operations:
- GET  /api/dimensions?key=...  - Get cached dimensions
- GET  /api/dimensions/stats    - Get cache statistics
- GET  /api/dimensions/fetch?url=  - Resolve dimensions (cache, then backend)
- POST /api/dimensions/clear    - Clear all entries
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from .cache import dimension_cache
from .fetcher import DimensionFetcher

router = APIRouter(prefix="/api/dimensions", tags=["dimensions"])

# Shared fetcher, closed on application shutdown
dimension_fetcher = DimensionFetcher(dimension_cache)


# ============================================
# Response Models
# ============================================

class DimensionsResponse(BaseModel):
    """Response model for get endpoint"""
    success: bool
    key: str
    width: int
    height: int
    aspect_ratio: float
    format: Optional[str] = None
    last_fetched: float


class DimensionStatsResponse(BaseModel):
    """Response model for stats endpoint"""
    total_entries: int
    max_size: int
    ttl_seconds: float


# ============================================
# API Endpoints
# ============================================

@router.get("", response_model=DimensionsResponse)
async def get_dimensions(key: str = Query(..., description="Image URL or path")):
    """
    Get cached dimensions for an image
    """
    record = dimension_cache.get(key)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail=f"No cached dimensions for '{key}'"
        )
    return DimensionsResponse(
        success=True,
        key=dimension_cache.normalize_key(key),
        **record.to_dict(),
    )


@router.get("/stats", response_model=DimensionStatsResponse)
async def get_dimension_stats():
    """
    Get cache statistics
    """
    return DimensionStatsResponse(**dimension_cache.stats())


@router.post("/clear")
async def clear_dimensions():
    """
    Clear all cached dimensions
    """
    count = dimension_cache.clear()
    return {
        "success": True,
        "message": f"Cleared {count} cache entries",
        "deleted_count": count,
    }


@router.get("/fetch", response_model=DimensionsResponse)
async def fetch_dimensions(url: str = Query(..., description="Image URL on the resizing backend")):
    """
    Resolve dimensions for an image, asking the backend on a cache miss
    """
    record = await dimension_fetcher.get_dimensions(url)
    if record is None:
        raise HTTPException(
            status_code=502,
            detail=f"Could not resolve dimensions for '{url}'"
        )
    return DimensionsResponse(
        success=True,
        key=dimension_cache.normalize_key(url),
        **record.to_dict(),
    )
