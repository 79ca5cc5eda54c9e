"""
Browser Format Support API Routes

Provides endpoints for:
- Checking whether a browser version supports an image format
"""

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from .support import is_format_supported, best_supported_format, normalize_browser_name

router = APIRouter(prefix="/api/formats", tags=["Browser Formats"])


class FormatSupportResponse(BaseModel):
    """Response model for the support endpoint"""
    format: str
    browser: str
    version: str
    supported: bool
    best_format: Optional[str] = None


@router.get("/support", response_model=FormatSupportResponse)
async def check_format_support(
    format: str = Query(..., description="Image format (webp, avif)"),
    browser: str = Query(..., description="Browser name"),
    version: str = Query(..., description="Browser version"),
):
    """
    Check format support for a browser.

    Example:
        GET /api/formats/support?format=webp&browser=safari&version=14
    """
    return FormatSupportResponse(
        format=format.lower(),
        browser=normalize_browser_name(browser),
        version=version,
        supported=is_format_supported(format, browser, version),
        best_format=best_supported_format(browser, version),
    )
