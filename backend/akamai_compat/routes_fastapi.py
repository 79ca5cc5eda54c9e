"""
Akamai Compatibility API Routes

Provides endpoints for:
- Detecting Akamai Image Manager parameters in a URL
- Translating them to canonical transform options and a rewritten URL
"""

import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .config import load_config
from .rewriter import rewrite_url
from .translator import AkamaiTranslator

logger = logging.getLogger(__name__)

COMPAT_HEADER = "X-Akamai-Compatibility"

# ============================================
# Configuration
# ============================================

compat_config = load_config()
translator = AkamaiTranslator(compat_config)

router = APIRouter(prefix="/api/akamai", tags=["Akamai Compatibility"])


# ============================================
# Response Models
# ============================================

class DetectResponse(BaseModel):
    """Response model for detect endpoint"""
    success: bool
    url: str
    detected: bool


class TranslateResponse(BaseModel):
    """Response model for translate endpoint"""
    success: bool
    detected: bool
    options: Dict[str, Any] = {}
    translated_url: str
    error: Optional[str] = None


# ============================================
# Helpers
# ============================================

def merge_headers(response: Response, headers: Mapping[str, str]) -> Response:
    """Return the response with extra headers set; existing values are replaced."""
    for name, value in headers.items():
        response.headers[name] = value
    return response


def with_compat_header(response: Response, detected: bool) -> Response:
    if not detected:
        return response
    return merge_headers(response, {COMPAT_HEADER: "Enabled"})


# ============================================
# API Endpoints
# ============================================

@router.get("/detect", response_model=DetectResponse)
async def detect(url: str = Query(..., description="Image URL to inspect")):
    """
    Check whether a URL uses Akamai-style parameters.
    """
    detected = compat_config.enable_compatibility and translator.is_akamai_format(url)
    return DetectResponse(success=True, url=url, detected=detected)


@router.get("/translate", response_model=TranslateResponse)
async def translate(url: str = Query(..., description="Image URL to translate")):
    """
    Translate Akamai-style parameters to canonical options.

    Translation never fails the request: errors are reported in
    `error` and the original URL is returned.

    Example:
        GET /api/akamai/translate?url=https://cdn.example.com/a.jpg?imwidth=400
    """
    if not compat_config.enable_compatibility:
        body = TranslateResponse(success=True, detected=False, translated_url=url)
        return JSONResponse(content=body.model_dump())

    result = translator.translate_detailed(url)
    translated_url = url
    if result.detected and result.ok:
        translated_url = rewrite_url(url, result.options)
    else:
        logger.debug(f"[AkamaiRoutes] Passing URL through untouched: {url[:80]}")

    body = TranslateResponse(
        success=result.ok,
        detected=result.detected,
        options=result.options,
        translated_url=translated_url,
        error=result.error,
    )
    response = JSONResponse(content=body.model_dump())
    return with_compat_header(response, result.detected and result.ok)
