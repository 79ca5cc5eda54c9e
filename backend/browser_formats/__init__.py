"""
Browser Format Support Module

Static lookup of the minimum browser versions that can decode
modern image encodings (WebP, AVIF).
"""

from .support import FORMAT_SUPPORT, is_format_supported, normalize_browser_name, best_supported_format
from .routes_fastapi import router as formats_router

__all__ = [
    "FORMAT_SUPPORT",
    "is_format_supported",
    "normalize_browser_name",
    "best_supported_format",
    "formats_router",
]
