"""
Browser Format Support Table

Minimum browser versions able to decode each image format.
The data is regenerated from the browser compatibility database and
is read-only for the lifetime of the process.
"""

import re
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


# format -> browser -> first version with support
FORMAT_SUPPORT: Dict[str, Dict[str, float]] = {
    "webp": {
        "and_chr": 133,
        "and_ff": 135,
        "chrome": 9,
        "edge": 18,
        "edge_chromium": 79,
        "firefox": 65,
        "ios_saf": 14,
        "opera": 11.1,
        "safari": 14,
        "samsung": 4,
    },
    "avif": {
        "and_chr": 133,
        "and_ff": 135,
        "chrome": 85,
        "edge_chromium": 121,
        "firefox": 93,
        "ios_saf": 16,
        "opera": 71,
        "safari": 16.1,
        "samsung": 14,
    },
}

# Formats in order of preference for best_supported_format()
PREFERRED_FORMATS = ("avif", "webp")

BROWSER_ALIASES: Dict[str, str] = {
    "chrome": "chrome",
    "google chrome": "chrome",
    "chromium": "chrome",
    "firefox": "firefox",
    "safari": "safari",
    "edge": "edge",
    "edge_chromium": "edge_chromium",
    "edg": "edge_chromium",
    "ie": "ie",
    "msie": "ie",
    "internet explorer": "ie",
    "opera": "opera",
    "samsung": "samsung",
    "samsung internet": "samsung",
    "samsungbrowser": "samsung",
    "ios_saf": "ios_saf",
    "mobile safari": "ios_saf",
    "and_chr": "and_chr",
    "chrome mobile": "and_chr",
    "and_ff": "and_ff",
    "firefox mobile": "and_ff",
}

_LEADING_FLOAT = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)")


def normalize_browser_name(browser: str) -> str:
    """Map a browser name onto the keys used by FORMAT_SUPPORT."""
    name = browser.strip().lower()
    return BROWSER_ALIASES.get(name, name)


def _parse_version(version: str) -> Optional[float]:
    # "14.1.2" -> 14.1, like a leading-float parse
    match = _LEADING_FLOAT.match(version or "")
    if not match:
        return None
    return float(match.group(0))


def is_format_supported(image_format: str, browser: str, version: str) -> bool:
    """
    Check whether a browser version can decode an image format.

    Args:
        image_format: Format name ("webp", "avif")
        browser: Browser name, any case, aliases accepted
        version: Browser version string

    Returns:
        True if a minimum version is known and the given version reaches it.
        Unknown formats, unknown browsers and non-numeric versions are
        reported as unsupported.
    """
    version_number = _parse_version(version)
    if version_number is None:
        logger.debug(f"[FormatSupport] Non-numeric version: {version!r}")
        return False

    support = FORMAT_SUPPORT.get((image_format or "").lower())
    if not support:
        return False

    minimum = support.get(normalize_browser_name(browser or ""))
    if minimum is None:
        return False

    return version_number >= minimum


def best_supported_format(browser: str, version: str) -> Optional[str]:
    """Return the most efficient modern format the browser supports, if any."""
    for image_format in PREFERRED_FORMATS:
        if is_format_supported(image_format, browser, version):
            return image_format
    return None
