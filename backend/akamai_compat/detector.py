"""
Akamai Dialect Detector

Decides whether a URL carries Akamai Image Manager parameters, either in
the query string or as path segments (/im-resize=width:200/, /im(...)/).
"""

import re
import logging
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, unquote, urlsplit

from .registry import COMPOSITE_PARAMETER, DOT_PREFIX, LEGACY_NAMED_PARAMETERS

logger = logging.getLogger(__name__)

# /im-<name>=<value> or /im(<name>=<value>,...)
PATH_PARAMETER = re.compile(r"/im(?:-([\w.]+)=([^/]+)|\(([^)]+)\))")


def query_pairs(url: str) -> List[Tuple[str, str]]:
    """Query parameters of a URL in order, blank values kept."""
    return parse_qsl(urlsplit(url).query, keep_blank_values=True)


def _group_pairs(group: str) -> List[Tuple[str, str]]:
    """
    Split an im(...) group into im.<name> pairs.

    A token without '=' continues the previous value, so
    im(resize=width:800,height:600) keeps both resize arguments together.
    """
    pairs: List[List[str]] = []
    for token in group.replace('"', "").replace("'", "").split(","):
        token = token.strip()
        if not token:
            continue
        if "=" in token:
            name, value = (part.strip() for part in token.split("=", 1))
            if name and value:
                pairs.append([f"{DOT_PREFIX}{name}", value])
        elif pairs:
            pairs[-1][1] += f",{token}"
    return [(name, value) for name, value in pairs]


def path_pairs(url: str) -> List[Tuple[str, str]]:
    """Parameters written as path segments, as im.<name> pairs in path order."""
    pairs: List[Tuple[str, str]] = []
    for match in PATH_PARAMETER.finditer(urlsplit(url).path):
        name, value, group = match.groups()
        if group is None:
            pairs.append((f"{DOT_PREFIX}{name}", unquote(value)))
        else:
            pairs.extend(_group_pairs(unquote(group)))
    return pairs


def strip_path_parameters(path: str) -> str:
    """Remove /im-... and /im(...) segments from a URL path."""
    return PATH_PARAMETER.sub("", path)


def legacy_pairs(url: str) -> List[Tuple[str, str]]:
    """
    Path parameters followed by query parameters.

    Query parameters come last so they win over a path parameter of the
    same name.
    """
    return path_pairs(url) + query_pairs(url)


def is_akamai_format(url: str, logger: Optional[logging.Logger] = None) -> bool:
    """
    Check if a URL has Akamai-style parameters.

    Signals, first match wins: an `im` parameter, any `im.*` parameter
    (path segments included), any of the flat legacy names (imwidth,
    impolicy, ...).
    """
    log = logger or logging.getLogger(__name__)

    try:
        names = [name for name, _ in legacy_pairs(url)]
    except ValueError as e:
        log.debug(f"[AkamaiDetector] Unparsable URL {url!r}: {e}")
        return False

    if COMPOSITE_PARAMETER in names:
        log.debug("[AkamaiDetector] Detected im= parameter")
        return True

    for name in names:
        if name.startswith(DOT_PREFIX):
            log.debug(f"[AkamaiDetector] Detected dot parameter: {name}")
            return True

    for name in LEGACY_NAMED_PARAMETERS:
        if name in names:
            log.debug(f"[AkamaiDetector] Detected legacy parameter: {name}")
            return True

    return False
