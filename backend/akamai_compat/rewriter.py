"""
URL Rewriter

Replaces Akamai parameters in a URL with canonical ones.
"""

import json
from typing import Any, List, Tuple
from urllib.parse import quote, unquote_plus, urlencode, urlsplit, urlunsplit

from .detector import strip_path_parameters
from .models import TransformOptions
from .registry import COMPOSITE_PARAMETER, DOT_PREFIX


def _is_stripped(name: str) -> bool:
    return name == COMPOSITE_PARAMETER or name.startswith(DOT_PREFIX)


def _to_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _segments(query: str) -> List[Tuple[str, str]]:
    """(decoded name, raw segment) for each '&'-separated query segment."""
    return [
        (unquote_plus(segment.split("=", 1)[0]), segment)
        for segment in query.split("&")
        if segment
    ]


def rewrite_url(url: str, options: TransformOptions) -> str:
    """
    Build a URL with canonical parameters.

    Parameters named `im` or starting with `im.` are removed, and so are
    /im-... and /im(...) path segments. Each option replaces the first
    parameter of the same name in place (dropping any duplicates) or is
    appended. None values and internal options (leading `_`) are omitted.
    Untouched parameters keep their original encoding.
    """
    parts = urlsplit(url)
    segments = [(name, raw) for name, raw in _segments(parts.query) if not _is_stripped(name)]

    for name, value in options.items():
        if value is None or name.startswith("_"):
            continue
        raw = urlencode([(name, _to_query_value(value))], quote_via=quote)
        index = next((i for i, (n, _) in enumerate(segments) if n == name), None)
        if index is None:
            segments.append((name, raw))
            continue
        segments[index] = (name, raw)
        segments = [s for i, s in enumerate(segments) if i <= index or s[0] != name]

    return urlunsplit(parts._replace(
        path=strip_path_parameters(parts.path),
        query="&".join(raw for _, raw in segments),
    ))
