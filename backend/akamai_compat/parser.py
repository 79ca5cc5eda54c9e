"""
Akamai Parameter Parser

Turns Akamai Image Manager parameters into an ordered list of
NeutralParameter records. Handles:
- Composite values: im=Resize=width:400,height:300 / im=AspectCrop=(16,9)
- Dot notation: im.resize=width:400 / im.resize.width=400
- Flat names: imwidth=400, impolicy=letterbox
- Path segments: /im-resize=width:200/ and /im(resize=width:200)/, read as dot notation
- Overlays and conditions: im.composite=url:...,placement:southeast, im.if-dimension=...

Parsing is tolerant: a malformed token is logged and skipped, the rest
of the request is still parsed. Path segments come before the query
string; priority between duplicates is resolved later by the processor.
"""

import re
import logging
from typing import Any, List, Optional, Tuple

from .detector import legacy_pairs
from .errors import MalformedTokenError
from .models import NeutralParameter, ParameterSource, ParameterValue
from .registry import (
    COMPOSITE_PARAMETER,
    DOT_PREFIX,
    LEGACY_NAMED_PARAMETERS,
    LEGACY_TRANSFORMS,
    RAW_DOT_PARAMETERS,
)

logger = logging.getLogger(__name__)

# "key:value" or "key=value" where key is an identifier
_PAIR_KEY = re.compile(r"^\s*[A-Za-z][\w-]*\s*[:=]")
# A value that is itself a URL, e.g. im.composite=https://host/logo.png
_BARE_URL = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def url_of(source: Any) -> str:
    if isinstance(source, str):
        return source
    url = getattr(source, "url", None)
    if url is None:
        raise TypeError(f"Cannot read a URL from {type(source).__name__}")
    return str(url)


def split_tokens(value: str) -> List[str]:
    """
    Split on ',' and ';' outside parentheses.

    An unclosed '(' swallows the rest of the value into one token, which
    then fails validation on its own.
    """
    tokens: List[str] = []
    depth = 0
    current = ""

    for char in value:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char in ",;" and depth <= 0:
            tokens.append(current.strip())
            current = ""
            depth = 0
            continue
        current += char

    tokens.append(current.strip())
    return [token for token in tokens if token]


def _is_parenthesized(value: str) -> bool:
    return value.startswith("(") and value.endswith(")")


def _check_balanced(token: str) -> None:
    depth = 0
    for char in token:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise MalformedTokenError(token, "unexpected ')'")
    if depth != 0:
        raise MalformedTokenError(token, "unclosed '('")


def split_pair(token: str) -> Tuple[str, Optional[str]]:
    """
    Split a token on its first ':' or '='.

    Returns:
        (key, value), value is None for a bare word
    """
    _check_balanced(token)

    positions = [i for i in (token.find("="), token.find(":")) if i >= 0]
    if not positions:
        return token.strip(), None

    index = min(positions)
    key = token[:index].strip()
    value = token[index + 1:].strip()
    if not key:
        raise MalformedTokenError(token, "missing key")
    if not value:
        raise MalformedTokenError(token, "missing value")
    return key, value


class AkamaiParser:
    """
    Parser for Akamai-style image parameters.

    Usage:
        parser = AkamaiParser()
        parameters = parser.parse("https://example.com/a.jpg?imwidth=400")
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def parse(self, source: Any) -> List[NeutralParameter]:
        """
        Parse legacy parameters from a URL or request-like object.

        Args:
            source: URL string, or any object with a `url` attribute
        """
        parameters: List[NeutralParameter] = []

        for name, value in legacy_pairs(url_of(source)):
            if name == COMPOSITE_PARAMETER:
                parameters.extend(self._parse_composite(value))
            elif name.startswith(DOT_PREFIX):
                parameters.extend(self._parse_dot(name[len(DOT_PREFIX):], value))
            elif name in LEGACY_NAMED_PARAMETERS:
                parameters.append(NeutralParameter(name, value, ParameterSource.LEGACY_NAMED))

        self._logger.debug(
            f"[AkamaiParser] Parsed {len(parameters)} parameters: "
            f"{', '.join(p.name for p in parameters)}"
        )
        return parameters

    # ============================================
    # Composite im= values
    # ============================================

    def _parse_composite(self, value: str) -> List[NeutralParameter]:
        parameters: List[NeutralParameter] = []
        context: Optional[str] = None  # transform whose arguments may follow

        for token in split_tokens(value):
            try:
                parsed, context = self._composite_token(token, context)
            except MalformedTokenError as e:
                self._logger.warning(f"[AkamaiParser] Skipping token in im=: {e}")
                continue
            parameters.extend(parsed)

        return parameters

    def _composite_token(
        self, token: str, context: Optional[str]
    ) -> Tuple[List[NeutralParameter], Optional[str]]:
        key, arg = split_pair(token)
        name = key.lower()
        source = ParameterSource.LEGACY_SHORT

        if context is not None and arg is not None and name in LEGACY_TRANSFORMS[context].args:
            return [self._param(f"{context}.{name}", _unwrap(arg), source)], context

        if name in LEGACY_TRANSFORMS:
            if arg is None:
                return [self._param(name, True, source)], name
            if _is_parenthesized(arg):
                return self._positional(name, arg, source), name
            if _BARE_URL.match(arg):
                return [self._param(name, arg, source)], name
            if _PAIR_KEY.match(arg):
                sub_key, sub_value = split_pair(arg)
                return [self._param(f"{name}.{sub_key.lower()}", _unwrap(sub_value), source)], name
            # Single-valued transform, e.g. Rotate=90
            return [self._param(name, arg, source)], None

        if arg is None:
            raise MalformedTokenError(token, "unknown transform")

        return [self._param(name, _unwrap(arg), source)], context

    # ============================================
    # Dot notation im.<path>=value
    # ============================================

    def _parse_dot(self, path: str, value: str) -> List[NeutralParameter]:
        name = path.lower()
        source = ParameterSource.LEGACY_DOT

        if not name or any(not segment for segment in name.split(".")):
            self._logger.warning(f"[AkamaiParser] Skipping malformed parameter name: im.{path}")
            return []

        if name in RAW_DOT_PARAMETERS or _BARE_URL.match(value):
            return [self._param(name, value, source)]

        transform = name.rsplit(".", 1)[-1]
        if _is_parenthesized(value) and transform in LEGACY_TRANSFORMS:
            try:
                return self._positional(name, value, source)
            except MalformedTokenError as e:
                self._logger.warning(f"[AkamaiParser] Skipping im.{path}: {e}")
                return []

        if not _PAIR_KEY.match(value):
            return [self._param(name, value, source)]

        parameters: List[NeutralParameter] = []
        for token in split_tokens(value):
            try:
                key, arg = split_pair(token)
                if arg is None:
                    raise MalformedTokenError(token, "missing value")
            except MalformedTokenError as e:
                self._logger.warning(f"[AkamaiParser] Skipping token in im.{path}: {e}")
                continue
            parameters.append(self._param(f"{name}.{key.lower()}", _unwrap(arg), source))
        return parameters

    # ============================================
    # Helpers
    # ============================================

    def _positional(self, name: str, arg: str, source: ParameterSource) -> List[NeutralParameter]:
        """Transform=(a,b) -> one parameter per named position."""
        _check_balanced(arg)
        values = [v.strip() for v in arg[1:-1].split(",")]
        if any(not v for v in values):
            raise MalformedTokenError(arg, "empty positional value")

        names = LEGACY_TRANSFORMS[name.rsplit(".", 1)[-1]].positional
        if names and len(values) == len(names):
            return [self._param(f"{name}.{n}", v, source) for n, v in zip(names, values)]
        return [self._param(name, ",".join(values), source)]

    def _param(self, name: str, value: ParameterValue, source: ParameterSource) -> NeutralParameter:
        self._logger.debug(f"[AkamaiParser] {source.value}: {name}={value}")
        return NeutralParameter(name, value, source)


def _unwrap(value: str) -> str:
    return value[1:-1].strip() if _is_parenthesized(value) else value
