"""
Akamai Compatibility Data Models

Contains:
- ParameterSource: which legacy encoding a parameter came from
- CanonicalOption: option names understood by the resizing backend
- NeutralParameter: one parsed legacy parameter
- TransformOptions: canonical options produced for a request
- TranslationResult: options or the reason translation failed
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class ParameterSource(str, Enum):
    """
    Legacy encoding of a parameter
    """
    LEGACY_SHORT = "legacy_short"    # composite im=... value
    LEGACY_DOT = "legacy_dot"        # im.<path>=...
    LEGACY_NAMED = "legacy_named"    # imwidth=..., impolicy=...


class CanonicalOption(str, Enum):
    """
    Canonical transform option names
    """
    WIDTH = "width"
    HEIGHT = "height"
    QUALITY = "quality"
    FIT = "fit"
    GRAVITY = "gravity"
    ASPECT = "aspect"
    FOCAL = "focal"
    FORMAT = "format"
    DERIVATIVE = "derivative"
    ROTATE = "rotate"
    TRIM = "trim"
    BLUR = "blur"
    FLIP = "flip"
    FLOP = "flop"
    SATURATION = "saturation"
    CONTRAST = "contrast"
    BRIGHTNESS = "brightness"
    SHARPEN = "sharpen"
    BACKGROUND = "background"
    DPR = "dpr"
    METADATA = "metadata"
    ANIM = "anim"
    DRAW = "draw"                # overlay list, advanced features only
    CONDITIONS = "_conditions"   # internal, never written to a URL


ParameterValue = Union[str, float, bool]

# Canonical option name -> value. Values are scalars except `draw` and
# `_conditions`, which hold lists of dicts. Unset options are absent.
TransformOptions = Dict[str, Any]


@dataclass(frozen=True)
class NeutralParameter:
    """A legacy parameter after parsing, before translation."""
    name: str
    value: ParameterValue
    source: ParameterSource


@dataclass
class TranslationResult:
    """
    Outcome of a translation.

    An empty `options` with no `error` means there was nothing to translate.
    """
    options: TransformOptions = field(default_factory=dict)
    detected: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
