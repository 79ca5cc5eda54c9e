"""
Legacy Parameter Registry

Fixed tables describing the Akamai Image Manager query dialect:
which query parameters belong to it, which transforms the composite
im= value understands, and the size code widths.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

COMPOSITE_PARAMETER = "im"
DOT_PREFIX = "im."

# Flat single-word parameters, in detection order
LEGACY_NAMED_PARAMETERS: Tuple[str, ...] = (
    "imwidth",
    "imheight",
    "impolicy",
    "imcolor",
    "imquality",
    "imformat",
    "imbypass",
    "imcrop",
    "imrotate",
    "imdensity",
)


@dataclass(frozen=True)
class TransformSpec:
    """
    A transform usable inside the composite im= value.

    args: argument names that belong to the transform when they follow it
    positional: names given to `Transform=(a,b)` values, in order
    """
    args: FrozenSet[str] = frozenset()
    positional: Tuple[str, ...] = ()


_OVERLAY_ARGS = frozenset({
    "url", "placement", "opacity", "tile", "offset",
    "width", "height", "fit", "background", "rotate",
})

LEGACY_TRANSFORMS: Dict[str, TransformSpec] = {
    "resize": TransformSpec(
        args=frozenset({"width", "height", "mode", "aspect"}),
        positional=("width", "height"),
    ),
    "crop": TransformSpec(
        args=frozenset({"width", "height", "rect"}),
        positional=("width", "height"),
    ),
    "aspectcrop": TransformSpec(
        args=frozenset({"width", "height", "xposition", "yposition", "hoffset", "voffset", "allowexpansion"}),
        positional=("width", "height"),
    ),
    "quality": TransformSpec(args=frozenset({"chromasubsampling"})),
    "backgroundcolor": TransformSpec(args=frozenset({"color"})),
    "sharpen": TransformSpec(args=frozenset({"amount", "radius", "threshold"})),
    "rotate": TransformSpec(args=frozenset({"degrees"})),
    "blur": TransformSpec(),
    "format": TransformSpec(),
    "mirror": TransformSpec(),
    "grayscale": TransformSpec(),
    "contrast": TransformSpec(),
    "brightness": TransformSpec(),
    "composite": TransformSpec(args=_OVERLAY_ARGS),
    "watermark": TransformSpec(args=_OVERLAY_ARGS),
}

# Overlay transforms: im.composite=url:...,placement:southeast
OVERLAY_TRANSFORMS: Tuple[str, ...] = ("composite", "watermark")

# Dot parameters whose value is kept whole instead of split into key:value pairs
CONDITION_PARAMETER = "if-dimension"
RAW_DOT_PARAMETERS: FrozenSet[str] = frozenset({CONDITION_PARAMETER})

# Size code for the f= parameter -> width in pixels
SIZE_CODES: Dict[str, int] = {
    "xxu": 40,
    "xu": 80,
    "u": 160,
    "xxxs": 300,
    "xxs": 400,
    "xs": 500,
    "s": 600,
    "m": 700,
    "l": 750,
    "xl": 900,
    "xxl": 1100,
    "xxxl": 1400,
    "sg": 1600,
    "g": 2000,
    "xg": 3000,
    "xxg": 4000,
}


def is_legacy_parameter(name: str) -> bool:
    """True for any query parameter name that belongs to the legacy dialect."""
    return (
        name == COMPOSITE_PARAMETER
        or name.startswith(DOT_PREFIX)
        or name in LEGACY_NAMED_PARAMETERS
    )
