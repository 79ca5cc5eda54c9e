"""
Parameter Processor

Folds the ordered NeutralParameter list into one TransformOptions dict:
- legacy names are translated through a fixed table to canonical options
- values are coerced to the canonical type; invalid values are dropped
- a later parameter overwrites an earlier one with the same canonical name
- unknown legacy names are ignored
- composite/watermark overlays and if-dimension conditions are only
  translated when advanced features are enabled
"""

import re
import math
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CanonicalOption, NeutralParameter, ParameterValue, TransformOptions
from .registry import CONDITION_PARAMETER, OVERLAY_TRANSFORMS, SIZE_CODES

logger = logging.getLogger(__name__)

Assignment = Tuple[CanonicalOption, ParameterValue]
Translator = Callable[[ParameterValue], List[Assignment]]

_TRUTHY = {"", "true", "1", "yes", "on"}
_ASPECT = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[:\-]\s*(\d+(?:\.\d+)?)\s*$")
_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


# ============================================
# Coercion helpers
# ============================================

def to_number(value: ParameterValue) -> Optional[float]:
    """Parse a number; integral values come back as int, invalid as None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _is_truthy(value: ParameterValue) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _format_number(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


# ============================================
# Translator factories
# ============================================

def _number(
    option: CanonicalOption,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    exclusive_minimum: bool = False,
) -> Translator:
    def translate(value: ParameterValue) -> List[Assignment]:
        number = to_number(value)
        if number is None:
            return []
        if minimum is not None and (number < minimum or (exclusive_minimum and number == minimum)):
            return []
        if maximum is not None and number > maximum:
            return []
        return [(option, number)]
    return translate


def _positive(option: CanonicalOption) -> Translator:
    return _number(option, minimum=0, exclusive_minimum=True)


def _choice(option: CanonicalOption, mapping: Mapping[str, ParameterValue]) -> Translator:
    def translate(value: ParameterValue) -> List[Assignment]:
        mapped = mapping.get(str(value).strip().lower())
        return [] if mapped is None else [(option, mapped)]
    return translate


def _text(option: CanonicalOption, lower: bool = False) -> Translator:
    def translate(value: ParameterValue) -> List[Assignment]:
        text = str(value).strip()
        if not text:
            return []
        return [(option, text.lower() if lower else text)]
    return translate


def _with(translator: Translator, *extra: Assignment) -> Translator:
    def translate(value: ParameterValue) -> List[Assignment]:
        assignments = translator(value)
        return assignments + list(extra) if assignments else []
    return translate


def _quality(value: ParameterValue) -> List[Assignment]:
    named = {"low": 50, "medium": 75, "high": 90}
    text = str(value).strip().lower()
    if text in named:
        return [(CanonicalOption.QUALITY, named[text])]
    return _number(CanonicalOption.QUALITY, minimum=1, maximum=100)(value)


def _aspect(value: ParameterValue) -> List[Assignment]:
    match = _ASPECT.match(str(value))
    if not match:
        return []
    width, height = float(match.group(1)), float(match.group(2))
    if width <= 0 or height <= 0:
        return []
    return [(CanonicalOption.ASPECT, f"{_format_number(width)}:{_format_number(height)}")]


def _focal(value: ParameterValue) -> List[Assignment]:
    parts = [to_number(p) for p in str(value).split(",")]
    if len(parts) != 2 or any(p is None or not 0 <= p <= 1 for p in parts):
        return []
    return [(CanonicalOption.FOCAL, ",".join(_format_number(p) for p in parts))]


def _size_code(value: ParameterValue) -> List[Assignment]:
    width = SIZE_CODES.get(str(value).strip().lower())
    return [] if width is None else [(CanonicalOption.WIDTH, width)]


def _rotate(value: ParameterValue) -> List[Assignment]:
    degrees = to_number(value)
    if degrees is None:
        return []
    normalized = degrees % 360
    if 45 < normalized <= 135:
        return [(CanonicalOption.ROTATE, 90)]
    if 135 < normalized <= 225:
        return [(CanonicalOption.ROTATE, 180)]
    if 225 < normalized <= 315:
        return [(CanonicalOption.ROTATE, 270)]
    # Close to 0/360: no rotation
    return []


def _trim(value: ParameterValue) -> List[Assignment]:
    """x,y,width,height -> "top;right;bottom;left"."""
    parts = [to_number(p) for p in str(value).split(",")]
    if len(parts) != 4 or any(p is None for p in parts):
        return []
    x, y, width, height = parts
    edges = (y, x + width, y + height, x)
    return [(CanonicalOption.TRIM, ";".join(_format_number(e) for e in edges))]


def _blur(value: ParameterValue) -> List[Assignment]:
    amount = to_number(value)
    if amount is None or amount <= 0:
        return []
    blur = min(250, amount * 2.5)
    return [(CanonicalOption.BLUR, int(blur) if float(blur).is_integer() else blur)]


def _mirror(value: ParameterValue) -> List[Assignment]:
    text = str(value).strip().lower()
    if text in ("horizontal", "h"):
        return [(CanonicalOption.FLIP, True)]
    if text in ("vertical", "v"):
        return [(CanonicalOption.FLOP, True)]
    if text in ("both", "hv", "vh"):
        return [(CanonicalOption.FLIP, True), (CanonicalOption.FLOP, True)]
    return []


def _grayscale(value: ParameterValue) -> List[Assignment]:
    return [(CanonicalOption.SATURATION, 0)] if _is_truthy(value) else []


def _sharpen(value: ParameterValue) -> List[Assignment]:
    amount = to_number(value)
    if amount is None or amount <= 0:
        return []
    # Legacy amounts run 0-100, canonical sharpen runs 0-10
    sharpen = min(10, amount / 10 if amount > 20 else amount)
    return [(CanonicalOption.SHARPEN, sharpen)]


def _hex_color(value: ParameterValue) -> List[Assignment]:
    match = _HEX_COLOR.match(str(value).strip())
    return [] if not match else [(CanonicalOption.BACKGROUND, f"#{match.group(1).lower()}")]


def _policy(value: ParameterValue) -> List[Assignment]:
    policy = str(value).strip()
    if policy.lower() == "letterbox":
        return [(CanonicalOption.FIT, "pad")]
    if policy.lower() == "cropfit":
        return [(CanonicalOption.FIT, "cover")]
    return [(CanonicalOption.DERIVATIVE, policy)] if policy else []


def _disable_animation(value: ParameterValue) -> List[Assignment]:
    return [(CanonicalOption.ANIM, False)]


_FIT_MODES = {
    "fit": "contain",
    "stretch": "scale-down",
    "fill": "cover",
    "crop": "crop",
    "pad": "pad",
    "cover": "cover",
    "contain": "contain",
    "scale-down": "scale-down",
}

_FORMATS = {
    "webp": "webp",
    "avif": "avif",
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "png": "png",
    "gif": "gif",
    "auto": "auto",
}

_METADATA = {
    "none": "none",
    "no": "none",
    "copyright": "copyright",
    "minimal": "copyright",
    "keep": "keep",
    "all": "keep",
}

_WIDTH = _positive(CanonicalOption.WIDTH)
_HEIGHT = _positive(CanonicalOption.HEIGHT)
_CROP_FIT = (CanonicalOption.FIT, "crop")


# Legacy parameter name -> translator
TRANSLATIONS: Dict[str, Translator] = {
    "imwidth": _WIDTH,
    "w": _WIDTH,
    "width": _WIDTH,
    "resize.width": _WIDTH,
    "crop.width": _with(_WIDTH, _CROP_FIT),
    "imheight": _HEIGHT,
    "h": _HEIGHT,
    "height": _HEIGHT,
    "resize.height": _HEIGHT,
    "crop.height": _with(_HEIGHT, _CROP_FIT),
    "f": _size_code,
    "imquality": _quality,
    "q": _quality,
    "quality": _quality,
    "quality.chromasubsampling": _choice(CanonicalOption.QUALITY, {"444": 90, "420": 85}),
    "imformat": _choice(CanonicalOption.FORMAT, _FORMATS),
    "format": _choice(CanonicalOption.FORMAT, _FORMATS),
    "fit": _choice(CanonicalOption.FIT, _FIT_MODES),
    "resize.mode": _choice(CanonicalOption.FIT, _FIT_MODES),
    "r": _aspect,
    "aspect": _aspect,
    "resize.aspect": _aspect,
    "p": _focal,
    "focal": _focal,
    "imrotate": _rotate,
    "rotate": _rotate,
    "rotate.degrees": _rotate,
    "imcrop": _trim,
    "crop": _trim,
    "crop.rect": _trim,
    "blur": _blur,
    "mirror": _mirror,
    "grayscale": _grayscale,
    "contrast": _number(CanonicalOption.CONTRAST, minimum=0),
    "brightness": _number(CanonicalOption.BRIGHTNESS, minimum=0),
    "saturation": _number(CanonicalOption.SATURATION, minimum=0),
    "sharpen": _sharpen,
    "sharpen.amount": _sharpen,
    "unsharp": _sharpen,
    "imcolor": _hex_color,
    "backgroundcolor": _hex_color,
    "backgroundcolor.color": _hex_color,
    "background": _text(CanonicalOption.BACKGROUND),
    "impolicy": _policy,
    "policy": _policy,
    "derivative": _text(CanonicalOption.DERIVATIVE),
    "imdensity": _number(CanonicalOption.DPR, minimum=1, maximum=3),
    "dpr": _number(CanonicalOption.DPR, minimum=1, maximum=3),
    "gravity": _text(CanonicalOption.GRAVITY, lower=True),
    "metadata": _choice(CanonicalOption.METADATA, _METADATA),
    "frame": _disable_animation,
    "animationframeindex": _disable_animation,
}

# Options assembled from several legacy parameters: name -> (option, slot)
COMPOSED_PARTS: Dict[str, Tuple[CanonicalOption, int]] = {
    "aspectcrop.width": (CanonicalOption.ASPECT, 0),
    "aspectcrop.height": (CanonicalOption.ASPECT, 1),
    "aspectcrop.xposition": (CanonicalOption.FOCAL, 0),
    "aspectcrop.hoffset": (CanonicalOption.FOCAL, 0),
    "aspectcrop.yposition": (CanonicalOption.FOCAL, 1),
    "aspectcrop.voffset": (CanonicalOption.FOCAL, 1),
}

_COMPOSERS: Dict[CanonicalOption, Translator] = {
    CanonicalOption.ASPECT: _aspect,
    CanonicalOption.FOCAL: _focal,
}
_COMPOSE_SEPARATOR = {CanonicalOption.ASPECT: ":", CanonicalOption.FOCAL: ","}


# Overlay placement -> edges that receive the offset
_PLACEMENTS: Dict[str, Tuple[str, ...]] = {
    "north": ("top",),
    "top": ("top",),
    "south": ("bottom",),
    "bottom": ("bottom",),
    "east": ("right",),
    "right": ("right",),
    "west": ("left",),
    "left": ("left",),
    "northeast": ("top", "right"),
    "topright": ("top", "right"),
    "northwest": ("top", "left"),
    "topleft": ("top", "left"),
    "southeast": ("bottom", "right"),
    "bottomright": ("bottom", "right"),
    "southwest": ("bottom", "left"),
    "bottomleft": ("bottom", "left"),
    "center": (),
}
_DEFAULT_OFFSET = 5

# Overlay arguments translated like their top-level counterparts
_OVERLAY_OPTIONS: Dict[str, Translator] = {
    "width": _WIDTH,
    "height": _HEIGHT,
    "fit": _choice(CanonicalOption.FIT, _FIT_MODES),
    "background": _hex_color,
    "rotate": _rotate,
}


class ParameterProcessor:
    """
    Processes parsed legacy parameters into canonical transform options.

    Args:
        logger: logger for per-parameter debug output
        advanced_features: translate overlays (im.composite, im.watermark)
            and im.if-dimension conditions; they are ignored otherwise
    """

    def __init__(self, logger: Optional[logging.Logger] = None, advanced_features: bool = False):
        self._logger = logger or logging.getLogger(__name__)
        self.advanced_features = advanced_features

    def process(self, parameters: Iterable[NeutralParameter]) -> TransformOptions:
        """
        Fold parameters into TransformOptions, last write wins.

        Returns:
            Canonical options; empty when nothing was recognized.
        """
        options: TransformOptions = {}
        parts: Dict[CanonicalOption, List[Optional[str]]] = {}
        overlay: Dict[str, ParameterValue] = {}
        conditions: List[Dict[str, str]] = []

        for param in parameters:
            head, _, key = param.name.partition(".")
            if head in OVERLAY_TRANSFORMS or param.name == CONDITION_PARAMETER:
                if not self.advanced_features:
                    self._logger.debug(
                        f"[ParameterProcessor] Advanced features disabled, ignoring {param.name}"
                    )
                elif param.name == CONDITION_PARAMETER:
                    conditions.append({"type": "dimension", "condition": str(param.value)})
                else:
                    overlay[key or "url"] = param.value
                continue

            if param.name in COMPOSED_PARTS:
                assignments = self._compose(param, parts)
            else:
                translator = TRANSLATIONS.get(param.name)
                if translator is None:
                    self._logger.debug(f"[ParameterProcessor] Ignoring unknown parameter: {param.name}")
                    continue
                assignments = translator(param.value)
                if not assignments:
                    self._logger.debug(
                        f"[ParameterProcessor] Dropped invalid value {param.name}={param.value!r}"
                    )

            for option, value in assignments:
                if option.value in options and options[option.value] != value:
                    self._logger.debug(
                        f"[ParameterProcessor] {option.value}: {options[option.value]!r} -> {value!r} "
                        f"(from {param.name})"
                    )
                options[option.value] = value

        if overlay:
            draw = self._build_overlay(overlay)
            if draw is not None:
                options[CanonicalOption.DRAW.value] = [draw]
        if conditions:
            options[CanonicalOption.CONDITIONS.value] = conditions

        self._logger.debug(f"[ParameterProcessor] Options: {options}")
        return options

    def _compose(
        self, param: NeutralParameter, parts: Dict[CanonicalOption, List[Optional[str]]]
    ) -> List[Assignment]:
        option, slot = COMPOSED_PARTS[param.name]
        slots = parts.setdefault(option, [None, None])
        slots[slot] = str(param.value).strip()
        if any(s is None for s in slots):
            return []
        return _COMPOSERS[option](_COMPOSE_SEPARATOR[option].join(slots))

    def _build_overlay(self, values: Dict[str, ParameterValue]) -> Optional[Dict[str, Any]]:
        """
        Build one draw entry from collected overlay arguments.

        Placement puts `offset` (default 5) on the matching edges; opacity
        0-100 becomes 0-1.
        """
        url = values.get("url")
        if isinstance(url, bool) or not str(url or "").strip():
            self._logger.warning("[ParameterProcessor] Skipping overlay without url")
            return None

        draw: Dict[str, Any] = {"url": str(url).strip()}

        offset = to_number(values.get("offset", _DEFAULT_OFFSET))
        placement = str(values.get("placement", "")).strip().lower()
        if placement and placement not in _PLACEMENTS:
            self._logger.debug(f"[ParameterProcessor] Unknown overlay placement: {placement}")
        for edge in _PLACEMENTS.get(placement, ()):
            draw[edge] = _DEFAULT_OFFSET if offset is None else offset

        if "opacity" in values:
            opacity = to_number(values["opacity"])
            if opacity is not None:
                draw["opacity"] = min(1, max(0, opacity / 100))

        tile = values.get("tile")
        if tile is True or str(tile).strip().lower() == "true":
            draw["repeat"] = True

        for key, translator in _OVERLAY_OPTIONS.items():
            if key in values:
                for option, value in translator(values[key]):
                    draw[option.value] = value

        return draw
