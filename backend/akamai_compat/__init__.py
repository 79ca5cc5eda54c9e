"""
Akamai Compatibility Module

Translates Akamai Image Manager parameters (im=, im.*, imwidth, /im-.../ path segments)
into canonical transform options for the resizing backend.

Pipeline:
- Detector: does the URL use the legacy dialect?
- Parser: legacy parameters -> ordered NeutralParameter list
- Processor: NeutralParameter list -> TransformOptions
- Optional stages (advanced features), then URL rewrite
"""

from .config import CompatConfig, load_config
from .detector import is_akamai_format
from .errors import AkamaiCompatError, MalformedTokenError, TranslationError
from .models import CanonicalOption, NeutralParameter, ParameterSource, TranslationResult
from .parser import AkamaiParser
from .processor import ParameterProcessor
from .advanced import AdvancedFeatureApplier, PipelineStage
from .rewriter import rewrite_url
from .translator import AkamaiTranslator
from .routes_fastapi import router

__all__ = [
    "router",
    "CompatConfig",
    "load_config",
    "is_akamai_format",
    "AkamaiCompatError",
    "MalformedTokenError",
    "TranslationError",
    "CanonicalOption",
    "NeutralParameter",
    "ParameterSource",
    "TranslationResult",
    "AkamaiParser",
    "ParameterProcessor",
    "AdvancedFeatureApplier",
    "PipelineStage",
    "rewrite_url",
    "AkamaiTranslator",
]
