"""
Advanced-Feature Applier

Optional post-processing of canonical options, enabled by
ENABLE_AKAMAI_ADVANCED_FEATURES. Only fills in options that are
still unset; resolved options are never overwritten.
"""

import logging
from typing import Optional

from .config import CompatConfig
from .models import CanonicalOption, TransformOptions

logger = logging.getLogger(__name__)

AUTO_GRAVITY = "auto"


class PipelineStage:
    """
    An optional pass run after parameter processing.

    Enablement is decided once, when the pipeline is built.
    """
    name = "stage"

    def is_enabled(self, config: CompatConfig) -> bool:
        return True

    def apply(self, options: TransformOptions, config: CompatConfig) -> TransformOptions:
        raise NotImplementedError


class AdvancedFeatureApplier(PipelineStage):
    """
    Rules:
    - aspect set, gravity unset -> gravity=auto
    - derivative set and configured -> copy derivative options that are unset
    """
    name = "advanced_features"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def is_enabled(self, config: CompatConfig) -> bool:
        return config.enable_advanced_features

    def apply(self, options: TransformOptions, config: CompatConfig) -> TransformOptions:
        result = dict(options)
        self._apply_auto_gravity(result)
        self._apply_derivative(result, config)
        return result

    def _apply_auto_gravity(self, options: TransformOptions) -> None:
        aspect = CanonicalOption.ASPECT.value
        gravity = CanonicalOption.GRAVITY.value
        if options.get(aspect) and gravity not in options:
            options[gravity] = AUTO_GRAVITY
            self._logger.debug("[AdvancedFeatures] Applied auto gravity for aspect ratio")

    def _apply_derivative(self, options: TransformOptions, config: CompatConfig) -> None:
        name = options.get(CanonicalOption.DERIVATIVE.value)
        if not name:
            return

        derivative = config.get_derivative(str(name))
        if derivative is None:
            self._logger.debug(f"[AdvancedFeatures] Unknown derivative: {name}")
            return

        inherited = []
        for key, value in derivative.items():
            if key not in options and value is not None:
                options[key] = value
                inherited.append(key)

        self._logger.debug(
            f"[AdvancedFeatures] Applied derivative '{name}': {', '.join(inherited) or 'nothing new'}"
        )
