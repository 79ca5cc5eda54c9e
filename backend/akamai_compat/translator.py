"""
Akamai Translation Pipeline

Detector -> Parser -> Processor -> enabled stages -> canonical options.

Translation is fail-open: any unexpected error is logged and turned into
empty options, so a bad legacy parameter never breaks the request.
"""

import logging
from typing import Any, List, Optional, Sequence

from .advanced import AdvancedFeatureApplier, PipelineStage
from .config import CompatConfig
from .detector import is_akamai_format
from .errors import TranslationError
from .models import TransformOptions, TranslationResult
from .parser import AkamaiParser, url_of
from .processor import ParameterProcessor
from .rewriter import rewrite_url

logger = logging.getLogger(__name__)


def default_stages(logger: Optional[logging.Logger] = None) -> List[PipelineStage]:
    """Optional stages, in the order they run."""
    return [AdvancedFeatureApplier(logger)]


class AkamaiTranslator:
    """
    Translates Akamai-style URLs into canonical transform options.

    Usage:
        translator = AkamaiTranslator(load_config())
        options = translator.translate("https://example.com/a.jpg?imwidth=400")
    """

    def __init__(
        self,
        config: Optional[CompatConfig] = None,
        logger: Optional[logging.Logger] = None,
        stages: Optional[Sequence[PipelineStage]] = None,
    ):
        self.config = config or CompatConfig()
        self._logger = logger or logging.getLogger(__name__)
        self.parser = AkamaiParser(self._logger)
        self.processor = ParameterProcessor(
            self._logger, advanced_features=self.config.enable_advanced_features
        )

        candidates = default_stages(self._logger) if stages is None else stages
        self.stages: List[PipelineStage] = [
            stage for stage in candidates if stage.is_enabled(self.config)
        ]
        self._logger.debug(
            f"[AkamaiTranslator] Enabled stages: {', '.join(s.name for s in self.stages) or 'none'}"
        )

    def is_akamai_format(self, url: str) -> bool:
        return is_akamai_format(url, self._logger)

    def translate_detailed(self, source: Any) -> TranslationResult:
        """
        Translate a URL or request, keeping failures distinguishable.

        Returns:
            TranslationResult; `error` is set when translation failed.
        """
        detected = False
        try:
            url = url_of(source)
            detected = self.is_akamai_format(url)
            if not detected:
                return TranslationResult(options={}, detected=False)

            parameters = self.parser.parse(url)
            options = self.processor.process(parameters)
            for stage in self.stages:
                options = stage.apply(options, self.config)
        except Exception as e:
            error = TranslationError(f"{type(e).__name__}: {e}")
            self._logger.error(f"[AkamaiTranslator] Failed to translate parameters: {error}")
            return TranslationResult(options={}, detected=detected, error=str(error))

        self._logger.debug(
            f"[AkamaiTranslator] Translated {len(options)} options: {', '.join(options)}"
        )
        return TranslationResult(options=options, detected=True)

    def translate(self, source: Any) -> TransformOptions:
        """Translate to canonical options; failures become {}."""
        return self.translate_detailed(source).options

    def translate_url(self, url: str) -> str:
        """
        Rewrite an Akamai-style URL with canonical parameters.

        URLs without legacy parameters, or whose translation fails, are
        returned unchanged.
        """
        result = self.translate_detailed(url)
        if not result.detected or not result.ok:
            return url
        return rewrite_url(url, result.options)
