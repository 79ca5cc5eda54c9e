"""
Akamai Compatibility Configuration

Environment variables:
- ENABLE_AKAMAI_COMPATIBILITY: translate legacy URLs at all (default true)
- ENABLE_AKAMAI_ADVANCED_FEATURES: run the advanced defaulting pass (default false)
- AKAMAI_DERIVATIVES: JSON object, derivative name -> canonical options
"""

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class CompatConfig:
    """Configuration for the compatibility layer."""
    enable_compatibility: bool = True
    enable_advanced_features: bool = False
    derivatives: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def get_derivative(self, name: str) -> Optional[Dict[str, Any]]:
        derivative = self.derivatives.get(name)
        return derivative if isinstance(derivative, dict) else None


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _load_derivatives(raw: Optional[str]) -> Dict[str, Dict[str, Any]]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning(f"[CompatConfig] Failed to parse AKAMAI_DERIVATIVES: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning("[CompatConfig] AKAMAI_DERIVATIVES must be a JSON object")
        return {}

    derivatives = {
        name: options for name, options in data.items()
        if isinstance(options, dict)
    }
    if len(derivatives) != len(data):
        logger.warning(f"[CompatConfig] Ignored {len(data) - len(derivatives)} malformed derivatives")
    logger.info(f"[CompatConfig] Loaded {len(derivatives)} derivatives")
    return derivatives


def load_config(env: Optional[Mapping[str, str]] = None) -> CompatConfig:
    """
    Build configuration from environment variables.

    Args:
        env: Mapping to read instead of os.environ
    """
    env = os.environ if env is None else env
    return CompatConfig(
        enable_compatibility=_env_flag(env, "ENABLE_AKAMAI_COMPATIBILITY", True),
        enable_advanced_features=_env_flag(env, "ENABLE_AKAMAI_ADVANCED_FEATURES", False),
        derivatives=_load_derivatives(env.get("AKAMAI_DERIVATIVES")),
    )
