"""
Configuration manager for askr.

Provides environment-backed overrides on top of DEFAULT_CONFIG with the same
type coercion rules for every key.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from .config import DEFAULT_CONFIG, ENV_ASKR_NO_COLOR, ENV_NO_COLOR, ENV_TIMEOUT, ENV_WIDTH
from .prompt_config import PromptConfig

logger = logging.getLogger(__name__)

# Configuration key -> environment variables, first match wins
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "no_color": (ENV_NO_COLOR, ENV_ASKR_NO_COLOR),
    "width": (ENV_WIDTH,),
    "timeout": (ENV_TIMEOUT,),
}


def _coerce(key: str, value: Any, fallback: Any) -> Any:
    expected_type = type(fallback)
    if expected_type is bool:
        return value.strip().lower() in ("true", "1", "yes", "on") if isinstance(value, str) else bool(value)
    if expected_type in (int, float, str):
        return expected_type(value)
    if not isinstance(value, expected_type):
        logger.warning(f"Config key '{key}' has unexpected type, using default")
        return fallback
    return value


class ConfigManager:
    """
    Environment-backed configuration with robust defaults.

    Provides type-safe access to configuration values with automatic fallback
    to defaults when a variable is missing or cannot be coerced.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Initialize the ConfigManager over ``environ`` (defaults to ``os.environ``)."""
        self._environ = os.environ if environ is None else environ
        self._defaults = DEFAULT_CONFIG.copy()

    def get(self, key: str, default: Any | None = None) -> Any:
        """
        Get a configuration value with fallback to defaults.

        Args:
            key: Configuration key
            default: Override default value (if None, uses DEFAULT_CONFIG)

        Returns:
            Configuration value with type coercion and default fallback
        """
        fallback = default if default is not None else self._defaults.get(key)
        raw = self._raw(key)
        if raw is None:
            return fallback

        if key == "no_color" and self._environ.get(ENV_NO_COLOR):
            # NO_COLOR disables color whatever its value
            return True

        if fallback is None:
            return raw
        try:
            return _coerce(key, raw, fallback)
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to coerce config key '{key}': {e}, using default")
            return fallback

    def has_override(self, key: str) -> bool:
        """Check whether an environment variable sets ``key``."""
        return self._raw(key) is not None

    def load_all(self) -> dict[str, Any]:
        """
        Load all configuration values merged with defaults.

        Returns:
            Dictionary with every DEFAULT_CONFIG key
        """
        return {key: self.get(key) for key in self._defaults}

    def apply(self, config: PromptConfig) -> PromptConfig:
        """
        Return a copy of ``config`` with environment overrides applied.

        ``NO_COLOR`` always wins; width and timeout only fill values the
        configuration leaves unset.
        """
        ui = config.ui
        interaction = config.interaction

        if self.get("no_color"):
            ui = replace(ui, no_color=True)
        if ui.width is None and self.has_override("width"):
            width = self.get("width")
            if width > 0:
                ui = replace(ui, width=width)
        if interaction.timeout is None and self.has_override("timeout"):
            timeout = self.get("timeout")
            if timeout > 0:
                interaction = replace(interaction, timeout=timeout)

        return replace(config, ui=ui, interaction=interaction)

    def _raw(self, key: str) -> str | None:
        for name in ENV_OVERRIDES.get(key, ()):
            value = self._environ.get(name)
            if value:
                return value
        return None
