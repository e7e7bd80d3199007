"""
Tests for the ConfigManager class.
"""

from askr_core.config import DEFAULT_CONFIG
from askr_core.config_manager import ConfigManager
from askr_core.prompt_config import InteractionConfig, PromptConfig, UiConfig


class TestConfigManager:
    """Test cases for ConfigManager."""

    def test_defaults_without_environment(self) -> None:
        """Test that every key falls back to DEFAULT_CONFIG."""
        manager = ConfigManager(environ={})

        assert manager.load_all() == DEFAULT_CONFIG
        assert manager.has_override("width") is False

    def test_width_is_coerced_to_int(self) -> None:
        """Test integer coercion of ASKR_WIDTH."""
        manager = ConfigManager(environ={"ASKR_WIDTH": "120"})

        assert manager.get("width") == 120
        assert manager.has_override("width") is True

    def test_timeout_is_coerced_to_float(self) -> None:
        """Test float coercion of ASKR_TIMEOUT."""
        manager = ConfigManager(environ={"ASKR_TIMEOUT": "2.5"})

        assert manager.get("timeout") == 2.5

    def test_invalid_value_falls_back_to_default(self) -> None:
        """Test that an unparseable value is replaced by the default."""
        manager = ConfigManager(environ={"ASKR_WIDTH": "wide"})

        assert manager.get("width") == DEFAULT_CONFIG["width"]

    def test_askr_no_color_boolean_strings(self) -> None:
        """Test boolean coercion of ASKR_NO_COLOR."""
        assert ConfigManager(environ={"ASKR_NO_COLOR": "yes"}).get("no_color") is True
        assert ConfigManager(environ={"ASKR_NO_COLOR": "off"}).get("no_color") is False

    def test_no_color_wins_whatever_its_value(self) -> None:
        """Test that any non-empty NO_COLOR disables color."""
        assert ConfigManager(environ={"NO_COLOR": "0"}).get("no_color") is True

    def test_explicit_default_argument(self) -> None:
        """Test that get() honours an explicit default for unknown keys."""
        assert ConfigManager(environ={}).get("unknown", "fallback") == "fallback"


class TestApplyOverrides:
    """Test overlaying environment overrides on a PromptConfig."""

    def test_apply_fills_unset_values(self) -> None:
        """Test that width and timeout fill values the configuration leaves unset."""
        manager = ConfigManager(environ={"ASKR_WIDTH": "100", "ASKR_TIMEOUT": "30"})

        config = manager.apply(PromptConfig())

        assert config.ui.width == 100
        assert config.interaction.timeout == 30.0

    def test_apply_keeps_explicit_values(self) -> None:
        """Test that explicit configuration beats the environment."""
        manager = ConfigManager(environ={"ASKR_WIDTH": "100", "ASKR_TIMEOUT": "30"})
        original = PromptConfig(ui=UiConfig(width=60), interaction=InteractionConfig(timeout=5))

        config = manager.apply(original)

        assert config.ui.width == 60
        assert config.interaction.timeout == 5

    def test_apply_no_color(self) -> None:
        """Test that NO_COLOR always disables color."""
        config = ConfigManager(environ={"NO_COLOR": "1"}).apply(PromptConfig())

        assert config.ui.no_color is True

    def test_apply_does_not_mutate_input(self) -> None:
        """Test that apply returns a copy."""
        original = PromptConfig()

        ConfigManager(environ={"NO_COLOR": "1", "ASKR_WIDTH": "90"}).apply(original)

        assert original.ui.no_color is False
        assert original.ui.width is None

    def test_zero_width_is_ignored(self) -> None:
        """Test that a zero width override leaves the probed width in charge."""
        config = ConfigManager(environ={"ASKR_WIDTH": "0"}).apply(PromptConfig())

        assert config.ui.width is None
