"""
Tests for RuleCatalog construction and message templates.
"""

import pytest

from askr_core.errors import ArgumentError, ErrorCode
from askr_core.validation import Priority, RuleCatalog, RuleConfig, ValidationRule, ValidatorKind, render_message


class TestRuleCatalog:
    """Test building catalogs from configurations."""

    def test_rule_ids_are_unique_per_kind(self):
        """Test that repeated kinds get numbered ids."""
        catalog = RuleCatalog.from_configs(
            [
                RuleConfig(kind="min_length", params={"min": 2}),
                RuleConfig(kind="required"),
                RuleConfig(kind="min_length", params={"min": 8}, priority="low"),
            ]
        )

        assert [rule.rule_id for rule in catalog] == ["min_length", "required", "min_length_2"]
        assert catalog.get("min_length_2").priority is Priority.LOW

    def test_default_priorities(self):
        """Test that each kind supplies its own default priority."""
        catalog = RuleCatalog.from_configs([RuleConfig(kind="required"), RuleConfig(kind="email")])

        assert catalog.get("required").priority is Priority.CRITICAL
        assert catalog.get("email").priority is Priority.HIGH

    def test_disabled_rules_are_skipped(self):
        """Test that disabled rules keep the order of the others."""
        catalog = RuleCatalog.from_configs(
            [RuleConfig(kind="required", enabled=False), RuleConfig(kind="integer")]
        )

        assert len(catalog) == 1
        assert catalog.rules[0].order == 1

    def test_unknown_kind(self):
        """Test that unknown validators are rejected."""
        with pytest.raises(ArgumentError) as exc_info:
            RuleCatalog.from_configs([RuleConfig(kind="zipcode")])

        assert exc_info.value.code == ErrorCode.UNKNOWN_VALIDATOR

    def test_invalid_priority(self):
        """Test that an unknown priority name is rejected."""
        with pytest.raises(ArgumentError):
            RuleCatalog.from_configs([RuleConfig(kind="required", priority="urgent")])

    def test_duplicate_ids_rejected(self):
        """Test that hand-built catalogs cannot repeat ids."""
        rule = ValidationRule(rule_id="required", kind=ValidatorKind.REQUIRED, priority=Priority.CRITICAL)

        with pytest.raises(ArgumentError):
            RuleCatalog([rule, rule])

    def test_params_are_read_only(self):
        """Test that rules cannot be mutated after construction."""
        rule = RuleCatalog.from_configs([RuleConfig(kind="min_length", params={"min": 2})]).rules[0]

        with pytest.raises(TypeError):
            rule.params["min"] = 5

    def test_filter(self):
        """Test deriving a catalog with a subset of rules."""
        catalog = RuleCatalog.from_configs([RuleConfig(kind="required"), RuleConfig(kind="file_exists")])

        filtered = catalog.filter(lambda rule: not rule.is_slow)

        assert [rule.rule_id for rule in filtered] == ["required"]

    def test_rule_config_round_trip(self):
        """Test RuleConfig mapping conversion."""
        config = RuleConfig(kind="range", priority="high", params={"min": 1}, debounce_ms=50)

        assert RuleConfig.from_dict(config.to_dict()) == config


class TestRenderMessage:
    """Test message template rendering."""

    def test_placeholders(self):
        """Test filling placeholders."""
        assert render_message("{count} of {max_choices}", {"count": 3, "max_choices": 2}) == "3 of 2"

    def test_malformed_template_returned_unchanged(self):
        """Test that a broken template is shown as written."""
        assert render_message("{unclosed", {}) == "{unclosed"
