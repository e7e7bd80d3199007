"""
Tests for the required, length and pattern validators.
"""

import pytest

from askr_core.errors import ArgumentError, ErrorCode


class TestRequired:
    """Test the required validator."""

    def test_blank_input_fails(self, make_rule):
        """Test that empty and whitespace-only input fail."""
        rule = make_rule("required")

        assert rule.validate("").message == "This field is required"
        assert rule.validate("   ").passed is False
        assert rule.validate("x").passed is True

    def test_partial_flags_empty_input(self, make_rule):
        """Test that empty input is wrong from offset 0 but can continue."""
        partial = make_rule("required").partial_validate("", 0)

        assert partial.first_error_offset == 0
        assert partial.can_continue is True


class TestLengthLimits:
    """Test the min_length and max_length validators."""

    def test_min_length_message(self, make_rule):
        """Test the message reports the current length."""
        rule = make_rule("min_length", min=3)

        outcome = rule.validate("ab")

        assert outcome.message == "Minimum length is 3 characters (currently 2)"
        assert outcome.metadata == {"min_length": 3, "actual_length": 2}
        assert rule.validate("abc").passed is True

    def test_length_counts_characters_not_bytes(self, make_rule):
        """Test that multi-byte characters count once."""
        assert make_rule("min_length", min=3).validate("日本語").passed is True

    def test_min_length_partial(self, make_rule):
        """Test the suggestion for a short input."""
        partial = make_rule("min_length", min=3).partial_validate("ab", 2)

        assert partial.first_error_offset == 0
        assert partial.suggestion == "Need 1 more characters"

    def test_min_length_requires_min(self, make_rule):
        """Test that a missing parameter is a configuration error."""
        with pytest.raises(ArgumentError):
            make_rule("min_length")

    def test_max_length_message(self, make_rule):
        """Test the max_length failure message."""
        outcome = make_rule("max_length", max=5).validate("abcdefg")

        assert outcome.message == "Maximum length is 5 characters (currently 7)"

    def test_max_length_partial_soft_limit(self, make_rule):
        """Test that a soft limit colors the excess but allows typing."""
        partial = make_rule("max_length", max=5).partial_validate("abcdefg", 7)

        assert partial.first_error_offset == 5
        assert partial.can_continue is True

    def test_max_length_hard_limit_stops_at_limit(self, make_rule):
        """Test that a hard limit refuses further typing once full."""
        rule = make_rule("max_length", max=5, hard_limit=True)

        full = rule.partial_validate("abcde", 5)
        over = rule.partial_validate("abcdef", 6)

        assert full.first_error_offset is None
        assert full.can_continue is False
        assert over.first_error_offset == 5
        assert over.can_continue is False

    def test_max_length_potential_message(self, make_rule):
        """Test the worst-case message used for sizing."""
        assert make_rule("max_length", max=5).potential_messages() == ["Maximum length is 5 characters (currently 50)"]

    def test_negative_limit_rejected(self, make_rule):
        """Test that negative limits are configuration errors."""
        with pytest.raises(ArgumentError):
            make_rule("max_length", max=-1)


class TestPattern:
    """Test the pattern validator."""

    def test_match(self, make_rule):
        """Test full matching."""
        rule = make_rule("pattern", pattern="^[a-z]+$")

        assert rule.validate("abc").passed is True
        assert rule.validate("ab1").message == "Must match pattern: ^[a-z]+$"

    def test_partial_offset(self, make_rule):
        """Test that the first offending prefix is reported."""
        partial = make_rule("pattern", pattern="^[a-z]+$").partial_validate("ab1c", 4)

        assert partial.first_error_offset == 2

    def test_partial_empty_is_ok(self, make_rule):
        """Test that nothing typed is not an error."""
        assert make_rule("pattern", pattern="^[a-z]+$").partial_validate("", 0).first_error_offset is None

    def test_invalid_regex(self, make_rule):
        """Test that a bad pattern is rejected when the rule is built."""
        with pytest.raises(ArgumentError) as exc_info:
            make_rule("pattern", pattern="(")

        assert exc_info.value.code == ErrorCode.INVALID_PATTERN
        assert exc_info.value.exit_code == 2


class TestCustomMessages:
    """Test message templates."""

    def test_template_uses_metadata(self, make_rule):
        """Test that placeholders are filled from rule metadata."""
        rule = make_rule("min_length", message="Need {min_length} chars, got {actual_length}", min=3)

        assert rule.validate("ab").message == "Need 3 chars, got 2"

    def test_unknown_placeholder_kept(self, make_rule):
        """Test that unknown placeholders stay as written."""
        rule = make_rule("required", message="Please fill {field}")

        assert rule.validate("").message == "Please fill {field}"

    def test_template_applies_to_potential_messages(self, make_rule):
        """Test that sizing sees the custom message."""
        rule = make_rule("required", message="Name please")

        assert rule.potential_messages() == ["Name please"]
