"""
Tests for the choice validator and its parsing helpers.
"""

import pytest

from askr_core.errors import ArgumentError
from askr_core.validation.rules.choice import detect_separator, parse_choices, split_selection


class TestParsing:
    """Test choice list parsing."""

    def test_parse_trims_and_drops_empty(self):
        """Test trimming and empty entry removal."""
        assert parse_choices("a, b ,,c") == ["a", "b", "c"]

    def test_newlines_win_over_commas(self):
        """Test separator detection."""
        assert detect_separator("a\nb,c") == "\n"
        assert parse_choices("a\nb,c") == ["a", "b,c"]

    def test_explicit_separator(self):
        """Test an explicit separator."""
        assert parse_choices("auth;db;api", ";") == ["auth", "db", "api"]

    def test_split_selection(self):
        """Test splitting a submitted multi-choice value."""
        assert split_selection("auth | api", " | ") == ["auth", "api"]
        assert split_selection("a,b", ",") == ["a", "b"]


class TestSingleChoice:
    """Test single-selection membership."""

    def setup_method(self):
        """Set up test fixtures."""
        self.choices = "dev,staging,prod"

    def test_membership_is_case_insensitive_by_default(self, make_rule):
        """Test default case folding."""
        rule = make_rule("choice", choices=self.choices)

        assert rule.validate("staging").passed is True
        assert rule.validate("STAGING").passed is True

    def test_case_sensitive(self, make_rule):
        """Test case-sensitive matching."""
        rule = make_rule("choice", choices=self.choices, case_sensitive=True)

        assert rule.validate("STAGING").passed is False

    def test_invalid_choice_message(self, make_rule):
        """Test the message lists the valid options."""
        outcome = make_rule("choice", choices=self.choices).validate("qa")

        assert outcome.message == "Invalid choice(s): qa. Valid options: dev, staging, prod"

    def test_empty_selection(self, make_rule):
        """Test that nothing selected violates min_choices."""
        assert make_rule("choice", choices=self.choices).validate("").message == "At least 1 choice(s) required"

    def test_partial(self, make_rule):
        """Test that impossible prefixes are flagged."""
        rule = make_rule("choice", choices=self.choices)

        assert rule.partial_validate("sta", 3).first_error_offset is None
        assert rule.partial_validate("stx", 3).first_error_offset == 2


class TestMultiChoice:
    """Test multi-selection counts and duplicates."""

    def setup_method(self):
        """Set up test fixtures."""
        self.params = {"choices": ["dev", "staging", "prod"], "max_choices": 2}

    def test_within_bounds(self, make_rule):
        """Test an accepted selection."""
        assert make_rule("choice", **self.params).validate("dev,prod").passed is True

    def test_too_many(self, make_rule):
        """Test max_choices."""
        outcome = make_rule("choice", **self.params).validate("dev,prod,staging")

        assert outcome.message == "At most 2 choice(s) allowed"
        assert outcome.metadata["count"] == 3

    def test_duplicates(self, make_rule):
        """Test duplicate detection."""
        outcome = make_rule("choice", **self.params).validate("dev,DEV")

        assert outcome.message == "Duplicate choices not allowed: dev"

    def test_partial_checks_current_entry(self, make_rule):
        """Test that only the entry being typed is checked."""
        rule = make_rule("choice", **self.params)

        assert rule.partial_validate("dev, pr", 7).first_error_offset is None
        assert rule.partial_validate("dev, prx", 8).first_error_offset == 7

    def test_potential_messages_cover_duplicates(self, make_rule):
        """Test the worst-case messages of a multi-choice rule."""
        messages = make_rule("choice", **self.params).potential_messages()

        assert "Duplicate choices not allowed: staging" in messages
        assert "Invalid choice(s): staging. Valid options: dev, staging, prod" in messages


class TestChoiceConfiguration:
    """Test rejected configurations."""

    def test_no_choices(self, make_rule):
        """Test that an empty list is rejected."""
        with pytest.raises(ArgumentError):
            make_rule("choice", choices=" , ")

    def test_min_above_max(self, make_rule):
        """Test inverted bounds."""
        with pytest.raises(ArgumentError):
            make_rule("choice", choices="a,b", min_choices=3, max_choices=2)

    def test_multi_choice_label_with_separator(self, make_rule):
        """Test that multi-selection labels cannot contain the selection separator."""
        with pytest.raises(ArgumentError):
            make_rule("choice", choices=["Austin, TX", "Boston, MA"], max_choices=2)


class TestLabelsWithSeparator:
    """Test single selection of labels that contain the selection separator."""

    def setup_method(self):
        """Set up test fixtures."""
        self.choices = ["Austin, TX", "Boston, MA"]

    def test_whole_label_is_one_entry(self, make_rule):
        """Test that a full label is not split on the separator."""
        outcome = make_rule("choice", choices=self.choices).validate("Austin, TX")

        assert outcome.passed is True
        assert outcome.metadata["count"] == 1

    def test_partial_accepts_label_prefix(self, make_rule):
        """Test that typing a label with a comma is not colored invalid."""
        assert make_rule("choice", choices=self.choices).partial_validate("Austin, T", 9).first_error_offset is None
