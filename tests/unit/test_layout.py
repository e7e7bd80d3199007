"""
Tests for space reservation of the prompt region.
"""

from rich.text import Text

from askr_core.validation import Priority, ValidationOutcome
from askr_tui.layout import SpacePlan, SpacePlanner, wrap_text, wrapped_height


def failure(priority, message="x"):
    return ValidationOutcome(rule_id=message, passed=False, priority=priority, message=message)


class TestWrapping:
    """Test width-aware wrapping."""

    def test_wrapped_height_includes_marker(self):
        """Test that the marker counts towards the line width."""
        assert wrapped_height("x" * 7, width=10) == 1
        assert wrapped_height("x" * 8, width=10) == 2

    def test_wide_characters(self):
        """Test that double-width characters take two cells."""
        assert wrapped_height("日本語日本", width=10, marker_width=0) == 1
        assert wrapped_height("日本語日本語", width=10, marker_width=0) == 2

    def test_empty_text(self):
        """Test that empty text is one line."""
        assert len(wrap_text(Text(""), 10)) == 1


class TestPlanInput:
    """Test planning a free-text prompt."""

    def test_worst_case_messages(self, make_engine):
        """Test that every potential message gets a line."""
        engine = make_engine({"kind": "required"}, {"kind": "min_length", "params": {"min": 3}})

        plan = SpacePlanner(80, 24).plan_input(engine)

        assert plan == SpacePlan(total=3, error_lines=2, help_lines=0)
        assert plan.message_capacity == 2

    def test_help_text(self, make_engine):
        """Test that help text is reserved below the messages."""
        engine = make_engine({"kind": "required"})

        plan = SpacePlanner(80, 24).plan_input(engine, help_text="Your full name")

        assert plan == SpacePlan(total=3, error_lines=1, help_lines=1)

    def test_no_rules(self, make_engine):
        """Test that a prompt without rules only needs its input line."""
        assert SpacePlanner(80, 24).plan_input(make_engine()).total == 1

    def test_minimum_message_lines(self, make_engine):
        """Test that a status line can be reserved without rules."""
        plan = SpacePlanner(80, 24).plan_input(make_engine(), min_error_lines=1)

        assert plan.total == 2
        assert plan.message_capacity == 1

    def test_clamped_to_terminal_height(self, make_engine):
        """Test that the region never exceeds the terminal height minus one."""
        engine = make_engine({"kind": "required"}, {"kind": "min_length", "params": {"min": 3}})

        plan = SpacePlanner(80, 3).plan_input(engine, help_text="help")

        assert plan.total == 2
        assert plan.error_lines == 1
        assert plan.help_lines == 0

    def test_narrow_terminal_wraps_messages(self, make_engine):
        """Test that long messages take several lines on a narrow terminal."""
        engine = make_engine({"kind": "min_length", "params": {"min": 3}})

        wide = SpacePlanner(80, 24).plan_input(engine)
        narrow = SpacePlanner(20, 24).plan_input(engine)

        assert narrow.error_lines > wide.error_lines


class TestErrorHeight:
    """Test worst-case message height."""

    def test_low_only_screen_can_be_taller(self):
        """Test that the screen without blocking failures is sized too."""
        failures = [failure(Priority.HIGH, "h"), failure(Priority.LOW, "l1"), failure(Priority.LOW, "l2"), failure(Priority.LOW, "l3")]

        # Blocking screen: one message plus "+3 more"; non-blocking screen: two plus "+1 more"
        assert SpacePlanner(80, 24).error_height(failures) == 3

    def test_capped_by_max_error_lines(self):
        """Test the configured cap."""
        failures = [failure(Priority.HIGH, f"m{i}") for i in range(5)]

        assert SpacePlanner(80, 24, max_error_lines=2).error_height(failures) == 2

    def test_no_failures(self):
        """Test that no rules need no lines."""
        assert SpacePlanner(80, 24).error_height([]) == 0


    def test_tag_markers_are_wider(self):
        """Test that no-color tags are sized by their own width."""
        failures = [failure(Priority.HIGH, "x" * 7)]

        assert SpacePlanner(10, 24).error_height(failures) == 1
        assert SpacePlanner(10, 24, marker_width=8).error_height(failures) == 2


class TestPlanChoice:
    """Test planning a choice menu."""

    def test_all_rows_fit(self):
        """Test prompt, instruction, rows and one status line."""
        plan = SpacePlanner(80, 24).plan_choice(3)

        assert plan == SpacePlan(total=6, error_lines=1, help_lines=0, menu_lines=4)
        assert plan.message_capacity == 1

    def test_long_list_is_clamped(self):
        """Test that a list taller than the terminal scrolls inside the menu."""
        plan = SpacePlanner(80, 10).plan_choice(30, help_text="pick one")

        assert plan.total == 9
        assert plan.menu_lines == 8
        assert plan.help_lines == 0
