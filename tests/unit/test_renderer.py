"""
Tests for frame building and differential rendering.
"""

import io

from rich.text import Text

from askr_core.validation import PartialResult, Priority, ValidationOutcome
from askr_tui.renderer import FrameBuilder, Renderer
from askr_tui.styling import ColorScheme, MessageStyler
from askr_tui.terminal import TerminalCapabilities

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"


def capabilities(width=40, height=10, color_system=None, cursor_control=True):
    return TerminalCapabilities(
        is_terminal=True,
        cursor_control=cursor_control,
        color_system=color_system,
        width=width,
        height=height,
    )


def outcome(message, priority=Priority.HIGH):
    return ValidationOutcome(rule_id=message, passed=False, priority=priority, message=message)


class TestInputLine:
    """Test building the input line."""

    def setup_method(self):
        """Set up test fixtures."""
        self.scheme = ColorScheme.default()
        self.builder = FrameBuilder(40, MessageStyler(self.scheme))

    def test_prompt_and_text(self):
        """Test the label and the cursor column."""
        line, column = self.builder.input_line("Name:", "abc", 3)

        assert line.plain == "Name: abc"
        assert column == 9

    def test_cursor_inside_text(self):
        """Test the column for a cursor in the middle."""
        _, column = self.builder.input_line("Name:", "abc", 1)

        assert column == 7

    def test_mask(self):
        """Test that masked input never shows the real text."""
        line, column = self.builder.input_line("Password:", "secret", 6, mask_char="*")

        assert line.plain == "Password: ******"
        assert "secret" not in line.plain
        assert column == 16

    def test_invalid_suffix_styled(self):
        """Test that characters from the error offset on use the invalid style."""
        line, _ = self.builder.input_line(">", "12a4", 4, PartialResult.error_at(2))

        invalid = {
            offset
            for span in line.spans
            if span.style == self.scheme.invalid_text
            for offset in range(span.start, span.end)
        }
        # Two label cells, so buffer offset 2 is line offset 4
        assert invalid == {4, 5}

    def test_prompt_style_only_on_label(self):
        """Test that the typed text does not inherit the prompt style."""
        line, _ = self.builder.input_line("Name:", "abc", 3)

        assert line.style == ""
        assert [(span.start, span.end) for span in line.spans if span.style == self.scheme.prompt] == [(0, 6)]

    def test_horizontal_scroll(self):
        """Test that long input scrolls to keep the cursor visible."""
        builder = FrameBuilder(10, MessageStyler(self.scheme))

        line, column = builder.input_line(">", "abcdefghijkl", 12)

        assert line.plain == "> fghijkl"
        assert column == 9

    def test_wide_characters(self):
        """Test that the cursor column counts terminal cells."""
        _, column = self.builder.input_line(">", "日本", 2)

        assert column == 6


class TestMessageLines:
    """Test message area layout."""

    def setup_method(self):
        """Set up test fixtures."""
        self.builder = FrameBuilder(40, MessageStyler(ColorScheme.no_color(), use_icons=False))

    def test_messages_fit(self):
        """Test one line per short message."""
        lines = self.builder.message_lines([outcome("first"), outcome("second", Priority.MEDIUM)], 0, 3)

        assert [line.plain for line in lines] == ["[ERROR] first", "[WARN] second"]

    def test_overflow_line(self):
        """Test that messages beyond the capacity collapse into +N more."""
        lines = self.builder.message_lines([outcome("a"), outcome("b"), outcome("c")], 0, 2)

        assert [line.plain for line in lines] == ["[ERROR] a", "+2 more"]

    def test_hidden_count_included(self):
        """Test that failures left out by the display policy are counted."""
        lines = self.builder.message_lines([outcome("a")], 4, 3)

        assert [line.plain for line in lines] == ["[ERROR] a", "+4 more"]

    def test_long_message_wraps(self):
        """Test that a long message wraps within the capacity."""
        lines = self.builder.message_lines([outcome("word " * 12)], 0, 5)

        assert 1 < len(lines) <= 5
        assert all(line.cell_len <= 40 for line in lines)

    def test_zero_capacity(self):
        """Test that nothing is drawn without room."""
        assert self.builder.message_lines([outcome("a")], 2, 0) == []

    def test_help_lines(self):
        """Test help text lines."""
        assert [line.plain for line in self.builder.help_lines("Press enter", 1)] == ["Press enter"]
        assert self.builder.help_lines(None, 1) == []


class TestRenderer:
    """Test drawing frames into the reserved region."""

    def setup_method(self):
        """Set up test fixtures."""
        self.output = io.StringIO()
        self.renderer = Renderer(self.output, capabilities(), reserved_lines=3)

    def test_first_render_draws_every_line(self):
        """Test that the first frame covers the whole region."""
        changed = self.renderer.render([Text("hello")], 5)

        assert changed == 3
        assert "hello" in self.output.getvalue()

    def test_unchanged_frame_draws_nothing(self):
        """Test differential redraw."""
        self.renderer.render([Text("hello"), Text("msg")], 5)

        assert self.renderer.render([Text("hello"), Text("msg")], 5) == 0
        assert self.renderer.render([Text("hello!"), Text("msg")], 6) == 1

    def test_cursor_hidden_while_drawing(self):
        """Test cursor visibility around a redraw."""
        self.renderer.render([Text("x")], 1)
        written = self.output.getvalue()

        assert written.index(HIDE_CURSOR) < written.index("x") < written.rindex(SHOW_CURSOR)

    def test_no_cursor_control_skips_visibility(self):
        """Test that dumb terminals get no cursor visibility sequences."""
        output = io.StringIO()
        Renderer(output, capabilities(cursor_control=False), 1).render([Text("x")], 1)

        assert HIDE_CURSOR not in output.getvalue()

    def test_lines_truncated_to_width(self):
        """Test that no line wraps past the terminal width."""
        output = io.StringIO()
        Renderer(output, capabilities(width=5), 1).render([Text("abcdefghij")], 0)

        assert "abcde" in output.getvalue()
        assert "abcdef" not in output.getvalue()

    def test_no_color(self):
        """Test that color is dropped without a color system."""
        assert "\x1b[31m" not in self.renderer.to_ansi(Text("x", style="red"))

    def test_color(self):
        """Test that color is emitted with a color system."""
        renderer = Renderer(io.StringIO(), capabilities(color_system="standard"), 1)

        assert "\x1b[31m" in renderer.to_ansi(Text("x", style="red"))

    def test_resize_redraws_everything(self):
        """Test that a resize forces a full redraw."""
        self.renderer.render([Text("hello")], 5)
        self.renderer.resize(30, 10)

        assert self.renderer.width == 30
        assert self.renderer.render([Text("hello")], 5) == 3

    def test_finish_moves_below_content(self):
        """Test that finishing leaves the cursor on a fresh line."""
        self.renderer.render([Text("done")], 4)
        self.renderer.finish()

        assert self.output.getvalue().endswith("\n" + SHOW_CURSOR)


class TestMessageStyler:
    """Test marker selection by color support."""

    def test_icons_with_color(self):
        """Test that color terminals get icons."""
        styler = MessageStyler.for_color(True)

        assert styler.marker(Priority.CRITICAL) == "❌"
        assert styler.marker_width == 3

    def test_tags_without_color(self):
        """Test that no-color output gets bracketed tags."""
        styler = MessageStyler.for_color(False)

        assert styler.marker(Priority.MEDIUM) == "[WARN]"
        assert styler.marker_width == 8
