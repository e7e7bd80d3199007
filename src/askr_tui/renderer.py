"""
Frame rendering for the reserved prompt region.

A frame is a list of styled rich Text lines, at most one per reserved line.
FrameBuilder turns session state into frames; Renderer converts each line to
ANSI through an off-screen rich Console and rewrites only the lines that
changed since the previous frame.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from typing import IO

from rich.cells import cell_len
from rich.console import Console
from rich.control import Control, ControlType
from rich.text import Text

from askr_core.validation import PartialResult, ValidationOutcome

from .layout import wrap_text
from .styling import ColorScheme, MessageStyler
from .terminal import TerminalCapabilities

logger = logging.getLogger(__name__)

_ERASE_LINE = str(Control((ControlType.ERASE_IN_LINE, 0)))


class FrameBuilder:
    """Builds the styled lines of one frame for a given terminal width."""

    def __init__(self, width: int, styler: MessageStyler) -> None:
        self.width = max(width, 1)
        self.styler = styler

    @property
    def scheme(self) -> ColorScheme:
        return self.styler.scheme

    def input_line(
        self,
        prompt: str,
        text: str,
        cursor: int,
        partial: PartialResult | None = None,
        mask_char: str | None = None,
    ) -> tuple[Text, int]:
        """
        Build the input line and the cursor column on it.

        Characters from the first invalid offset onward use the invalid style.
        When the input is wider than the terminal only a window around the
        cursor is shown.

        Args:
            prompt: Prompt label, drawn before the input
            text: Real buffer contents
            cursor: Scalar cursor index into ``text``
            partial: Partial validation result driving the coloring
            mask_char: Glyph replacing every character, None to show the text

        Returns:
            Tuple of (line, cursor column)
        """
        label = f"{prompt} " if prompt else ""
        line = Text(no_wrap=True)
        line.append(label, style=self.scheme.prompt)
        label_cells = cell_len(label)

        shown = mask_char * len(text) if mask_char else text
        available = max(1, self.width - label_cells - 1)
        start, end = self._window(shown, cursor, available)

        offset = partial.first_error_offset if partial is not None else None
        for index in range(start, end):
            invalid = offset is not None and index >= offset
            style = self.scheme.invalid_text if invalid else (self.scheme.masked_text if mask_char else self.scheme.valid_text)
            line.append(shown[index], style=style)

        column = label_cells + cell_len(shown[start:cursor])
        return line, min(column, self.width - 1)

    @staticmethod
    def _window(shown: str, cursor: int, available: int) -> tuple[int, int]:
        start = 0
        while start < cursor and cell_len(shown[start:cursor]) > available:
            start += 1
        end = start
        while end < len(shown) and cell_len(shown[start : end + 1]) <= available:
            end += 1
        return start, end

    def message_lines(self, shown: Sequence[ValidationOutcome], hidden: int, capacity: int) -> list[Text]:
        """
        Wrap the displayed messages into at most ``capacity`` lines.

        Messages that do not fit are counted into a trailing "+N more" line.
        """
        if capacity <= 0:
            return []

        lines: list[Text] = []
        pending = list(shown)
        while pending:
            wrapped = wrap_text(self.styler.message(pending[0]), self.width)
            reserve = 1 if hidden or len(pending) > 1 else 0
            room = capacity - len(lines) - reserve
            if len(wrapped) > room:
                if lines or room <= 0:
                    break
                wrapped = wrapped[:room]
            lines.extend(wrapped)
            pending.pop(0)

        hidden += len(pending)
        if hidden:
            lines = lines[: capacity - 1]
            lines.append(self.styler.overflow(hidden))
        return lines

    def status_lines(self, status: Text | None, capacity: int) -> list[Text]:
        """Lines for a message that is not part of the rule report."""
        if capacity <= 0 or status is None:
            return []
        return wrap_text(status, self.width)[:capacity]

    def help_lines(self, help_text: str | None, capacity: int) -> list[Text]:
        if capacity <= 0 or not help_text:
            return []
        return wrap_text(self.styler.help(help_text), self.width)[:capacity]


class Renderer:
    """
    Draws frames into the reserved region of ``output``.

    The cursor starts on the first reserved line. The renderer tracks which
    region row the cursor is on, so every move is relative and nothing above
    the region is ever touched.
    """

    def __init__(
        self,
        output: IO[str],
        capabilities: TerminalCapabilities,
        reserved_lines: int,
        scheme: ColorScheme | None = None,
    ) -> None:
        self.output = output
        self.capabilities = capabilities
        self.reserved_lines = max(1, reserved_lines)
        self.scheme = scheme or (ColorScheme.default() if capabilities.supports_color else ColorScheme.no_color())
        self._console = Console(
            file=io.StringIO(),
            force_terminal=True,
            color_system=capabilities.color_system or "standard",
            no_color=not capabilities.supports_color,
            width=max(capabilities.width, 1),
            highlight=False,
            markup=False,
            emoji=False,
        )
        self._last: list[str | None] = [None] * self.reserved_lines
        self._row = 0

    @property
    def width(self) -> int:
        return self.capabilities.width

    def to_ansi(self, line: Text) -> str:
        """Render one line to a string with ANSI styling."""
        with self._console.capture() as capture:
            self._console.print(line, end="", soft_wrap=True)
        return capture.get()

    def invalidate(self) -> None:
        """Forget the previous frame so the next render redraws every line."""
        self._last = [None] * self.reserved_lines

    def resize(self, width: int, height: int) -> None:
        self.capabilities = self.capabilities.resized(width, height)
        self._console.width = max(width, 1)
        self.invalidate()
        # The terminal may have reflowed the region; restart from the line start
        self.output.write(str(Control.move_to_column(0)))
        logger.debug(f"Renderer resized to {width}x{height}")

    def render(self, lines: Sequence[Text], cursor_column: int, cursor_row: int = 0) -> int:
        """
        Draw a frame and place the cursor.

        Lines past the reserved region are dropped and missing lines are
        blanked, so the frame always covers exactly the reserved region.

        Returns:
            Number of lines rewritten
        """
        frame = [self.to_ansi(self._fit(line)) for line in list(lines)[: self.reserved_lines]]
        frame += [""] * (self.reserved_lines - len(frame))

        changed = 0
        parts: list[str] = []
        if self.capabilities.cursor_control:
            parts.append(str(Control.show_cursor(False)))

        for row, ansi in enumerate(frame):
            if self._last[row] == ansi:
                continue
            parts.append(self._move_to(row, 0))
            parts.append(ansi)
            parts.append(_ERASE_LINE)
            self._last[row] = ansi
            changed += 1

        parts.append(self._move_to(min(cursor_row, self.reserved_lines - 1), cursor_column))
        if self.capabilities.cursor_control:
            parts.append(str(Control.show_cursor(True)))

        self.output.write("".join(parts))
        self.output.flush()
        return changed

    def finish(self, lines: Sequence[Text] | None = None) -> None:
        """
        Leave the cursor on the line below the drawn content.

        Args:
            lines: Optional final frame, drawn first; without it the last
                frame stays on screen
        """
        if lines is not None:
            self.render(lines, 0, 0)
        content = [row for row, ansi in enumerate(self._last) if ansi]
        last_row = content[-1] if content else 0
        self.output.write(self._move_to(last_row, 0))
        self.output.write("\n")
        if self.capabilities.cursor_control:
            self.output.write(str(Control.show_cursor(True)))
        self.output.flush()
        self._row = 0

    def _fit(self, line: Text) -> Text:
        if line.cell_len <= self.width:
            return line
        fitted = line.copy()
        fitted.truncate(self.width, overflow="crop")
        return fitted

    def _move_to(self, row: int, column: int) -> str:
        control = Control.move_to_column(max(column, 0), row - self._row)
        self._row = row
        return str(control)
