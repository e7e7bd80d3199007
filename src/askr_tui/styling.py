"""
Shared styling for the askr terminal front end.

This module maps semantic roles (prompt, valid input, invalid input, message
priorities, help, menu rows) to rich Styles, and builds the styled Text lines
the renderer draws.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.cells import cell_len
from rich.style import Style
from rich.text import Text

from askr_core.validation import Priority, ValidationOutcome


@dataclass(frozen=True)
class ColorScheme:
    """Styles per semantic role; every role is plain in the no-color scheme."""

    prompt: Style = Style(bold=True)
    valid_text: Style = Style()
    invalid_text: Style = Style(color="red", underline=True)
    masked_text: Style = Style()
    help_text: Style = Style(color="bright_black")
    error: Style = Style(color="red")
    warning: Style = Style(color="yellow")
    info: Style = Style(color="blue")
    success: Style = Style(color="green")
    highlighted: Style = Style(color="black", bgcolor="white")
    instruction: Style = Style(color="bright_black", italic=True)
    overflow: Style = Style(color="bright_black")

    @classmethod
    def default(cls) -> ColorScheme:
        return cls()

    @classmethod
    def no_color(cls) -> ColorScheme:
        plain = Style()
        return cls(
            prompt=plain,
            valid_text=plain,
            invalid_text=plain,
            masked_text=plain,
            help_text=plain,
            error=plain,
            warning=plain,
            info=plain,
            success=plain,
            highlighted=Style(reverse=True),
            instruction=plain,
            overflow=plain,
        )

    def for_priority(self, priority: Priority) -> Style:
        if priority.is_blocking:
            return self.error
        if priority is Priority.MEDIUM:
            return self.warning
        return self.info


class MessageStyler:
    """Builds the styled lines shown under the input."""

    def __init__(self, scheme: ColorScheme, use_icons: bool = True) -> None:
        self.scheme = scheme
        self.use_icons = use_icons

    @classmethod
    def for_color(cls, supports_color: bool) -> MessageStyler:
        """Icons and colors on color terminals, plain tags otherwise."""
        scheme = ColorScheme.default() if supports_color else ColorScheme.no_color()
        return cls(scheme, use_icons=supports_color)

    @property
    def marker_width(self) -> int:
        """Cells taken by the widest marker and the space after it."""
        return max(cell_len(self.marker(priority)) for priority in Priority) + 1

    def marker(self, priority: Priority) -> str:
        return priority.icon if self.use_icons else priority.tag

    def message(self, outcome: ValidationOutcome) -> Text:
        """One failing outcome as ``<icon> <message>``."""
        text = Text(f"{self.marker(outcome.priority)} ", style=self.scheme.for_priority(outcome.priority))
        text.append(outcome.message or outcome.rule_id, style=self.scheme.for_priority(outcome.priority))
        return text

    def plain(self, message: str, priority: Priority) -> Text:
        """A message that is not backed by a rule outcome."""
        return Text(f"{self.marker(priority)} {message}", style=self.scheme.for_priority(priority))

    def overflow(self, hidden: int) -> Text:
        return Text(f"+{hidden} more", style=self.scheme.overflow)

    def help(self, help_text: str) -> Text:
        return Text(help_text, style=self.scheme.help_text)
