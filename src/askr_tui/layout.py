"""
Space reservation for the prompt region.

The region below the cursor is sized once, before the first keystroke, from
the worst case the rules can produce: every rule's longest message, wrapped to
the terminal width and filtered through the display policy. Sizing it once
keeps the prompt from jumping when messages appear and disappear.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass

from rich.console import Console
from rich.text import Text

from askr_core.validation import DisplayPolicy, Priority, ValidationEngine, ValidationOutcome

logger = logging.getLogger(__name__)

_measure_console = Console(file=io.StringIO(), color_system=None, width=200, highlight=False)


def wrap_text(text: Text, width: int) -> list[Text]:
    """Word-wrap ``text`` to ``width`` cells, folding words longer than a line."""
    if not text.plain:
        return [text]
    return list(text.wrap(_measure_console, max(width, 1), overflow="fold"))


def wrapped_height(message: str, width: int, marker_width: int = 3) -> int:
    """Number of lines ``message`` takes behind a priority marker."""
    return len(wrap_text(Text(" " * marker_width + message), width))


@dataclass(frozen=True)
class SpacePlan:
    """Fixed line budget of the prompt region."""

    total: int
    error_lines: int
    help_lines: int
    menu_lines: int = 0

    @property
    def message_capacity(self) -> int:
        """Lines available for messages once the input and help lines are placed."""
        return max(0, self.total - 1 - self.menu_lines - self.help_lines)


class SpacePlanner:
    """Computes the line budget R for the interactive region."""

    def __init__(
        self,
        width: int,
        height: int,
        display_policy: DisplayPolicy | None = None,
        max_error_lines: int = 10,
        marker_width: int = 3,
    ):
        self.width = max(width, 1)
        self.height = max(height, 2)
        self.display_policy = display_policy or DisplayPolicy()
        self.max_error_lines = max_error_lines
        self.marker_width = marker_width

    def help_height(self, help_text: str | None) -> int:
        if not help_text:
            return 0
        return len(wrap_text(Text(help_text), self.width))

    def error_height(self, failures: list[ValidationOutcome]) -> int:
        """
        Worst-case message lines for a set of potential failures.

        Low-priority messages are only displayed while nothing blocking fails,
        so the blocking-plus-medium screen and the medium-plus-low screen are
        sized separately and the larger one wins.
        """
        if not failures:
            return 0

        blocking = [outcome for outcome in failures if outcome.priority.is_blocking]
        non_blocking = [outcome for outcome in failures if not outcome.priority.is_blocking]
        scenarios = [failures]
        if blocking and any(outcome.priority is Priority.LOW for outcome in failures):
            scenarios.append(non_blocking)

        worst = 0
        for scenario in scenarios:
            shown, hidden = self.display_policy.select(scenario)
            lines = sum(wrapped_height(outcome.message or "", self.width, self.marker_width) for outcome in shown)
            if hidden:
                lines += 1
            worst = max(worst, lines)
        return min(worst, self.max_error_lines)

    def _clamp(self, lines: int) -> int:
        return max(1, min(lines, self.height - 1))

    def plan_input(self, engine: ValidationEngine, help_text: str | None = None, min_error_lines: int = 0) -> SpacePlan:
        """Plan a free-text prompt: input line, message area, help."""
        help_lines = self.help_height(help_text)
        error_lines = max(self.error_height(engine.potential_failures()), min_error_lines)
        total = self._clamp(1 + error_lines + help_lines)
        error_lines = min(error_lines, total - 1)
        help_lines = min(help_lines, total - 1 - error_lines)
        plan = SpacePlan(total=total, error_lines=error_lines, help_lines=help_lines)
        logger.debug(f"Planned input region: {plan}")
        return plan

    def plan_choice(self, choice_count: int, help_text: str | None = None) -> SpacePlan:
        """Plan a choice menu: prompt, instruction, rows, one status line, help."""
        help_lines = self.help_height(help_text)
        total = self._clamp(1 + 1 + choice_count + 1 + help_lines)
        remaining = total - 1
        menu_lines = min(1 + choice_count, remaining)
        remaining -= menu_lines
        status_lines = min(1, remaining)
        help_lines = min(help_lines, remaining - status_lines)
        plan = SpacePlan(total=total, error_lines=status_lines, help_lines=help_lines, menu_lines=menu_lines)
        logger.debug(f"Planned choice region: {plan}")
        return plan
