"""
Choice menu mode.

When a prompt carries a choice list, the free-text buffer is replaced by a
navigable list. Single-selection menus submit the highlighted row on Enter;
multi-selection menus toggle rows with Space and submit only when the
selection size is within the configured bounds.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from rich.text import Text

from askr_core.errors import ArgumentError
from askr_core.prompt_config import ChoiceConfig, PromptConfig
from askr_core.validation import Priority, ValidationEngine, ValidationOutcome

from .events import EventSource
from .keys import Key, KeyEvent
from .layout import SpacePlan
from .renderer import Renderer
from .session import EventLoopSession, SessionState

logger = logging.getLogger(__name__)

SINGLE_INSTRUCTION = "Use ↑↓ to navigate, ENTER to select:"
MULTI_INSTRUCTION = "Use ↑↓ to navigate, SPACE to toggle, ENTER to submit:"
COUNT_RULE_ID = "choice_count"


@dataclass(frozen=True)
class ChoiceItem:
    """One row of the menu."""

    label: str
    value: str


@dataclass
class ChoiceList:
    """
    Ordered choices with a highlighted row and a selection set.

    The selection holds indices; the submitted value always lists labels in
    their original order, whatever order they were toggled in.
    """

    items: list[ChoiceItem]
    min_choices: int = 1
    max_choices: int = 1
    selection_separator: str = ","
    highlighted: int = 0
    selected: set[int] = field(default_factory=set)

    @classmethod
    def from_config(cls, config: ChoiceConfig) -> ChoiceList:
        return cls(
            items=[ChoiceItem(label, label) for label in config.labels],
            min_choices=config.min_choices,
            max_choices=config.max_choices,
            selection_separator=config.selection_separator,
        )

    @property
    def multi(self) -> bool:
        return self.max_choices > 1

    def __len__(self) -> int:
        return len(self.items)

    def move_up(self) -> bool:
        if self.highlighted == 0:
            return False
        self.highlighted -= 1
        return True

    def move_down(self) -> bool:
        if self.highlighted >= len(self.items) - 1:
            return False
        self.highlighted += 1
        return True

    def toggle(self, index: int | None = None) -> None:
        index = self.highlighted if index is None else index
        if index in self.selected:
            self.selected.discard(index)
        else:
            self.selected.add(index)

    @property
    def selection(self) -> list[int]:
        return sorted(self.selected)

    @property
    def count_ok(self) -> bool:
        return self.min_choices <= len(self.selected) <= self.max_choices

    def count_violation(self) -> str | None:
        """Message for a selection outside [min_choices, max_choices], if any."""
        count = len(self.selected)
        if count < self.min_choices:
            return f"At least {self.min_choices} choice(s) required"
        if count > self.max_choices:
            return f"At most {self.max_choices} choice(s) allowed"
        return None

    def value(self) -> str:
        """Selected values joined by the selection separator, in list order."""
        return self.selection_separator.join(self.items[index].value for index in self.selection)

    def window(self, rows: int) -> range:
        """Indices of the rows to draw so the highlighted row stays visible."""
        rows = max(rows, 0)
        if len(self.items) <= rows:
            return range(len(self.items))
        start = min(max(0, self.highlighted - rows + 1), len(self.items) - rows)
        return range(start, start + rows)


class ChoiceMenuController(EventLoopSession):
    """Event loop over a ChoiceList."""

    def __init__(
        self,
        engine: ValidationEngine,
        renderer: Renderer,
        plan: SpacePlan,
        source: EventSource,
        choices: ChoiceList,
        prompt: str,
        **kwargs,
    ) -> None:
        super().__init__(engine, renderer, plan, source, **kwargs)
        self.choices = choices
        self.prompt = prompt
        self.status: ValidationOutcome | None = None

    @classmethod
    def from_config(
        cls,
        config: PromptConfig,
        engine: ValidationEngine,
        renderer: Renderer,
        plan: SpacePlan,
        source: EventSource,
        clock: Callable[[], float] = time.monotonic,
    ) -> ChoiceMenuController:
        if config.choice is None:
            raise ArgumentError("Prompt configuration has no choices")
        return cls(
            engine,
            renderer,
            plan,
            source,
            choices=ChoiceList.from_config(config.choice),
            prompt=config.display_prompt,
            timeout=config.interaction.timeout,
            max_attempts=config.interaction.max_attempts,
            help_text=config.ui.help_text,
            clock=clock,
        )

    def handle_key(self, event: KeyEvent) -> None:
        key = event.key
        if key is Key.UP or (key is Key.CHAR and event.char == "k"):
            self.choices.move_up()
        elif key is Key.DOWN or (key is Key.CHAR and event.char == "j"):
            self.choices.move_down()
        elif key is Key.CHAR and event.char == " " and self.choices.multi:
            self.choices.toggle()
            self.status = None
        elif key is Key.ENTER:
            self.submit()
        elif key is Key.EOF:
            self.state = SessionState.END_OF_INPUT

    def submit(self) -> None:
        """Submit the highlighted row (single mode) or the toggled set (multi mode)."""
        self.attempts += 1
        if not self.choices.multi:
            self.choices.selected = {self.choices.highlighted}

        violation = self.choices.count_violation()
        if violation is not None:
            self.status = ValidationOutcome.failure(COUNT_RULE_ID, Priority.CRITICAL, violation)
            self.record_failure()
            return

        value = self.choices.value()
        self.report = self.engine.validate(value, force=True)
        if not self.engine.accepts(self.report):
            self.status = self.report.failures[0] if self.report.failures else None
            self.record_failure()
            return

        logger.debug(f"Selected {len(self.choices.selected)} choice(s)")
        self.value = value
        self.state = SessionState.SUBMITTING

    def _row(self, index: int) -> Text:
        item = self.choices.items[index]
        scheme = self.styler.scheme
        highlighted = index == self.choices.highlighted
        if self.choices.multi:
            mark = "[✓]" if index in self.choices.selected else "[ ]"
            prefix = f"{'>' if highlighted else ' '} {mark} "
        else:
            prefix = "> " if highlighted else "  "
        return Text(prefix + item.label, style=scheme.highlighted if highlighted else scheme.valid_text)

    def frame(self) -> tuple[list[Text], int, int]:
        scheme = self.styler.scheme
        prompt = Text(self.prompt, style=scheme.prompt)
        menu_lines = self.plan.menu_lines
        lines = [prompt]
        rows: list[Text] = []
        if menu_lines > 0:
            instruction = MULTI_INSTRUCTION if self.choices.multi else SINGLE_INSTRUCTION
            rows.append(Text(instruction, style=scheme.instruction))
            rows += [self._row(index) for index in self.choices.window(menu_lines - 1)]
        lines += self.padded(rows, menu_lines)

        capacity = self.plan.message_capacity
        status: list[Text] = []
        if self.status is not None:
            status = self.builder.message_lines([self.status], 0, capacity)
        lines += self.padded(status, capacity)
        lines += self.builder.help_lines(self.help_text, self.plan.help_lines)

        highlighted_row = 2 + list(self.choices.window(menu_lines - 1)).index(self.choices.highlighted) if menu_lines > 1 else 0
        return lines, 0, min(highlighted_row, len(lines) - 1)

    def final_frame(self) -> list[Text]:
        scheme = self.styler.scheme
        line = Text()
        line.append(f"{self.prompt} ", style=scheme.prompt)
        if self.value is not None:
            line.append(self.value, style=scheme.success)
        return [line]
