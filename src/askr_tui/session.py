"""
Interactive session state machine.

A session owns the edit buffer and drives one event loop: wait for the next
event (or the inactivity deadline), update state, redraw. Validation runs
synchronously on every edit; nothing here spawns threads or coroutines.

States::

    EDITING -> SUBMITTING | CANCELLED | TIMED_OUT | MAX_ATTEMPTS_EXCEEDED | END_OF_INPUT

Every state except EDITING is terminal.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from rich.text import Text

from askr_core.errors import BaseAppError, ErrorCode, Interrupted, MaxAttemptsExceeded, SessionTimeout
from askr_core.prompt_config import PromptConfig
from askr_core.validation import Priority, ValidationEngine, ValidationReport

from .buffer import InputBuffer
from .events import Event, EventSource, ResizeEvent
from .keys import Key, KeyEvent
from .layout import SpacePlan
from .renderer import FrameBuilder, Renderer
from .styling import MessageStyler

logger = logging.getLogger(__name__)

MISMATCH_MESSAGE = "Values do not match"
CONFIRM_PROMPT = "Confirm:"


class SessionState(Enum):
    """Where a session is in its lifecycle."""

    EDITING = "editing"
    SUBMITTING = "submitting"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"
    END_OF_INPUT = "end_of_input"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionState.EDITING


@dataclass
class SessionOutcome:
    """How a session ended and, when it was submitted, with which value."""

    state: SessionState
    value: str | None = None
    report: ValidationReport | None = None
    attempts: int = 0
    timeout: float | None = None

    @property
    def submitted(self) -> bool:
        return self.state is SessionState.SUBMITTING

    def error(self) -> BaseAppError | None:
        """
        The error a caller should raise for this outcome.

        Returns:
            None for a submitted value, the matching session error otherwise
        """
        if self.state is SessionState.CANCELLED:
            return Interrupted()
        if self.state is SessionState.END_OF_INPUT:
            return Interrupted(ErrorCode.END_OF_INPUT, "End of input")
        if self.state is SessionState.TIMED_OUT:
            return SessionTimeout(self.timeout)
        if self.state is SessionState.MAX_ATTEMPTS_EXCEEDED:
            return MaxAttemptsExceeded(self.attempts)
        return None


_MOVES: dict[Key, Callable[[InputBuffer], bool]] = {
    Key.LEFT: InputBuffer.move_left,
    Key.RIGHT: InputBuffer.move_right,
    Key.HOME: InputBuffer.home,
    Key.END: InputBuffer.end,
}

_EDITS: dict[Key, Callable[[InputBuffer], bool]] = {
    Key.BACKSPACE: InputBuffer.backspace,
    Key.DELETE: InputBuffer.delete,
    Key.WORD_BACKSPACE: InputBuffer.delete_word_backward,
    Key.KILL_TO_END: InputBuffer.kill_to_end,
    Key.KILL_TO_START: InputBuffer.kill_to_start,
}


class EventLoopSession:
    """
    Event loop shared by the free-text session and the choice menu.

    Subclasses implement ``handle_key`` and ``frame``; the loop takes care of
    the inactivity deadline, Ctrl+C, resizes and redrawing.
    """

    def __init__(
        self,
        engine: ValidationEngine,
        renderer: Renderer,
        plan: SpacePlan,
        source: EventSource,
        styler: MessageStyler | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        help_text: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine
        self.renderer = renderer
        self.plan = plan
        self.source = source
        self.styler = styler or MessageStyler(renderer.scheme, use_icons=renderer.capabilities.supports_color)
        self.builder = FrameBuilder(renderer.width, self.styler)
        self.timeout = timeout if timeout and timeout > 0 else None
        self.max_attempts = max_attempts if max_attempts and max_attempts > 0 else None
        self.help_text = help_text
        self._clock = clock

        self.state = SessionState.EDITING
        self.attempts = 0
        self.failures = 0
        self.value: str | None = None
        self.report: ValidationReport | None = None

    def run(self) -> SessionOutcome:
        """Draw, then process events until a terminal state is reached."""
        self.draw()
        while not self.state.is_terminal:
            deadline = self._clock() + self.timeout if self.timeout is not None else None
            event = self.source.read_event(deadline)
            if event is None:
                logger.info(f"No input for {self.timeout}s, giving up")
                self.state = SessionState.TIMED_OUT
                break
            self.handle_event(event)
            if not self.state.is_terminal:
                self.draw()

        self.draw_final()
        logger.debug(f"Session ended in state {self.state.value} after {self.attempts} attempt(s)")
        return self.outcome()

    def handle_event(self, event: Event) -> None:
        if isinstance(event, ResizeEvent):
            self.renderer.resize(event.width, event.height)
            self.builder = FrameBuilder(event.width, self.styler)
            return
        if event.key is Key.INTERRUPT:
            self.state = SessionState.CANCELLED
            return
        self.handle_key(event)

    def handle_key(self, event: KeyEvent) -> None:
        raise NotImplementedError

    def frame(self) -> tuple[list[Text], int, int]:
        """Lines of the current frame plus the cursor (column, row)."""
        raise NotImplementedError

    def final_frame(self) -> list[Text]:
        lines, _, _ = self.frame()
        return lines[:1]

    def draw(self) -> None:
        lines, column, row = self.frame()
        self.renderer.render(lines, column, row)

    def draw_final(self) -> None:
        self.renderer.render(self.final_frame(), 0, 0)

    def record_failure(self) -> None:
        """Count a rejected submission and stop once the attempt budget is spent."""
        self.failures += 1
        logger.info(f"Submission rejected ({self.failures}/{self.max_attempts or 'unlimited'})")
        if self.max_attempts is not None and self.failures >= self.max_attempts:
            self.state = SessionState.MAX_ATTEMPTS_EXCEEDED

    def outcome(self) -> SessionOutcome:
        return SessionOutcome(
            state=self.state,
            value=self.value,
            report=self.report,
            attempts=self.attempts,
            timeout=self.timeout,
        )

    def padded(self, body: list[Text], capacity: int) -> list[Text]:
        return body[:capacity] + [Text("")] * (capacity - len(body))


class InteractiveSession(EventLoopSession):
    """
    Free-text prompt with live validation.

    The input is re-validated after every edit: the partial result colors the
    text from its first invalid character, the full report feeds the messages
    below the input. Enter submits through the engine's submission policy.
    With confirmation enabled an accepted value must be typed a second time.
    """

    def __init__(
        self,
        engine: ValidationEngine,
        renderer: Renderer,
        plan: SpacePlan,
        source: EventSource,
        prompt: str,
        default_value: str | None = None,
        mask_char: str | None = None,
        confirm: bool = False,
        **kwargs,
    ) -> None:
        super().__init__(engine, renderer, plan, source, **kwargs)
        self.prompt = prompt
        self.mask_char = mask_char
        self.buffer = InputBuffer(default_value or "")
        self.show_messages = False
        self.status: Text | None = None

        self._primary_engine = engine
        self._confirm_engine = engine.for_confirmation() if confirm else None
        self._first_value: str | None = None
        self._first_report: ValidationReport | None = None
        self.partial = self.engine.partial_validate(self.buffer.text, self.buffer.cursor)

    @classmethod
    def from_config(
        cls,
        config: PromptConfig,
        engine: ValidationEngine,
        renderer: Renderer,
        plan: SpacePlan,
        source: EventSource,
        clock: Callable[[], float] = time.monotonic,
    ) -> InteractiveSession:
        interaction = config.interaction
        return cls(
            engine,
            renderer,
            plan,
            source,
            prompt=config.display_prompt,
            default_value=interaction.default_value,
            mask_char=config.ui.mask_char if interaction.mask else None,
            confirm=interaction.confirm,
            timeout=interaction.timeout,
            max_attempts=interaction.max_attempts,
            help_text=config.ui.help_text,
            clock=clock,
        )

    @property
    def confirming(self) -> bool:
        return self._first_value is not None

    def handle_key(self, event: KeyEvent) -> None:
        key = event.key
        if key is Key.ENTER:
            self.submit()
        elif key is Key.EOF and self.buffer.is_empty:
            self.state = SessionState.END_OF_INPUT
        elif key is Key.EOF:
            self._changed(self.buffer.delete(), edited=True)
        elif key is Key.CHAR:
            self._changed(self._insert(event.char), edited=True)
        elif key in _EDITS:
            self._changed(_EDITS[key](self.buffer), edited=True)
        elif key in _MOVES:
            self._changed(_MOVES[key](self.buffer), edited=False)

    def _insert(self, text: str) -> bool:
        if not self.partial.can_continue:
            logger.debug("Insertion refused: input cannot become valid by typing more")
            return False
        return self.buffer.insert(text) > 0

    def _changed(self, changed: bool, edited: bool) -> None:
        if not changed:
            return
        text = self.buffer.text
        self.partial = self.engine.partial_validate(text, self.buffer.cursor)
        if edited:
            self.status = None
            self.show_messages = True
            self.report = self.engine.validate(text)

    def submit(self) -> None:
        """Run a submission attempt on the current buffer."""
        text = self.buffer.text
        self.attempts += 1
        self.report = self.engine.validate(text, force=True)
        self.show_messages = True
        self.status = None

        if not self.engine.accepts(self.report):
            self.record_failure()
            return

        if self.confirming:
            self._finish_confirmation(text)
        elif self._confirm_engine is not None:
            self._start_confirmation(text)
        else:
            self.value = text
            self.state = SessionState.SUBMITTING

    def _start_confirmation(self, text: str) -> None:
        logger.debug("First value accepted, starting confirmation")
        self._first_value = text
        self._first_report = self.report
        self.engine = self._confirm_engine  # type: ignore[assignment]
        self.prompt = CONFIRM_PROMPT
        self.buffer.clear()
        self.report = None
        self.show_messages = False
        self.partial = self.engine.partial_validate("", 0)

    def _finish_confirmation(self, text: str) -> None:
        if text == self._first_value:
            self.value = text
            self.report = self._first_report
            self.state = SessionState.SUBMITTING
            return

        logger.info("Confirmation value does not match")
        self.buffer.clear()
        self.report = None
        self.partial = self.engine.partial_validate("", 0)
        self.status = self.styler.plain(MISMATCH_MESSAGE, Priority.CRITICAL)
        self.record_failure()

    def frame(self) -> tuple[list[Text], int, int]:
        line, column = self.builder.input_line(
            self.prompt,
            self.buffer.text,
            self.buffer.cursor,
            self.partial,
            self.mask_char,
        )
        capacity = self.plan.message_capacity
        body = self.builder.status_lines(self.status, capacity)
        if self.show_messages and self.report is not None:
            shown, hidden = self.engine.display_errors(self.report)
            body += self.builder.message_lines(shown, hidden, capacity - len(body))
        lines = [line] + self.padded(body, capacity) + self.builder.help_lines(self.help_text, self.plan.help_lines)
        return lines, column, 0

    def final_frame(self) -> list[Text]:
        line, _ = self.builder.input_line(self.prompt, self.buffer.text, self.buffer.cursor, None, self.mask_char)
        if self.state is SessionState.MAX_ATTEMPTS_EXCEEDED:
            lines, _, _ = self.frame()
            return [line] + lines[1 : 1 + self.plan.message_capacity]
        return [line]

