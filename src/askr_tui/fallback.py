"""
Line-based prompt used when the terminal cannot be put into raw mode.

No live coloring and no reserved region: the prompt is written, a whole line
is read, and the failures are printed as plain tagged lines. Attempts,
timeout, confirmation and choice lists behave as in the interactive session.
"""

from __future__ import annotations

import logging
import select
from typing import IO

from askr_core.errors import IOFailure
from askr_core.prompt_config import PromptConfig
from askr_core.validation import Priority, ValidationEngine, ValidationReport

from .session import CONFIRM_PROMPT, MISMATCH_MESSAGE, SessionOutcome, SessionState
from .terminal import stream_fileno

logger = logging.getLogger(__name__)


class LineFallback:
    """Prompt loop over plain line I/O."""

    def __init__(
        self,
        config: PromptConfig,
        engine: ValidationEngine,
        input_stream: IO[str],
        output_stream: IO[str],
    ) -> None:
        self.config = config
        self.engine = engine
        self.input_stream = input_stream
        self.output_stream = output_stream
        interaction = config.interaction
        self.timeout = interaction.timeout if interaction.timeout and interaction.timeout > 0 else None
        self.max_attempts = interaction.max_attempts if interaction.max_attempts and interaction.max_attempts > 0 else None
        self.attempts = 0
        self.failures = 0

    def _write(self, text: str) -> None:
        self.output_stream.write(text)
        self.output_stream.flush()

    def read_line(self) -> str | None:
        """
        Read one line, honouring the inactivity timeout when the stream has a descriptor.

        Returns:
            The line without its terminator, or None at end of input

        Raises:
            TimeoutError: If no line arrived before the timeout
            IOFailure: If reading fails
        """
        fd = stream_fileno(self.input_stream)
        if self.timeout is not None and fd is not None:
            readable, _, _ = select.select([fd], [], [], self.timeout)
            if not readable:
                raise TimeoutError(f"No input within {self.timeout}s")
        try:
            line = self.input_stream.readline()
        except OSError as e:
            raise IOFailure("Failed to read input", technical_message=str(e)) from e
        if not line:
            return None
        return line.rstrip("\r\n")

    def _print_failures(self, messages: list[str]) -> None:
        for message in messages:
            self._write(f"{message}\n")

    def _ask(self, prompt: str) -> str | None:
        self._write(f"{prompt} ")
        line = self.read_line()
        if line is None:
            self._write("\n")
        return line

    def run(self) -> SessionOutcome:
        """Prompt until a value is accepted or the session ends otherwise."""
        if self.config.choice is not None:
            self._write(f"Options: {', '.join(self.config.choice.labels)}\n")

        default = self.config.interaction.default_value
        first_value: str | None = None
        first_report: ValidationReport | None = None
        engine = self.engine

        while True:
            prompt = CONFIRM_PROMPT if first_value is not None else self.config.display_prompt
            try:
                line = self._ask(prompt)
            except TimeoutError:
                logger.info(f"No input for {self.timeout}s, giving up")
                self._write("\n")
                return self._outcome(SessionState.TIMED_OUT)
            except KeyboardInterrupt:
                # Line mode leaves ISIG on, so Ctrl+C arrives as a signal
                self._write("\n")
                return self._outcome(SessionState.CANCELLED)
            if line is None:
                return self._outcome(SessionState.END_OF_INPUT)

            text = line if line or first_value is not None else (default or "")
            self.attempts += 1
            report = engine.validate(text, force=True)

            if not engine.accepts(report):
                shown, hidden = engine.display_errors(report)
                messages = [f"{outcome.priority.tag} {outcome.message}" for outcome in shown]
                if hidden:
                    messages.append(f"+{hidden} more")
                self._print_failures(messages)
            elif first_value is None and self.config.interaction.confirm:
                first_value, first_report = text, report
                engine = self.engine.for_confirmation()
                continue
            elif first_value is not None and text != first_value:
                self._print_failures([f"{Priority.CRITICAL.tag} {MISMATCH_MESSAGE}"])
            else:
                return self._outcome(SessionState.SUBMITTING, text, first_report or report)

            self.failures += 1
            if self.max_attempts is not None and self.failures >= self.max_attempts:
                return self._outcome(SessionState.MAX_ATTEMPTS_EXCEEDED, report=report)

    def _outcome(self, state: SessionState, value: str | None = None, report: ValidationReport | None = None) -> SessionOutcome:
        return SessionOutcome(state=state, value=value, report=report, attempts=self.attempts, timeout=self.timeout)
