"""
Terminal ownership for the interactive session.

This module probes terminal capabilities through a rich Console, switches the
input descriptor into raw mode with termios, waits for keystrokes and SIGWINCH
with a single ``select`` call, and reserves a fixed region of lines below the
cursor. Every resource is released on every exit path.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import sys
import termios
import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Any

from rich.console import Console
from rich.control import Control

from askr_core.errors import ErrorCode, IOFailure, TerminalFailure

from .events import Event, ResizeEvent
from .keys import KeyDecoder

logger = logging.getLogger(__name__)

ESCAPE_TIMEOUT = 0.05  # seconds to wait for the rest of an escape sequence
DEFAULT_WIDTH = 80
DEFAULT_HEIGHT = 24


def stream_fileno(stream: IO[str]) -> int | None:
    """File descriptor behind ``stream``, or None for in-memory streams."""
    try:
        return stream.fileno()
    except (AttributeError, ValueError, OSError):
        return None


@dataclass(frozen=True)
class TerminalCapabilities:
    """What the output terminal supports."""

    is_terminal: bool
    cursor_control: bool
    color_system: str | None
    width: int
    height: int

    @property
    def supports_color(self) -> bool:
        return self.color_system is not None

    @classmethod
    def probe(cls, stream: IO[str] | None = None, no_color: bool = False, width: int | None = None) -> TerminalCapabilities:
        """
        Inspect ``stream`` (stderr by default).

        Args:
            stream: Output stream the prompt draws on
            no_color: Force the no-color scheme
            width: Override the detected width

        Returns:
            TerminalCapabilities for the stream
        """
        console = Console(file=stream or sys.stderr, no_color=no_color or None, highlight=False)
        size = console.size
        is_terminal = console.is_terminal
        caps = cls(
            is_terminal=is_terminal,
            cursor_control=is_terminal and not console.is_dumb_terminal,
            color_system=None if no_color or console.no_color else console.color_system,
            width=width or size.width or DEFAULT_WIDTH,
            height=size.height or DEFAULT_HEIGHT,
        )
        logger.debug(f"Probed terminal: {caps}")
        return caps

    def resized(self, width: int, height: int) -> TerminalCapabilities:
        return TerminalCapabilities(
            is_terminal=self.is_terminal,
            cursor_control=self.cursor_control,
            color_system=self.color_system,
            width=width,
            height=height,
        )


class RawMode:
    """
    Context manager putting a tty descriptor into raw mode.

    Echo, canonical line editing, signal generation (so Ctrl+C arrives as a
    key), flow control and CR translation are disabled. Output post-processing
    stays on so ``\\n`` still returns the carriage.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: list[Any] | None = None

    def __enter__(self) -> RawMode:
        try:
            self._saved = termios.tcgetattr(self.fd)
            mode = termios.tcgetattr(self.fd)
            mode[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
            mode[2] |= termios.CS8
            mode[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
            mode[6][termios.VMIN] = 1
            mode[6][termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)
        except (termios.error, OSError) as e:
            raise TerminalFailure(
                "Cannot switch the terminal into raw mode",
                code=ErrorCode.RAW_MODE_FAILED,
                technical_message=str(e),
            ) from e
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._saved is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved)
            except (termios.error, OSError) as e:
                logger.warning(f"Failed to restore terminal mode: {e}")
            self._saved = None


class TtyEventSource:
    """
    Reads key and resize events from a tty.

    Resize notifications come from a SIGWINCH handler writing to a self-pipe,
    so one ``select`` call waits for keys, resizes and the deadline at once.
    """

    def __init__(
        self,
        fd: int,
        size: Callable[[], tuple[int, int]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fd = fd
        self._size = size
        self._clock = clock
        self._decoder = KeyDecoder()
        self._ready: deque[Event] = deque()
        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_w, False)
        self._previous_handler: Any = None

    def install(self) -> None:
        if hasattr(signal, "SIGWINCH"):
            self._previous_handler = signal.signal(signal.SIGWINCH, self._on_resize)

    def close(self) -> None:
        if hasattr(signal, "SIGWINCH") and self._previous_handler is not None:
            signal.signal(signal.SIGWINCH, self._previous_handler)
            self._previous_handler = None
        for fd in (self._wake_r, self._wake_w):
            try:
                os.close(fd)
            except OSError as e:
                logger.debug(f"Failed to close wake pipe: {e}")

    def _on_resize(self, signum: int, frame: Any) -> None:
        try:
            os.write(self._wake_w, b"\0")
        except BlockingIOError:
            # Pipe full: a wakeup is already pending
            return

    def read_event(self, deadline: float | None) -> Event | None:
        while not self._ready:
            timeout = None if deadline is None else max(0.0, deadline - self._clock())
            if self._decoder.pending:
                timeout = ESCAPE_TIMEOUT if timeout is None else min(timeout, ESCAPE_TIMEOUT)

            try:
                readable, _, _ = select.select([self.fd, self._wake_r], [], [], timeout)
            except InterruptedError:
                continue

            if not readable:
                if self._decoder.pending:
                    self._ready.extend(self._decoder.flush())
                    continue
                return None

            if self._wake_r in readable:
                os.read(self._wake_r, 1024)
                width, height = self._size()
                self._ready.append(ResizeEvent(width, height))
            if self.fd in readable:
                try:
                    data = os.read(self.fd, 1024)
                except OSError as e:
                    raise IOFailure("Failed to read from terminal", technical_message=str(e)) from e
                if not data:
                    raise IOFailure("Terminal input closed", code=ErrorCode.READ_FAILED)
                self._ready.extend(self._decoder.feed(data))

        return self._ready.popleft()


class TerminalSession:
    """
    Owns the terminal for one prompt.

    ``acquire`` enters raw mode and reserves ``reserved_lines`` lines below the
    cursor; on exit it moves below the region and restores the terminal even
    when the body raised.
    """

    def __init__(self, output: IO[str], capabilities: TerminalCapabilities, input_fd: int | None = None) -> None:
        self.output = output
        self.capabilities = capabilities
        self.input_fd = input_fd
        self.reserved_lines = 0

    def terminal_size(self) -> tuple[int, int]:
        try:
            size = os.get_terminal_size(self.output.fileno())
        except (OSError, ValueError):
            return self.capabilities.width, self.capabilities.height
        return size.columns, size.lines

    def reserve(self, lines: int) -> None:
        """Print ``lines - 1`` newlines, then return to the first line of the region."""
        self.reserved_lines = max(1, lines)
        if self.reserved_lines > 1:
            self.output.write("\n" * (self.reserved_lines - 1))
            self.output.write(str(Control.move(0, -(self.reserved_lines - 1))))
        self.output.write(str(Control.move_to_column(0)))
        self.output.flush()

    @contextmanager
    def acquire(self, reserved_lines: int, finish: Callable[[], None] | None = None) -> Iterator[TtyEventSource]:
        """
        Enter raw mode, reserve the region and yield the event source.

        Args:
            reserved_lines: Size of the screen region, fixed for the session
            finish: Called before the terminal is released, to leave the cursor
                below the region
        """
        if self.input_fd is None or not os.isatty(self.input_fd):
            raise TerminalFailure("Input is not a terminal")

        source = TtyEventSource(self.input_fd, self.terminal_size)
        with RawMode(self.input_fd):
            source.install()
            try:
                self.reserve(reserved_lines)
                yield source
            finally:
                try:
                    if finish is not None:
                        finish()
                    self.output.flush()
                finally:
                    source.close()
