"""
Input events and event sources for the interactive session.

The session performs exactly one blocking call per loop iteration:
``EventSource.read_event(deadline)``, which returns the next key or resize
event, or None once the monotonic ``deadline`` passes. ScriptedEventSource
replays a fixed script against a ManualClock so sessions can be driven
deterministically.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, Union

from askr_core.errors import ErrorCode, IOFailure

from .keys import KeyDecoder, KeyEvent


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal changed size."""

    width: int
    height: int


Event = Union[KeyEvent, ResizeEvent]


class EventSource(Protocol):
    """Anything the session can block on for its next event."""

    def read_event(self, deadline: float | None) -> Event | None:
        """Return the next event, or None when ``deadline`` passes first."""
        ...


class ManualClock:
    """Monotonic clock advanced explicitly by tests and scripted input."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    def set(self, value: float) -> None:
        self._now = max(self._now, value)


@dataclass(frozen=True)
class Pause:
    """A stretch of ``seconds`` without any input."""

    seconds: float


ScriptItem = Union[str, bytes, KeyEvent, ResizeEvent, Pause]


class ScriptedEventSource:
    """
    Replays a script of keystrokes, resizes and pauses.

    Strings and bytes are decoded as raw terminal input, so ``"ab\\r"`` yields
    three key events and ``"\\x1b[A"`` an Up arrow. A Pause that reaches the
    caller's deadline advances the clock to the deadline and reports a timeout.
    """

    def __init__(self, script: Iterable[ScriptItem], clock: ManualClock | None = None) -> None:
        self.clock = clock or ManualClock()
        self._script: deque[ScriptItem] = deque(script)
        self._ready: deque[Event] = deque()
        self._decoder = KeyDecoder()

    @property
    def exhausted(self) -> bool:
        return not self._ready and not self._script

    def read_event(self, deadline: float | None) -> Event | None:
        while not self._ready:
            if not self._script:
                return self._exhausted(deadline)

            item = self._script.popleft()
            if isinstance(item, Pause):
                if deadline is not None and self.clock() + item.seconds >= deadline:
                    remaining = self.clock() + item.seconds - deadline
                    self.clock.set(deadline)
                    if remaining > 0:
                        self._script.appendleft(Pause(remaining))
                    return None
                self.clock.advance(item.seconds)
            elif isinstance(item, (str, bytes)):
                self._ready.extend(self._decoder.feed(item))
                self._ready.extend(self._decoder.flush())
            else:
                self._ready.append(item)

        return self._ready.popleft()

    def _exhausted(self, deadline: float | None) -> None:
        if deadline is None:
            raise IOFailure("Scripted input exhausted", code=ErrorCode.READ_FAILED)
        self.clock.set(deadline)
        return None
