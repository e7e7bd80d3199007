"""
Keystroke decoding for askr.

Turns the raw text a terminal sends in raw mode into logical key events.
Control characters map to editing actions (readline-style Ctrl bindings),
and CSI/SS3 escape sequences map to cursor keys. Incomplete escape sequences
stay pending until more input arrives or the caller flushes them.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from enum import Enum, auto

ESC = "\x1b"


class Key(Enum):
    """Logical keys the session and the choice menu react to."""

    CHAR = auto()
    ENTER = auto()
    BACKSPACE = auto()
    DELETE = auto()
    LEFT = auto()
    RIGHT = auto()
    UP = auto()
    DOWN = auto()
    HOME = auto()
    END = auto()
    WORD_BACKSPACE = auto()
    KILL_TO_END = auto()
    KILL_TO_START = auto()
    INTERRUPT = auto()
    EOF = auto()
    TAB = auto()
    ESCAPE = auto()
    UNKNOWN = auto()


@dataclass(frozen=True)
class KeyEvent:
    """One decoded key press; ``char`` is set for printable input."""

    key: Key
    char: str = ""

    @classmethod
    def of(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, char)


CONTROL_KEYS: dict[str, Key] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    "\t": Key.TAB,
    "\x01": Key.HOME,  # Ctrl+A
    "\x05": Key.END,  # Ctrl+E
    "\x02": Key.LEFT,  # Ctrl+B
    "\x06": Key.RIGHT,  # Ctrl+F
    "\x10": Key.UP,  # Ctrl+P
    "\x0e": Key.DOWN,  # Ctrl+N
    "\x17": Key.WORD_BACKSPACE,  # Ctrl+W
    "\x0b": Key.KILL_TO_END,  # Ctrl+K
    "\x15": Key.KILL_TO_START,  # Ctrl+U
    "\x03": Key.INTERRUPT,  # Ctrl+C
    "\x04": Key.EOF,  # Ctrl+D
}

# Final byte of a CSI/SS3 sequence without parameters
_FINAL_KEYS: dict[str, Key] = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
}

# Parameter of a CSI ``~`` sequence
_TILDE_KEYS: dict[str, Key] = {
    "1": Key.HOME,
    "7": Key.HOME,
    "4": Key.END,
    "8": Key.END,
    "3": Key.DELETE,
}


class KeyDecoder:
    """Incremental decoder from terminal input to KeyEvents."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    @property
    def pending(self) -> bool:
        """True while an incomplete escape sequence is buffered."""
        return bool(self._pending)

    def feed(self, data: bytes | str) -> list[KeyEvent]:
        """Decode a chunk of input into complete key events."""
        text = self._utf8.decode(data) if isinstance(data, bytes) else data
        self._pending += text
        events, self._pending = self._parse(self._pending, final=False)
        return events

    def flush(self) -> list[KeyEvent]:
        """Decode whatever is pending as if no more input will follow."""
        events, self._pending = self._parse(self._pending, final=True)
        return events

    def _parse(self, text: str, final: bool) -> tuple[list[KeyEvent], str]:
        events: list[KeyEvent] = []
        index = 0
        while index < len(text):
            char = text[index]
            if char != ESC:
                events.append(self._single(char))
                index += 1
                continue

            consumed, event = self._escape(text, index, final)
            if consumed == 0:
                return events, text[index:]
            if event is not None:
                events.append(event)
            index += consumed
        return events, ""

    def _single(self, char: str) -> KeyEvent:
        if char in CONTROL_KEYS:
            return KeyEvent(CONTROL_KEYS[char])
        if char.isprintable():
            return KeyEvent.of(char)
        return KeyEvent(Key.UNKNOWN)

    def _escape(self, text: str, start: int, final: bool) -> tuple[int, KeyEvent | None]:
        """
        Decode the escape sequence at ``start``.

        Returns:
            Characters consumed (0 when more input is needed) and the event,
            None for sequences that are deliberately ignored
        """
        rest = text[start + 1 :]
        if not rest:
            return (1, KeyEvent(Key.ESCAPE)) if final else (0, None)

        introducer = rest[0]
        if introducer == "O":
            if len(rest) < 2:
                return (2, KeyEvent(Key.UNKNOWN)) if final else (0, None)
            return 3, KeyEvent(_FINAL_KEYS.get(rest[1], Key.UNKNOWN))

        if introducer != "[":
            # Alt+key or a bare Escape followed by typing
            return 1, KeyEvent(Key.ESCAPE)

        for offset, char in enumerate(rest[1:], start=2):
            if "\x40" <= char <= "\x7e":
                params = rest[1 : offset - 1]
                return offset + 1, self._csi(params, char)
            if not ("\x20" <= char <= "\x3f"):
                return offset, KeyEvent(Key.UNKNOWN)
        return (len(rest) + 1, KeyEvent(Key.UNKNOWN)) if final else (0, None)

    def _csi(self, params: str, final_char: str) -> KeyEvent | None:
        if final_char == "~":
            code = params.split(";", 1)[0]
            if code in ("200", "201"):
                # Bracketed paste markers carry no key
                return None
            return KeyEvent(_TILDE_KEYS.get(code, Key.UNKNOWN))
        return KeyEvent(_FINAL_KEYS.get(final_char, Key.UNKNOWN))
