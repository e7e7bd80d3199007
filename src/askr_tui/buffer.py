"""Single-line edit buffer with a scalar cursor."""

from __future__ import annotations


class InputBuffer:
    """
    Editable line of text.

    Positions count Unicode scalars (Python ``str`` indices), never bytes, so a
    cursor can never land inside a multi-byte character.
    """

    def __init__(self, text: str = "") -> None:
        self._chars: list[str] = list(text)
        self._cursor = len(self._chars)

    @property
    def text(self) -> str:
        return "".join(self._chars)

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._chars)

    @property
    def is_empty(self) -> bool:
        return not self._chars

    def set_text(self, text: str) -> None:
        self._chars = list(text)
        self._cursor = len(self._chars)

    def clear(self) -> None:
        self.set_text("")

    def insert(self, text: str) -> int:
        """Insert printable characters at the cursor; returns how many were inserted."""
        chars = [char for char in text if char.isprintable()]
        self._chars[self._cursor : self._cursor] = chars
        self._cursor += len(chars)
        return len(chars)

    def backspace(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= 1
        del self._chars[self._cursor]
        return True

    def delete(self) -> bool:
        if self._cursor >= len(self._chars):
            return False
        del self._chars[self._cursor]
        return True

    def move_left(self) -> bool:
        if self._cursor == 0:
            return False
        self._cursor -= 1
        return True

    def move_right(self) -> bool:
        if self._cursor >= len(self._chars):
            return False
        self._cursor += 1
        return True

    def home(self) -> bool:
        moved = self._cursor != 0
        self._cursor = 0
        return moved

    def end(self) -> bool:
        moved = self._cursor != len(self._chars)
        self._cursor = len(self._chars)
        return moved

    def delete_word_backward(self) -> bool:
        """Ctrl+W: remove the whitespace before the cursor and the word before it."""
        start = self._cursor
        while start > 0 and self._chars[start - 1].isspace():
            start -= 1
        while start > 0 and not self._chars[start - 1].isspace():
            start -= 1
        if start == self._cursor:
            return False
        del self._chars[start : self._cursor]
        self._cursor = start
        return True

    def kill_to_end(self) -> bool:
        if self._cursor >= len(self._chars):
            return False
        del self._chars[self._cursor :]
        return True

    def kill_to_start(self) -> bool:
        if self._cursor == 0:
            return False
        del self._chars[: self._cursor]
        self._cursor = 0
        return True
