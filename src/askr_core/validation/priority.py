"""Rule priority levels and their ordering."""

from __future__ import annotations

from enum import Enum

from ..errors import ArgumentError


class Priority(Enum):
    """Priority of a validation rule; lower rank sorts first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def icon(self) -> str:
        """Glyph shown next to a failing rule's message."""
        return _ICONS[self]

    @property
    def tag(self) -> str:
        """Plain-text marker used when colors and emoji are unavailable."""
        return _TAGS[self]

    @property
    def is_blocking(self) -> bool:
        """Critical and High failures are always shown and always block submission."""
        return self in (Priority.CRITICAL, Priority.HIGH)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def from_str(cls, value: str | Priority) -> Priority:
        """
        Parse a priority name case-insensitively.

        Raises:
            ArgumentError: If the name is not one of critical, high, medium, low
        """
        if isinstance(value, Priority):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ArgumentError(
                f"Invalid priority '{value}'. Expected one of: critical, high, medium, low",
                technical_message=str(e),
            ) from e


_RANKS = {Priority.CRITICAL: 0, Priority.HIGH: 1, Priority.MEDIUM: 2, Priority.LOW: 3}
_ICONS = {Priority.CRITICAL: "❌", Priority.HIGH: "❌", Priority.MEDIUM: "⚠️", Priority.LOW: "💡"}
_TAGS = {Priority.CRITICAL: "[ERROR]", Priority.HIGH: "[ERROR]", Priority.MEDIUM: "[WARN]", Priority.LOW: "[INFO]"}
