"""
Validator kinds and the handler contract each kind implements.

The set of kinds is closed: every kind maps to exactly one RuleHandler, registered
by the modules in ``askr_core.validation.rules``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple

from .priority import Priority
from .result import PartialResult


class ValidatorKind(Enum):
    """Every validator askr knows how to run."""

    REQUIRED = "required"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    PATTERN = "pattern"
    EMAIL = "email"
    HOSTNAME = "hostname"
    URL = "url"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    INTEGER = "integer"
    FLOAT = "float"
    RANGE = "range"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    CHOICE = "choice"
    FILE_EXISTS = "file_exists"
    DIR_EXISTS = "dir_exists"
    PATH_EXISTS = "path_exists"
    READABLE = "readable"
    WRITABLE = "writable"
    EXECUTABLE = "executable"


class Check(NamedTuple):
    """Raw verdict of a handler before the rule applies its message template."""

    passed: bool
    message: str | None = None
    metadata: dict[str, Any] = {}


def ok(**metadata: Any) -> Check:
    return Check(True, None, metadata)


def fail(message: str, **metadata: Any) -> Check:
    return Check(False, message, metadata)


Params = Mapping[str, Any]


@dataclass(frozen=True)
class RuleHandler:
    """
    Behaviour of one validator kind.

    Attributes:
        check: Full validation of a complete input
        partial: Keystroke-time validation of ``(text, cursor, params)``
        potential: Worst-case failures the rule could ever report; used to size
            the screen region before any input exists. Must not touch the
            filesystem or any other external state.
        default_priority: Priority used when the configuration names none
        prepare: Normalises and validates raw parameters when the catalog is
            built; raises ArgumentError for a malformed configuration
        default_debounce: Debounce window in seconds for slow kinds
        value_dependent: True when the outcome depends on state outside the
            input text (the confirmation cycle skips these kinds)
    """

    check: Callable[[str, Params], Check]
    partial: Callable[[str, int, Params], PartialResult]
    potential: Callable[[Params], Iterable[Check]]
    default_priority: Priority
    prepare: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    default_debounce: float | None = None
    value_dependent: bool = False
