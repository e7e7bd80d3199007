"""
Validation result types.

Outcomes of single rules, partial (keystroke-time) results, the sorted report the
engine produces for one input and the result record handed to output formatters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .priority import Priority


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of running one rule against a complete input."""

    rule_id: str
    passed: bool
    priority: Priority
    message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    order: int = 0

    @classmethod
    def success(cls, rule_id: str, priority: Priority, **metadata: Any) -> ValidationOutcome:
        return cls(rule_id=rule_id, passed=True, priority=priority, metadata=dict(metadata))

    @classmethod
    def failure(cls, rule_id: str, priority: Priority, message: str, **metadata: Any) -> ValidationOutcome:
        return cls(rule_id=rule_id, passed=False, priority=priority, message=message, metadata=dict(metadata))

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.priority.rank, self.order)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "rule_name": self.rule_id,
            "passed": self.passed,
            "priority": self.priority.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class PartialResult:
    """
    Keystroke-time verdict on an incomplete input.

    ``first_error_offset`` is the scalar index from which the input is known to be
    wrong (``None`` when nothing is wrong yet). ``can_continue`` is False when no
    further typing can make the input valid.
    """

    first_error_offset: int | None = None
    can_continue: bool = True
    suggestion: str | None = None

    @classmethod
    def ok(cls) -> PartialResult:
        return cls()

    @classmethod
    def error_at(cls, offset: int, suggestion: str | None = None, can_continue: bool = True) -> PartialResult:
        return cls(first_error_offset=max(offset, 0), can_continue=can_continue, suggestion=suggestion)

    @classmethod
    def merge(cls, results: list[PartialResult]) -> PartialResult:
        """Combine per-rule results: earliest offset wins, any hard stop stops."""
        offsets = [r.first_error_offset for r in results if r.first_error_offset is not None]
        suggestions = [r.suggestion for r in results if r.suggestion]
        return cls(
            first_error_offset=min(offsets) if offsets else None,
            can_continue=all(r.can_continue for r in results),
            suggestion="; ".join(suggestions) if suggestions else None,
        )


@dataclass
class ValidationReport:
    """All outcomes for one input, sorted by (priority, configuration order)."""

    text: str
    outcomes: list[ValidationOutcome]
    validation_time: float = 0.0  # milliseconds

    def __post_init__(self) -> None:
        self.outcomes = sorted(self.outcomes, key=lambda outcome: outcome.sort_key)

    @property
    def valid(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    @property
    def failures(self) -> list[ValidationOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]

    @property
    def primary_error(self) -> str | None:
        """Message of the highest-priority failing outcome."""
        for outcome in self.outcomes:
            if not outcome.passed:
                return outcome.message
        return None

    @property
    def rules_checked(self) -> int:
        return len(self.outcomes)

    @property
    def rules_passed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.passed)


@dataclass
class PromptResult:
    """Result record of a finished prompt, consumed by output formatters."""

    value: str
    valid: bool
    primary_error: str | None
    validation_results: list[ValidationOutcome]
    validation_time: float = 0.0
    attempts: int = 1

    @classmethod
    def from_report(cls, report: ValidationReport, attempts: int = 1) -> PromptResult:
        return cls(
            value=report.text,
            valid=report.valid,
            primary_error=report.primary_error,
            validation_results=list(report.outcomes),
            validation_time=report.validation_time,
            attempts=attempts,
        )

    @property
    def rules_checked(self) -> int:
        return len(self.validation_results)

    @property
    def rules_passed(self) -> int:
        return sum(1 for outcome in self.validation_results if outcome.passed)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-ready result record."""
        return {
            "value": self.value,
            "valid": self.valid,
            "error": self.primary_error,
            "validation_results": [outcome.to_dict() for outcome in self.validation_results],
            "metadata": {
                "validation_time_ms": round(self.validation_time, 3),
                "rules_checked": self.rules_checked,
                "rules_passed": self.rules_passed,
                "input_length": len(self.value),
                "attempts": self.attempts,
            },
        }
