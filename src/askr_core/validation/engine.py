"""
Validation engine for askr.

The engine runs a RuleCatalog against an input. It answers two questions per
keystroke: where the input first goes wrong (partial validation, used for
coloring) and which rules the input fails (full validation, used for messages
and submission). Full reports are cached per exact input, and slow rules are
debounced so that filesystem checks do not run on every key press.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .catalog import RuleCatalog, ValidationRule
from .kinds import ValidatorKind
from .priority import Priority
from .result import PartialResult, ValidationOutcome, ValidationReport

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_CACHE_SIZE = 256


@dataclass(frozen=True)
class DisplayPolicy:
    """
    Which failures are shown while the user types.

    Critical and High failures are always shown. Medium failures are capped,
    Low failures only appear while nothing blocking is wrong, and the whole
    list is capped at ``max_lines`` entries.
    """

    medium_limit: int = 3
    low_limit: int = 2
    max_lines: int = 10

    def select(self, failures: Iterable[ValidationOutcome]) -> tuple[list[ValidationOutcome], int]:
        """
        Pick the failures to display.

        Args:
            failures: Failing outcomes sorted by priority

        Returns:
            The outcomes to show and the number of failures left out
        """
        failures = [outcome for outcome in failures if not outcome.passed]
        blocking = [outcome for outcome in failures if outcome.priority.is_blocking]
        medium = [outcome for outcome in failures if outcome.priority is Priority.MEDIUM][: self.medium_limit]
        low = [] if blocking else [outcome for outcome in failures if outcome.priority is Priority.LOW][: self.low_limit]

        shown = (blocking + medium + low)[: self.max_lines]
        return shown, len(failures) - len(shown)


@dataclass(frozen=True)
class SubmissionPolicy:
    """Whether a report is good enough to submit."""

    low_priority_blocks: bool = False

    def blocking(self, report: ValidationReport) -> list[ValidationOutcome]:
        if self.low_priority_blocks:
            return report.failures
        return [outcome for outcome in report.failures if outcome.priority is not Priority.LOW]

    def accepts(self, report: ValidationReport) -> bool:
        return not self.blocking(report)


@dataclass
class DebounceState:
    """Last execution of a slow rule."""

    last_run: float
    text: str
    outcome: ValidationOutcome


class ValidationEngine:
    """Runs the rules of a catalog with caching and debouncing."""

    def __init__(
        self,
        catalog: RuleCatalog,
        clock: Clock = time.monotonic,
        display_policy: DisplayPolicy | None = None,
        submission_policy: SubmissionPolicy | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._catalog = catalog
        self._clock = clock
        self.display_policy = display_policy or DisplayPolicy()
        self.submission_policy = submission_policy or SubmissionPolicy()
        self._cache_size = cache_size
        self._cache: OrderedDict[str, ValidationReport] = OrderedDict()
        self._debounce: dict[str, DebounceState] = {}

    @property
    def catalog(self) -> RuleCatalog:
        return self._catalog

    @property
    def rules(self) -> tuple[ValidationRule, ...]:
        return self._catalog.rules

    def partial_validate(self, text: str, cursor: int | None = None) -> PartialResult:
        """
        Validate an input that may still be incomplete.

        Args:
            text: Current buffer contents
            cursor: Scalar cursor index; defaults to the end of the text

        Returns:
            Merged PartialResult: earliest error offset across all rules
        """
        if cursor is None:
            cursor = len(text)
        return PartialResult.merge([rule.partial_validate(text, cursor) for rule in self._catalog])

    def validate(self, text: str, force: bool = False) -> ValidationReport:
        """
        Validate a complete input against every rule.

        Args:
            text: Input to validate
            force: Ignore the cache and debounce windows (used on submission)

        Returns:
            ValidationReport with outcomes sorted by priority then configuration order
        """
        if not force and text in self._cache:
            self._cache.move_to_end(text)
            return self._cache[text]

        started = time.perf_counter()
        now = self._clock()
        outcomes: list[ValidationOutcome] = []
        substituted = False

        for rule in self._catalog:
            if rule.is_slow and not force:
                state = self._debounce.get(rule.rule_id)
                if state is not None and now - state.last_run < rule.debounce:  # type: ignore[operator]
                    outcomes.append(state.outcome)
                    substituted = substituted or state.text != text
                    continue

            outcome = rule.validate(text)
            if rule.is_slow:
                self._debounce[rule.rule_id] = DebounceState(last_run=now, text=text, outcome=outcome)
            outcomes.append(outcome)

        report = ValidationReport(
            text=text,
            outcomes=outcomes,
            validation_time=(time.perf_counter() - started) * 1000,
        )

        if not substituted:
            self._store(text, report)
        return report

    def potential_failures(self) -> list[ValidationOutcome]:
        """
        Worst-case failure of every rule, without running any rule on real input.

        Each rule contributes one outcome carrying its longest possible message.
        No engine state is touched.
        """
        failures = []
        for rule in self._catalog:
            messages = rule.potential_messages()
            if not messages:
                continue
            failures.append(
                ValidationOutcome(
                    rule_id=rule.rule_id,
                    passed=False,
                    priority=rule.priority,
                    message=max(messages, key=len),
                    order=rule.order,
                )
            )
        return sorted(failures, key=lambda outcome: outcome.sort_key)

    def potential_error_messages(self) -> list[str]:
        """Every message any rule could produce, in priority order."""
        ordered = sorted(self._catalog, key=lambda rule: (rule.priority.rank, rule.order))
        return [message for rule in ordered for message in rule.potential_messages()]

    def display_errors(self, report: ValidationReport) -> tuple[list[ValidationOutcome], int]:
        """Failures to show for ``report`` and how many were left out."""
        return self.display_policy.select(report.failures)

    def blocking_failures(self, report: ValidationReport) -> list[ValidationOutcome]:
        return self.submission_policy.blocking(report)

    def accepts(self, report: ValidationReport) -> bool:
        """True when ``report`` may be submitted under the submission policy."""
        return self.submission_policy.accepts(report)

    def clear_cache(self) -> None:
        self._cache.clear()
        self._debounce.clear()

    def derive(self, predicate: Callable[[ValidationRule], bool]) -> ValidationEngine:
        """New engine over the rules matching ``predicate`` with the same policies and clock."""
        return ValidationEngine(
            self._catalog.filter(predicate),
            clock=self._clock,
            display_policy=self.display_policy,
            submission_policy=self.submission_policy,
            cache_size=self._cache_size,
        )

    def without_kinds(self, *kinds: ValidatorKind) -> ValidationEngine:
        return self.derive(lambda rule: rule.kind not in kinds)

    def for_confirmation(self) -> ValidationEngine:
        """Engine for the confirmation cycle: no value-dependent or debounced rules."""
        return self.derive(lambda rule: not rule.value_dependent and not rule.is_slow)

    def _store(self, text: str, report: ValidationReport) -> None:
        if self._cache_size <= 0:
            return
        self._cache[text] = report
        self._cache.move_to_end(text)
        while len(self._cache) > self._cache_size:
            self._cache.popitem(last=False)
