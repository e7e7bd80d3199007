"""
Rule catalog for askr.

Turns rule configurations into immutable ValidationRule objects. Each rule is
bound to the handler of its ValidatorKind, keeps its configuration order for
stable sorting and renders its optional message template against the metadata
its handler reports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..errors import ArgumentError, ErrorCode
from .kinds import Check, RuleHandler, ValidatorKind
from .priority import Priority
from .result import PartialResult, ValidationOutcome
from .rules import HANDLERS

logger = logging.getLogger(__name__)


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_message(template: str, metadata: Mapping[str, Any]) -> str:
    """
    Fill ``{placeholders}`` in a custom message from rule metadata.

    Unknown placeholders are left as written; a template that is not a valid
    format string is returned unchanged.
    """
    try:
        return template.format_map(_KeepMissing(metadata))
    except (ValueError, IndexError, AttributeError):
        return template


@dataclass
class RuleConfig:
    """Configuration of one rule as supplied by the caller."""

    kind: str
    priority: str | None = None
    message: str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    debounce_ms: float | None = None
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RuleConfig:
        return cls(
            kind=data["kind"],
            priority=data.get("priority"),
            message=data.get("message"),
            params=dict(data.get("params") or {}),
            debounce_ms=data.get("debounce_ms"),
            enabled=data.get("enabled", True),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "priority": self.priority,
            "message": self.message,
            "params": dict(self.params),
            "debounce_ms": self.debounce_ms,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class ValidationRule:
    """An immutable, ready-to-run validation rule."""

    rule_id: str
    kind: ValidatorKind
    priority: Priority
    order: int = 0
    params: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    message: str | None = None
    debounce: float | None = None  # seconds
    enabled: bool = True

    @property
    def handler(self) -> RuleHandler:
        return HANDLERS[self.kind]

    @property
    def is_slow(self) -> bool:
        """Slow rules are re-run at most once per debounce window."""
        return bool(self.debounce)

    @property
    def value_dependent(self) -> bool:
        return self.handler.value_dependent

    def validate(self, text: str) -> ValidationOutcome:
        check = self.handler.check(text, self.params)
        return self._outcome(check)

    def partial_validate(self, text: str, cursor: int) -> PartialResult:
        return self.handler.partial(text, cursor, self.params)

    def potential_messages(self) -> list[str]:
        """Every message this rule could show, with custom templates applied."""
        messages = []
        for check in self.handler.potential(self.params):
            message = self._render(check)
            if message and message not in messages:
                messages.append(message)
        return messages

    def _outcome(self, check: Check) -> ValidationOutcome:
        if check.passed:
            return ValidationOutcome(
                rule_id=self.rule_id,
                passed=True,
                priority=self.priority,
                metadata=dict(check.metadata),
                order=self.order,
            )
        return ValidationOutcome(
            rule_id=self.rule_id,
            passed=False,
            priority=self.priority,
            message=self._render(check),
            metadata=dict(check.metadata),
            order=self.order,
        )

    def _render(self, check: Check) -> str | None:
        if self.message:
            return render_message(self.message, check.metadata)
        return check.message


class RuleCatalog:
    """Ordered collection of the rules configured for one prompt."""

    def __init__(self, rules: Iterable[ValidationRule] = ()) -> None:
        self._rules: tuple[ValidationRule, ...] = tuple(sorted(rules, key=lambda rule: rule.order))
        ids = [rule.rule_id for rule in self._rules]
        if len(ids) != len(set(ids)):
            raise ArgumentError(f"Duplicate rule ids in catalog: {ids}", code=ErrorCode.CONFIG_INVALID)

    @classmethod
    def from_configs(cls, configs: Iterable[RuleConfig]) -> RuleCatalog:
        """
        Build a catalog from rule configurations.

        Args:
            configs: Rule configurations in the order they were given

        Returns:
            RuleCatalog holding every enabled rule

        Raises:
            ArgumentError: If a kind is unknown or its parameters are malformed
        """
        rules: list[ValidationRule] = []
        seen: dict[ValidatorKind, int] = {}

        for order, config in enumerate(configs):
            if not config.enabled:
                continue

            try:
                kind = ValidatorKind(config.kind)
            except ValueError as e:
                raise ArgumentError(
                    f"Unknown validator '{config.kind}'", code=ErrorCode.UNKNOWN_VALIDATOR
                ) from e

            handler = HANDLERS[kind]
            params = dict(config.params)
            if handler.prepare:
                params = handler.prepare(params)

            priority = Priority.from_str(config.priority) if config.priority else handler.default_priority
            if config.debounce_ms is not None:
                debounce = config.debounce_ms / 1000 if config.debounce_ms > 0 else None
            else:
                debounce = handler.default_debounce

            seen[kind] = seen.get(kind, 0) + 1
            rule_id = kind.value if seen[kind] == 1 else f"{kind.value}_{seen[kind]}"

            rules.append(
                ValidationRule(
                    rule_id=rule_id,
                    kind=kind,
                    priority=priority,
                    order=order,
                    params=MappingProxyType(params),
                    message=config.message,
                    debounce=debounce,
                )
            )

        logger.debug(f"Built rule catalog with {len(rules)} rules: {[rule.rule_id for rule in rules]}")
        return cls(rules)

    @property
    def rules(self) -> tuple[ValidationRule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[ValidationRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def get(self, rule_id: str) -> ValidationRule | None:
        return next((rule for rule in self._rules if rule.rule_id == rule_id), None)

    def filter(self, predicate: Callable[[ValidationRule], bool]) -> RuleCatalog:
        """Return a new catalog with only the rules matching ``predicate``."""
        return RuleCatalog(rule for rule in self._rules if predicate(rule))
