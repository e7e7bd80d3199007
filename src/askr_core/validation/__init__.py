"""
Validation engine and rule catalog for askr.

This package provides priority-ordered rule evaluation with partial
(keystroke-time) and full validation, result caching and debouncing of slow
rules.
"""

from .catalog import RuleCatalog, RuleConfig, ValidationRule, render_message
from .engine import DisplayPolicy, SubmissionPolicy, ValidationEngine
from .kinds import ValidatorKind
from .priority import Priority
from .result import PartialResult, PromptResult, ValidationOutcome, ValidationReport

__all__ = [
    "DisplayPolicy",
    "PartialResult",
    "Priority",
    "PromptResult",
    "RuleCatalog",
    "RuleConfig",
    "SubmissionPolicy",
    "ValidationEngine",
    "ValidationOutcome",
    "ValidationReport",
    "ValidationRule",
    "ValidatorKind",
    "render_message",
]
