"""
Built-in validator implementations, one handler per ValidatorKind.
"""

from ..kinds import RuleHandler, ValidatorKind
from . import basic, choice, datetime_rules, filesystem, formats, numeric

HANDLERS: dict[ValidatorKind, RuleHandler] = {
    **basic.HANDLERS,
    **formats.HANDLERS,
    **numeric.HANDLERS,
    **datetime_rules.HANDLERS,
    **choice.HANDLERS,
    **filesystem.HANDLERS,
}

__all__ = ["HANDLERS"]
