"""
Filesystem validators.

These checks touch the disk, so they are debounced by default and skipped by the
confirmation cycle. Partial validation never touches the filesystem.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult

DEFAULT_DEBOUNCE = 0.2  # seconds
SENTINEL_PATH = "<path>"

_MESSAGES = {
    ValidatorKind.FILE_EXISTS: "File does not exist: {path}",
    ValidatorKind.DIR_EXISTS: "Directory does not exist: {path}",
    ValidatorKind.PATH_EXISTS: "Path does not exist: {path}",
    ValidatorKind.READABLE: "Path is not readable: {path}",
    ValidatorKind.WRITABLE: "Path is not writable: {path}",
    ValidatorKind.EXECUTABLE: "Path is not executable: {path}",
}


def _is_writable(path: Path) -> bool:
    if path.exists():
        return os.access(path, os.W_OK)
    parent = path.parent if str(path.parent) else Path(".")
    return parent.is_dir() and os.access(parent, os.W_OK)


_PREDICATES = {
    ValidatorKind.FILE_EXISTS: lambda path: path.is_file(),
    ValidatorKind.DIR_EXISTS: lambda path: path.is_dir(),
    ValidatorKind.PATH_EXISTS: lambda path: path.exists(),
    ValidatorKind.READABLE: lambda path: path.exists() and os.access(path, os.R_OK),
    ValidatorKind.WRITABLE: _is_writable,
    ValidatorKind.EXECUTABLE: lambda path: path.exists() and os.access(path, os.X_OK),
}


def _checker(kind: ValidatorKind):
    predicate = _PREDICATES[kind]
    template = _MESSAGES[kind]

    def check(text: str, params: Params) -> Check:
        if not text or "\0" in text:
            return fail(template.format(path=text), path=text)
        path = Path(text).expanduser()
        try:
            passed = predicate(path)
        except OSError:
            passed = False
        if passed:
            return ok(path=text)
        return fail(template.format(path=text), path=text)

    return check


def _partial(text: str, cursor: int, params: Params) -> PartialResult:
    nul = text.find("\0")
    if nul >= 0:
        return PartialResult.error_at(nul)
    return PartialResult.ok()


def _potential(kind: ValidatorKind):
    template = _MESSAGES[kind]

    def potential(params: Params) -> list[Check]:
        return [fail(template.format(path=SENTINEL_PATH), path=SENTINEL_PATH)]

    return potential


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    kind: RuleHandler(
        check=_checker(kind),
        partial=_partial,
        potential=_potential(kind),
        default_priority=Priority.HIGH,
        default_debounce=DEFAULT_DEBOUNCE,
        value_dependent=True,
    )
    for kind in _MESSAGES
}
