"""
Shared pytest configuration for askr tests.
"""

import pytest

from askr_core.validation import RuleCatalog, RuleConfig, ValidationEngine
from askr_tui.events import ManualClock


@pytest.fixture(scope="session", autouse=True)
def isolated_log_dir(tmp_path_factory):
    """Keep the rotating error log out of the user's state directory."""
    log_dir = tmp_path_factory.mktemp("askr-logs")
    patcher = pytest.MonkeyPatch()
    patcher.setenv("ASKR_LOG_DIR", str(log_dir))
    yield log_dir
    patcher.undo()


@pytest.fixture
def clock():
    """Manually advanced monotonic clock."""
    return ManualClock(100.0)


@pytest.fixture
def make_rule():
    """Build a single ready-to-run rule from a kind and its parameters."""

    def factory(kind, priority=None, message=None, **params):
        catalog = RuleCatalog.from_configs([RuleConfig(kind=kind, priority=priority, message=message, params=params)])
        return catalog.rules[0]

    return factory


@pytest.fixture
def make_engine(clock):
    """Build an engine from rule configuration mappings."""

    def factory(*rules, **kwargs):
        catalog = RuleCatalog.from_configs(RuleConfig.from_dict(rule) for rule in rules)
        return ValidationEngine(catalog, clock=clock, **kwargs)

    return factory
