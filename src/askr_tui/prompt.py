"""
Prompt orchestration.

run_prompt picks the mode for a PromptConfig and turns the way the session
ended into either a PromptResult or a session error:

* quiet mode validates one line from the input stream without any terminal
  interaction;
* interactive mode owns the terminal for a free-text session or a choice menu;
* when the terminal cannot be owned, the line-based fallback takes over.
"""

from __future__ import annotations

import logging
import sys
import time
from collections.abc import Callable
from typing import IO

from askr_core.error_handler import get_error_handler
from askr_core.errors import IOFailure, TerminalFailure
from askr_core.prompt_config import PromptConfig
from askr_core.validation import PromptResult, ValidationEngine

from .choice_menu import ChoiceMenuController
from .events import EventSource
from .fallback import LineFallback
from .layout import SpacePlan, SpacePlanner
from .renderer import Renderer
from .session import EventLoopSession, InteractiveSession, SessionOutcome
from .styling import MessageStyler
from .terminal import DEFAULT_HEIGHT, DEFAULT_WIDTH, TerminalCapabilities, TerminalSession, stream_fileno

logger = logging.getLogger(__name__)


def run_quiet(engine: ValidationEngine, input_stream: IO[str]) -> PromptResult:
    """
    Validate a single line read from ``input_stream``.

    Raises:
        IOFailure: If the stream cannot be read
    """
    try:
        line = input_stream.readline()
    except OSError as e:
        raise IOFailure("Failed to read input", technical_message=str(e)) from e
    report = engine.validate(line.rstrip("\r\n"), force=True)
    return PromptResult.from_report(report, attempts=1)


def plan_region(config: PromptConfig, engine: ValidationEngine, capabilities: TerminalCapabilities) -> SpacePlan:
    """Size the reserved region once for the whole session."""
    planner = SpacePlanner(
        capabilities.width,
        capabilities.height,
        display_policy=engine.display_policy,
        max_error_lines=config.ui.max_error_lines,
        marker_width=MessageStyler.for_color(capabilities.supports_color).marker_width,
    )
    if config.choice is not None:
        return planner.plan_choice(len(config.choice.labels), config.ui.help_text)
    return planner.plan_input(engine, config.ui.help_text, min_error_lines=1 if config.interaction.confirm else 0)


def build_session(
    config: PromptConfig,
    engine: ValidationEngine,
    renderer: Renderer,
    plan: SpacePlan,
    source: EventSource,
    clock: Callable[[], float] = time.monotonic,
) -> EventLoopSession:
    if config.choice is not None:
        return ChoiceMenuController.from_config(config, engine, renderer, plan, source, clock)
    return InteractiveSession.from_config(config, engine, renderer, plan, source, clock)


def run_interactive(
    config: PromptConfig,
    engine: ValidationEngine,
    capabilities: TerminalCapabilities,
    input_stream: IO[str],
    output_stream: IO[str],
) -> SessionOutcome:
    """
    Run a session on the real terminal.

    Raises:
        TerminalFailure: If the terminal cannot be owned
    """
    if not capabilities.cursor_control:
        raise TerminalFailure("Terminal does not support cursor control")

    plan = plan_region(config, engine, capabilities)
    renderer = Renderer(output_stream, capabilities, plan.total)
    terminal = TerminalSession(output_stream, capabilities, stream_fileno(input_stream))
    with terminal.acquire(plan.total, finish=renderer.finish) as source:
        return build_session(config, engine, renderer, plan, source).run()


def run_scripted(
    config: PromptConfig,
    engine: ValidationEngine,
    capabilities: TerminalCapabilities,
    output_stream: IO[str],
    source: EventSource,
    clock: Callable[[], float],
) -> SessionOutcome:
    """Run a session against a supplied event source, without raw mode."""
    plan = plan_region(config, engine, capabilities)
    renderer = Renderer(output_stream, capabilities, plan.total)
    TerminalSession(output_stream, capabilities).reserve(plan.total)
    try:
        return build_session(config, engine, renderer, plan, source, clock).run()
    finally:
        renderer.finish()


def to_result(outcome: SessionOutcome) -> PromptResult:
    """
    Convert a finished session into a result record.

    Raises:
        SessionTimeout, Interrupted, MaxAttemptsExceeded: When the session was
            not submitted
        IOFailure: If a submitted session carries no validation report
    """
    error = outcome.error()
    if error is not None:
        raise error
    if outcome.report is None:
        raise IOFailure("Session ended without a validated value", technical_message=f"state={outcome.state.value}")
    return PromptResult.from_report(outcome.report, attempts=outcome.attempts)


def run_prompt(
    config: PromptConfig,
    input_stream: IO[str] | None = None,
    output_stream: IO[str] | None = None,
    event_source: EventSource | None = None,
    capabilities: TerminalCapabilities | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PromptResult:
    """
    Run one prompt to completion.

    Args:
        config: Prompt configuration, environment overrides already applied
        input_stream: Where input is read from (stdin by default)
        output_stream: Where the prompt is drawn (stderr by default)
        event_source: Replaces the terminal as the source of key events
        capabilities: Terminal capabilities; probed from ``output_stream`` when omitted
        clock: Monotonic clock used for debouncing and timeouts

    Returns:
        PromptResult of the submitted value. ``valid`` is the AND of every
        outcome, so a submitted value can still be invalid through a
        non-blocking Low failure; in quiet mode any failure makes it invalid.

    Raises:
        ArgumentError: If the rule configuration is malformed
        IOFailure: If the input stream fails
        SessionTimeout, Interrupted, MaxAttemptsExceeded: When no value was submitted
    """
    input_stream = input_stream or sys.stdin
    output_stream = output_stream or sys.stderr
    engine = config.build_engine(clock)

    if config.quiet:
        return run_quiet(engine, input_stream)

    if event_source is not None:
        capabilities = capabilities or TerminalCapabilities(
            is_terminal=True,
            cursor_control=True,
            color_system=None,
            width=config.ui.width or DEFAULT_WIDTH,
            height=DEFAULT_HEIGHT,
        )
        return to_result(run_scripted(config, engine, capabilities, output_stream, event_source, clock))

    capabilities = capabilities or TerminalCapabilities.probe(output_stream, config.ui.no_color, config.ui.width)
    try:
        outcome = run_interactive(config, engine, capabilities, input_stream, output_stream)
    except TerminalFailure as e:
        get_error_handler().handle(e, {"mode": "interactive"})
        logger.info("Falling back to line-based prompt")
        outcome = LineFallback(config, engine, input_stream, output_stream).run()
    return to_result(outcome)
