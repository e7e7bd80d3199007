"""
Command-line entry point for askr.

Loads a prompt configuration, applies environment overrides, runs the prompt
and prints the result on stdout. The prompt itself is drawn on stderr, so the
value can be captured with ``$(askr ...)``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from askr_core.config_manager import ConfigManager
from askr_core.error_handler import init_logging, setup_error_handling
from askr_core.errors import ArgumentError, BaseAppError, ExitCode
from askr_core.prompt_config import OutputFormat, PromptConfig
from askr_core.validation import PromptResult

from .prompt import run_prompt

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="askr", description="Interactive prompt with real-time validation")
    parser.add_argument("prompt", nargs="?", help="Prompt text")
    parser.add_argument("-c", "--config", help="JSON prompt configuration file")
    parser.add_argument("-q", "--quiet", action="store_true", help="Validate one line from stdin without a prompt")
    parser.add_argument("-o", "--output", choices=[fmt.value for fmt in OutputFormat], help="Output format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Write debug logs")
    return parser


def format_result(result: PromptResult, output_format: OutputFormat, accepted: bool | None = None) -> str:
    """
    Render a result record for stdout.

    Args:
        result: Finished prompt result
        output_format: How to render it
        accepted: Whether the value was accepted; defaults to ``result.valid``.
            The default format prints nothing for a value that was not accepted.
    """
    if accepted is None:
        accepted = result.valid
    if output_format is OutputFormat.JSON:
        return json.dumps(result.to_dict(), ensure_ascii=False) + "\n"
    if output_format is OutputFormat.RAW:
        return result.value
    return f"{result.value}\n" if accepted else ""


def load_config(args: argparse.Namespace) -> PromptConfig:
    config = PromptConfig.from_file(args.config) if args.config else PromptConfig()
    if args.prompt:
        config.prompt_text = args.prompt
    if args.quiet:
        config.quiet = True
    if args.output:
        config.output_format = OutputFormat(args.output)
    if args.verbose:
        config.verbose = True
    return ConfigManager().apply(config)


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    handler = setup_error_handling()
    init_logging(logging.DEBUG if args.verbose else logging.WARNING)

    quiet = args.quiet
    try:
        config = load_config(args)
        quiet = config.quiet
        result = run_prompt(config)
    except BaseAppError as e:
        handler.handle(e)
        if not quiet or isinstance(e, ArgumentError):
            sys.stderr.write(f"{handler.to_user_message(e)}\n")
        return int(e.exit_code)

    # Interactive values already passed the submission policy
    accepted = result.valid or not config.quiet
    sys.stdout.write(format_result(result, config.output_format, accepted))
    sys.stdout.flush()
    return int(ExitCode.SUCCESS if accepted else ExitCode.VALIDATION_FAILED)


if __name__ == "__main__":
    raise SystemExit(main())
