"""
Tests for the command-line entry point.
"""

import io
import json

import pytest

from askr_core.error_handler import get_error_handler
from askr_core.prompt_config import OutputFormat
from askr_core.validation import Priority, PromptResult, ValidationOutcome
from askr_tui.cli import build_parser, format_result, main


def make_result(value="42", passed=True):
    outcome = ValidationOutcome("integer", passed, Priority.HIGH, message=None if passed else "Must be a valid integer")
    return PromptResult(
        value=value,
        valid=passed,
        primary_error=outcome.message,
        validation_results=[outcome],
    )


class TestFormatResult:
    """Test rendering results for stdout."""

    def test_default(self):
        """Test the default format."""
        assert format_result(make_result(), OutputFormat.DEFAULT) == "42\n"
        assert format_result(make_result("x", passed=False), OutputFormat.DEFAULT) == ""

    def test_accepted_overrides_valid(self):
        """Test that an accepted value prints even with a failing outcome."""
        assert format_result(make_result("x", passed=False), OutputFormat.DEFAULT, accepted=True) == "x\n"

    def test_raw(self):
        """Test that raw output is the bare value."""
        assert format_result(make_result("x", passed=False), OutputFormat.RAW) == "x"

    def test_json(self):
        """Test the JSON record."""
        data = json.loads(format_result(make_result("x", passed=False), OutputFormat.JSON))

        assert data["valid"] is False
        assert data["error"] == "Must be a valid integer"
        assert data["metadata"]["rules_checked"] == 1


class TestMain:
    """Test the entry point in quiet mode."""

    def teardown_method(self):
        """Clean up test fixtures."""
        get_error_handler().restore_hooks()

    def test_parser(self):
        """Test argument parsing."""
        args = build_parser().parse_args(["Port:", "-q", "-o", "json"])

        assert args.prompt == "Port:"
        assert args.quiet is True
        assert args.output == "json"

    def test_quiet_valid(self, monkeypatch, capsys, tmp_path):
        """Test a valid line in quiet mode."""
        config = tmp_path / "prompt.json"
        config.write_text(json.dumps({"rules": [{"kind": "integer"}]}))
        monkeypatch.setattr("sys.stdin", io.StringIO("42\n"))

        assert main(["-q", "-c", str(config)]) == 0
        assert capsys.readouterr().out == "42\n"

    def test_quiet_invalid(self, monkeypatch, capsys, tmp_path):
        """Test that an invalid line exits with 1 and prints nothing."""
        config = tmp_path / "prompt.json"
        config.write_text(json.dumps({"rules": [{"kind": "integer"}]}))
        monkeypatch.setattr("sys.stdin", io.StringIO("abc\n"))

        assert main(["-q", "-c", str(config)]) == 1
        assert capsys.readouterr().out == ""

    def test_bad_config(self, capsys, tmp_path):
        """Test that a bad configuration exits with 2 and explains why."""
        config = tmp_path / "prompt.json"
        config.write_text(json.dumps({"rules": [{"kind": "zipcode"}]}))

        assert main(["-q", "-c", str(config)]) == 2
        assert "Invalid prompt configuration" in capsys.readouterr().err

    def test_invalid_output_format(self):
        """Test that argparse rejects unknown formats with exit code 2."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-o", "yaml"])

        assert exc_info.value.code == 2
