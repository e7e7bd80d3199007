"""
Tests for the filesystem validators.
"""

from unittest.mock import patch

from askr_core.validation import RuleCatalog, RuleConfig
from askr_core.validation.rules.filesystem import DEFAULT_DEBOUNCE, SENTINEL_PATH


class TestExistence:
    """Test the file, directory and path existence validators."""

    def test_file_exists(self, make_rule, tmp_path):
        """Test file_exists against a real file and a missing one."""
        target = tmp_path / "notes.txt"
        target.write_text("hi")
        rule = make_rule("file_exists")

        assert rule.validate(str(target)).passed is True
        missing = str(tmp_path / "missing.txt")
        assert rule.validate(missing).message == f"File does not exist: {missing}"

    def test_dir_exists(self, make_rule, tmp_path):
        """Test that a file is not a directory."""
        target = tmp_path / "notes.txt"
        target.write_text("hi")
        rule = make_rule("dir_exists")

        assert rule.validate(str(tmp_path)).passed is True
        assert rule.validate(str(target)).passed is False

    def test_path_exists(self, make_rule, tmp_path):
        """Test path_exists accepts files and directories."""
        rule = make_rule("path_exists")

        assert rule.validate(str(tmp_path)).passed is True
        assert rule.validate("").passed is False

    def test_nul_byte(self, make_rule):
        """Test that NUL bytes fail without touching the disk."""
        rule = make_rule("path_exists")

        assert rule.validate("a\0b").passed is False
        assert rule.partial_validate("a\0b", 3).first_error_offset == 1


class TestPermissions:
    """Test the readable and writable validators."""

    def test_readable(self, make_rule, tmp_path):
        """Test an existing readable file."""
        target = tmp_path / "data.csv"
        target.write_text("a,b")

        assert make_rule("readable").validate(str(target)).passed is True
        assert make_rule("readable").validate(str(tmp_path / "nope")).message.startswith("Path is not readable")

    def test_writable_new_file_in_writable_dir(self, make_rule, tmp_path):
        """Test that a file that does not exist yet is writable when its directory is."""
        assert make_rule("writable").validate(str(tmp_path / "new.txt")).passed is True

    def test_writable_missing_parent(self, make_rule, tmp_path):
        """Test that a missing parent directory is not writable."""
        assert make_rule("writable").validate(str(tmp_path / "no" / "such" / "file")).passed is False


class TestSlowRuleProperties:
    """Test debounce defaults and side-effect free sizing."""

    def test_default_debounce_and_value_dependence(self, make_rule):
        """Test that filesystem rules are slow and value dependent."""
        rule = make_rule("file_exists")

        assert rule.debounce == DEFAULT_DEBOUNCE
        assert rule.is_slow is True
        assert rule.value_dependent is True

    def test_debounce_can_be_disabled(self):
        """Test that a zero debounce turns debouncing off."""
        rule = RuleCatalog.from_configs([RuleConfig(kind="dir_exists", debounce_ms=0)]).rules[0]

        assert rule.debounce is None
        assert rule.is_slow is False

    def test_potential_messages_use_sentinel(self, make_rule):
        """Test that sizing uses a placeholder path and never touches the disk."""
        rule = make_rule("file_exists")

        with patch("pathlib.Path.is_file", side_effect=AssertionError("filesystem touched")):
            messages = rule.potential_messages()

        assert messages == [f"File does not exist: {SENTINEL_PATH}"]
