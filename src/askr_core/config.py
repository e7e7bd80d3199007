"""
Configuration constants for askr.

This module provides the application identifiers, the default prompt settings,
the environment variables that override them and the JSON schema used to
validate prompt configuration documents.
"""

import os
from pathlib import Path
from typing import Any

APP_NAME = "askr"

# JSON Schema version for prompt configuration documents
SCHEMA_VERSION = "1.0.0"

# Environment variables recognised by ConfigManager
ENV_NO_COLOR = "NO_COLOR"
ENV_ASKR_NO_COLOR = "ASKR_NO_COLOR"
ENV_WIDTH = "ASKR_WIDTH"
ENV_TIMEOUT = "ASKR_TIMEOUT"
ENV_LOG_DIR = "ASKR_LOG_DIR"

PRIORITY_NAMES = ["critical", "high", "medium", "low"]

VALIDATOR_KINDS = [
    "required",
    "min_length",
    "max_length",
    "pattern",
    "email",
    "hostname",
    "url",
    "ipv4",
    "ipv6",
    "integer",
    "float",
    "range",
    "positive",
    "negative",
    "date",
    "time",
    "datetime",
    "choice",
    "file_exists",
    "dir_exists",
    "path_exists",
    "readable",
    "writable",
    "executable",
]

# Default configuration with all supported keys and JSON-serializable types
DEFAULT_CONFIG: dict[str, Any] = {
    # UI settings
    "no_color": False,
    "width": 0,  # 0 means use the probed terminal width
    "mask_char": "*",
    "max_error_lines": 10,
    "medium_limit": 3,
    "low_limit": 2,
    # Interaction settings
    "timeout": 0.0,  # seconds of inactivity, 0 disables
    "max_attempts": 0,  # 0 means unlimited
    "low_priority_blocks": False,
    # Validator defaults
    "date_format": "%Y-%m-%d",
    "time_format": "%H:%M:%S",
    "datetime_format": "%Y-%m-%d %H:%M:%S",
    "filesystem_debounce_ms": 200,
    # Choice settings
    "selection_separator": ",",
    "min_choices": 1,
    "max_choices": 1,
}

_RULE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["kind"],
    "additionalProperties": False,
    "properties": {
        "kind": {"type": "string", "enum": VALIDATOR_KINDS},
        "priority": {"type": ["string", "null"], "enum": PRIORITY_NAMES + [p.upper() for p in PRIORITY_NAMES] + [None]},
        "message": {"type": ["string", "null"]},
        "params": {"type": "object"},
        "debounce_ms": {"type": ["number", "null"], "minimum": 0},
        "enabled": {"type": "boolean"},
    },
}

# JSON Schema for prompt configuration validation (draft-07)
PROMPT_CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "askr prompt configuration",
    "description": "Rules and presentation options for one interactive prompt",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "schema_version": {"type": "string"},
        "prompt_text": {"type": ["string", "null"]},
        "output_format": {"type": "string", "enum": ["default", "json", "raw"]},
        "quiet": {"type": "boolean"},
        "verbose": {"type": "boolean"},
        "rules": {"type": "array", "items": _RULE_SCHEMA},
        "ui": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "no_color": {"type": "boolean"},
                "width": {"type": ["integer", "null"], "minimum": 1},
                "help_text": {"type": ["string", "null"]},
                "mask_char": {"type": "string", "minLength": 1, "maxLength": 1},
                "max_error_lines": {"type": "integer", "minimum": 0},
                "medium_limit": {"type": "integer", "minimum": 0},
                "low_limit": {"type": "integer", "minimum": 0},
            },
        },
        "interaction": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "timeout": {"type": ["number", "null"], "exclusiveMinimum": 0},
                "max_attempts": {"type": ["integer", "null"], "minimum": 1},
                "default_value": {"type": ["string", "null"]},
                "mask": {"type": "boolean"},
                "confirm": {"type": "boolean"},
                "low_priority_blocks": {"type": "boolean"},
            },
        },
        "choice": {
            "type": ["object", "null"],
            "additionalProperties": False,
            "required": ["choices"],
            "properties": {
                "choices": {"type": "string"},
                "choice_separator": {"type": ["string", "null"], "minLength": 1},
                "selection_separator": {"type": "string"},
                "case_sensitive": {"type": "boolean"},
                "min_choices": {"type": "integer", "minimum": 0},
                "max_choices": {"type": "integer", "minimum": 1},
            },
        },
    },
}


def get_log_dir() -> Path:
    """
    Get the directory where askr writes its rotating log file.

    Returns:
        ``$ASKR_LOG_DIR`` when set, otherwise ``$XDG_STATE_HOME/askr/logs``
        (falling back to ``~/.local/state/askr/logs``)
    """
    override = os.environ.get(ENV_LOG_DIR)
    if override:
        return Path(override)

    state_home = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state_home) / APP_NAME / "logs"
