"""
Typed prompt configuration for askr.

This module provides the dataclasses describing one prompt: its rules,
presentation options, interaction limits and optional choice list. Mappings
from JSON documents are validated against PROMPT_CONFIG_SCHEMA before they are
turned into dataclasses.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import jsonschema

from .config import DEFAULT_CONFIG, PROMPT_CONFIG_SCHEMA, SCHEMA_VERSION
from .errors import ArgumentError, ErrorCode
from .validation import DisplayPolicy, RuleCatalog, RuleConfig, SubmissionPolicy, ValidationEngine
from .validation.engine import Clock
from .validation.rules.choice import parse_choices

logger = logging.getLogger(__name__)


class OutputFormat(Enum):
    """How the result record is printed by the caller."""

    DEFAULT = "default"
    JSON = "json"
    RAW = "raw"


@dataclass
class UiConfig:
    """Presentation options."""

    no_color: bool = DEFAULT_CONFIG["no_color"]
    width: int | None = None
    help_text: str | None = None
    mask_char: str = DEFAULT_CONFIG["mask_char"]
    max_error_lines: int = DEFAULT_CONFIG["max_error_lines"]
    medium_limit: int = DEFAULT_CONFIG["medium_limit"]
    low_limit: int = DEFAULT_CONFIG["low_limit"]

    def display_policy(self) -> DisplayPolicy:
        return DisplayPolicy(
            medium_limit=self.medium_limit,
            low_limit=self.low_limit,
            max_lines=self.max_error_lines,
        )


@dataclass
class InteractionConfig:
    """Limits and behaviour of the interactive session."""

    timeout: float | None = None  # seconds of inactivity
    max_attempts: int | None = None
    default_value: str | None = None
    mask: bool = False
    confirm: bool = False
    low_priority_blocks: bool = DEFAULT_CONFIG["low_priority_blocks"]


@dataclass
class ChoiceConfig:
    """A fixed list of options presented as a navigable menu."""

    choices: str
    choice_separator: str | None = None
    selection_separator: str = DEFAULT_CONFIG["selection_separator"]
    case_sensitive: bool = False
    min_choices: int = DEFAULT_CONFIG["min_choices"]
    max_choices: int = DEFAULT_CONFIG["max_choices"]

    @property
    def labels(self) -> list[str]:
        return parse_choices(self.choices, self.choice_separator)

    @property
    def multi(self) -> bool:
        return self.max_choices > 1

    def to_rule(self) -> RuleConfig:
        """Choice rule checking a submitted value against this list."""
        return RuleConfig(
            kind="choice",
            params={
                "choices": self.labels,
                "case_sensitive": self.case_sensitive,
                "min_choices": self.min_choices,
                "max_choices": self.max_choices,
                "separator": self.selection_separator,
            },
        )


@dataclass
class PromptConfig:
    """Everything needed to run one prompt."""

    prompt_text: str | None = None
    output_format: OutputFormat = OutputFormat.DEFAULT
    quiet: bool = False
    verbose: bool = False
    rules: list[RuleConfig] = field(default_factory=list)
    ui: UiConfig = field(default_factory=UiConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    choice: ChoiceConfig | None = None

    @property
    def display_prompt(self) -> str:
        return self.prompt_text or "Enter input:"

    def all_rules(self) -> list[RuleConfig]:
        """Configured rules plus the implicit choice rule of a choice prompt."""
        rules = list(self.rules)
        if self.choice is not None and not any(rule.kind == "choice" for rule in rules):
            rules.append(self.choice.to_rule())
        return rules

    def build_engine(self, clock: Clock = time.monotonic) -> ValidationEngine:
        """
        Build the validation engine for this prompt.

        Raises:
            ArgumentError: If any rule configuration is malformed
        """
        catalog = RuleCatalog.from_configs(self.all_rules())
        return ValidationEngine(
            catalog,
            clock=clock,
            display_policy=self.ui.display_policy(),
            submission_policy=SubmissionPolicy(low_priority_blocks=self.interaction.low_priority_blocks),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PromptConfig:
        """
        Create a PromptConfig from a JSON-style mapping.

        Args:
            data: Mapping following PROMPT_CONFIG_SCHEMA

        Returns:
            PromptConfig instance

        Raises:
            ArgumentError: If the mapping does not follow the schema
        """
        try:
            jsonschema.validate(data, PROMPT_CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            location = "/".join(str(part) for part in e.absolute_path) or "<root>"
            raise ArgumentError(
                f"Invalid prompt configuration at {location}: {e.message}",
                code=ErrorCode.CONFIG_INVALID,
                technical_message=str(e),
            ) from e

        ui_data = data.get("ui", {})
        interaction_data = data.get("interaction", {})
        choice_data = data.get("choice")

        return cls(
            prompt_text=data.get("prompt_text"),
            output_format=OutputFormat(data.get("output_format", OutputFormat.DEFAULT.value)),
            quiet=data.get("quiet", False),
            verbose=data.get("verbose", False),
            rules=[RuleConfig.from_dict(rule) for rule in data.get("rules", [])],
            ui=UiConfig(**ui_data),
            interaction=InteractionConfig(**interaction_data),
            choice=ChoiceConfig(**choice_data) if choice_data else None,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> PromptConfig:
        """
        Load a prompt configuration from a JSON file.

        Raises:
            ArgumentError: If the file cannot be read or is not valid configuration
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ArgumentError(
                f"Failed to load prompt configuration '{path}': {e}",
                code=ErrorCode.CONFIG_INVALID,
            ) from e

        schema_version = data.get("schema_version") if isinstance(data, dict) else None
        if schema_version and schema_version != SCHEMA_VERSION:
            logger.warning(f"Configuration '{path}' has schema version {schema_version}, expected {SCHEMA_VERSION}")

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a mapping accepted by from_dict."""
        data: dict[str, Any] = {
            "schema_version": SCHEMA_VERSION,
            "prompt_text": self.prompt_text,
            "output_format": self.output_format.value,
            "quiet": self.quiet,
            "verbose": self.verbose,
            "rules": [rule.to_dict() for rule in self.rules],
            "ui": {
                "no_color": self.ui.no_color,
                "width": self.ui.width,
                "help_text": self.ui.help_text,
                "mask_char": self.ui.mask_char,
                "max_error_lines": self.ui.max_error_lines,
                "medium_limit": self.ui.medium_limit,
                "low_limit": self.ui.low_limit,
            },
            "interaction": {
                "timeout": self.interaction.timeout,
                "max_attempts": self.interaction.max_attempts,
                "default_value": self.interaction.default_value,
                "mask": self.interaction.mask,
                "confirm": self.interaction.confirm,
                "low_priority_blocks": self.interaction.low_priority_blocks,
            },
        }
        if self.choice is not None:
            data["choice"] = {
                "choices": self.choice.choices,
                "choice_separator": self.choice.choice_separator,
                "selection_separator": self.choice.selection_separator,
                "case_sensitive": self.choice.case_sensitive,
                "min_choices": self.choice.min_choices,
                "max_choices": self.choice.max_choices,
            }
        return data
