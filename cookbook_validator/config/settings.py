"""
Configuration system using Pydantic for type-safe settings management.

Settings come from, in increasing priority: defaults, ``COOKBOOK_VALIDATOR_*``
environment variables, an optional YAML file, and CLI options.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cookbook_validator.exceptions import ConfigurationError

_ENV_REFERENCE = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


class ValidatorSettings(BaseSettings):
    """Pull-request validator settings.

    Example:
        >>> settings = ValidatorSettings(base_branch="main")
        >>> settings.metadata_file
        'metadata.rb'
    """

    model_config = SettingsConfigDict(
        env_prefix="COOKBOOK_VALIDATOR_",
        case_sensitive=False,
    )

    base_branch: str = Field(default="master", description="Branch the pull request targets")
    working_branch: str = Field(default="PR_branch", description="Branch created at the detached PR commit")
    metadata_file: str = Field(default="metadata.rb", description="Cookbook metadata file in the repository root")
    changelog_file: str = Field(default="CHANGELOG.md", description="Changelog file in the repository root")
    ticket_pattern: str = Field(
        default=r"[A-Z0-9]+-\d+", description="Regular expression matching an issue-tracker ticket"
    )
    check_cookbook_name: bool = Field(
        default=False, description="Require the repository directory to be named after the cookbook"
    )
    cookbook_prefix: str = Field(default="chef-", description="Allowed directory prefix before the cookbook name")

    @field_validator("base_branch", "working_branch", "metadata_file", "changelog_file")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty branch and file names."""
        if not v or not v.strip():
            raise ValueError("Branch and file names must not be empty")
        return v.strip()

    @field_validator("ticket_pattern")
    @classmethod
    def validate_ticket_pattern(cls, v: str) -> str:
        """Ensure the ticket pattern compiles."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid ticket pattern {v!r}: {e}") from e
        return v

    @property
    def ticket_regex(self) -> re.Pattern[str]:
        """Compiled ticket pattern."""
        return re.compile(self.ticket_pattern)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ValidatorSettings:
        """Load settings from a YAML mapping, expanding environment references.

        Keys the file leaves out fall back to ``COOKBOOK_VALIDATOR_*``
        variables and then to the defaults. An empty file yields the defaults.

        Raises:
            ConfigurationError: If the file is missing or unreadable, is not a
                YAML mapping, or holds an invalid value.
        """
        path = Path(config_path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

        try:
            data = yaml.safe_load(expand_env_references(raw))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must map setting names to values, not hold a list or scalar")

        try:
            return cls(**data)
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Failed to validate {path}: {e}") from e


def expand_env_references(content: str) -> str:
    """Replace ``${NAME}`` and ``${NAME:-fallback}`` with environment values.

    YAML comment lines are kept as written.

    Raises:
        ConfigurationError: If a reference without fallback names an unset variable.
    """

    def resolve(match: re.Match[str]) -> str:
        name, fallback = match.groups()
        value = os.environ.get(name, fallback)
        if value is None:
            raise ConfigurationError(f"Environment variable {name} referenced in configuration is not set")
        return value

    return "\n".join(
        line if line.lstrip().startswith("#") else _ENV_REFERENCE.sub(resolve, line)
        for line in content.split("\n")
    )
