"""CLI entry point for the cookbook pull-request validator."""

import sys
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from cookbook_validator.config.settings import ValidatorSettings
from cookbook_validator.exceptions import (
    EXIT_SUCCESS,
    ConfigurationError,
    MissingFileError,
    ValidatorError,
)
from cookbook_validator.git.repository import PullRequestRepository
from cookbook_validator.metadata import REQUIRED_FIELDS, check_metadata_fields
from cookbook_validator.models import CheckResult
from cookbook_validator.pipeline import PullRequestValidator
from cookbook_validator.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

EXIT_UNEXPECTED = 1
EXIT_INTERRUPTED = 130

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

CHECK_LABELS = {
    "repository_state": "Detached HEAD",
    "branch_setup": "Branches",
    "required_files": "Required files",
    "metadata_fields": "Metadata fields",
    "cookbook_name": "Cookbook name",
    "version_updated": "Version updated",
    "version_format": "Version number",
    "changelog": "Changelog",
    "ticket": "Ticket reference",
}

SUCCESS_MESSAGE = "Pull-Request files are excellent."


def _print_check(name: str, status: bool, detail: str | None = None) -> None:
    """Print a check result with consistent formatting.

    Args:
        name: Name of the check
        status: True if passed, False if failed
        detail: Optional detail message
    """
    if status:
        click.echo(f"  {click.style('[OK]', fg='green')} {name}")
    else:
        click.echo(f"  {click.style('[FAIL]', fg='red')} {name}")

    if detail:
        for line in detail.splitlines():
            click.echo(f"       {line}")


def _print_result(result: CheckResult) -> None:
    label = CHECK_LABELS.get(result.name, result.name)
    _print_check(label, result.success, result.message)
    if not result.success and result.details and result.details.get("hint"):
        click.echo()
        click.echo(click.style("Suggestion:", fg="yellow") + f" {result.details['hint']}")


def _load_settings(config_path: str | None, overrides: dict[str, object]) -> ValidatorSettings:
    """Combine the optional YAML file with CLI overrides.

    Raises:
        ConfigurationError: If the environment, the file or any override is invalid.
    """
    try:
        settings = ValidatorSettings.from_yaml(config_path) if config_path else ValidatorSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if not overrides:
        return settings
    try:
        return ValidatorSettings(**{**settings.model_dump(), **overrides})
    except Exception as e:
        raise ConfigurationError(f"Invalid command-line option: {e}") from e


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Logging level (structured logs go to stderr)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="json",
    help="Structured log format",
)
@click.version_option(package_name="cookbook-validator")
def cli(log_level: str, log_format: str) -> None:
    """cookbook-validator: pre-merge checks for single-cookbook pull requests."""
    configure_logging(log_level, log_format)


@cli.command()
@click.option(
    "--repo",
    "repo_path",
    default=".",
    type=click.Path(file_okay=False),
    help="Path to the pull-request checkout",
)
@click.option("--config", "config_path", default=None, type=click.Path(), help="Optional YAML configuration file")
@click.option("--base-branch", default=None, help="Branch the pull request targets (default: master)")
@click.option("--working-branch", default=None, help="Branch created at the detached commit (default: PR_branch)")
@click.option("--metadata-file", default=None, help="Metadata file name (default: metadata.rb)")
@click.option("--changelog-file", default=None, help="Changelog file name (default: CHANGELOG.md)")
@click.option(
    "--check-cookbook-name/--no-check-cookbook-name",
    default=None,
    help="Require the repository directory to be named after the cookbook",
)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON instead of check lines")
def validate(
    repo_path: str,
    config_path: str | None,
    base_branch: str | None,
    working_branch: str | None,
    metadata_file: str | None,
    changelog_file: str | None,
    check_cookbook_name: bool | None,
    as_json: bool,
) -> None:
    """Validate the pull request checked out in a detached-HEAD workspace.

    \b
    Checks performed, stopping at the first failure:
      1. HEAD is detached (as left by the pull-request builder)
      2. Working and base branches can be created and resolved
      3. metadata.rb and CHANGELOG.md exist
      4. metadata.rb declares name, maintainer_email, maintainer, description
      5. Cookbook name matches the directory (with --check-cookbook-name)
      6. The metadata.rb version line changed since the base branch
      7. The new version is a dotted number
      8. CHANGELOG.md mentions the new version
      9. A commit subject on the pull request references a ticket

    \b
    Exit codes:
      0  - All checks passed
      1  - Not a detached HEAD
      2  - Git operation failed
      3  - Required file missing
      4  - Metadata field missing or malformed
      5  - Cookbook name does not match directory
      6  - Version not updated
      7  - Version number malformed
      8  - Changelog does not mention version
      9  - No ticket reference in commits
      10 - Configuration error
    """
    try:
        settings = _load_settings(
            config_path,
            {
                "base_branch": base_branch,
                "working_branch": working_branch,
                "metadata_file": metadata_file,
                "changelog_file": changelog_file,
                "check_cookbook_name": check_cookbook_name,
            },
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(e.exit_code)

    if not as_json:
        click.echo(click.style("Validating various files in the current PR", bold=True))
        click.echo()

    validator = PullRequestValidator(
        PullRequestRepository(repo_path),
        settings,
        on_result=None if as_json else _print_result,
    )

    try:
        validator.run()
    except ValidatorError as e:
        if as_json:
            click.echo(validator.report.to_json())
        elif not validator.report.failure:
            # Raised outside a recorded step, e.g. while resolving the working tree
            _print_check("Validation", False, str(e))
        log.debug("validation_failed", exc_info=True)
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error("validation_unexpected", exc_info=True)
        sys.exit(EXIT_UNEXPECTED)

    if as_json:
        click.echo(validator.report.to_json())
    else:
        click.echo()
        click.echo(click.style(SUCCESS_MESSAGE, fg="green", bold=True))
    sys.exit(EXIT_SUCCESS)


@cli.command("check-metadata")
@click.argument("metadata_path", default="metadata.rb", type=click.Path(dir_okay=False))
def check_metadata(metadata_path: str) -> None:
    """Check the required fields of a single metadata file.

    Runs the same field rules as `validate`, without any git operations.
    """
    path = Path(metadata_path)
    try:
        if not path.is_file():
            raise MissingFileError(metadata_path)
        fields = check_metadata_fields(path.read_text(encoding="utf-8", errors="replace"), path.name)
    except ValidatorError as e:
        _print_check(path.name, False, str(e))
        sys.exit(e.exit_code)

    for rule in REQUIRED_FIELDS:
        _print_check(rule.field, True, getattr(fields, rule.field))
    click.echo()
    click.echo(click.style(f"{path.name} declares all required fields.", fg="green", bold=True))
    sys.exit(EXIT_SUCCESS)
