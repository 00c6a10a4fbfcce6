"""Unit tests for the cookbook_validator.main CLI module.

The pipeline and repository are mocked; see tests/integration for runs
against real git repositories.
"""

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from cookbook_validator.exceptions import (
    EXIT_CONFIG_ERROR,
    EXIT_METADATA_FIELD,
    EXIT_MISSING_FILE,
    EXIT_MISSING_TICKET,
    MissingTicketError,
)
from cookbook_validator.main import SUCCESS_MESSAGE, _print_check, cli
from cookbook_validator.models import CheckResult, ValidationReport
from tests.conftest import BASE_METADATA


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_validator():
    """Patch PullRequestValidator and return the instance the CLI will use."""
    with patch("cookbook_validator.main.PullRequestValidator") as validator_cls, patch(
        "cookbook_validator.main.PullRequestRepository"
    ):
        validator = MagicMock()
        validator.report = ValidationReport(repository="/ws", base_branch="master", working_branch="PR_branch")
        validator_cls.return_value = validator
        yield validator_cls, validator


class TestPrintCheck:
    def test_print_check_success(self, capsys):
        _print_check("Test check", True)

        captured = capsys.readouterr()
        assert "[OK]" in captured.out
        assert "Test check" in captured.out

    def test_print_check_failure_with_multiline_detail(self, capsys):
        _print_check("Test check", False, "first line\nsecond line")

        captured = capsys.readouterr()
        assert "[FAIL]" in captured.out
        assert "       first line" in captured.out
        assert "       second line" in captured.out


class TestValidateCommand:
    def test_success(self, cli_runner, mock_validator):
        _, validator = mock_validator

        result = cli_runner.invoke(cli, ["validate"])

        assert result.exit_code == 0
        assert SUCCESS_MESSAGE in result.output
        validator.run.assert_called_once()

    def test_failure_exit_code(self, cli_runner, mock_validator):
        _, validator = mock_validator
        validator.run.side_effect = MissingTicketError("master")

        result = cli_runner.invoke(cli, ["validate"])

        assert result.exit_code == EXIT_MISSING_TICKET
        assert SUCCESS_MESSAGE not in result.output

    def test_cli_options_override_settings(self, cli_runner, mock_validator):
        validator_cls, _ = mock_validator

        result = cli_runner.invoke(
            cli,
            ["validate", "--base-branch", "main", "--changelog-file", "HISTORY.md", "--check-cookbook-name"],
        )

        assert result.exit_code == 0
        settings = validator_cls.call_args.args[1]
        assert settings.base_branch == "main"
        assert settings.changelog_file == "HISTORY.md"
        assert settings.check_cookbook_name is True
        assert settings.working_branch == "PR_branch"

    def test_config_file(self, cli_runner, mock_validator, tmp_path):
        validator_cls, _ = mock_validator
        config_file = tmp_path / "config.yaml"
        config_file.write_text("base_branch: develop\nworking_branch: pr\n")

        result = cli_runner.invoke(cli, ["validate", "--config", str(config_file), "--working-branch", "cli-pr"])

        assert result.exit_code == 0
        settings = validator_cls.call_args.args[1]
        assert settings.base_branch == "develop"
        assert settings.working_branch == "cli-pr"

    def test_missing_config_file(self, cli_runner, mock_validator, tmp_path):
        _, validator = mock_validator

        result = cli_runner.invoke(cli, ["validate", "--config", str(tmp_path / "missing.yaml")])

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Configuration file not found" in result.output
        validator.run.assert_not_called()

    def test_invalid_override(self, cli_runner, mock_validator):
        result = cli_runner.invoke(cli, ["validate", "--base-branch", " "])

        assert result.exit_code == EXIT_CONFIG_ERROR

    @pytest.mark.parametrize(
        ("variable", "value"),
        [("COOKBOOK_VALIDATOR_TICKET_PATTERN", "[A-Z"), ("COOKBOOK_VALIDATOR_BASE_BRANCH", " ")],
    )
    def test_invalid_environment_setting(self, cli_runner, mock_validator, monkeypatch, variable, value):
        _, validator = mock_validator
        monkeypatch.setenv(variable, value)

        result = cli_runner.invoke(cli, ["validate"])

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Invalid environment configuration" in result.output
        validator.run.assert_not_called()

    def test_unexpected_error(self, cli_runner, mock_validator):
        _, validator = mock_validator
        validator.run.side_effect = OSError("disk on fire")

        result = cli_runner.invoke(cli, ["validate"])

        assert result.exit_code == 1
        assert "Unexpected error: disk on fire" in result.output

    def test_json_output(self, cli_runner, mock_validator):
        _, validator = mock_validator
        validator.report.version = "1.0.1"
        validator.report.results.append(CheckResult(name="version_format", success=True, message="ok"))

        result = cli_runner.invoke(cli, ["validate", "--json"])

        assert result.exit_code == 0
        assert '"version": "1.0.1"' in result.output
        assert "[OK]" not in result.output

    def test_help_text(self, cli_runner):
        result = cli_runner.invoke(cli, ["validate", "--help"])

        assert result.exit_code == 0
        assert "Exit codes" in result.output
        assert "--base-branch" in result.output


class TestLogLevelOption:
    def test_unknown_level_is_a_usage_error(self, cli_runner, mock_validator):
        _, validator = mock_validator

        result = cli_runner.invoke(cli, ["--log-level", "LOUD", "validate"])

        assert result.exit_code == 2
        assert "Invalid value for '--log-level'" in result.output
        validator.run.assert_not_called()

    def test_level_is_case_insensitive(self, cli_runner, mock_validator):
        result = cli_runner.invoke(cli, ["--log-level", "debug", "validate"])

        assert result.exit_code == 0


class TestCheckMetadataCommand:
    def test_valid_file(self, cli_runner, tmp_path):
        metadata = tmp_path / "metadata.rb"
        metadata.write_text(BASE_METADATA)

        result = cli_runner.invoke(cli, ["check-metadata", str(metadata)])

        assert result.exit_code == 0
        assert "ops@example.com" in result.output
        assert "declares all required fields" in result.output

    def test_missing_field(self, cli_runner, tmp_path):
        metadata = tmp_path / "metadata.rb"
        metadata.write_text(BASE_METADATA.replace("description ", "# description "))

        result = cli_runner.invoke(cli, ["check-metadata", str(metadata)])

        assert result.exit_code == EXIT_METADATA_FIELD
        assert "description" in result.output
        assert "[FAIL]" in result.output

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["check-metadata", str(tmp_path / "metadata.rb")])

        assert result.exit_code == EXIT_MISSING_FILE
