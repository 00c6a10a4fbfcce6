"""
Pull-request validation pipeline.

PullRequestValidator runs the checks in a fixed order against a checkout
handed over by the CI builder. The first failing check stops the run:

    repository_state -> branch_setup -> required_files -> metadata_fields
    -> cookbook_name (opt-in) -> version_updated -> version_format
    -> changelog -> ticket

Only branch_setup modifies the checkout. It creates the working branch and
switches back to it, so the workspace must be fresh for every run.

Example:
    >>> repo = PullRequestRepository("/ws/chef-apache2")
    >>> validator = PullRequestValidator(repo, ValidatorSettings())
    >>> report = validator.run()
    >>> report.version, report.ticket
    ('1.0.1', 'OPS-42')
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from cookbook_validator import checks
from cookbook_validator.config.settings import ValidatorSettings
from cookbook_validator.exceptions import ValidatorError
from cookbook_validator.git.repository import PullRequestRepository
from cookbook_validator.metadata import check_cookbook_name, check_metadata_fields
from cookbook_validator.models import CheckResult, ValidationReport

log = structlog.get_logger(__name__)


class PullRequestValidator:
    """Run every pull-request check against one checkout.

    Attributes:
        repo: Repository wrapper for the checkout under validation.
        settings: Branch names, file names and optional checks.
        report: Results recorded so far. Still available after a failure.
    """

    def __init__(
        self,
        repo: PullRequestRepository,
        settings: ValidatorSettings,
        on_result: Callable[[CheckResult], None] | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            repo: Repository wrapper for the checkout
            settings: Validator settings
            on_result: Called with each CheckResult as soon as it is recorded
        """
        self.repo = repo
        self.settings = settings
        self.on_result = on_result
        self.report = ValidationReport(
            repository=str(repo.repo_path),
            base_branch=settings.base_branch,
            working_branch=settings.working_branch,
        )

    def _record(self, result: CheckResult) -> None:
        self.report.results.append(result)
        if self.on_result is not None:
            self.on_result(result)

    def _passed(self, name: str, message: str, **details: str) -> None:
        log.info("check_passed", check=name, **details)
        self._record(CheckResult(name=name, success=True, message=message, details=details or None))

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        """Record a failed CheckResult for any ValidatorError raised in the step."""
        try:
            yield
        except ValidatorError as e:
            log.warning("check_failed", check=name, error=e.message, exit_code=e.exit_code)
            details = {"hint": e.hint} if e.hint else None
            self._record(CheckResult(name=name, success=False, message=e.message, details=details))
            raise

    def _read(self, root: Path, filename: str) -> str:
        return (root / filename).read_text(encoding="utf-8", errors="replace")

    def run(self) -> ValidationReport:
        """Run all checks in order.

        Returns:
            The completed report.

        Raises:
            ValidatorError: The first failing check's error.
        """
        settings = self.settings
        base = settings.base_branch
        working = settings.working_branch
        log.info("validation_started", repository=self.report.repository, base_branch=base)

        with self._step("repository_state"):
            checks.check_repo_state(self.repo.state(), self.repo.current_branch())
        self._passed("repository_state", "HEAD is detached")

        with self._step("branch_setup"):
            self.repo.materialize_branches(working=working, base=base)
        self._passed("branch_setup", f"Created '{working}' and resolved '{base}'")

        root = self.repo.working_tree
        with self._step("required_files"):
            checks.check_required_files(root, [settings.metadata_file, settings.changelog_file])
        self._passed("required_files", f"{settings.metadata_file} and {settings.changelog_file} exist")

        metadata_text = self._read(root, settings.metadata_file)
        with self._step("metadata_fields"):
            self.report.metadata = check_metadata_fields(metadata_text, settings.metadata_file)
        self._passed("metadata_fields", "name, maintainer_email, maintainer and description are declared")

        if settings.check_cookbook_name:
            with self._step("cookbook_name"):
                check_cookbook_name(self.report.metadata.name, root.name, settings.cookbook_prefix)
            self._passed("cookbook_name", f"Directory '{root.name}' matches cookbook '{self.report.metadata.name}'")

        with self._step("version_updated"):
            added = self.repo.added_lines(settings.metadata_file, base=base, working=working)
            self.report.version_line = checks.find_version_line(added, settings.metadata_file, base)
        self._passed("version_updated", f"{settings.metadata_file} version changed since '{base}'")

        with self._step("version_format"):
            self.report.version = checks.extract_version(self.report.version_line)
        self._passed(
            "version_format",
            f"Version number in {settings.metadata_file} is <{self.report.version}>",
            version=self.report.version,
        )

        changelog_text = self._read(root, settings.changelog_file)
        with self._step("changelog"):
            checks.check_changelog(self.report.version, changelog_text, settings.changelog_file)
        self._passed(
            "changelog",
            f"{settings.changelog_file} matches the {settings.metadata_file} version number: <{self.report.version}>",
            version=self.report.version,
        )

        with self._step("ticket"):
            commits = self.repo.unique_commits(base=base, working=working)
            self.report.ticket = checks.check_ticket(
                (commit.subject for commit in commits), base, settings.ticket_regex
            )
        self._passed("ticket", f"Jira ticket from commit-log is <{self.report.ticket}>", ticket=self.report.ticket)

        log.info("validation_passed", version=self.report.version, ticket=self.report.ticket)
        return self.report
