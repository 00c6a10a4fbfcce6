"""Report models for a validation run.

The pipeline records one CheckResult per step as it runs and collects the
confirmed values (version, ticket, metadata fields) on the ValidationReport.
The report is built up during a single run and never persisted.

Example:
    Building a report by hand::

        report = ValidationReport(repository="/ws/apache2", base_branch="master", working_branch="PR_branch")
        report.results.append(CheckResult(name="changelog", success=True, message="CHANGELOG.md mentions 1.0.1"))
        print(report.to_json())
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

from cookbook_validator.metadata import MetadataFields


@dataclass
class CheckResult:
    """Outcome of a single pipeline step.

    Attributes:
        name: Step identifier, e.g. "repository_state" or "ticket"
        success: Whether the step passed
        message: Human-readable description of what was confirmed or violated
        details: Optional extra data, such as the confirmed value or a hint
    """

    name: str
    success: bool
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        The details field is omitted if empty.
        """
        result: dict[str, Any] = {
            "name": self.name,
            "success": self.success,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ValidationReport:
    """Everything one validation run confirmed, in execution order."""

    repository: str
    base_branch: str
    working_branch: str
    results: list[CheckResult] = field(default_factory=list)
    metadata: MetadataFields | None = None
    version_line: str | None = None
    version: str | None = None
    ticket: str | None = None

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def all_passed(self) -> bool:
        """True when at least one step ran and none failed."""
        return bool(self.results) and self.failed == 0

    @property
    def failure(self) -> CheckResult | None:
        """The failing step, if any. The pipeline stops at the first one."""
        for result in self.results:
            if not result.success:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository": self.repository,
            "base_branch": self.base_branch,
            "working_branch": self.working_branch,
            "passed": self.passed,
            "failed": self.failed,
            "metadata": asdict(self.metadata) if self.metadata else None,
            "version_line": self.version_line,
            "version": self.version,
            "ticket": self.ticket,
            "results": [r.to_dict() for r in self.results],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
