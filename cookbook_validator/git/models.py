"""Git data models returned by the repository wrapper.

Example:
    >>> from cookbook_validator.git.models import CommitSummary
    >>> commit = CommitSummary(hexsha="a1b2c3d", subject="PROJ-42: add feature", parent_count=1)
    >>> commit.is_merge
    False
"""

from dataclasses import dataclass
from enum import Enum


class RepoState(str, Enum):
    """Where HEAD points in the checkout."""

    DETACHED = "detached"
    ON_BRANCH = "on-branch"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CommitSummary:
    """One-line view of a commit.

    Attributes:
        hexsha: Full commit SHA
        subject: First line of the commit message
        parent_count: Number of parents (more than one means a merge commit)
    """

    hexsha: str
    subject: str
    parent_count: int = 1

    @property
    def is_merge(self) -> bool:
        return self.parent_count > 1

    @property
    def short_sha(self) -> str:
        return self.hexsha[:7]
