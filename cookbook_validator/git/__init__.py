"""Typed access to the pull-request checkout.

Example:
    >>> from cookbook_validator.git import PullRequestRepository, RepoState
    >>> repo = PullRequestRepository(".")
    >>> repo.state() is RepoState.DETACHED
    True
"""

from cookbook_validator.git.models import CommitSummary, RepoState
from cookbook_validator.git.repository import PullRequestRepository

__all__ = [
    "PullRequestRepository",
    "CommitSummary",
    "RepoState",
]
