"""GitPython wrapper exposing the primitives the validator needs.

The validator never parses raw ``git`` output itself. This module turns the
checkout into typed answers: where HEAD points, which lines a branch added
to a file, and which commits a branch adds on top of its base.

Example:
    >>> from cookbook_validator.git.repository import PullRequestRepository
    >>> repo = PullRequestRepository("/var/lib/jenkins/workspace/my-cookbook")
    >>> repo.state()
    <RepoState.DETACHED: 'detached'>
    >>> repo.materialize_branches(working="PR_branch", base="master")
    >>> repo.added_lines("metadata.rb", base="master", working="PR_branch")
    ["version          '1.0.1'"]

Dependencies:
    Requires GitPython (gitpython) package for repository access.
"""

from pathlib import Path

import structlog

try:
    import git
    from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
except ImportError as e:
    raise ImportError("GitPython is required for repository access. Install it with: pip install gitpython") from e

from cookbook_validator.exceptions import GitError, NotGitRepositoryError
from cookbook_validator.git.models import CommitSummary, RepoState

log = structlog.get_logger(__name__)


def _command_error(e: GitCommandError) -> GitError:
    """Convert a GitPython command failure into a GitError."""
    command = e.command if isinstance(e.command, str) else " ".join(str(part) for part in e.command)
    stderr = (e.stderr or "").strip()
    # GitPython prefixes captured stderr with "stderr: '" and wraps it in quotes
    stderr = stderr.removeprefix("stderr:").strip().strip("'").strip()
    message = f"Git command failed: {command}"
    if stderr:
        message = f"{message}\n{stderr}"
    return GitError(message, command=command)


class PullRequestRepository:
    """A pull-request checkout as handed over by the CI builder.

    The git.Repo object is created lazily on first access, so constructing
    an instance never touches the filesystem.

    Attributes:
        repo_path: Resolved path given by the caller.
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        self.repo_path = Path(repo_path).resolve()
        self._repo: git.Repo | None = None

    def _get_repo(self) -> git.Repo:
        """Get the GitPython repository object, initializing if needed.

        Raises:
            NotGitRepositoryError: If the path is not within a Git repository.
        """
        if self._repo is None:
            try:
                self._repo = git.Repo(self.repo_path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise NotGitRepositoryError(str(self.repo_path)) from e

        return self._repo

    @property
    def working_tree(self) -> Path:
        """Root directory of the working tree."""
        repo = self._get_repo()
        if repo.working_tree_dir is None:
            raise GitError(f"Repository has no working tree: {self.repo_path}")
        return Path(repo.working_tree_dir)

    def state(self) -> RepoState:
        """Report whether HEAD is detached or points at a named branch."""
        if self._get_repo().head.is_detached:
            return RepoState.DETACHED
        return RepoState.ON_BRANCH

    def current_branch(self) -> str | None:
        """Name of the checked-out branch, or None when HEAD is detached."""
        repo = self._get_repo()
        if repo.head.is_detached:
            return None
        return repo.head.ref.name

    def materialize_branches(self, working: str, base: str) -> None:
        """Name the detached commit and make the base branch resolvable.

        Creates ``working`` at the detached commit, checks out ``base`` (which
        lets git create it from a remote-tracking branch), then returns to
        ``working``.

        Raises:
            GitError: If any checkout fails, e.g. the base branch is absent
                or ``working`` already exists.
        """
        repo = self._get_repo()
        try:
            repo.git.checkout("-b", working)
            repo.git.checkout(base)
            repo.git.checkout(working)
        except GitCommandError as e:
            raise _command_error(e) from e

        log.info("branch_materialized", working_branch=working, base_branch=base)

    def added_lines(self, path: str, base: str, working: str) -> list[str]:
        """Lines added to ``path`` between ``base`` and ``working``.

        Returns:
            Text of each added line, without the leading ``+`` marker, in
            diff order.

        Raises:
            GitError: If git cannot produce the diff.
        """
        repo = self._get_repo()
        try:
            diff = repo.git.diff(f"{base}..{working}", "--", path)
        except GitCommandError as e:
            raise _command_error(e) from e

        added: list[str] = []
        in_hunk = False
        for line in diff.splitlines():
            if line.startswith("diff --git"):
                in_hunk = False
            elif line.startswith("@@"):
                in_hunk = True
            elif in_hunk and line.startswith("+"):
                added.append(line[1:])

        log.debug("diff_parsed", path=path, added_count=len(added))
        return added

    def unique_commits(self, base: str, working: str, include_merges: bool = False) -> list[CommitSummary]:
        """Commits reachable from ``working`` but not from ``base``.

        Returns:
            Commits newest first, merge commits omitted unless requested.

        Raises:
            GitError: If either revision cannot be resolved.
        """
        repo = self._get_repo()
        kwargs = {} if include_merges else {"no_merges": True}
        try:
            commits = [
                CommitSummary(
                    hexsha=commit.hexsha,
                    subject=str(commit.summary),
                    parent_count=len(commit.parents),
                )
                for commit in repo.iter_commits(f"{base}..{working}", **kwargs)
            ]
        except GitCommandError as e:
            raise _command_error(e) from e

        log.debug(
            "commits_listed",
            base_branch=base,
            working_branch=working,
            commits=[commit.short_sha for commit in commits],
        )
        return commits
