"""Pytest configuration and shared fixtures."""

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest
import structlog

BASE_METADATA = """\
name             'apache2'
maintainer       'Ops Team'
maintainer_email 'ops@example.com'
license          'Apache-2.0'
description      'Installs/Configures apache2'
long_description IO.read(File.join(File.dirname(__FILE__), 'README.md'))
version          '1.0.0'
"""

BASE_CHANGELOG = """\
# apache2 CHANGELOG

## 1.0.0
- Initial release
"""


def metadata_with_version(version: str) -> str:
    """BASE_METADATA with a different version declaration."""
    return BASE_METADATA.replace("'1.0.0'", f"'{version}'")


def changelog_with_version(version: str) -> str:
    """BASE_CHANGELOG with a new entry on top."""
    return BASE_CHANGELOG.replace("## 1.0.0", f"## {version}\n- OPS-42 New feature\n\n## 1.0.0")


def git(cwd: Path, *args: str) -> str:
    """Run a git command in ``cwd`` and return its stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_cookbook_repo(tmp_path: Path) -> Callable[..., Path]:
    """Factory for a cookbook repository in the state the CI builder leaves it.

    The base branch ``master`` holds version 1.0.0. A pull-request commit
    bumps it (by default to 1.0.1 with a matching changelog entry) and HEAD
    is left detached at the pull-request tip.
    """

    def _create(
        name: str = "chef-apache2",
        metadata: str | None = None,
        changelog: str | None = None,
        subjects: Sequence[str] = ("OPS-42: Bump version to 1.0.1",),
        remove: Sequence[str] = (),
        detach: bool = True,
    ) -> Path:
        repo = tmp_path / name
        repo.mkdir()

        git(repo, "init")
        git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
        git(repo, "config", "user.email", "test@example.com")
        git(repo, "config", "user.name", "Test User")
        git(repo, "config", "commit.gpgsign", "false")

        (repo / "metadata.rb").write_text(BASE_METADATA)
        (repo / "CHANGELOG.md").write_text(BASE_CHANGELOG)
        git(repo, "add", "-A")
        git(repo, "commit", "-m", "Initial commit")

        git(repo, "checkout", "-b", "feature")
        (repo / "metadata.rb").write_text(metadata if metadata is not None else metadata_with_version("1.0.1"))
        (repo / "CHANGELOG.md").write_text(changelog if changelog is not None else changelog_with_version("1.0.1"))
        for filename in remove:
            git(repo, "rm", "-q", "-f", filename)
        git(repo, "add", "-A")

        first, *rest = subjects or ("Update metadata",)
        git(repo, "commit", "--allow-empty", "-m", first)
        for subject in rest:
            git(repo, "commit", "--allow-empty", "-m", subject)

        if detach:
            git(repo, "checkout", "-q", "--detach")
            git(repo, "branch", "-D", "feature")

        return repo

    return _create
