"""Individual pull-request checks.

Each function takes plain values (file contents, diff lines, commit
subjects) and either returns what it confirmed or raises the matching
ValidatorError. Nothing here touches git; the pipeline feeds these from
PullRequestRepository.
"""

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from cookbook_validator.exceptions import (
    ChangelogMismatchError,
    MissingFileError,
    MissingTicketError,
    StateError,
    VersionFormatError,
    VersionNotUpdatedError,
)
from cookbook_validator.git.models import RepoState

VERSION_PATTERN = re.compile(r"\d+(?:\.\d+){0,2}")
TICKET_PATTERN = re.compile(r"[A-Z0-9]+-\d+")


def check_repo_state(state: RepoState, branch: str | None = None) -> None:
    """Raise StateError unless HEAD is detached."""
    if state is not RepoState.DETACHED:
        raise StateError(branch)


def check_required_files(root: Path, filenames: Sequence[str]) -> None:
    """Check that each file exists in ``root``, in order.

    Raises:
        MissingFileError: For the first file that is absent.
    """
    for filename in filenames:
        if not (root / filename).is_file():
            raise MissingFileError(filename)


def find_version_line(added_lines: Iterable[str], metadata_file: str = "metadata.rb", base_branch: str = "master") -> str:
    """Find the added version declaration in a metadata diff.

    This assumes the base revision also declares a version, so that a bump
    shows up as a changed (added) line.

    Args:
        added_lines: Lines added to the metadata file, without diff markers

    Returns:
        The first added line that declares a version.

    Raises:
        VersionNotUpdatedError: If no added line declares a version.
    """
    for line in added_lines:
        if line.startswith("version"):
            return line
    raise VersionNotUpdatedError(metadata_file, base_branch)


def extract_version(line: str) -> str:
    """Extract the first dotted numeric version (``9``, ``9.9`` or ``9.9.9``).

    Raises:
        VersionFormatError: If the line holds no digits.
    """
    match = VERSION_PATTERN.search(line)
    if match is None:
        raise VersionFormatError(line)
    return match.group(0)


def check_changelog(version: str, changelog: str, changelog_file: str = "CHANGELOG.md") -> None:
    """Check that the changelog mentions ``version``.

    This is a plain substring search: ``1.0.1`` is found in a changelog that
    only mentions ``1.0.10``.

    Raises:
        ChangelogMismatchError: If the version string does not occur.
    """
    if version not in changelog:
        raise ChangelogMismatchError(version, changelog_file)


def find_ticket(subjects: Iterable[str], pattern: re.Pattern[str] = TICKET_PATTERN) -> str | None:
    """Return the first ticket token in commit subjects, in the order given."""
    for subject in subjects:
        match = pattern.search(subject)
        if match:
            return match.group(0)
    return None


def check_ticket(
    subjects: Iterable[str],
    base_branch: str = "master",
    pattern: re.Pattern[str] = TICKET_PATTERN,
) -> str:
    """Require a ticket reference among the pull request's commit subjects.

    Raises:
        MissingTicketError: If no subject contains a ticket token.
    """
    ticket = find_ticket(subjects, pattern)
    if ticket is None:
        raise MissingTicketError(base_branch)
    return ticket
