"""Exception hierarchy for the cookbook pull-request validator.

Every check in the validation pipeline fails by raising one of these
exceptions. The CLI catches them, prints the message and hint, and exits
with the exception's ``exit_code``.

Exception Hierarchy:
    ValidatorError (base)
    ├── ConfigurationError
    ├── StateError
    ├── GitError
    │   └── NotGitRepositoryError
    ├── MissingFileError
    ├── MetadataFieldError
    ├── CookbookNameMismatchError
    ├── VersionNotUpdatedError
    ├── VersionFormatError
    ├── ChangelogMismatchError
    └── MissingTicketError

Example Usage:
    >>> from cookbook_validator.exceptions import MissingFileError
    >>> error = MissingFileError("metadata.rb")
    >>> error.message
    'metadata.rb does not exist in the repository root'
    >>> error.exit_code
    3
"""

# Exit codes for semantic error reporting
EXIT_SUCCESS = 0
EXIT_STATE_ERROR = 1
EXIT_GIT_ERROR = 2
EXIT_MISSING_FILE = 3
EXIT_METADATA_FIELD = 4
EXIT_COOKBOOK_NAME = 5
EXIT_VERSION_NOT_UPDATED = 6
EXIT_VERSION_FORMAT = 7
EXIT_CHANGELOG_MISMATCH = 8
EXIT_MISSING_TICKET = 9
EXIT_CONFIG_ERROR = 10


class ValidatorError(Exception):
    """Base exception for all validator errors.

    Attributes:
        message: Human-readable error description
        hint: Optional hint telling the author how to fix the pull request
        exit_code: Process exit status used by the CLI
    """

    exit_code = EXIT_STATE_ERROR

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            hint: Optional hint for resolution
        """
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        """Format error message with hint.

        Returns:
            Formatted error message with optional hint
        """
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class ConfigurationError(ValidatorError):
    """Configuration file or settings are invalid."""

    exit_code = EXIT_CONFIG_ERROR


class StateError(ValidatorError):
    """Repository is not in the detached-HEAD state the CI builder hands off."""

    exit_code = EXIT_STATE_ERROR

    def __init__(self, branch: str | None = None) -> None:
        message = "The git repo must be a detached-HEAD, as created by the pull-request builder"
        if branch:
            message += f" (currently on branch '{branch}')"
        super().__init__(
            message=message,
            hint="Run the validator on the revision checked out by the CI job, not on a named branch.",
        )
        self.branch = branch


class GitError(ValidatorError):
    """A git operation failed.

    Attributes:
        command: The git command that failed, if known
    """

    exit_code = EXIT_GIT_ERROR

    def __init__(self, message: str, command: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.command = command


class NotGitRepositoryError(GitError):
    """Raised when the validated directory is not a git repository.

    Attributes:
        path: Path to the directory that is not a git repository
    """

    def __init__(self, path: str) -> None:
        super().__init__(
            message=f"Not a Git repository: {path}",
            hint="Point --repo at the checkout created by the CI job.",
        )
        self.path = path


class MissingFileError(ValidatorError):
    """A required file is absent from the repository root.

    Attributes:
        filename: Name of the missing file
    """

    exit_code = EXIT_MISSING_FILE

    def __init__(self, filename: str) -> None:
        super().__init__(
            message=f"{filename} does not exist in the repository root",
            hint=f"Single-cookbook repositories must commit {filename} at the top level.",
        )
        self.filename = filename


class MetadataFieldError(ValidatorError):
    """A required metadata field is missing or malformed.

    Attributes:
        field: Name of the offending field
        expected: Example of a well-formed declaration
    """

    exit_code = EXIT_METADATA_FIELD

    def __init__(self, field: str, expected: str, metadata_file: str = "metadata.rb") -> None:
        super().__init__(
            message=f"{metadata_file} must have a valid {field} field",
            hint=f"Use the format: {expected}",
        )
        self.field = field
        self.expected = expected


class CookbookNameMismatchError(ValidatorError):
    """The cookbook name does not match the repository directory."""

    exit_code = EXIT_COOKBOOK_NAME

    def __init__(self, name: str, directory: str) -> None:
        super().__init__(
            message=f"Cookbook name '{name}' does not match repository directory '{directory}'",
            hint="The directory must be named after the cookbook, optionally with a 'chef-' prefix.",
        )
        self.name = name
        self.directory = directory


class VersionNotUpdatedError(ValidatorError):
    """The metadata version line was not changed relative to the base branch."""

    exit_code = EXIT_VERSION_NOT_UPDATED

    def __init__(self, metadata_file: str, base_branch: str) -> None:
        super().__init__(
            message=f"{metadata_file} must have an updated version number",
            hint=f"Bump the version declaration compared to '{base_branch}'.",
        )
        self.metadata_file = metadata_file
        self.base_branch = base_branch


class VersionFormatError(ValidatorError):
    """The changed version line holds no dotted numeric version."""

    exit_code = EXIT_VERSION_FORMAT

    def __init__(self, line: str) -> None:
        super().__init__(
            message=f"Version line has no version number: {line.strip()!r}",
            hint="Use single-quoted digits, e.g. version '1.2.3'.",
        )
        self.line = line


class ChangelogMismatchError(ValidatorError):
    """The changelog does not mention the new version."""

    exit_code = EXIT_CHANGELOG_MISMATCH

    def __init__(self, version: str, changelog_file: str = "CHANGELOG.md") -> None:
        super().__init__(
            message=f"{changelog_file} must match the metadata version number: <{version}>",
            hint=f"Add a {changelog_file} entry for version {version}.",
        )
        self.version = version


class MissingTicketError(ValidatorError):
    """No commit unique to the pull request references a ticket."""

    exit_code = EXIT_MISSING_TICKET

    def __init__(self, base_branch: str) -> None:
        super().__init__(
            message="Commit-log is missing a Jira ticket number",
            hint=f"Reference a ticket such as PROJ-123 in a commit subject not already on '{base_branch}'.",
        )
        self.base_branch = base_branch
