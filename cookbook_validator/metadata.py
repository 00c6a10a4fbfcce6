"""Structural checks on a cookbook ``metadata.rb``.

These rules only prove that a syntactically plausible declaration exists for
each required field. They are not a Ruby parser: a declaration only counts
when it starts at the beginning of a line, so fields inside comments or in
the middle of a line are ignored.

The rules are shared by the pull-request pipeline and the standalone
``check-metadata`` command.

Example:
    >>> from cookbook_validator.metadata import check_metadata_fields
    >>> fields = check_metadata_fields(
    ...     "name 'apache2'\\n"
    ...     "maintainer 'Ops Team'\\n"
    ...     "maintainer_email 'ops@example.com'\\n"
    ...     "description 'Installs apache2'\\n"
    ... )
    >>> fields.name
    'apache2'
"""

import re
from dataclasses import dataclass

import structlog

from cookbook_validator.exceptions import CookbookNameMismatchError, MetadataFieldError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FieldRule:
    """How one required metadata field must be declared.

    Attributes:
        field: Field name as written in metadata.rb
        pattern: Line-anchored pattern with a ``value`` group
        expected: Example declaration shown when the check fails
    """

    field: str
    pattern: re.Pattern[str]
    expected: str

    def search(self, text: str) -> str | None:
        """Return the value of the first matching declaration, if any."""
        match = self.pattern.search(text)
        if match is None:
            return None
        return match.group("value")


# Order matters: the first failing rule is the one reported
REQUIRED_FIELDS: tuple[FieldRule, ...] = (
    FieldRule(
        field="name",
        pattern=re.compile(r"^name\s+'(?P<value>.+)'$", re.MULTILINE),
        expected="name 'some_name'",
    ),
    FieldRule(
        field="maintainer_email",
        pattern=re.compile(r"^maintainer_email\s+'(?P<value>.+?@[\w+\-.]+)'$", re.MULTILINE),
        expected="maintainer_email 'john.doe@yoyodyne.com'",
    ),
    FieldRule(
        field="maintainer",
        pattern=re.compile(r"^maintainer\s+'(?P<value>.+)'$", re.MULTILINE),
        expected="maintainer 'some_name'",
    ),
    # Description may open a multi-line string
    FieldRule(
        field="description",
        pattern=re.compile(r"^description\s+'(?P<value>.+?)'?$", re.MULTILINE),
        expected="description 'some stuff'",
    ),
)


@dataclass(frozen=True)
class MetadataFields:
    """Values captured from the required metadata declarations."""

    name: str
    maintainer_email: str
    maintainer: str
    description: str


def check_field(text: str, rule: FieldRule, metadata_file: str = "metadata.rb") -> str:
    """Check a single field rule against the metadata text.

    Returns:
        The captured value.

    Raises:
        MetadataFieldError: If no line declares the field in the expected form.
    """
    value = rule.search(text)
    if value is None:
        log.info("metadata_field_invalid", field=rule.field, metadata_file=metadata_file)
        raise MetadataFieldError(rule.field, rule.expected, metadata_file=metadata_file)
    return value


def check_metadata_fields(text: str, metadata_file: str = "metadata.rb") -> MetadataFields:
    """Check every required field, stopping at the first failure.

    Args:
        text: Contents of the metadata file
        metadata_file: File name used in error messages

    Returns:
        MetadataFields with the captured values.

    Raises:
        MetadataFieldError: Naming the first missing or malformed field.
    """
    values = {rule.field: check_field(text, rule, metadata_file) for rule in REQUIRED_FIELDS}
    return MetadataFields(**values)


def check_cookbook_name(name: str, directory: str, prefix: str = "chef-") -> None:
    """Check that the repository directory is named after the cookbook.

    ``apache2`` may live in ``apache2`` or, with the default prefix, in
    ``chef-apache2``.

    Raises:
        CookbookNameMismatchError: If neither form matches.
    """
    if directory == name:
        return
    if prefix and directory == f"{prefix}{name}":
        return
    raise CookbookNameMismatchError(name, directory)
