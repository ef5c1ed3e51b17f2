"""Exceptions raised by shapeguard."""

from collections.abc import Iterable

from .models import Issue


class ValidationError(ValueError):
    """Raised by `assert_validate` when a value does not match its schema.

    The message enumerates every issue, one per line, so a caller sees all
    problems at once.

    Attributes:
        issues: Every issue found during validation.

    Example:
        >>> try:
        ...     assert_validate(UserSchema, payload)
        ... except ValidationError as e:
        ...     for issue in e.issues:
        ...         print(issue.location, issue.message)
    """

    def __init__(self, issues: Iterable[Issue], prefix: str = "Validation failed"):
        self.issues = tuple(issues)
        lines = [f"{prefix} with {len(self.issues)} issue(s):"]
        lines.extend(f"  - {issue}" for issue in self.issues)
        super().__init__("\n".join(lines))


class SchemaDefinitionError(ValueError):
    """Raised when a schema descriptor is malformed at construction time.

    This signals a programming error in the schema itself (for example
    duplicate discriminator values), never a problem with validated data.
    """

    pass
