"""Pydantic models for shapeguard validation outcomes.

This module contains the base model every shapeguard model inherits from,
plus the models describing the result of a validation call:

- `Issue`: one recorded failure (path, kind, message)
- `Valid`: successful outcome carrying the normalized value
- `Invalid`: failed outcome carrying every issue found
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ._types import Path


class ShapeBaseModel(BaseModel):
    """Base model for all shapeguard Pydantic models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable so they can be shared freely
      between threads and validation calls
    """

    model_config = ConfigDict(extra="forbid", frozen=True)


class IssueKind(Enum):
    """Closed set of failure kinds reported by the engine."""

    REQUIRED_BUT_MISSING = "required_but_missing"
    NULL_NOT_ALLOWED = "null_not_allowed"
    TYPE_MISMATCH = "type_mismatch"
    REFINEMENT_FAILED = "refinement_failed"
    LITERAL_MISMATCH = "literal_mismatch"
    ENUM_MISMATCH = "enum_mismatch"
    UNRECOGNIZED_KEY = "unrecognized_key"
    TUPLE_LENGTH_MISMATCH = "tuple_length_mismatch"
    ARRAY_LENGTH_CONSTRAINT = "array_length_constraint"
    NO_UNION_MEMBER_MATCHED = "no_union_member_matched"
    UNKNOWN_DISCRIMINATOR = "unknown_discriminator"
    RECORD_KEY_INVALID = "record_key_invalid"
    RECORD_VALUE_INVALID = "record_value_invalid"


def format_path(path: Iterable[str | int]) -> str:
    """Render a path the way it would be written in code.

    Example:
        >>> format_path(("coords", 2))
        'coords[2]'
        >>> format_path(("id", "data"))
        'id.data'
        >>> format_path(())
        '(root)'
    """
    rendered = ""
    for element in path:
        if isinstance(element, int):
            rendered += f"[{element}]"
        elif rendered:
            rendered += f".{element}"
        else:
            rendered = element
    return rendered or "(root)"


class Issue(ShapeBaseModel):
    """A single validation failure.

    Attributes:
        path: Field names and sequence indices leading to the failure.
        kind: The failure kind.
        message: Human-readable reason.
        union_errors: For ``no_union_member_matched``, the issues produced by
            each union candidate, in declared order.
        causes: For record/map entry failures, the underlying issues.
    """

    path: Path = ()
    kind: IssueKind
    message: str
    union_errors: tuple[tuple[Issue, ...], ...] = ()
    causes: tuple[Issue, ...] = ()

    @property
    def location(self) -> str:
        return format_path(self.path)

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"


class Valid(ShapeBaseModel):
    """Successful validation outcome.

    Attributes:
        value: The normalized output (defaults applied, unknown keys handled).
    """

    ok: Literal[True] = True
    value: Any = None


class Invalid(ShapeBaseModel):
    """Failed validation outcome.

    Attributes:
        issues: Every issue found, in evaluation order. Never empty.
    """

    ok: Literal[False] = False
    issues: tuple[Issue, ...] = Field(min_length=1)

    def flatten(self) -> dict[str, list[str]]:
        """Group issue messages by rendered path, e.g. for form-field errors."""
        grouped: dict[str, list[str]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.location, []).append(issue.message)
        return grouped


Outcome = Valid | Invalid


Issue.model_rebuild()
Valid.model_rebuild()
Invalid.model_rebuild()


class SchemaDocumentModel(ShapeBaseModel):
    """A schema declared as data (YAML/JSON), before compilation.

    The dialect follows OpenAPI/JSON Schema naming. Unknown keywords such as
    ``examples`` or ``title`` are ignored so documents written for other
    tools still load.

    Example:
        >>> doc = SchemaDocumentModel.model_validate({
        ...     "type": "object",
        ...     "properties": {"name": {"type": "string", "minLength": 2}},
        ...     "required": ["name"],
        ...     "additionalProperties": False,
        ... })
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    type: str | None = None
    description: str | None = None
    format: str | None = None
    pattern: str | None = None

    # String constraints
    min_length: int | None = Field(default=None, alias="minLength", ge=0)
    max_length: int | None = Field(default=None, alias="maxLength", ge=0)

    # Numeric constraints
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: int | float | None = Field(default=None, alias="exclusiveMinimum")
    exclusive_maximum: int | float | None = Field(default=None, alias="exclusiveMaximum")
    multiple_of: int | float | None = Field(default=None, alias="multipleOf")

    # Array constraints
    min_items: int | None = Field(default=None, alias="minItems", ge=0)
    max_items: int | None = Field(default=None, alias="maxItems", ge=0)
    items: SchemaDocumentModel | None = None
    prefix_items: list[SchemaDocumentModel] | None = Field(default=None, alias="prefixItems")

    # Object constraints
    properties: dict[str, SchemaDocumentModel] | None = None
    required: list[str] | None = None
    additional_properties: bool | SchemaDocumentModel | None = Field(
        default=None, alias="additionalProperties"
    )
    property_names: SchemaDocumentModel | None = Field(default=None, alias="propertyNames")

    # Map constraints
    keys: SchemaDocumentModel | None = None
    values: SchemaDocumentModel | None = None

    # Value constraints
    enum: list[Any] | None = None
    const: Any = None
    any_of: list[SchemaDocumentModel] | None = Field(default=None, alias="anyOf")
    one_of: list[SchemaDocumentModel] | None = Field(default=None, alias="oneOf")
    discriminator: dict[str, Any] | None = None

    nullable: bool = False
    default: Any = None


SchemaDocumentModel.model_rebuild()
