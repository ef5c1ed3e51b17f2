"""Core validation logic for shapeguard.

`validate` walks a value alongside its schema descriptor and returns a
`Valid` or `Invalid` outcome. It never raises for bad input: every problem
becomes an `Issue` with an absolute path. `assert_validate` is the raising
variant and aggregates every issue into one `ValidationError`.

Evaluation is a pure function of the descriptor and the input. Each call
builds its own issue list and output value, so descriptors can be shared
between threads without locking.
"""

import logging
import math
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from ._types import MISSING, Path, PathElement
from .errors import SchemaDefinitionError, ValidationError
from .models import Invalid, Issue, IssueKind, Outcome, Valid
from .schemas import (
    ArraySchema,
    BaseSchema,
    DefaultSchema,
    DiscriminatedUnionSchema,
    EnumSchema,
    LiteralSchema,
    MapSchema,
    NullableSchema,
    NullishSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveSchema,
    RecordSchema,
    TupleSchema,
    UnionSchema,
    same_value,
)

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Any, Path, list[Issue]], Any]


def validate(schema: BaseSchema, value: Any = MISSING) -> Outcome:
    """Validate ``value`` against ``schema``.

    Args:
        schema: The descriptor to validate against.
        value: The input. Omit it (or pass ``MISSING``) to validate absence.

    Returns:
        ``Valid`` with the normalized value, or ``Invalid`` with every issue.
    """
    issues: list[Issue] = []
    output = evaluate(schema, value, (), issues)
    if issues:
        return Invalid(issues=tuple(issues))
    return Valid(value=output)


def assert_validate(schema: BaseSchema, value: Any = MISSING) -> Any:
    """Validate ``value`` and return the normalized value.

    Raises:
        ValidationError: If validation fails; carries the full issue list.
    """
    outcome = validate(schema, value)
    if isinstance(outcome, Invalid):
        logger.debug("Validation against %s schema failed with %d issue(s)", schema.kind, len(outcome.issues))
        raise ValidationError(outcome.issues)
    return outcome.value


def is_valid(schema: BaseSchema, value: Any = MISSING) -> bool:
    return validate(schema, value).ok


def describe_type(value: Any) -> str:
    """Name the runtime kind of ``value`` in schema vocabulary."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return "nan"
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, date):
        return "date"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    if callable(value):
        return "function"
    return type(value).__name__


def _issue(path: Path, kind: IssueKind, message: str, **extra: Any) -> Issue:
    return Issue(path=path, kind=kind, message=message, **extra)


def _mismatch(expected: str, value: Any, path: Path, issues: list[Issue]) -> Any:
    issues.append(
        _issue(path, IssueKind.TYPE_MISMATCH, f"Expected {expected}, received {describe_type(value)}")
    )
    return value


def _path_key(key: Any) -> PathElement:
    if isinstance(key, (str, int)) and not isinstance(key, bool):
        return key
    return str(key)


def _admits_none(schema: BaseSchema) -> bool:
    if isinstance(schema, LiteralSchema):
        return schema.value is None
    if isinstance(schema, EnumSchema):
        if schema.enum_class is not None:
            return any(member.value is None for member in schema.values)
        return any(v is None for v in schema.values)
    return False


def evaluate(schema: BaseSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    """Evaluate ``value`` at ``path``, appending any issues to ``issues``.

    This is the recursive step behind `validate`. It is public so callers
    that validate several values together (see `shapeguard.decorators`)
    can collect issues under their own path prefix.
    """
    handler = _HANDLERS.get(schema.kind)
    if handler is None:
        raise SchemaDefinitionError(f"Unsupported schema kind: {schema.kind}")

    if schema.kind not in _HANDLES_PRESENCE:
        if value is MISSING:
            issues.append(_issue(path, IssueKind.REQUIRED_BUT_MISSING, "Required"))
            return value
        if value is None and not _admits_none(schema):
            issues.append(
                _issue(path, IssueKind.NULL_NOT_ALLOWED, f"Expected {schema.kind}, received null")
            )
            return value

    return handler(schema, value, path, issues)


# Wrappers


def _optional(schema: OptionalSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if value is MISSING:
        return MISSING
    return evaluate(schema.inner, value, path, issues)


def _nullable(schema: NullableSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if value is None:
        return None
    return evaluate(schema.inner, value, path, issues)


def _nullish(schema: NullishSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if value is MISSING or value is None:
        return value
    return evaluate(schema.inner, value, path, issues)


def _default(schema: DefaultSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if value is MISSING:
        value = schema.produce()
    return evaluate(schema.inner, value, path, issues)


def _unknown(schema: BaseSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    return value


# Primitives


def _refine(schema: PrimitiveSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    for refinement in schema.refinements:
        if not refinement.check(value):
            issues.append(_issue(path, IssueKind.REFINEMENT_FAILED, refinement.message))
            break
    return value


def _string(schema: PrimitiveSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, str):
        return _mismatch("string", value, path, issues)
    return _refine(schema, value, path, issues)


def _number(schema: PrimitiveSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if (
        not isinstance(value, (int, float))
        or isinstance(value, bool)
        or (isinstance(value, float) and math.isnan(value))
    ):
        return _mismatch("number", value, path, issues)
    return _refine(schema, value, path, issues)


def _boolean(schema: PrimitiveSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, bool):
        return _mismatch("boolean", value, path, issues)
    return _refine(schema, value, path, issues)


def _date(schema: PrimitiveSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, date):
        return _mismatch("date", value, path, issues)
    return _refine(schema, value, path, issues)


def _literal(schema: LiteralSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not same_value(schema.value, value):
        issues.append(
            _issue(
                path,
                IssueKind.LITERAL_MISMATCH,
                f"Invalid literal value, expected {schema.value!r}, received {value!r}",
            )
        )
    return value


def _enum(schema: EnumSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    for allowed in schema.values:
        if same_value(allowed, value):
            return allowed
        if schema.enum_class is not None and same_value(allowed.value, value):
            return allowed

    if schema.enum_class is not None:
        expected = " | ".join(repr(member.value) for member in schema.values)
    else:
        expected = " | ".join(repr(v) for v in schema.values)
    issues.append(
        _issue(
            path,
            IssueKind.ENUM_MISMATCH,
            f"Invalid enum value. Expected {expected}, received {value!r}",
        )
    )
    return value


# Containers


def _object(schema: ObjectSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, Mapping):
        return _mismatch("object", value, path, issues)

    result: dict[Any, Any] = {}
    for name, field in schema.properties.items():
        raw = value[name] if name in value else MISSING
        output = evaluate(field, raw, path + (name,), issues)
        if output is not MISSING:
            result[name] = output

    extras = [key for key in value if key not in schema.properties]
    if schema.unknown_keys == "passthrough":
        for key in extras:
            result[key] = value[key]
    elif schema.unknown_keys == "strict":
        for key in extras:
            issues.append(
                _issue(path + (_path_key(key),), IssueKind.UNRECOGNIZED_KEY, f"Unrecognized key: {key!r}")
            )
    return result


def _array(schema: ArraySchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, (list, tuple)):
        return _mismatch("array", value, path, issues)

    result = [evaluate(schema.element, item, path + (i,), issues) for i, item in enumerate(value)]

    size = len(value)
    if schema.exact_items is not None and size != schema.exact_items:
        issues.append(
            _issue(
                path,
                IssueKind.ARRAY_LENGTH_CONSTRAINT,
                f"Array must contain exactly {schema.exact_items} element(s)",
            )
        )
    if schema.min_items is not None and size < schema.min_items:
        issues.append(
            _issue(
                path,
                IssueKind.ARRAY_LENGTH_CONSTRAINT,
                f"Array must contain at least {schema.min_items} element(s)",
            )
        )
    if schema.max_items is not None and size > schema.max_items:
        issues.append(
            _issue(
                path,
                IssueKind.ARRAY_LENGTH_CONSTRAINT,
                f"Array must contain at most {schema.max_items} element(s)",
            )
        )
    return result


def _tuple(schema: TupleSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, (list, tuple)):
        return _mismatch("array", value, path, issues)
    if len(value) != len(schema.items):
        issues.append(
            _issue(
                path,
                IssueKind.TUPLE_LENGTH_MISMATCH,
                f"Expected {len(schema.items)} item(s), received {len(value)}",
            )
        )
        return value
    return [
        evaluate(item_schema, item, path + (i,), issues)
        for i, (item_schema, item) in enumerate(zip(schema.items, value))
    ]


def _union(schema: UnionSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    failures: list[tuple[Issue, ...]] = []
    for option in schema.options:
        attempt: list[Issue] = []
        output = evaluate(option, value, path, attempt)
        if not attempt:
            return output
        failures.append(tuple(attempt))

    if value is MISSING:
        issues.append(_issue(path, IssueKind.REQUIRED_BUT_MISSING, "Required"))
        return value
    if value is None:
        issues.append(_issue(path, IssueKind.NULL_NOT_ALLOWED, "Expected union, received null"))
        return value

    reasons = " | ".join("; ".join(str(issue) for issue in failure) for failure in failures)
    issues.append(
        _issue(
            path,
            IssueKind.NO_UNION_MEMBER_MATCHED,
            f"Input did not match any union member ({reasons})",
            union_errors=tuple(failures),
        )
    )
    return value


def _discriminated_union(
    schema: DiscriminatedUnionSchema, value: Any, path: Path, issues: list[Issue]
) -> Any:
    if not isinstance(value, Mapping):
        return _mismatch("object", value, path, issues)

    tag = value.get(schema.discriminator, MISSING)
    branch = None if tag is MISSING else schema.branch_for(tag)
    if branch is None:
        expected = " | ".join(
            repr(option.properties[schema.discriminator].value) for option in schema.options
        )
        issues.append(
            _issue(
                path + (schema.discriminator,),
                IssueKind.UNKNOWN_DISCRIMINATOR,
                f"Invalid discriminator value. Expected {expected}",
            )
        )
        return value
    return evaluate(branch, value, path, issues)


def _entry(
    key_schema: BaseSchema,
    value_schema: BaseSchema,
    key: Any,
    item: Any,
    key_path: Path,
    value_path: Path,
    issues: list[Issue],
) -> tuple[bool, Any, Any]:
    key_issues: list[Issue] = []
    key_out = evaluate(key_schema, key, key_path, key_issues)
    if key_issues:
        issues.append(
            _issue(
                key_path,
                IssueKind.RECORD_KEY_INVALID,
                f"Invalid key {key!r}: " + "; ".join(i.message for i in key_issues),
                causes=tuple(key_issues),
            )
        )

    value_issues: list[Issue] = []
    value_out = evaluate(value_schema, item, value_path, value_issues)
    if value_issues:
        issues.append(
            _issue(
                value_path,
                IssueKind.RECORD_VALUE_INVALID,
                f"Invalid value for key {key!r}: " + "; ".join(str(i) for i in value_issues),
                causes=tuple(value_issues),
            )
        )
    return not (key_issues or value_issues), key_out, value_out


def _record(schema: RecordSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if not isinstance(value, Mapping):
        return _mismatch("object", value, path, issues)

    result = {}
    for key, item in value.items():
        entry_path = path + (_path_key(key),)
        ok, key_out, value_out = _entry(schema.key, schema.value, key, item, entry_path, entry_path, issues)
        if ok and value_out is not MISSING:
            result[key_out] = value_out
    return result


def _map(schema: MapSchema, value: Any, path: Path, issues: list[Issue]) -> Any:
    if isinstance(value, Mapping):
        entries = list(value.items())
    elif isinstance(value, (list, tuple)):
        entries = []
        for i, pair in enumerate(value):
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                _mismatch("[key, value] pair", pair, path + (i,), issues)
                continue
            entries.append((pair[0], pair[1]))
        if len(entries) != len(value):
            return value
    else:
        return _mismatch("map", value, path, issues)

    result = {}
    for i, (key, item) in enumerate(entries):
        ok, key_out, value_out = _entry(
            schema.key, schema.value, key, item, path + (i, "key"), path + (i, "value"), issues
        )
        if ok:
            result[key_out] = value_out
    return result


_HANDLERS: dict[str, Handler] = {
    "optional": _optional,
    "nullable": _nullable,
    "nullish": _nullish,
    "default": _default,
    "unknown": _unknown,
    "string": _string,
    "number": _number,
    "boolean": _boolean,
    "date": _date,
    "literal": _literal,
    "enum": _enum,
    "object": _object,
    "array": _array,
    "tuple": _tuple,
    "union": _union,
    "discriminated_union": _discriminated_union,
    "record": _record,
    "map": _map,
}

# Kinds whose handlers decide for themselves what absence and null mean
_HANDLES_PRESENCE = frozenset({"optional", "nullable", "nullish", "default", "unknown", "union"})
