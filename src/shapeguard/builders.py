"""Constructors for schema descriptors.

Names that would shadow Python builtins carry a trailing underscore
(``object_``, ``tuple_``, ``map_``).

Example:
    >>> from shapeguard import builders as s
    >>> UserSchema = s.object_({
    ...     "id": s.union([s.string(), s.number()]),
    ...     "username": s.string(),
    ...     "friends": s.array(s.string()).nonempty(),
    ...     "coords": s.tuple_([s.number(), s.number(), s.number().int_().gt(4)]),
    ... }).strict()
"""

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from .errors import SchemaDefinitionError
from .schemas import (
    ArraySchema,
    BaseSchema,
    BooleanSchema,
    DateSchema,
    DiscriminatedUnionSchema,
    EnumSchema,
    LiteralSchema,
    MapSchema,
    NumberSchema,
    ObjectSchema,
    RecordSchema,
    StringSchema,
    TupleSchema,
    UnionSchema,
    UnknownSchema,
    _require_schema,
    default,
    literal_key,
    nullable,
    nullish,
    optional,
    same_value,
)


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def integer() -> NumberSchema:
    return NumberSchema().int_()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def date() -> DateSchema:
    return DateSchema()


def unknown() -> UnknownSchema:
    return UnknownSchema()


def literal(value: Any) -> LiteralSchema:
    return LiteralSchema(value=value)


def enum(values: Iterable[Any] | Mapping[str, Any] | type[Enum]) -> EnumSchema:
    """Build an enum from a value list, a name-to-value mapping or an Enum class."""
    if isinstance(values, type) and issubclass(values, Enum):
        members = list(values)
        allowed: tuple[Any, ...] = tuple(members)
        names: tuple[str, ...] | None = tuple(m.name for m in members)
        enum_class: type[Enum] | None = values
    elif isinstance(values, Mapping):
        names = tuple(values.keys())
        allowed = tuple(values.values())
        enum_class = None
    elif isinstance(values, (str, bytes)):
        raise SchemaDefinitionError("enum() expects a collection of values, not a string")
    else:
        allowed = tuple(values)
        names = None
        enum_class = None

    if not allowed:
        raise SchemaDefinitionError("enum() needs at least one value")
    for i, value in enumerate(allowed):
        if any(same_value(value, earlier) for earlier in allowed[:i]):
            raise SchemaDefinitionError(f"enum() got duplicate value {value!r}")
    return EnumSchema(values=allowed, names=names, enum_class=enum_class)


def object_(properties: Mapping[str, BaseSchema] | None = None) -> ObjectSchema:
    fields = {}
    for name, field in (properties or {}).items():
        if not isinstance(name, str):
            raise SchemaDefinitionError(f"Object field names must be strings, got {name!r}")
        fields[name] = _require_schema(field, f"Field {name!r}")
    return ObjectSchema(properties=fields)


def array(element: BaseSchema) -> ArraySchema:
    return ArraySchema(element=_require_schema(element, "Array element"))


def tuple_(items: Sequence[BaseSchema]) -> TupleSchema:
    return TupleSchema(items=tuple(_require_schema(i, "Tuple item") for i in items))


def union(options: Sequence[BaseSchema]) -> UnionSchema:
    if not options:
        raise SchemaDefinitionError("union() needs at least one option")
    return UnionSchema(options=tuple(_require_schema(o, "Union option") for o in options))


def discriminated_union(
    discriminator: str, options: Sequence[ObjectSchema]
) -> DiscriminatedUnionSchema:
    """Build a union whose branch is picked by one literal field.

    Raises:
        SchemaDefinitionError: If an option is not an object, does not declare
            the discriminator as a literal, or reuses a discriminator value.
    """
    if not options:
        raise SchemaDefinitionError("discriminated_union() needs at least one option")

    seen: set[tuple[bool, Any]] = set()
    for index, option in enumerate(options):
        if not isinstance(option, ObjectSchema):
            raise SchemaDefinitionError(
                f"discriminated_union() option {index} must be an object schema, "
                f"got {type(option).__name__}"
            )
        tag = option.properties.get(discriminator)
        if not isinstance(tag, LiteralSchema):
            raise SchemaDefinitionError(
                f"discriminated_union() option {index} must declare {discriminator!r} as a literal"
            )
        try:
            key = literal_key(tag.value)
            hash(key)
        except TypeError as e:
            raise SchemaDefinitionError(
                f"Discriminator value {tag.value!r} in option {index} is not hashable"
            ) from e
        if key in seen:
            raise SchemaDefinitionError(
                f"Duplicate discriminator value {tag.value!r} for {discriminator!r}"
            )
        seen.add(key)

    return DiscriminatedUnionSchema(discriminator=discriminator, options=tuple(options))


def record(value: BaseSchema, key: BaseSchema | None = None) -> RecordSchema:
    """Mapping with uniform values; keys default to strings."""
    return RecordSchema(
        key=_require_schema(key, "Record key") if key is not None else StringSchema(),
        value=_require_schema(value, "Record value"),
    )


def map_(key: BaseSchema, value: BaseSchema) -> MapSchema:
    return MapSchema(key=_require_schema(key, "Map key"), value=_require_schema(value, "Map value"))


__all__ = [
    "string",
    "number",
    "integer",
    "boolean",
    "date",
    "unknown",
    "literal",
    "enum",
    "object_",
    "array",
    "tuple_",
    "union",
    "discriminated_union",
    "record",
    "map_",
    "optional",
    "nullable",
    "nullish",
    "default",
]
