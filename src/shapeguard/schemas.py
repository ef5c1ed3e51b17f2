"""Schema descriptors for shapeguard.

Each descriptor kind is a frozen Pydantic model tagged by its ``kind``
class attribute. Descriptors never change after construction: every
transformation (``optional``, ``strict``, ``pick``, ...) returns a new
descriptor, so a descriptor can be shared between threads and reused
across validation calls.

The transformations are plain functions at the bottom of this module. The
fluent methods on the models delegate to them, so both spellings work:

    >>> from shapeguard import builders as s
    >>> user = s.object_({"username": s.string(), "age": s.number().gt(0)})
    >>> partial(user) == user.partial()
    True

Evaluation lives in `shapeguard.core` and dispatches on ``kind``.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Mapping
from datetime import date as date_type
from enum import Enum
from functools import cached_property
from types import MappingProxyType
from typing import Any, ClassVar, cast

from pydantic import Field, field_validator

from . import refinements as r
from ._types import MISSING, UnknownKeys
from .errors import SchemaDefinitionError
from .models import ShapeBaseModel


def same_value(expected: Any, actual: Any) -> bool:
    """Type-aware equality used for literals, enums and discriminators.

    Booleans only equal booleans, so ``literal(1)`` rejects ``True``.
    """
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected is actual
    try:
        return bool(expected == actual)
    except Exception:
        return False


def literal_key(value: Any) -> tuple[bool, Any]:
    """Hashable lookup key that keeps ``True`` and ``1`` apart."""
    return (isinstance(value, bool), value)


class BaseSchema(ShapeBaseModel):
    """Common base for all schema descriptors.

    Attributes:
        description: Optional human-readable description, kept for export.
    """

    kind: ClassVar[str] = "base"

    description: str | None = None

    def describe(self, description: str) -> BaseSchema:
        return self.model_copy(update={"description": description})

    def optional(self) -> OptionalSchema:
        return optional(self)

    def nullable(self) -> NullableSchema:
        return nullable(self)

    def nullish(self) -> NullishSchema:
        return nullish(self)

    def default(
        self, value: Any = MISSING, *, factory: Callable[[], Any] | None = None
    ) -> DefaultSchema:
        return default(self, value, factory=factory)

    def __or__(self, other: BaseSchema) -> UnionSchema:
        return UnionSchema(options=(self, other))


class PrimitiveSchema(BaseSchema):
    """Base for primitive kinds, which carry ordered refinements.

    Attributes:
        refinements: Predicates applied in order after the type check.
    """

    refinements: tuple[r.Refinement, ...] = ()

    def with_refinement(self, refinement: r.Refinement) -> PrimitiveSchema:
        return self.model_copy(update={"refinements": self.refinements + (refinement,)})

    def refine(self, check: Callable[[Any], bool], message: str = "Invalid input") -> PrimitiveSchema:
        return self.with_refinement(r.custom(check, message))


class StringSchema(PrimitiveSchema):
    kind: ClassVar[str] = "string"

    def min(self, size: int, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.min_length(size, message))

    def max(self, size: int, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.max_length(size, message))

    def length(self, size: int, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.exact_length(size, message))

    def nonempty(self, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.min_length(1, message))

    def regex(self, pattern: Any, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.pattern(pattern, message))

    def startswith(self, prefix: str, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.starts_with(prefix, message))

    def endswith(self, suffix: str, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.ends_with(suffix, message))

    def email(self, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.email(message))

    def url(self, message: str | None = None) -> StringSchema:
        return self.with_refinement(r.uri(message))


class NumberSchema(PrimitiveSchema):
    kind: ClassVar[str] = "number"

    def gt(self, bound: int | float, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.gt(bound, message))

    def gte(self, bound: int | float, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.gte(bound, message))

    def lt(self, bound: int | float, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.lt(bound, message))

    def lte(self, bound: int | float, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.lte(bound, message))

    min = gte
    max = lte

    def int_(self, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.is_integer(message))

    def positive(self, message: str | None = None) -> NumberSchema:
        return self.gt(0, message)

    def nonnegative(self, message: str | None = None) -> NumberSchema:
        return self.gte(0, message)

    def negative(self, message: str | None = None) -> NumberSchema:
        return self.lt(0, message)

    def nonpositive(self, message: str | None = None) -> NumberSchema:
        return self.lte(0, message)

    def multiple_of(self, step: int | float, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.multiple_of(step, message))

    def finite(self, message: str | None = None) -> NumberSchema:
        return self.with_refinement(r.finite(message))


class BooleanSchema(PrimitiveSchema):
    kind: ClassVar[str] = "boolean"


class DateSchema(PrimitiveSchema):
    kind: ClassVar[str] = "date"

    def min(self, bound: date_type, message: str | None = None) -> DateSchema:
        return self.with_refinement(r.min_date(bound, message))

    def max(self, bound: date_type, message: str | None = None) -> DateSchema:
        return self.with_refinement(r.max_date(bound, message))


class UnknownSchema(BaseSchema):
    """Accepts any value, including an absent one."""

    kind: ClassVar[str] = "unknown"


class LiteralSchema(BaseSchema):
    kind: ClassVar[str] = "literal"

    value: Any


class EnumSchema(BaseSchema):
    """One of an ordered set of allowed values.

    Attributes:
        values: Allowed values, in declaration order.
        names: Member names when built from a name-to-value mapping or an
            ``Enum`` subclass.
        enum_class: The ``Enum`` subclass, if any. Inputs may then be either
            members or their raw values and the output is always the member.
    """

    kind: ClassVar[str] = "enum"

    values: tuple[Any, ...]
    names: tuple[str, ...] | None = None
    enum_class: type[Enum] | None = None

    @property
    def options(self) -> tuple[Any, ...]:
        return self.values

    @property
    def enum(self) -> dict[str, Any]:
        """Name-to-value view, names defaulting to the values themselves."""
        if self.names is None:
            return {str(v): v for v in self.values}
        return dict(zip(self.names, self.values))


class _WrapperSchema(BaseSchema):
    inner: BaseSchema

    def unwrap(self) -> BaseSchema:
        return self.inner


class OptionalSchema(_WrapperSchema):
    kind: ClassVar[str] = "optional"


class NullableSchema(_WrapperSchema):
    kind: ClassVar[str] = "nullable"


class NullishSchema(_WrapperSchema):
    kind: ClassVar[str] = "nullish"


class DefaultSchema(_WrapperSchema):
    """Substitutes a value when the input is absent.

    Attributes:
        value: Static default, or ``MISSING`` when ``factory`` is used.
        factory: Zero-argument producer called on every substitution.
    """

    kind: ClassVar[str] = "default"

    value: Any = MISSING
    factory: Callable[[], Any] | None = None

    def produce(self) -> Any:
        if self.factory is not None:
            return self.factory()
        return self.value


class ObjectSchema(BaseSchema):
    """Ordered mapping of field names to descriptors.

    Attributes:
        properties: Field descriptors in declaration order, as a read-only
            mapping.
        unknown_keys: Policy for undeclared keys: ``strip`` drops them,
            ``passthrough`` keeps them and ``strict`` reports each one.
    """

    kind: ClassVar[str] = "object"

    properties: Mapping[str, BaseSchema] = Field(default_factory=lambda: MappingProxyType({}))
    unknown_keys: UnknownKeys = "strip"

    @field_validator("properties", mode="after")
    @classmethod
    def _freeze_properties(cls, value: Mapping[str, BaseSchema]) -> Mapping[str, BaseSchema]:
        return MappingProxyType(dict(value))

    @property
    def shape(self) -> Mapping[str, BaseSchema]:
        return self.properties

    def keys(self) -> tuple[str, ...]:
        return tuple(self.properties)

    def strict(self) -> ObjectSchema:
        return strict(self)

    def passthrough(self) -> ObjectSchema:
        return passthrough(self)

    def strip(self) -> ObjectSchema:
        return strip(self)

    def pick(self, *keys: str | Mapping[str, bool]) -> ObjectSchema:
        return pick(self, *keys)

    def omit(self, *keys: str | Mapping[str, bool]) -> ObjectSchema:
        return omit(self, *keys)

    def partial(self, *keys: str | Mapping[str, bool]) -> ObjectSchema:
        return partial(self, *keys)

    def deep_partial(self) -> ObjectSchema:
        return deep_partial(self)

    def extend(self, properties: Mapping[str, BaseSchema]) -> ObjectSchema:
        return extend(self, properties)

    def merge(self, other: ObjectSchema) -> ObjectSchema:
        return merge(self, other)


class ArraySchema(BaseSchema):
    """Homogeneous sequence.

    Attributes:
        element: Descriptor every element must match.
        min_items: Inclusive lower bound on length.
        max_items: Inclusive upper bound on length.
        exact_items: Required exact length.
    """

    kind: ClassVar[str] = "array"

    element: BaseSchema
    min_items: int | None = None
    max_items: int | None = None
    exact_items: int | None = None

    def nonempty(self) -> ArraySchema:
        return self.min(1)

    def min(self, size: int) -> ArraySchema:
        return self.model_copy(update={"min_items": _bound(size, "min")})

    def max(self, size: int) -> ArraySchema:
        return self.model_copy(update={"max_items": _bound(size, "max")})

    def length(self, size: int) -> ArraySchema:
        return self.model_copy(update={"exact_items": _bound(size, "length")})


class TupleSchema(BaseSchema):
    kind: ClassVar[str] = "tuple"

    items: tuple[BaseSchema, ...]


class UnionSchema(BaseSchema):
    """Candidates tried in declared order; the first match wins."""

    kind: ClassVar[str] = "union"

    options: tuple[BaseSchema, ...]

    def __or__(self, other: BaseSchema) -> UnionSchema:
        return UnionSchema(options=self.options + (other,))


class DiscriminatedUnionSchema(BaseSchema):
    """Object branches selected by the literal value of one field.

    Build these with `shapeguard.builders.discriminated_union`, which checks
    that every branch declares the discriminator as a literal and that the
    literal values are unique.
    """

    kind: ClassVar[str] = "discriminated_union"

    discriminator: str
    options: tuple[ObjectSchema, ...]

    @cached_property
    def branches(self) -> dict[tuple[bool, Any], ObjectSchema]:
        result = {}
        for option in self.options:
            tag = option.properties.get(self.discriminator)
            if not isinstance(tag, LiteralSchema):
                raise SchemaDefinitionError(
                    f"Every option must declare {self.discriminator!r} as a literal"
                )
            result[literal_key(tag.value)] = option
        return result

    def branch_for(self, value: Any) -> ObjectSchema | None:
        if not isinstance(value, Hashable):
            return None
        try:
            return self.branches.get(literal_key(value))
        except TypeError:
            return None


class RecordSchema(BaseSchema):
    kind: ClassVar[str] = "record"

    key: BaseSchema
    value: BaseSchema


class MapSchema(BaseSchema):
    kind: ClassVar[str] = "map"

    key: BaseSchema
    value: BaseSchema


# Transformations


def _bound(size: int, what: str) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise SchemaDefinitionError(f"Array {what} must be a non-negative integer, got {size!r}")
    return size


def _require_schema(candidate: Any, what: str = "Schema") -> BaseSchema:
    if not isinstance(candidate, BaseSchema):
        raise SchemaDefinitionError(f"{what} must be a schema descriptor, got {type(candidate).__name__}")
    return candidate


def _require_object(candidate: Any, operation: str) -> ObjectSchema:
    if not isinstance(candidate, ObjectSchema):
        raise SchemaDefinitionError(
            f"{operation}() requires an object schema, got {type(candidate).__name__}"
        )
    return candidate


def _select(schema: ObjectSchema, keys: Iterable[str | Mapping[str, bool]], operation: str) -> list[str]:
    names: list[str] = []
    for key in keys:
        if isinstance(key, Mapping):
            names.extend(name for name, enabled in key.items() if enabled)
        else:
            names.append(key)
    unknown = [name for name in names if name not in schema.properties]
    if unknown:
        raise SchemaDefinitionError(f"{operation}() got undeclared field(s): {', '.join(unknown)}")
    return names


def optional(schema: BaseSchema) -> OptionalSchema:
    return OptionalSchema(inner=_require_schema(schema))


def nullable(schema: BaseSchema) -> NullableSchema:
    return NullableSchema(inner=_require_schema(schema))


def nullish(schema: BaseSchema) -> NullishSchema:
    return NullishSchema(inner=_require_schema(schema))


def default(
    schema: BaseSchema, value: Any = MISSING, *, factory: Callable[[], Any] | None = None
) -> DefaultSchema:
    """Substitute ``value`` (or ``factory()``) when the input is absent."""
    if (value is MISSING) == (factory is None):
        raise SchemaDefinitionError("default() needs exactly one of a value or a factory")
    if factory is not None and not callable(factory):
        raise SchemaDefinitionError("default() factory must be callable")
    return DefaultSchema(inner=_require_schema(schema), value=value, factory=factory)


def strict(schema: ObjectSchema) -> ObjectSchema:
    return _require_object(schema, "strict").model_copy(update={"unknown_keys": "strict"})


def passthrough(schema: ObjectSchema) -> ObjectSchema:
    return _require_object(schema, "passthrough").model_copy(update={"unknown_keys": "passthrough"})


def strip(schema: ObjectSchema) -> ObjectSchema:
    return _require_object(schema, "strip").model_copy(update={"unknown_keys": "strip"})


def pick(schema: ObjectSchema, *keys: str | Mapping[str, bool]) -> ObjectSchema:
    schema = _require_object(schema, "pick")
    selected = set(_select(schema, keys, "pick"))
    properties = {k: v for k, v in schema.properties.items() if k in selected}
    return _with_properties(schema, properties)


def omit(schema: ObjectSchema, *keys: str | Mapping[str, bool]) -> ObjectSchema:
    schema = _require_object(schema, "omit")
    dropped = set(_select(schema, keys, "omit"))
    properties = {k: v for k, v in schema.properties.items() if k not in dropped}
    return _with_properties(schema, properties)


def partial(schema: ObjectSchema, *keys: str | Mapping[str, bool]) -> ObjectSchema:
    """Make fields optional, one level deep.

    With no keys every field becomes optional; otherwise only the named ones.
    """
    schema = _require_object(schema, "partial")
    selected = set(_select(schema, keys, "partial")) if keys else set(schema.properties)
    properties = {
        k: (_optional_once(v) if k in selected else v) for k, v in schema.properties.items()
    }
    return _with_properties(schema, properties)


def deep_partial(schema: ObjectSchema) -> ObjectSchema:
    """Make fields optional, recursing into nested objects, arrays and tuples."""
    return cast(ObjectSchema, _deep_partial(_require_object(schema, "deep_partial")))


def extend(schema: ObjectSchema, properties: Mapping[str, BaseSchema]) -> ObjectSchema:
    """Add fields; a field already declared is replaced in place."""
    schema = _require_object(schema, "extend")
    merged = dict(schema.properties)
    for name, field in properties.items():
        merged[name] = _require_schema(field, f"Field {name!r}")
    return _with_properties(schema, merged)


def merge(schema: ObjectSchema, other: ObjectSchema) -> ObjectSchema:
    """Combine two object schemas; ``other`` wins on collisions and its
    unknown-key policy applies to the result."""
    schema = _require_object(schema, "merge")
    other = _require_object(other, "merge")
    merged = extend(schema, other.properties)
    return merged.model_copy(update={"unknown_keys": other.unknown_keys})


def _with_properties(schema: ObjectSchema, properties: Mapping[str, BaseSchema]) -> ObjectSchema:
    # model_copy skips validation, so freeze the new mapping here
    return schema.model_copy(update={"properties": MappingProxyType(dict(properties))})


def _optional_once(schema: BaseSchema) -> BaseSchema:
    if isinstance(schema, (OptionalSchema, NullishSchema)):
        return schema
    return OptionalSchema(inner=schema)


def _deep_partial(schema: BaseSchema) -> BaseSchema:
    if isinstance(schema, ObjectSchema):
        properties = {k: _optional_once(_deep_partial(v)) for k, v in schema.properties.items()}
        return _with_properties(schema, properties)
    if isinstance(schema, ArraySchema):
        return schema.model_copy(update={"element": _deep_partial(schema.element)})
    if isinstance(schema, TupleSchema):
        return schema.model_copy(update={"items": tuple(_deep_partial(i) for i in schema.items)})
    if isinstance(schema, (OptionalSchema, NullableSchema, NullishSchema)):
        return schema.model_copy(update={"inner": _deep_partial(schema.inner)})
    return schema
