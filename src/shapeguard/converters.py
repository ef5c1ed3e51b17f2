"""Conversion of schema descriptors into schema documents."""

from typing import Any

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
    StringSchema,
    TupleSchema,
    UnionSchema,
)

__all__ = ["to_json_schema"]


def to_json_schema(schema: BaseSchema) -> dict[str, Any]:
    """Describe a descriptor in the document dialect read by `schema_from_dict`.

    Custom refinement predicates and default factories have no document
    form and are left out.

    Example:
        >>> to_json_schema(s.object_({"name": s.string().min(2)}).strict())
        {'type': 'object', 'properties': {'name': {'type': 'string', 'minLength': 2}},
         'required': ['name'], 'additionalProperties': False}
    """
    result = _convert(schema)
    if schema.description is not None:
        result["description"] = schema.description
    return result


def _is_optional(schema: BaseSchema) -> bool:
    return isinstance(schema, (OptionalSchema, NullishSchema, DefaultSchema))


def _convert(schema: BaseSchema) -> dict[str, Any]:
    if isinstance(schema, OptionalSchema):
        return to_json_schema(schema.inner)
    if isinstance(schema, NullableSchema) or isinstance(schema, NullishSchema):
        return {**to_json_schema(schema.inner), "nullable": True}
    if isinstance(schema, DefaultSchema):
        result = to_json_schema(schema.inner)
        if schema.factory is None:
            result["default"] = schema.value
        return result

    if isinstance(schema, PrimitiveSchema):
        result = {"type": schema.kind}
        for refinement in schema.refinements:
            result.update(refinement.params)
        return result

    if schema.kind == "unknown":
        return {"type": "any"}
    if isinstance(schema, LiteralSchema):
        return {"const": schema.value}
    if isinstance(schema, EnumSchema):
        if schema.enum_class is not None:
            return {"enum": [member.value for member in schema.values]}
        return {"enum": list(schema.values)}

    if isinstance(schema, ObjectSchema):
        result = {
            "type": "object",
            "properties": {k: to_json_schema(v) for k, v in schema.properties.items()},
            "required": [k for k, v in schema.properties.items() if not _is_optional(v)],
        }
        if schema.unknown_keys == "strict":
            result["additionalProperties"] = False
        elif schema.unknown_keys == "passthrough":
            result["additionalProperties"] = True
        return result

    if isinstance(schema, ArraySchema):
        result = {"type": "array", "items": to_json_schema(schema.element)}
        if schema.exact_items is not None:
            result["minItems"] = result["maxItems"] = schema.exact_items
        if schema.min_items is not None:
            result["minItems"] = max(schema.min_items, result.get("minItems", 0))
        if schema.max_items is not None:
            result["maxItems"] = (
                min(schema.max_items, result["maxItems"]) if "maxItems" in result else schema.max_items
            )
        return result

    if isinstance(schema, TupleSchema):
        return {
            "type": "array",
            "prefixItems": [to_json_schema(item) for item in schema.items],
            "minItems": len(schema.items),
            "maxItems": len(schema.items),
        }

    if isinstance(schema, UnionSchema):
        return {"anyOf": [to_json_schema(option) for option in schema.options]}
    if isinstance(schema, DiscriminatedUnionSchema):
        return {
            "oneOf": [to_json_schema(option) for option in schema.options],
            "discriminator": {"propertyName": schema.discriminator},
        }

    if isinstance(schema, RecordSchema):
        result = {"type": "object", "additionalProperties": to_json_schema(schema.value)}
        if not (isinstance(schema.key, StringSchema) and not schema.key.refinements):
            result["propertyNames"] = to_json_schema(schema.key)
        return result
    if isinstance(schema, MapSchema):
        return {"type": "map", "keys": to_json_schema(schema.key), "values": to_json_schema(schema.value)}

    raise TypeError(f"Cannot convert schema of kind {schema.kind!r}")
