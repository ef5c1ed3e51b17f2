"""Schema document loading for shapeguard.

Schemas can be declared as data in an OpenAPI-style dialect and compiled
into descriptors, which lets applications keep their input contracts in
configuration files:

    >>> doc = load_schema('''
    ... type: object
    ... properties:
    ...   username: {type: string, minLength: 2}
    ...   age: {type: number, exclusiveMinimum: 0}
    ... required: [username]
    ... additionalProperties: false
    ... ''')
    >>> UserSchema = schema_from_dict(doc)
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, cast

import yaml
from pydantic import ValidationError as PydanticValidationError

from . import builders as s
from .errors import SchemaDefinitionError
from .models import SchemaDocumentModel
from .schemas import BaseSchema, ObjectSchema

logger = logging.getLogger(__name__)


def load_schema(content: str, format: str = "yaml") -> dict[str, Any]:
    """Load a schema document from string content.

    Args:
        content: Schema content as string
        format: Format of the content ('yaml' or 'json')

    Returns:
        Schema dictionary

    Raises:
        SchemaDefinitionError: If format is not supported or parsing fails
    """
    if format == "yaml":
        try:
            loaded = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaDefinitionError(f"Failed to parse YAML: {e}") from e
    elif format == "json":
        try:
            loaded = json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaDefinitionError(f"Failed to parse JSON: {e}") from e
    else:
        raise SchemaDefinitionError(f"Unsupported format: {format}. Use 'yaml' or 'json'")

    if not isinstance(loaded, dict):
        raise SchemaDefinitionError(
            f"Schema document must be a mapping, got {type(loaded).__name__}"
        )
    return cast(dict[str, Any], loaded)


def schema_from_dict(definition: Mapping[str, Any]) -> BaseSchema:
    """Compile a schema document into a descriptor.

    Raises:
        SchemaDefinitionError: If the document is malformed or uses an
            unsupported type.
    """
    try:
        document = SchemaDocumentModel.model_validate(definition)
    except PydanticValidationError as e:
        raise SchemaDefinitionError(f"Invalid schema document: {e}") from e

    schema = _compile(document, "(root)")
    logger.debug("Compiled %s schema from document", schema.kind)
    return schema


def _compile(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    schema = _compile_type(doc, where)

    if doc.description is not None:
        schema = schema.describe(doc.description)
    if doc.nullable:
        schema = s.nullable(schema)
    if "default" in doc.model_fields_set:
        schema = s.default(schema, doc.default)
    return schema


def _compile_type(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    if "const" in doc.model_fields_set:
        return s.literal(doc.const)
    if doc.enum is not None:
        return s.enum(doc.enum)
    if doc.any_of is not None:
        return s.union([_compile(option, f"{where}.anyOf[{i}]") for i, option in enumerate(doc.any_of)])
    if doc.one_of is not None:
        options = [_compile(option, f"{where}.oneOf[{i}]") for i, option in enumerate(doc.one_of)]
        if doc.discriminator is None:
            return s.union(options)
        property_name = doc.discriminator.get("propertyName")
        if not isinstance(property_name, str):
            raise SchemaDefinitionError(f"{where}: discriminator requires a 'propertyName'")
        return s.discriminated_union(property_name, cast(list[ObjectSchema], options))

    if doc.type is None:
        raise SchemaDefinitionError(f"{where}: schema document has no 'type'")

    if doc.type == "string":
        return _compile_string(doc)
    elif doc.type in ("number", "integer"):
        return _compile_number(doc)
    elif doc.type == "boolean":
        return s.boolean()
    elif doc.type == "date":
        return s.date()
    elif doc.type in ("any", "unknown"):
        return s.unknown()
    elif doc.type == "array":
        return _compile_array(doc, where)
    elif doc.type == "tuple":
        if doc.prefix_items is None:
            raise SchemaDefinitionError(f"{where}: tuple schema requires 'prefixItems'")
        return _compile_tuple(doc, where)
    elif doc.type == "object":
        return _compile_object(doc, where)
    elif doc.type == "record":
        if not isinstance(doc.additional_properties, SchemaDocumentModel):
            raise SchemaDefinitionError(
                f"{where}: record schema requires an 'additionalProperties' schema"
            )
        return _compile_record(doc, where)
    elif doc.type == "map":
        if doc.keys is None or doc.values is None:
            raise SchemaDefinitionError(f"{where}: map schema requires 'keys' and 'values'")
        return s.map_(_compile(doc.keys, f"{where}.keys"), _compile(doc.values, f"{where}.values"))

    raise SchemaDefinitionError(f"{where}: unsupported type {doc.type!r}")


def _compile_string(doc: SchemaDocumentModel) -> BaseSchema:
    schema = s.string()
    if doc.min_length is not None:
        schema = schema.min(doc.min_length)
    if doc.max_length is not None:
        schema = schema.max(doc.max_length)
    if doc.pattern is not None:
        schema = schema.regex(doc.pattern)
    if doc.format == "email":
        schema = schema.email()
    elif doc.format == "uri":
        schema = schema.url()
    return schema


def _compile_number(doc: SchemaDocumentModel) -> BaseSchema:
    schema = s.integer() if doc.type == "integer" else s.number()
    if doc.minimum is not None:
        schema = schema.gte(doc.minimum)
    if doc.exclusive_minimum is not None:
        schema = schema.gt(doc.exclusive_minimum)
    if doc.maximum is not None:
        schema = schema.lte(doc.maximum)
    if doc.exclusive_maximum is not None:
        schema = schema.lt(doc.exclusive_maximum)
    if doc.multiple_of is not None:
        schema = schema.multiple_of(doc.multiple_of)
    return schema


def _compile_array(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    if doc.prefix_items is not None:
        return _compile_tuple(doc, where)

    element = _compile(doc.items, f"{where}.items") if doc.items is not None else s.unknown()
    schema = s.array(element)
    if doc.min_items is not None and doc.min_items == doc.max_items:
        return schema.length(doc.min_items)
    if doc.min_items is not None:
        schema = schema.min(doc.min_items)
    if doc.max_items is not None:
        schema = schema.max(doc.max_items)
    return schema


def _compile_tuple(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    items = doc.prefix_items or []
    return s.tuple_([_compile(item, f"{where}.prefixItems[{i}]") for i, item in enumerate(items)])


def _compile_record(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    value = cast(SchemaDocumentModel, doc.additional_properties)
    key = _compile(doc.property_names, f"{where}.propertyNames") if doc.property_names else None
    return s.record(_compile(value, f"{where}.additionalProperties"), key=key)


def _compile_object(doc: SchemaDocumentModel, where: str) -> BaseSchema:
    extra = doc.additional_properties
    if isinstance(extra, SchemaDocumentModel):
        if doc.properties:
            raise SchemaDefinitionError(
                f"{where}: 'additionalProperties' schemas cannot be combined with 'properties'"
            )
        return _compile_record(doc, where)

    properties = doc.properties or {}
    required = set(doc.required or [])
    undeclared = required - set(properties)
    if undeclared:
        raise SchemaDefinitionError(
            f"{where}: required field(s) not declared in properties: {', '.join(sorted(undeclared))}"
        )

    fields: dict[str, BaseSchema] = {}
    for name, field_doc in properties.items():
        field = _compile(field_doc, f"{where}.{name}")
        if name not in required and "default" not in field_doc.model_fields_set:
            field = s.optional(field)
        fields[name] = field

    schema = s.object_(fields)
    if extra is True:
        return schema.passthrough()
    if extra is False:
        return schema.strict()
    return schema
