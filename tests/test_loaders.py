"""Tests for schema documents: loading, compiling and exporting."""

from enum import Enum

import pytest

from shapeguard import (
    DiscriminatedUnionSchema,
    IssueKind,
    RecordSchema,
    SchemaDefinitionError,
    TupleSchema,
    builders as s,
    load_schema,
    schema_from_dict,
    to_json_schema,
    validate,
)

USER_YAML = """
type: object
description: A user profile
properties:
  username:
    type: string
    minLength: 2
  age:
    type: integer
    exclusiveMinimum: 0
  email:
    type: string
    format: email
  tags:
    type: array
    items: {type: string}
    minItems: 1
  role:
    type: string
    enum: [admin, user]
    default: user
required: [username, tags]
additionalProperties: false
"""


class TestLoadSchema:
    """Test parsing schema text."""

    def test_yaml(self):
        doc = load_schema(USER_YAML)
        assert doc["type"] == "object"
        assert doc["required"] == ["username", "tags"]

    def test_json(self):
        doc = load_schema('{"type": "string", "minLength": 1}', format="json")
        assert doc == {"type": "string", "minLength": 1}

    def test_invalid_yaml(self):
        with pytest.raises(SchemaDefinitionError, match="Failed to parse YAML"):
            load_schema("type: [unclosed")

    def test_invalid_json(self):
        with pytest.raises(SchemaDefinitionError, match="Failed to parse JSON"):
            load_schema("{", format="json")

    def test_unsupported_format(self):
        with pytest.raises(SchemaDefinitionError, match="Unsupported format: toml"):
            load_schema("a = 1", format="toml")

    def test_document_must_be_mapping(self):
        with pytest.raises(SchemaDefinitionError, match="must be a mapping"):
            load_schema("- a\n- b\n")


class TestSchemaFromDict:
    """Test compiling documents into descriptors."""

    @pytest.fixture
    def user(self):
        return schema_from_dict(load_schema(USER_YAML))

    def test_object_document(self, user):
        assert user.kind == "object"
        assert user.unknown_keys == "strict"
        assert user.description == "A user profile"
        result = validate(user, {"username": "JDoe", "tags": ["x"]})
        assert result.value == {"username": "JDoe", "tags": ["x"], "role": "user"}

    def test_constraints_enforced(self, user):
        outcome = validate(
            user,
            {"username": "J", "age": 1.5, "email": "nope", "tags": [], "role": "root", "x": 1},
        )
        assert [(i.location, i.kind) for i in outcome.issues] == [
            ("username", IssueKind.REFINEMENT_FAILED),
            ("age", IssueKind.REFINEMENT_FAILED),
            ("email", IssueKind.REFINEMENT_FAILED),
            ("tags", IssueKind.ARRAY_LENGTH_CONSTRAINT),
            ("role", IssueKind.ENUM_MISMATCH),
            ("x", IssueKind.UNRECOGNIZED_KEY),
        ]

    def test_additional_properties_policies(self):
        props = {"a": {"type": "number"}}
        assert schema_from_dict({"type": "object", "properties": props}).unknown_keys == "strip"
        assert (
            schema_from_dict(
                {"type": "object", "properties": props, "additionalProperties": True}
            ).unknown_keys
            == "passthrough"
        )

    def test_nullable_and_const(self):
        schema = schema_from_dict({"type": "string", "nullable": True})
        assert validate(schema, None).ok
        assert validate(schema_from_dict({"const": "v1"}), "v1").ok
        assert not validate(schema_from_dict({"const": "v1"}), "v2").ok

    def test_any_of(self):
        schema = schema_from_dict({"anyOf": [{"type": "string"}, {"type": "number"}]})
        assert validate(schema, "a").ok and validate(schema, 1).ok
        assert validate(schema, True).issues[0].kind is IssueKind.NO_UNION_MEMBER_MATCHED

    def test_one_of_with_discriminator(self):
        schema = schema_from_dict(
            {
                "oneOf": [
                    {
                        "type": "object",
                        "properties": {"kind": {"const": "circle"}, "radius": {"type": "number"}},
                        "required": ["kind", "radius"],
                    },
                    {
                        "type": "object",
                        "properties": {"kind": {"const": "square"}, "side": {"type": "number"}},
                        "required": ["kind", "side"],
                    },
                ],
                "discriminator": {"propertyName": "kind"},
            }
        )
        assert isinstance(schema, DiscriminatedUnionSchema)
        assert validate(schema, {"kind": "circle", "radius": 1}).ok
        assert validate(schema, {"kind": "hexagon"}).issues[0].kind is IssueKind.UNKNOWN_DISCRIMINATOR

    def test_record_and_tuple(self):
        record = schema_from_dict({"type": "object", "additionalProperties": {"type": "number"}})
        assert isinstance(record, RecordSchema)
        assert validate(record, {"a": 1, "b": 2}).ok

        pair = schema_from_dict(
            {"type": "array", "prefixItems": [{"type": "number"}, {"type": "number"}]}
        )
        assert isinstance(pair, TupleSchema)
        assert validate(pair, [1, 2]).ok

    def test_tuple_and_record_types(self):
        pair = schema_from_dict(
            {"type": "tuple", "prefixItems": [{"type": "number"}, {"type": "string"}]}
        )
        assert isinstance(pair, TupleSchema)
        assert validate(pair, [1, "a"]).ok
        assert validate(pair, [1]).issues[0].kind is IssueKind.TUPLE_LENGTH_MISMATCH

        scores = schema_from_dict(
            {
                "type": "record",
                "propertyNames": {"type": "string", "minLength": 2},
                "additionalProperties": {"type": "number"},
            }
        )
        assert isinstance(scores, RecordSchema)
        assert validate(scores, {"ab": 1}).ok
        issues = validate(scores, {"a": 1, "cd": "x"}).issues
        assert [i.kind for i in issues] == [
            IssueKind.RECORD_KEY_INVALID,
            IssueKind.RECORD_VALUE_INVALID,
        ]

    def test_map_and_date(self):
        schema = schema_from_dict(
            {"type": "map", "keys": {"type": "number"}, "values": {"type": "date", "nullable": True}}
        )
        assert validate(schema, [(1, None)]).ok

    @pytest.mark.parametrize(
        "document,match",
        [
            ({"type": "complex"}, "unsupported type 'complex'"),
            ({"description": "no type"}, "has no 'type'"),
            ({"type": "string", "minLength": -1}, "Invalid schema document"),
            ({"type": "object", "properties": {}, "required": ["a"]}, "not declared"),
            ({"type": "map", "keys": {"type": "string"}}, "requires 'keys' and 'values'"),
            ({"type": "tuple"}, "requires 'prefixItems'"),
            ({"type": "record"}, "requires an 'additionalProperties' schema"),
            ({"oneOf": [{"type": "string"}], "discriminator": {}}, "propertyName"),
            (
                {"type": "object", "properties": {"a": {"type": "fancy"}}},
                r"\(root\)\.a: unsupported type",
            ),
        ],
    )
    def test_malformed_documents(self, document, match):
        with pytest.raises(SchemaDefinitionError, match=match):
            schema_from_dict(document)


class Color(Enum):
    RED = "red"
    BLUE = "blue"


class TestToJsonSchema:
    """Test exporting descriptors as documents."""

    def test_round_trip(self):
        doc = {
            "type": "object",
            "properties": {
                "username": {"type": "string", "minLength": 2},
                "age": {"type": "integer", "exclusiveMinimum": 0},
                "tags": {"type": "array", "items": {"type": "string"}, "minItems": 1},
            },
            "required": ["username", "tags"],
            "additionalProperties": False,
        }
        assert to_json_schema(schema_from_dict(doc)) == doc

    def test_wrappers(self):
        assert to_json_schema(s.string().nullable()) == {"type": "string", "nullable": True}
        assert to_json_schema(s.number().default(0)) == {"type": "number", "default": 0}
        assert to_json_schema(s.number().default(factory=lambda: 0)) == {"type": "number"}

    def test_values(self):
        assert to_json_schema(s.literal("a")) == {"const": "a"}
        assert to_json_schema(s.enum(Color)) == {"enum": ["red", "blue"]}
        assert to_json_schema(s.unknown()) == {"type": "any"}

    def test_containers(self):
        assert to_json_schema(s.tuple_([s.number(), s.string()])) == {
            "type": "array",
            "prefixItems": [{"type": "number"}, {"type": "string"}],
            "minItems": 2,
            "maxItems": 2,
        }
        assert to_json_schema(s.array(s.number()).length(3)) == {
            "type": "array",
            "items": {"type": "number"},
            "minItems": 3,
            "maxItems": 3,
        }
        assert to_json_schema(s.record(s.number())) == {
            "type": "object",
            "additionalProperties": {"type": "number"},
        }
        assert to_json_schema(s.union([s.string(), s.number()])) == {
            "anyOf": [{"type": "string"}, {"type": "number"}]
        }

    def test_custom_refinements_are_omitted(self):
        schema = s.string().refine(lambda v: v.isupper(), "Must be upper case").describe("Code")
        assert to_json_schema(schema) == {"type": "string", "description": "Code"}

    def test_exported_document_compiles_to_equivalent_schema(self):
        original = s.object_(
            {
                "shape": s.discriminated_union(
                    "kind",
                    [
                        s.object_({"kind": s.literal("circle"), "radius": s.number().positive()}),
                        s.object_({"kind": s.literal("square"), "side": s.number()}),
                    ],
                ),
                "labels": s.record(s.string()).optional(),
            }
        ).passthrough()
        rebuilt = schema_from_dict(to_json_schema(original))
        for payload in (
            {"shape": {"kind": "circle", "radius": 2}, "note": "kept"},
            {"shape": {"kind": "circle", "radius": -2}},
            {"shape": {"kind": "triangle"}, "labels": {"a": 1}},
        ):
            assert validate(rebuilt, payload) == validate(original, payload)
