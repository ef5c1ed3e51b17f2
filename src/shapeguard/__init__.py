"""shapeguard - structural schema validation.

Schemas are immutable descriptor values built from small composable parts.
Values are checked against them with one of two calls:

- `validate`: returns `Valid(value)` or `Invalid(issues)` and never raises
  for bad input
- `assert_validate`: returns the normalized value or raises a single
  `ValidationError` listing every issue

## Key Components

### Builders (`shapeguard.builders`)
- Primitives: `string`, `number`, `integer`, `boolean`, `date`, `unknown`
- Values: `literal`, `enum`
- Containers: `object_`, `array`, `tuple_`, `record`, `map_`
- Alternatives: `union`, `discriminated_union`

### Transformations
`optional`, `nullable`, `nullish`, `default`, `strict`, `passthrough`,
`strip`, `pick`, `omit`, `partial`, `deep_partial`, `extend`, `merge`.
Each returns a new descriptor and is also available as a method.

### Outcomes
- `Issue`: path, kind (`IssueKind`) and message of one failure
- `Valid` / `Invalid`: the result of `validate`

## Quick Examples

### Object validation
```python
from shapeguard import assert_validate, builders as s, validate

UserSchema = s.object_({
    "username": s.string(),
    "age": s.number().gt(0),
    "isProgrammer": s.boolean().optional(),
    "isVerified": s.boolean().default(False),
    "hobby": s.enum(["reading", "coding", "gaming"]),
})

assert_validate(UserSchema, {"username": "JDoe", "age": 30, "hobby": "coding"})
# Returns: {"username": "JDoe", "age": 30, "isVerified": False, "hobby": "coding"}

outcome = validate(UserSchema, {"username": "JDoe", "age": -1, "hobby": "chess"})
# outcome.ok is False; outcome.issues lists the age and hobby failures
```

### Schema documents
```python
from shapeguard import load_schema, schema_from_dict

schema = schema_from_dict(load_schema(yaml_text))
```
"""

from ._types import MISSING, Path, PathElement, UnknownKeys
from .converters import to_json_schema
from .core import assert_validate, evaluate, is_valid, validate
from .decorators import validated
from .errors import SchemaDefinitionError, ValidationError
from .loaders import load_schema, schema_from_dict
from .models import Invalid, Issue, IssueKind, Outcome, Valid, format_path
from .schemas import (
    ArraySchema,
    BaseSchema,
    BooleanSchema,
    DateSchema,
    DefaultSchema,
    DiscriminatedUnionSchema,
    EnumSchema,
    LiteralSchema,
    MapSchema,
    NullableSchema,
    NullishSchema,
    NumberSchema,
    ObjectSchema,
    OptionalSchema,
    PrimitiveSchema,
    RecordSchema,
    StringSchema,
    TupleSchema,
    UnionSchema,
    UnknownSchema,
    deep_partial,
    default,
    extend,
    merge,
    nullable,
    nullish,
    omit,
    optional,
    partial,
    passthrough,
    pick,
    strict,
    strip,
)

__all__ = [
    # Absence marker and aliases
    "MISSING",
    "Path",
    "PathElement",
    "UnknownKeys",
    # Validation
    "validate",
    "assert_validate",
    "is_valid",
    "evaluate",
    # Outcomes
    "Issue",
    "IssueKind",
    "Valid",
    "Invalid",
    "Outcome",
    "format_path",
    # Errors
    "ValidationError",
    "SchemaDefinitionError",
    # Descriptors
    "BaseSchema",
    "PrimitiveSchema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "DateSchema",
    "UnknownSchema",
    "LiteralSchema",
    "EnumSchema",
    "OptionalSchema",
    "NullableSchema",
    "NullishSchema",
    "DefaultSchema",
    "ObjectSchema",
    "ArraySchema",
    "TupleSchema",
    "UnionSchema",
    "DiscriminatedUnionSchema",
    "RecordSchema",
    "MapSchema",
    # Transformations
    "optional",
    "nullable",
    "nullish",
    "default",
    "strict",
    "passthrough",
    "strip",
    "pick",
    "omit",
    "partial",
    "deep_partial",
    "extend",
    "merge",
    # Documents and decorators
    "load_schema",
    "schema_from_dict",
    "to_json_schema",
    "validated",
]
