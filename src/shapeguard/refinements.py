"""Refinement predicates for primitive schemas.

A refinement narrows a primitive schema after its type check passed, e.g.
a minimum string length or an integer-only number. Refinements run in
declaration order and validation stops at the first one that fails,
reporting that refinement's own message.

The factories below cover the common constraints. `custom` wraps any
predicate.
"""

import math
import operator
import re
from collections.abc import Callable
from datetime import date, datetime, time
from fractions import Fraction
from typing import Any

from .errors import SchemaDefinitionError
from .models import ShapeBaseModel

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URI_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:.*$")


class Refinement(ShapeBaseModel):
    """A named predicate applied to an already type-checked value.

    Attributes:
        name: Constraint identifier (e.g. "min_length", "gt", "custom").
        check: Predicate returning True when the value satisfies the constraint.
        message: Message reported when the predicate returns False.
        params: Constraint parameters in schema-document form, used when
            exporting the schema (e.g. ``{"minLength": 2}``). Empty for
            custom predicates.
    """

    name: str
    check: Callable[[Any], bool]
    message: str
    params: dict[str, Any] = {}


def custom(check: Callable[[Any], bool], message: str = "Invalid input") -> Refinement:
    """Wrap an arbitrary predicate as a refinement."""
    return Refinement(name="custom", check=check, message=message)


def _non_negative(value: int, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise SchemaDefinitionError(f"{what} must be a non-negative integer, got {value!r}")
    return value


# String constraints


def min_length(size: int, message: str | None = None) -> Refinement:
    _non_negative(size, "Minimum length")
    return Refinement(
        name="min_length",
        check=lambda v: len(v) >= size,
        message=message or f"String must contain at least {size} character(s)",
        params={"minLength": size},
    )


def max_length(size: int, message: str | None = None) -> Refinement:
    _non_negative(size, "Maximum length")
    return Refinement(
        name="max_length",
        check=lambda v: len(v) <= size,
        message=message or f"String must contain at most {size} character(s)",
        params={"maxLength": size},
    )


def exact_length(size: int, message: str | None = None) -> Refinement:
    _non_negative(size, "Length")
    return Refinement(
        name="length",
        check=lambda v: len(v) == size,
        message=message or f"String must contain exactly {size} character(s)",
        params={"minLength": size, "maxLength": size},
    )


def pattern(regex: str | re.Pattern[str], message: str | None = None) -> Refinement:
    compiled = re.compile(regex) if isinstance(regex, str) else regex
    return Refinement(
        name="pattern",
        check=lambda v: compiled.search(v) is not None,
        message=message or f"String must match pattern {compiled.pattern!r}",
        params={"pattern": compiled.pattern},
    )


def starts_with(prefix: str, message: str | None = None) -> Refinement:
    return Refinement(
        name="starts_with",
        check=lambda v: v.startswith(prefix),
        message=message or f"String must start with {prefix!r}",
        params={"pattern": "^" + re.escape(prefix)},
    )


def ends_with(suffix: str, message: str | None = None) -> Refinement:
    return Refinement(
        name="ends_with",
        check=lambda v: v.endswith(suffix),
        message=message or f"String must end with {suffix!r}",
        params={"pattern": re.escape(suffix) + "$"},
    )


def email(message: str | None = None) -> Refinement:
    return Refinement(
        name="email",
        check=lambda v: EMAIL_PATTERN.match(v) is not None,
        message=message or "Invalid email",
        params={"format": "email"},
    )


def uri(message: str | None = None) -> Refinement:
    return Refinement(
        name="uri",
        check=lambda v: URI_PATTERN.match(v) is not None,
        message=message or "Invalid url",
        params={"format": "uri"},
    )


# Numeric constraints


def gt(bound: int | float, message: str | None = None) -> Refinement:
    return Refinement(
        name="gt",
        check=lambda v: v > bound,
        message=message or f"Number must be greater than {bound}",
        params={"exclusiveMinimum": bound},
    )


def gte(bound: int | float, message: str | None = None) -> Refinement:
    return Refinement(
        name="gte",
        check=lambda v: v >= bound,
        message=message or f"Number must be greater than or equal to {bound}",
        params={"minimum": bound},
    )


def lt(bound: int | float, message: str | None = None) -> Refinement:
    return Refinement(
        name="lt",
        check=lambda v: v < bound,
        message=message or f"Number must be less than {bound}",
        params={"exclusiveMaximum": bound},
    )


def lte(bound: int | float, message: str | None = None) -> Refinement:
    return Refinement(
        name="lte",
        check=lambda v: v <= bound,
        message=message or f"Number must be less than or equal to {bound}",
        params={"maximum": bound},
    )


def is_integer(message: str | None = None) -> Refinement:
    return Refinement(
        name="int",
        check=lambda v: isinstance(v, int) or float(v).is_integer(),
        message=message or "Expected integer, received float",
        params={"type": "integer"},
    )


def multiple_of(step: int | float, message: str | None = None) -> Refinement:
    if step == 0 or (isinstance(step, float) and not math.isfinite(step)):
        raise SchemaDefinitionError("multiple_of step must be a non-zero finite number")

    def check(value: int | float) -> bool:
        if isinstance(value, float) and not math.isfinite(value):
            return False
        if isinstance(value, int) and isinstance(step, int):
            return value % step == 0
        try:
            remainder = math.fmod(value, step)
        except OverflowError:
            # ints beyond float range
            return Fraction(value) % Fraction(step) == 0
        tolerance = abs(step) * 1e-9
        return math.isclose(remainder, 0.0, abs_tol=tolerance) or math.isclose(
            abs(remainder), abs(step), abs_tol=tolerance
        )

    return Refinement(
        name="multiple_of",
        check=check,
        message=message or f"Number must be a multiple of {step}",
        params={"multipleOf": step},
    )


def finite(message: str | None = None) -> Refinement:
    return Refinement(
        name="finite",
        check=lambda v: isinstance(v, int) or math.isfinite(v),
        message=message or "Number must be finite",
    )


# Date constraints


def _comparable(value: date, bound: date) -> date:
    # datetime and date instances do not order against each other
    if isinstance(value, datetime) and not isinstance(bound, datetime):
        return value.date()
    if isinstance(bound, datetime) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=bound.tzinfo)
    return value


def _is_aware(value: date) -> bool:
    return isinstance(value, datetime) and value.utcoffset() is not None


def _compare(value: date, bound: date, accept: Callable[[date, date], bool]) -> bool:
    value = _comparable(value, bound)
    # naive and aware datetimes have no ordering
    if _is_aware(value) != _is_aware(bound):
        return False
    return accept(value, bound)


def min_date(bound: date, message: str | None = None) -> Refinement:
    return Refinement(
        name="min_date",
        check=lambda v: _compare(v, bound, operator.ge),
        message=message or f"Date must be greater than or equal to {bound.isoformat()}",
        params={"formatMinimum": bound.isoformat()},
    )


def max_date(bound: date, message: str | None = None) -> Refinement:
    return Refinement(
        name="max_date",
        check=lambda v: _compare(v, bound, operator.le),
        message=message or f"Date must be smaller than or equal to {bound.isoformat()}",
        params={"formatMaximum": bound.isoformat()},
    )
