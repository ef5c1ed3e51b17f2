"""Tests for shapeguard.decorators."""

import pytest

from shapeguard import IssueKind, SchemaDefinitionError, ValidationError, builders as s
from shapeguard.decorators import validated


class TestValidatedSync:
    """Test the decorator on regular functions."""

    def test_arguments_are_normalized(self):
        @validated(
            args={
                "user": s.object_({"name": s.string()}),
                "limit": s.number().int_().default(10),
            },
            returns=s.array(s.string()),
        )
        def search(user, limit=None):
            return [f"{user}:{limit}"]

        assert search({"name": "JDoe", "password": "x"}) == ["{'name': 'JDoe'}:10"]
        assert search({"name": "JDoe"}, limit=3) == ["{'name': 'JDoe'}:3"]

    def test_all_argument_issues_reported(self):
        @validated(args={"x": s.number().gte(0), "y": s.number().gte(0)})
        def add(x, y):
            return x + y

        assert add(1, 2) == 3
        with pytest.raises(ValidationError) as exc_info:
            add(-1, "2")

        issues = exc_info.value.issues
        assert [(i.path, i.kind) for i in issues] == [
            (("x",), IssueKind.REFINEMENT_FAILED),
            (("y",), IssueKind.TYPE_MISMATCH),
        ]
        assert str(exc_info.value).startswith("Invalid arguments for")

    def test_missing_argument_uses_function_default(self):
        @validated(args={"name": s.string().optional()})
        def greet(name="world"):
            return f"hello {name}"

        assert greet() == "hello world"
        assert greet("JDoe") == "hello JDoe"
        with pytest.raises(ValidationError):
            greet(5)

    def test_return_value_validated(self):
        @validated(returns=s.number())
        def broken():
            return "nope"

        with pytest.raises(ValidationError) as exc_info:
            broken()
        assert exc_info.value.issues[0].path == ("return",)
        assert "Invalid return value from" in str(exc_info.value)

    def test_return_value_normalized(self):
        @validated(returns=s.object_({"id": s.number()}))
        def load():
            return {"id": 1, "internal": "secret"}

        assert load() == {"id": 1}

    def test_unknown_parameter_rejected_at_decoration(self):
        with pytest.raises(SchemaDefinitionError, match="no parameter"):

            @validated(args={"missing": s.string()})
            def f(x):
                return x

    def test_wraps_metadata(self):
        @validated(args={"x": s.number()})
        def documented(x):
            """Docs."""
            return x

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docs."


class TestValidatedAsync:
    """Test the decorator on coroutine functions."""

    @pytest.mark.asyncio
    async def test_async_function(self):
        @validated(args={"value": s.string().min(2)}, returns=s.string())
        async def echo(value):
            return value.upper()

        assert await echo("ab") == "AB"
        with pytest.raises(ValidationError):
            await echo("a")

    @pytest.mark.asyncio
    async def test_async_return_validation(self):
        @validated(returns=s.number())
        async def compute():
            return None

        with pytest.raises(ValidationError) as exc_info:
            await compute()
        assert exc_info.value.issues[0].kind is IssueKind.NULL_NOT_ALLOWED
