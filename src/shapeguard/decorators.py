"""Validation decorators for shapeguard.

Example:
    >>> from shapeguard import builders as s
    >>> from shapeguard.decorators import validated
    >>>
    >>> @validated(
    ...     args={"username": s.string().min(2), "limit": s.number().int_().default(10)},
    ...     returns=s.array(s.string()),
    ... )
    ... def search(username, limit=None):
    ...     return [username] * limit
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from functools import wraps
from typing import Any, TypeVar

from ._types import MISSING
from .core import evaluate
from .errors import SchemaDefinitionError, ValidationError
from .models import Issue
from .schemas import BaseSchema

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class validated:
    """Validate a function's arguments and return value.

    Arguments named in ``args`` are validated and replaced with their
    normalized values before the call. An omitted argument is validated as
    absent, so a ``default`` schema fills it in; if the schema leaves it
    absent, the function's own default applies. All argument issues are
    reported together, with paths starting at the parameter name. The return
    value is validated under the path ``return``.
    """

    def __init__(
        self,
        args: Mapping[str, BaseSchema] | None = None,
        returns: BaseSchema | None = None,
    ):
        """Initialize the validation decorator.

        Args:
            args: Parameter name to schema mapping
            returns: Schema for the return value
        """
        self.args = dict(args or {})
        self.returns = returns

    def __call__(self, func: F) -> F:
        """Apply validation to the decorated function."""
        signature = inspect.signature(func)
        missing = [name for name in self.args if name not in signature.parameters]
        if missing:
            raise SchemaDefinitionError(
                f"{func.__qualname__} has no parameter(s) named: {', '.join(missing)}"
            )

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                bound = self._check_arguments(func, signature, args, kwargs)
                result = await func(*bound.args, **bound.kwargs)
                return self._check_result(func, result)

            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = self._check_arguments(func, signature, args, kwargs)
            result = func(*bound.args, **bound.kwargs)
            return self._check_result(func, result)

        return sync_wrapper  # type: ignore[return-value]

    def _check_arguments(
        self,
        func: Callable[..., Any],
        signature: inspect.Signature,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> inspect.BoundArguments:
        bound = signature.bind(*args, **kwargs)
        issues: list[Issue] = []
        for name, schema in self.args.items():
            value = bound.arguments.get(name, MISSING)
            output = evaluate(schema, value, (name,), issues)
            if output is not MISSING:
                bound.arguments[name] = output

        if issues:
            logger.debug("Rejected call to %s: %d issue(s)", func.__qualname__, len(issues))
            raise ValidationError(issues, prefix=f"Invalid arguments for {func.__qualname__}")
        return bound

    def _check_result(self, func: Callable[..., Any], result: Any) -> Any:
        if self.returns is None:
            return result
        issues: list[Issue] = []
        output = evaluate(self.returns, result, ("return",), issues)
        if issues:
            logger.debug("Rejected result of %s: %d issue(s)", func.__qualname__, len(issues))
            raise ValidationError(issues, prefix=f"Invalid return value from {func.__qualname__}")
        return output
