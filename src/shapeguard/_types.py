"""Type definitions shared across the shapeguard package."""

from typing import Any, Final, Literal


class _MissingType:
    """Marker for a value that is absent rather than ``None``."""

    _instance: "_MissingType | None" = None

    def __new__(cls) -> "_MissingType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> "_MissingType":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_MissingType":
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Final = _MissingType()

# Type aliases for better readability
PathElement = str | int
Path = tuple[PathElement, ...]
UnknownKeys = Literal["strip", "passthrough", "strict"]
PrimitiveType = Literal["string", "number", "boolean", "date"]

__all__ = [
    "MISSING",
    "PathElement",
    "Path",
    "UnknownKeys",
    "PrimitiveType",
]
