from typing import Any, Protocol, Tuple, Type

from ..error import ConversionError


class TypeConverter(Protocol):
    """Converts between the raw value the server returns and a python value."""

    target_type: type

    def from_protocol(self, raw: Any) -> Any: ...

    def to_protocol(self, value: Any) -> Any: ...


class DefaultConverter:
    """Passes values through unchanged and reports the fallback type."""

    def __init__(self, target_type: type = object):
        self.target_type = target_type

    def from_protocol(self, raw: Any) -> Any:
        return raw

    def to_protocol(self, value: Any) -> Any:
        return value

    def __repr__(self) -> str:
        return f"<DefaultConverter {self.target_type.__name__}>"


def expect_type(value: Any, expected: Tuple[Type, ...], what: str) -> None:
    """Raise ConversionError if `value` is not one of `expected`. bool never counts as int."""
    if isinstance(value, bool) and bool not in expected:
        raise ConversionError(f"{what} expects {_names(expected)}, got bool")
    if not isinstance(value, expected):
        raise ConversionError(f"{what} expects {_names(expected)}, got {type(value).__name__}")


def expect_range(value: int, low: int, high: int, what: str) -> None:
    if not low <= value <= high:
        raise ConversionError(f"{what} value {value} is outside {low} to {high}")


def _names(types: Tuple[Type, ...]) -> str:
    return " or ".join(t.__name__ for t in types)
