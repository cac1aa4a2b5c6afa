"""Parsed JSON values with forgiving lookups and conversions."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterator, Optional, Union


class JsonType(IntEnum):
    """The kind of a parsed JSON value; NONE marks a missing value."""

    NONE = 0
    OBJECT = 1
    ARRAY = 2
    INTEGER = 3
    DOUBLE = 4
    STRING = 5
    BOOLEAN = 6
    NULL = 7


def _default_payload(kind: JsonType) -> Any:
    if kind in (JsonType.OBJECT, JsonType.ARRAY):
        return []
    if kind is JsonType.STRING:
        return ""
    if kind is JsonType.INTEGER:
        return 0
    if kind is JsonType.DOUBLE:
        return 0.0
    if kind is JsonType.BOOLEAN:
        return False
    return None


class JsonValue:
    """A node of a parsed JSON document.

    Objects hold an ordered list of ``(name, JsonValue)`` pairs, so repeated
    names are kept; arrays hold a list of ``JsonValue``. Lookups that find
    nothing return a value of type :attr:`JsonType.NONE` instead of raising.
    """

    def __init__(
        self,
        type: JsonType = JsonType.NONE,
        value: Any = None,
        parent: Optional["JsonValue"] = None,
    ) -> None:
        self.type = JsonType(type)
        self.value = _default_payload(self.type) if value is None else value
        self.parent = parent

    def __repr__(self) -> str:
        return f"JsonValue({self.type.name}, {self.value!r})"

    def __getitem__(self, key: Union[int, str]) -> "JsonValue":
        if isinstance(key, str):
            if self.type is JsonType.OBJECT:
                for name, item in self.value:
                    if name == key:
                        return item
            return JsonValue()
        if (
            self.type is JsonType.ARRAY
            and isinstance(key, int)
            and not isinstance(key, bool)
            and 0 <= key < len(self.value)
        ):
            return self.value[key]
        return JsonValue()

    def __iter__(self) -> Iterator[Any]:
        if self.type is JsonType.ARRAY:
            return iter(self.value)
        if self.type is JsonType.OBJECT:
            return iter(list(self.value))
        return iter(())

    def __len__(self) -> int:
        if self.type in (JsonType.OBJECT, JsonType.ARRAY, JsonType.STRING):
            return len(self.value)
        return 0

    def __bool__(self) -> bool:
        if self.type is not JsonType.BOOLEAN:
            return False
        return bool(self.value)

    def as_str(self) -> str:
        """Return the string payload, or an empty string for other types."""
        if self.type is JsonType.STRING:
            return self.value
        return ""

    def as_int(self) -> int:
        """Return the number as an integer, truncating doubles; 0 otherwise."""
        if self.type is JsonType.INTEGER:
            return int(self.value)
        if self.type is JsonType.DOUBLE:
            return int(self.value)
        return 0

    def as_float(self) -> float:
        """Return the number as a float; 0.0 for non-numbers."""
        if self.type in (JsonType.INTEGER, JsonType.DOUBLE):
            return float(self.value)
        return 0.0

    def to_python(self) -> Any:
        """Convert to plain Python data; the first of repeated object names wins."""
        if self.type is JsonType.OBJECT:
            result: dict[str, Any] = {}
            for name, item in self.value:
                if name not in result:
                    result[name] = item.to_python()
            return result
        if self.type is JsonType.ARRAY:
            return [item.to_python() for item in self.value]
        if self.type is JsonType.STRING:
            return self.value
        if self.type is JsonType.INTEGER:
            return int(self.value)
        if self.type is JsonType.DOUBLE:
            return float(self.value)
        if self.type is JsonType.BOOLEAN:
            return bool(self.value)
        return None