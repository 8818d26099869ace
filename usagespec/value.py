"""The tagged value produced for each option, argument and command."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable

_LEADING_INTEGER = re.compile(r"[ \t\n\v\f\r]*[+-]?\d+")


class Kind(enum.Enum):
    """The kind of data a :class:`Value` holds."""

    EMPTY = "empty"
    BOOL = "bool"
    LONG = "long"
    STRING = "string"
    STRING_LIST = "string-list"


def _kind_of(data: object) -> Kind:
    if data is None:
        return Kind.EMPTY
    if isinstance(data, bool):
        return Kind.BOOL
    if isinstance(data, int):
        return Kind.LONG
    if isinstance(data, str):
        return Kind.STRING
    if isinstance(data, Iterable):
        return Kind.STRING_LIST
    raise TypeError(f"cannot hold a value of type {type(data).__name__}")


class Value:
    """Holds nothing, a bool, an integer, a string or a list of strings."""

    __slots__ = ("_kind", "_data")

    def __init__(self, data=None):
        if isinstance(data, Value):
            self._kind = data._kind
            self._data = data._data
            return
        kind = _kind_of(data)
        if kind is Kind.STRING_LIST:
            items = tuple(data)
            if not all(isinstance(item, str) for item in items):
                raise TypeError("a string list may only hold strings")
            data = items
        self._kind = kind
        self._data = data

    @property
    def kind(self) -> Kind:
        return self._kind

    def is_bool(self) -> bool:
        return self._kind is Kind.BOOL

    def is_long(self) -> bool:
        return self._kind is Kind.LONG

    def is_string(self) -> bool:
        return self._kind is Kind.STRING

    def is_string_list(self) -> bool:
        return self._kind is Kind.STRING_LIST

    def _require(self, expected: Kind) -> None:
        if self._kind is not expected:
            raise TypeError(
                f"Illegal cast to {expected.value}; type is actually {self._kind.value}"
            )

    def as_bool(self) -> bool:
        self._require(Kind.BOOL)
        return self._data

    def as_long(self) -> int:
        """Return the integer, converting a string holding a number."""
        if self._kind is Kind.STRING:
            text = self._data
            match = _LEADING_INTEGER.match(text)
            if match is None:
                raise ValueError(f"{text} is not a number.")
            if match.end() != len(text):
                raise ValueError(f"{text} contains non-numeric characters.")
            return int(match.group())
        self._require(Kind.LONG)
        return self._data

    def as_string(self) -> str:
        self._require(Kind.STRING)
        return self._data

    def as_string_list(self) -> list[str]:
        self._require(Kind.STRING_LIST)
        return list(self._data)

    def __bool__(self) -> bool:
        return self._kind is not Kind.EMPTY

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._kind is other._kind and self._data == other._data

    def __hash__(self):
        return hash((self._kind, self._data))

    def __str__(self) -> str:
        if self._kind is Kind.BOOL:
            return "true" if self._data else "false"
        if self._kind is Kind.LONG:
            return str(self._data)
        if self._kind is Kind.STRING:
            return f'"{self._data}"'
        if self._kind is Kind.STRING_LIST:
            return "[" + ", ".join(f'"{item}"' for item in self._data) + "]"
        return "null"

    def __repr__(self) -> str:
        if self._kind is Kind.STRING_LIST:
            return f"Value({list(self._data)!r})"
        return f"Value({self._data!r})"