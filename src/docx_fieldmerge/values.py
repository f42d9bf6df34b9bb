"""Values a template expression can resolve to.

Callers hand in plain Python data (dicts, lists, dataclasses, any object
with attributes). ``to_value`` wraps it in one of a closed set of variants
so the statements can dispatch on shape instead of probing objects.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Union, runtime_checkable

_MISSING = object()


@dataclass
class Image:
    """An image resource to embed in the rendered package.

    ``rid`` is the numeric relationship id, assigned by the relationship
    binder during a render.
    """

    name: str
    data: bytes = field(repr=False)
    rid: int | None = None

    @property
    def relationship_id(self) -> str | None:
        return None if self.rid is None else f"rId{self.rid}"


@runtime_checkable
class SupportsFieldLookup(Protocol):
    """Objects that resolve their own named fields."""

    def lookup_field(self, name: str) -> Any: ...


@dataclass(frozen=True)
class Scalar:
    value: Any

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ListValue:
    items: tuple

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return (to_value(item) for item in self.items)

    def at(self, index: int) -> "Value":
        """Item at *index*; raises IndexError when out of range."""
        return to_value(self.items[index])


@dataclass(frozen=True)
class Record:
    """A value with named fields, resolved through a lookup capability.

    ``lookup`` returns the raw field value or raises ``LookupError``.
    """

    source: Any
    lookup: Callable[[str], Any] = field(compare=False)

    def get(self, name: str) -> "Value":
        return to_value(self.lookup(name))


@dataclass(frozen=True)
class ImageValue:
    image: Image


class NilType:
    """The absent value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Nil"

    def __str__(self) -> str:
        return ""


Nil = NilType()

Value = Union[Scalar, ListValue, Record, ImageValue, NilType]

_SCALAR_TYPES = (
    str,
    bytes,
    numbers.Number,
    datetime.date,
    datetime.time,
    decimal.Decimal,
    enum.Enum,
)


def _mapping_lookup(mapping: Mapping) -> Callable[[str], Any]:
    def lookup(name: str) -> Any:
        if name in mapping:
            return mapping[name]
        raise KeyError(name)

    return lookup


def _attribute_lookup(obj: Any) -> Callable[[str], Any]:
    def lookup(name: str) -> Any:
        if not isinstance(name, str) or name.startswith("_"):
            raise AttributeError(name)
        value = getattr(obj, name, _MISSING)
        if value is _MISSING:
            raise AttributeError(name)
        return value

    return lookup


def to_value(obj: Any) -> Value:
    """Wrap a native Python object in its Value variant."""
    if isinstance(obj, (Scalar, ListValue, Record, ImageValue, NilType)):
        return obj
    if obj is None:
        return Nil
    if isinstance(obj, Image):
        return ImageValue(obj)
    if isinstance(obj, _SCALAR_TYPES):
        return Scalar(obj)
    # named tuples are records, not lists
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        return Record(obj, _attribute_lookup(obj))
    if isinstance(obj, (list, tuple)):
        return ListValue(tuple(obj))
    if isinstance(obj, Mapping):
        return Record(obj, _mapping_lookup(obj))
    if isinstance(obj, SupportsFieldLookup):
        return Record(obj, obj.lookup_field)
    return Record(obj, _attribute_lookup(obj))


def is_truthy(value: Value) -> bool:
    """Truthiness used by conditional blocks."""
    if value is Nil:
        return False
    if isinstance(value, ListValue):
        return len(value) > 0
    if isinstance(value, Scalar):
        return bool(value.value)
    return True


def describe(value: Value) -> str:
    """Short name of a value's variant, for error messages."""
    if value is Nil:
        return "nil"
    return {
        Scalar: "scalar",
        ListValue: "list",
        Record: "record",
        ImageValue: "image",
    }[type(value)]
