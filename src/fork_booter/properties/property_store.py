"""Ordered string property store with typed accessors."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping, Sequence
from enum import Enum
from typing import TextIO, TypeVar

from fork_booter.errors import EncodingError, MalformedValueError, MissingKeyError

from .text_format import is_valid_key, parse_lines, render_lines

SIZE_SUFFIX = "size"
PRESENT_SUFFIX = "present"

_INT_PATTERN = re.compile(r"-?[0-9]+")
_TRUE = "true"
_FALSE = "false"

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

ObjectWriter = Callable[["PropertyStore", str, T], None]
ObjectReader = Callable[["PropertyStore", str], T]


def child_key(prefix: str, name: str | int) -> str:
    """Join a namespace prefix and a field name or list index."""
    return f"{prefix}.{name}" if prefix else str(name)


class PropertyStore:
    """Flat ``str -> str`` mapping kept in insertion order.

    Lists are written as ``key.size`` plus ``key.0`` .. ``key.<n-1>``, enums by
    member name and nullable values with a ``key.present`` sentinel. Getters
    without a default raise ``MissingKeyError`` or ``MalformedValueError``.
    A sealed store rejects further writes.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = {}
        self._sealed = False
        for key, value in (entries or {}).items():
            self._put(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyStore):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"PropertyStore({len(self._entries)} entries, sealed={self._sealed})"

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries.items())

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> PropertyStore:
        """Reject every later write and return the store itself."""
        self._sealed = True
        return self

    def copy(self) -> PropertyStore:
        """Return an unsealed copy holding the same entries in the same order."""
        return PropertyStore(self._entries)

    def remove(self, key: str) -> None:
        self._ensure_writable()
        self._entries.pop(key, None)

    def set_string(self, key: str, value: str) -> None:
        self._put(key, value)

    def get_string(self, key: str) -> str:
        try:
            return self._entries[key]
        except KeyError:
            raise MissingKeyError(key) from None

    def get_optional_string(self, key: str, default: str | None = None) -> str | None:
        return self._entries.get(key, default)

    def set_int(self, key: str, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise EncodingError(f"{key} must be an integer.")
        self._put(key, str(value))

    def get_int(self, key: str) -> int:
        raw = self.get_string(key)
        if not _INT_PATTERN.fullmatch(raw):
            raise MalformedValueError(key, raw, "an integer")
        try:
            return int(raw)
        except ValueError:
            raise MalformedValueError(key, raw, "an integer") from None

    def get_optional_int(self, key: str, default: int | None = None) -> int | None:
        if key not in self._entries:
            return default
        return self.get_int(key)

    def set_boolean(self, key: str, value: bool) -> None:
        if not isinstance(value, bool):
            raise EncodingError(f"{key} must be a boolean.")
        self._put(key, _TRUE if value else _FALSE)

    def get_boolean(self, key: str) -> bool:
        raw = self.get_string(key)
        if raw == _TRUE:
            return True
        if raw == _FALSE:
            return False
        raise MalformedValueError(key, raw, "'true' or 'false'")

    def get_optional_boolean(self, key: str, default: bool | None = None) -> bool | None:
        if key not in self._entries:
            return default
        return self.get_boolean(key)

    def set_enum(self, key: str, value: Enum) -> None:
        if not isinstance(value, Enum):
            raise EncodingError(f"{key} must be an enum member.")
        self._put(key, value.name)

    def get_enum(self, key: str, enum_type: type[E]) -> E:
        raw = self.get_string(key)
        try:
            return enum_type[raw]
        except KeyError:
            names = ", ".join(member.name for member in enum_type)
            raise MalformedValueError(key, raw, f"one of {names}") from None

    def set_nullable_string(self, key: str, value: str | None) -> None:
        self.set_boolean(child_key(key, PRESENT_SUFFIX), value is not None)
        if value is not None:
            self.set_string(key, value)

    def get_nullable_string(self, key: str) -> str | None:
        if not self.get_boolean(child_key(key, PRESENT_SUFFIX)):
            return None
        return self.get_string(key)

    def set_string_list(self, key: str, values: Sequence[str]) -> None:
        self.set_object_list(key, values, PropertyStore._write_string)

    def get_string_list(self, key: str) -> tuple[str, ...]:
        return self.get_object_list(key, PropertyStore.get_string)

    def set_enum_list(self, key: str, values: Sequence[Enum]) -> None:
        self.set_object_list(key, values, PropertyStore._write_enum)

    def get_enum_list(self, key: str, enum_type: type[E]) -> tuple[E, ...]:
        def _read(store: PropertyStore, element_key: str) -> E:
            return store.get_enum(element_key, enum_type)

        return self.get_object_list(key, _read)

    def set_object(self, key: str, value: T, writer: ObjectWriter[T]) -> None:
        """Write a nested value object under the ``key`` namespace."""
        writer(self, key, value)

    def get_object(self, key: str, reader: ObjectReader[T]) -> T:
        """Read a nested value object from the ``key`` namespace."""
        return reader(self, key)

    def set_object_list(self, key: str, values: Sequence[T], writer: ObjectWriter[T]) -> None:
        if isinstance(values, str) or values is None:
            raise EncodingError(f"{key} must be a sequence.")
        self.set_int(child_key(key, SIZE_SUFFIX), len(values))
        for index, value in enumerate(values):
            writer(self, child_key(key, index), value)

    def get_object_list(self, key: str, reader: ObjectReader[T]) -> tuple[T, ...]:
        size_key = child_key(key, SIZE_SUFFIX)
        size = self.get_int(size_key)
        if size < 0:
            raise MalformedValueError(size_key, str(size), "a non-negative size")
        return tuple(reader(self, child_key(key, index)) for index in range(size))

    def to_text(self) -> str:
        return render_lines(self._entries.items())

    @classmethod
    def from_text(cls, text: str) -> PropertyStore:
        return cls(parse_lines(text)).seal()

    def store(self, target: TextIO) -> None:
        """Write every entry to ``target`` as ``key=value`` lines in insertion order."""
        target.write(self.to_text())

    @classmethod
    def load(cls, source: TextIO) -> PropertyStore:
        """Parse ``key=value`` lines from ``source`` into a sealed store."""
        return cls.from_text(source.read())

    def _put(self, key: str, value: str) -> None:
        self._ensure_writable()
        if not isinstance(key, str) or not is_valid_key(key):
            raise EncodingError(f"Invalid property key {key!r}.")
        if not isinstance(value, str):
            raise EncodingError(f"{key} must be a string, got {type(value).__name__}.")
        self._entries[key] = value

    def _ensure_writable(self) -> None:
        if self._sealed:
            raise RuntimeError("PropertyStore is sealed and can no longer be modified.")

    @staticmethod
    def _write_string(store: PropertyStore, key: str, value: str) -> None:
        store.set_string(key, value)

    @staticmethod
    def _write_enum(store: PropertyStore, key: str, value: Enum) -> None:
        store.set_enum(key, value)
