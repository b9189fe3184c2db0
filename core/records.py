"""Materialize raw poe.watch records into queryable objects.

Top-level keys of a record are normalised to snake_case and exposed as
attributes of an :class:`Entity`. Nested mappings are wrapped in a
:class:`Record`, which keeps the wire names of its keys, and arrays of
mappings become lists of :class:`Record`.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Iterator, Mapping, Optional

from utils.naming import snakify

log = logging.getLogger(__name__)

_MISSING = object()


def wrap_value(value: Any) -> Any:
    """Wrap mappings as :class:`Record` and arrays of mappings as lists of them."""
    if isinstance(value, Record):
        return value
    if isinstance(value, Mapping):
        return Record(value)
    if isinstance(value, list) and value and isinstance(value[0], Mapping):
        return [Record(v) if isinstance(v, Mapping) else v for v in value]
    return value


class Record:
    """Attribute and item access over one mapping, keyed by its wire names."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]):
        object.__setattr__(self, "_data", dict(data))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        try:
            return wrap_value(self._data[name])
        except KeyError:
            raise AttributeError(f"record has no key {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is read-only")

    def __getitem__(self, key: str) -> Any:
        return wrap_value(self._data[key])

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Record({self._data!r})"

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._data:
            return wrap_value(self._data[key])
        return default

    def keys(self):
        return self._data.keys()

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)


class field:
    """Typed accessor for a known schema field of an :class:`Entity`."""

    def __init__(self, default: Any = None):
        self.default = default
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Optional["Entity"], owner: type) -> Any:
        if obj is None:
            return self
        return obj._fields.get(self.name, self.default)


class Entity:
    """One materialized record of a dataset.

    Every raw key is reachable as ``entity.<snake_name>``, ``entity[name]``
    or ``entity.get(name)``. Boolean fields also answer ``entity.is_<name>``.
    """

    # Dataset this entity kind is read from, e.g. ``"leagues"``.
    dataset: ClassVar[str] = ""

    def __init__(self, raw: Mapping[str, Any], client: Any = None):
        self._raw = dict(raw)
        self._fields: Dict[str, Any] = {}
        for k, v in raw.items():
            key = snakify(k)
            if key in self._fields:
                # the last wire key wins
                log.warning("%s: keys normalising to %r collide; keeping %r", type(self).__name__, key, k)
            self._fields[key] = wrap_value(v)
        self._client = client

    def __getattr__(self, name: str) -> Any:
        fields = self.__dict__.get("_fields")
        if fields is None or name.startswith("__"):
            raise AttributeError(name)
        if name in fields:
            return fields[name]
        if name.startswith("is_"):
            value = self._lookup(name[3:])
            if isinstance(value, bool):
                return value
        raise AttributeError(f"{type(self).__name__} has no field {name!r}")

    def __getitem__(self, name: str) -> Any:
        key = snakify(name)
        if key not in self._fields:
            raise KeyError(name)
        return self._fields[key]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and snakify(name) in self._fields

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return type(self) is type(other) and self._raw == other._raw

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._fields.get("id")))

    def __repr__(self) -> str:
        label = self._fields.get("name", self._fields.get("id"))
        return f"<{type(self).__name__} {label!r}>"

    def get(self, name: str, default: Any = None) -> Any:
        """Field value by wire or snake name; ``is_<bool field>`` also resolves."""
        key = snakify(name)
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        if key.startswith("is_"):
            value = self._lookup(key[3:])
            if isinstance(value, bool):
                return value
        return default

    def _lookup(self, key: str) -> Any:
        """Raw field value, else the default of a declared schema field."""
        if key in self._fields:
            return self._fields[key]
        declared = getattr(type(self), key, None)
        if isinstance(declared, field):
            return declared.default
        return _MISSING

    @property
    def field_names(self):
        return list(self._fields)

    def to_dict(self) -> Dict[str, Any]:
        """The raw record this entity was built from."""
        return dict(self._raw)


__all__ = ["Record", "Entity", "field", "wrap_value"]
