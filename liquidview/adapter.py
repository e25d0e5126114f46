"""
Template Context Adapter - bridges host objects to template lookups.

Every value reachable from a template root is bound once into one of three
lookup variants:

- ExplicitLookup: objects with the drop capability (``invoke_drop``)
- ReflectiveLookup: mappings and plain objects (public data attributes)
- CollectionLookup: ordered collections, iterated item by item

Lookups never raise on a missing name; they return ``MISSING`` and the
environment turns it into an undefined value that renders as an empty
string. Names are used exactly as written in the template.
"""

from collections.abc import Iterable, Mapping, Sequence
import datetime
import decimal
import enum
import fractions
import inspect
import pathlib
import uuid
from typing import Any, Iterator

from jinja2 import Undefined


class _Missing:
    """Sentinel for a name that resolved to nothing."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


_SCALARS = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    decimal.Decimal,
    fractions.Fraction,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    enum.Enum,
    uuid.UUID,
    pathlib.PurePath,
)


class Lookup:
    """Base for bound template values."""

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = value

    def lookup(self, name: Any) -> Any:
        """Resolve ``name``; return ``MISSING`` when it does not exist."""
        raise NotImplementedError

    def unwrap(self) -> Any:
        """Return the host object behind this binding."""
        return self._value

    def __contains__(self, name: Any) -> bool:
        return self.lookup(name) is not MISSING

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self._value!r}>"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Lookup):
            other = other.unwrap()
        return self._value == other

    def __hash__(self) -> int:
        try:
            return hash(self._value)
        except TypeError:
            return id(self._value)


class ExplicitLookup(Lookup):
    """Lookup delegated to the object's own ``invoke_drop``."""

    __slots__ = ()

    def lookup(self, name: Any) -> Any:
        return self._value.invoke_drop(name)

    def __iter__(self) -> Iterator[Any]:
        if isinstance(self._value, Iterable):
            return (bind(item) for item in self._value)
        raise TypeError(f"'{type(self._value).__name__}' drop is not iterable")


class ReflectiveLookup(Lookup):
    """Lookup over mapping keys or public data attributes."""

    __slots__ = ()

    @property
    def is_mapping(self) -> bool:
        return isinstance(self._value, Mapping)

    def lookup(self, name: Any) -> Any:
        obj = self._value

        if isinstance(obj, Mapping):
            try:
                return obj[name]
            except (KeyError, TypeError):
                return MISSING

        if not isinstance(name, str) or name.startswith("_"):
            return MISSING

        try:
            value = getattr(obj, name)
        except AttributeError:
            return MISSING

        # Methods are behaviour, not data
        if inspect.isroutine(value):
            return MISSING
        return value

    def __iter__(self) -> Iterator[Any]:
        if isinstance(self._value, Mapping):
            return iter(self._value)
        raise TypeError(f"'{type(self._value).__name__}' object is not iterable")

    def __len__(self) -> int:
        if isinstance(self._value, Mapping):
            return len(self._value)
        raise TypeError(f"object of type '{type(self._value).__name__}' has no len()")

    def __bool__(self) -> bool:
        if isinstance(self._value, Mapping):
            return bool(self._value)
        return True


class CollectionLookup(Lookup):
    """
    Ordered collection binding.

    Iteration yields each element bound by the same rules. Besides integer
    indexes, the Liquid names ``size``, ``first`` and ``last`` resolve.
    """

    __slots__ = ()

    def __init__(self, value: Any):
        # One-shot iterables and unordered sets are captured once
        if not isinstance(value, Sequence):
            value = tuple(value)
        super().__init__(value)

    def lookup(self, name: Any) -> Any:
        items = self._value

        if isinstance(name, bool):
            return MISSING

        if isinstance(name, int):
            try:
                return items[name]
            except (IndexError, KeyError, TypeError):
                return MISSING

        if name == "size":
            return len(items)
        if name == "first":
            return items[0] if len(items) else MISSING
        if name == "last":
            return items[-1] if len(items) else MISSING
        return MISSING

    def __iter__(self) -> Iterator[Any]:
        return (bind(item) for item in self._value)

    def __reversed__(self) -> Iterator[Any]:
        return (bind(item) for item in reversed(self._value))

    def __getitem__(self, index: Any) -> Any:
        # Python-level access used by filters such as ``last`` and ``slice``
        if isinstance(index, slice):
            return CollectionLookup(self._value[index])
        return bind(self._value[index])

    def __len__(self) -> int:
        return len(self._value)

    def __bool__(self) -> bool:
        return len(self._value) > 0

    def __contains__(self, item: Any) -> bool:
        if isinstance(item, Lookup):
            item = item.unwrap()
        return item in self._value

    def __str__(self) -> str:
        return "".join(str(bind(item)) for item in self._value if item is not None)


def has_drop_capability(value: Any) -> bool:
    """True when ``value`` exposes names through ``invoke_drop``."""
    return callable(getattr(type(value), "invoke_drop", None))


def bind(value: Any) -> Any:
    """
    Bind a host value for use inside a template.

    Args:
        value: Any host object, including ``None``

    Returns:
        The value itself for scalars, ``None`` and callables; otherwise the
        matching :class:`Lookup` variant.
    """
    if value is None or value is MISSING or isinstance(value, (Lookup, Undefined) + _SCALARS):
        return value

    if inspect.isroutine(value) or isinstance(value, type):
        return value

    if has_drop_capability(value):
        to_liquid = getattr(value, "to_liquid", None)
        if callable(to_liquid):
            exposed = to_liquid()
            if exposed is not value:
                return bind(exposed)
        return ExplicitLookup(value)

    if isinstance(value, Mapping):
        return ReflectiveLookup(value)

    if isinstance(value, Iterable):
        return CollectionLookup(value)

    return ReflectiveLookup(value)
