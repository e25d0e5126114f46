"""
Drops - explicit, self-describing exposure of values to templates.

A model that subclasses :class:`Drop` decides for itself which names the
template may read, instead of being reflected over. Exposed names are the
public attributes and properties of the drop plus the public zero-argument
methods declared on its subclasses; everything else goes through
:meth:`Drop.before_method`.

Example:
    class Article(Drop):
        def __init__(self, name):
            self.Name = name

    {{ Model.Name }}
"""

import inspect
from typing import Any

from .adapter import MISSING


class Drop:
    """Base class for models exposing a controlled set of names."""

    def invoke_drop(self, name: Any) -> Any:
        """
        Resolve ``name`` against this drop.

        Returns ``MISSING`` when the name is not exposed and
        :meth:`before_method` does not supply a value.
        """
        if not isinstance(name, str) or name.startswith("_") or name in _RESERVED:
            return self.before_method(name)

        if name in getattr(self, "__dict__", {}):
            value = self.__dict__[name]
            return MISSING if inspect.isroutine(value) else value

        attr = inspect.getattr_static(type(self), name, MISSING)
        if attr is MISSING:
            return self.before_method(name)

        if isinstance(attr, (staticmethod, classmethod)) or inspect.isroutine(attr):
            method = getattr(self, name)
            if _takes_no_arguments(method):
                return method()
            return self.before_method(name)

        return getattr(self, name)

    def before_method(self, name: Any) -> Any:
        """Fallback for names the drop does not expose. Override to extend."""
        return MISSING

    def to_liquid(self) -> Any:
        """Return the value handed to the template for this drop."""
        return self

    def __contains__(self, name: Any) -> bool:
        return self.invoke_drop(name) is not MISSING


_RESERVED = frozenset(
    name for name in vars(Drop) if not name.startswith("_")
)


def _takes_no_arguments(func: Any) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not p.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in signature.parameters.values()
    )
