"""
Render context - ambient per-page values and template context building.
"""

from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Protocol, runtime_checkable

from .adapter import bind
from .cache import DefaultViewCache, ViewCache


class ViewBag(MutableMapping):
    """
    Page-scoped bag of named values.

    Supports attribute and item access. Reading a name that was never set
    through attribute access returns ``None``; item access follows the
    mapping protocol. Names are case-sensitive.

    Example:
        bag = ViewBag()
        bag.Name = "test"
        bag["Title"] = "Home"
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None, **kwargs: Any):
        object.__setattr__(self, "_values", {})
        self._values.update(values or {}, **kwargs)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._values.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._values[name] = value

    def __delattr__(self, name: str) -> None:
        self._values.pop(name, None)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ViewBag({self._values!r})"


@runtime_checkable
class RenderContext(Protocol):
    """What the engine needs from the host for a single render."""

    @property
    def view_cache(self) -> ViewCache: ...

    @property
    def view_bag(self) -> Any: ...


@dataclass
class DefaultRenderContext:
    """
    Plain render context.

    Attributes:
        view_cache: Cache of compiled templates shared across renders
        view_bag: Ambient values for the page being rendered
    """

    view_cache: ViewCache = field(default_factory=DefaultViewCache)
    view_bag: ViewBag = field(default_factory=ViewBag)


def create_template_context(model: Any = None, view_bag: Any = None) -> Dict[str, Any]:
    """
    Build the variables a view is rendered with.

    The model is reachable as ``Model`` and the page bag as ``ViewBag``.
    A ``None`` model or bag binds as an empty value.

    Args:
        model: Render model of any shape
        view_bag: Ambient page values

    Returns:
        Fresh dictionary for a single render
    """
    return {
        "Model": bind(model),
        "ViewBag": bind(view_bag),
    }
