"""
View file system - resolves partials for ``{% include %}``.

The engine obtains its file system from an injected factory when it is
initialized. The default factory serves the view locations known at
startup through a Jinja2 loader.
"""

import logging
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from jinja2 import BaseLoader, TemplateNotFound

from .locations import ViewLocationResult

if TYPE_CHECKING:
    from .cache import ViewCache
    from .engine import ViewEngineStartupContext


logger = logging.getLogger("liquidview.filesystem")


class FileSystemFactory(Protocol):
    """Produces the engine's file system from the startup context."""

    def get_file_system(self, startup_context: "ViewEngineStartupContext") -> BaseLoader: ...


class ViewFileSystem(BaseLoader):
    """
    Jinja2 loader over a fixed set of view locations.

    Template name formats (the extension is optional):
        - Full name: "shared/header" -> location "shared", name "header"
        - Bare name: "header" -> first view named "header"
        - Partial: "shared/header" also matches "shared/_header"

    Args:
        locations: View locations known to the host
        extensions: Extensions treated as view extensions
        view_cache: Cache shared with rendering; partials compiled through it
            are read once per entry
    """

    def __init__(
        self,
        locations: Iterable[ViewLocationResult] = (),
        extensions: Iterable[str] = ("liquid",),
        view_cache: Optional["ViewCache"] = None,
    ):
        self.extensions = tuple(extensions)
        self.view_cache = view_cache
        self._by_full_name: Dict[str, ViewLocationResult] = {}
        self._by_name: Dict[str, ViewLocationResult] = {}

        for location in locations:
            if location.extension not in self.extensions:
                continue
            self._by_full_name.setdefault(location.full_name, location)
            self._by_name.setdefault(location.name, location)

    def get_source(
        self,
        environment,
        template: str,
    ) -> Tuple[str, Optional[str], Optional[Callable[[], bool]]]:
        """
        Load partial source.

        Raises:
            TemplateNotFound: If no view location matches
        """
        location = self.find(template)
        if location is None:
            raise TemplateNotFound(template)

        logger.debug(f"Loading partial '{template}' from {location.full_name}")
        filename = f"{location.full_name}.{location.extension}"
        # View sources do not change for the lifetime of the engine
        return location.read(), filename, lambda: True

    def load(self, environment, name: str, globals=None):
        """
        Load a partial, through the view cache when one is attached.

        Raises:
            TemplateNotFound: If no view location matches
        """
        compile_view = getattr(environment, "compile_view", None)
        if self.view_cache is None or compile_view is None:
            return super().load(environment, name, globals)

        location = self.find(name)
        if location is None:
            raise TemplateNotFound(name)
        return self.view_cache.get_or_add(location, compile_view)

    def find(self, template: str) -> Optional[ViewLocationResult]:
        """Resolve a template name to a view location."""
        name = self._normalize(template)

        for candidate in self._candidates(name):
            if candidate in self._by_full_name:
                return self._by_full_name[candidate]

        if "/" not in name:
            for candidate in (name, f"_{name}"):
                if candidate in self._by_name:
                    return self._by_name[candidate]

        return None

    def list_templates(self) -> List[str]:
        return sorted(self._by_full_name)

    def _normalize(self, template: str) -> str:
        name = template.strip().strip("'\"").strip("/")
        for ext in self.extensions:
            suffix = f".{ext}"
            if name.endswith(suffix):
                return name[: -len(suffix)]
        return name

    def _candidates(self, name: str) -> List[str]:
        head, _, tail = name.rpartition("/")
        partial = f"{head}/_{tail}" if head else f"_{tail}"
        return [name, partial]


class DefaultFileSystemFactory:
    """Builds a :class:`ViewFileSystem` from the startup context."""

    def get_file_system(self, startup_context: "ViewEngineStartupContext") -> ViewFileSystem:
        return ViewFileSystem(
            startup_context.view_locations,
            extensions=startup_context.extensions,
            view_cache=startup_context.view_cache,
        )
