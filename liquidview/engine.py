"""
Liquid View Engine - compiles, caches and renders Liquid views.

Provides:
- Supported extension registration
- File system resolution at startup (for partials)
- Compile-once rendering through the host's view cache
- Model and ViewBag exposure to templates
- Deferred, write-once response output
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from jinja2 import BaseLoader, Template

from .cache import ViewCache
from .config import ViewEngineConfig
from .context import RenderContext, create_template_context
from .environment import create_environment
from .filesystem import DefaultFileSystemFactory, FileSystemFactory
from .locations import ViewLocationResult
from .response import ViewResponse

logger = logging.getLogger("liquidview.engine")


@dataclass(frozen=True)
class ViewEngineStartupContext:
    """
    What the host knows about views when the engine starts.

    Attributes:
        view_cache: Cache shared by renders
        view_locations: Views discovered by the host
        extensions: Extensions the host discovered views for
    """

    view_cache: ViewCache
    view_locations: Tuple[ViewLocationResult, ...] = ()
    extensions: Tuple[str, ...] = ("liquid",)

    def __post_init__(self):
        object.__setattr__(self, "view_locations", tuple(self.view_locations))
        object.__setattr__(self, "extensions", tuple(self.extensions))


class LiquidViewEngine:
    """
    View engine for ``.liquid`` views.

    Template parsing and execution are done by Jinja2; the engine decides
    what is compiled when, what the template sees, and how output is
    produced. Apart from the file system resolved by :meth:`initialize` it
    holds no mutable state, so one engine serves concurrent renders.

    Args:
        file_system_factory: Resolves the file system at startup
        config: Engine configuration
        filters: Custom filters
        globals: Custom global variables/functions

    Example:
        engine = LiquidViewEngine(DefaultFileSystemFactory())
        engine.initialize(startup_context)

        response = engine.render_view(location, {"name": "test"}, render_context)
        response.contents(stream)
    """

    def __init__(
        self,
        file_system_factory: Optional[FileSystemFactory] = None,
        config: Optional[ViewEngineConfig] = None,
        *,
        filters: Optional[Dict[str, Callable]] = None,
        globals: Optional[Dict[str, Any]] = None,
    ):
        self.file_system_factory = file_system_factory or DefaultFileSystemFactory()
        self.config = config or ViewEngineConfig()
        self.file_system: Optional[BaseLoader] = None
        self.env = create_environment(self.config, filters=filters, globals=globals)

    @property
    def extensions(self) -> Tuple[str, ...]:
        """File extensions this engine renders."""
        return self.config.extensions

    def initialize(self, startup_context: ViewEngineStartupContext) -> None:
        """
        Resolve the file system for this engine.

        Calling again re-resolves it. Factory errors propagate.
        """
        self.file_system = self.file_system_factory.get_file_system(startup_context)
        self.env.loader = self.file_system

        logger.info(
            f"Liquid view engine initialized "
            f"({len(startup_context.view_locations)} view locations, "
            f"extensions={list(self.extensions)})"
        )

    def render_view(
        self,
        location: ViewLocationResult,
        model: Any,
        render_context: RenderContext,
    ) -> ViewResponse:
        """
        Render a view.

        Args:
            location: View to render
            model: Render model, exposed as ``Model`` (may be None)
            render_context: Supplies the view cache and ``ViewBag``

        Returns:
            Response whose ``contents`` writes the output to a stream

        Raises:
            TemplateSyntaxError: If the view source is malformed
            TemplateError: If the view fails while rendering
        """
        template = render_context.view_cache.get_or_add(location, self.compile)
        context = create_template_context(model, render_context.view_bag)

        text = template.render(context)

        return ViewResponse(
            text,
            encoding=self.config.encoding,
            content_type=self.config.content_type,
            view=location.full_name,
        )

    def compile(self, location: ViewLocationResult) -> Template:
        """
        Read and compile a view's source.

        Only called by the view cache on a miss.
        """
        return self.env.compile_view(location)

    def register_filter(self, name: str, func: Callable) -> None:
        """
        Register custom filter.

        Only affects views compiled afterwards.
        """
        self.env.filters[name] = func

    def register_global(self, name: str, value: Any) -> None:
        """Register global variable/function."""
        self.env.globals[name] = value

    def precompile(self, startup_context: ViewEngineStartupContext) -> int:
        """
        Compile every known view into the startup view cache.

        Returns:
            Number of views handled by this engine
        """
        count = 0
        for location in startup_context.view_locations:
            if location.extension in self.extensions:
                startup_context.view_cache.get_or_add(location, self.compile)
                count += 1
        return count
