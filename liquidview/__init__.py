"""
Liquidview - Liquid view engine for host web frameworks.

Compiles ``.liquid`` views once per view location, renders them against a
model and a page-scoped ViewBag, and hands back a response that writes
itself to a byte stream.

Template parsing and execution are delegated to Jinja2.

Example:
    from liquidview import (
        DefaultRenderContext,
        DefaultViewCache,
        LiquidViewEngine,
        ViewEngineStartupContext,
        ViewLocationResult,
    )

    cache = DefaultViewCache()
    engine = LiquidViewEngine()
    engine.initialize(ViewEngineStartupContext(cache, locations))

    location = ViewLocationResult(
        "", "hello", "liquid", lambda: io.StringIO("<h1>{{ Model.name }}</h1>")
    )
    response = engine.render_view(
        location, {"name": "test"}, DefaultRenderContext(view_cache=cache)
    )
    response.contents(stream)
"""

__version__ = "1.0.0"

from .adapter import (
    MISSING,
    CollectionLookup,
    ExplicitLookup,
    Lookup,
    ReflectiveLookup,
    bind,
)
from .cache import DefaultViewCache, ViewCache, ViewCacheStats
from .config import ViewEngineConfig
from .context import (
    DefaultRenderContext,
    RenderContext,
    ViewBag,
    create_template_context,
)
from .drops import Drop
from .engine import LiquidViewEngine, ViewEngineStartupContext
from .environment import LiquidExtension, create_environment
from .faults import Fault, FaultDomain, ResponseConsumedFault, Severity, ViewConfigFault
from .filesystem import DefaultFileSystemFactory, FileSystemFactory, ViewFileSystem
from .locations import ViewLocationResult
from .response import ViewResponse

__all__ = [
    # Engine
    "LiquidViewEngine",
    "ViewEngineStartupContext",
    "ViewEngineConfig",

    # Views
    "ViewLocationResult",
    "ViewResponse",

    # Cache
    "ViewCache",
    "DefaultViewCache",
    "ViewCacheStats",

    # Context
    "RenderContext",
    "DefaultRenderContext",
    "ViewBag",
    "create_template_context",

    # Adapter
    "Drop",
    "Lookup",
    "ExplicitLookup",
    "ReflectiveLookup",
    "CollectionLookup",
    "MISSING",
    "bind",

    # Runtime
    "LiquidExtension",
    "create_environment",

    # File system
    "FileSystemFactory",
    "DefaultFileSystemFactory",
    "ViewFileSystem",

    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ViewConfigFault",
    "ResponseConsumedFault",
]
