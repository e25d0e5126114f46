"""
Shared fixtures and fakes for the Liquidview test suite.
"""

import io
from typing import Any, Callable, List

import pytest

from liquidview import (
    DefaultRenderContext,
    DefaultViewCache,
    LiquidViewEngine,
    ViewBag,
    ViewEngineStartupContext,
    ViewFileSystem,
    ViewLocationResult,
)


# ============================================================================
# Collaborator fakes
# ============================================================================


class PassThroughViewCache:
    """View cache that never stores: every call runs the factory."""

    def __init__(self):
        self.calls: List[Any] = []

    def get_or_add(self, key: Any, factory: Callable[[Any], Any]) -> Any:
        self.calls.append(key)
        return factory(key)


class RecordingFileSystemFactory:
    """File system factory that remembers the startup contexts it saw."""

    def __init__(self, error: Exception = None):
        self.contexts: List[ViewEngineStartupContext] = []
        self.error = error

    def get_file_system(self, startup_context):
        self.contexts.append(startup_context)
        if self.error is not None:
            raise self.error
        return ViewFileSystem(
            startup_context.view_locations,
            extensions=startup_context.extensions,
            view_cache=startup_context.view_cache,
        )


class CountingReader:
    """``contents`` callable that counts how often a view source is opened."""

    def __init__(self, source: str):
        self.source = source
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return io.StringIO(self.source)


# ============================================================================
# Helpers
# ============================================================================


def make_location(source: str, name: str = "", location: str = "", extension: str = "liquid"):
    """Build a view location whose reader serves ``source``."""
    return ViewLocationResult(location, name, extension, CountingReader(source))


def render(engine, location, model=None, render_context=None) -> str:
    """Render and write to a byte stream; return the decoded output."""
    stream = io.BytesIO()
    response = engine.render_view(location, model, render_context)
    response.contents(stream)
    return stream.getvalue().decode("utf-8")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def file_system_factory():
    return RecordingFileSystemFactory()


@pytest.fixture
def engine(file_system_factory):
    return LiquidViewEngine(file_system_factory)


@pytest.fixture
def view_cache():
    return PassThroughViewCache()


@pytest.fixture
def render_context(view_cache):
    return DefaultRenderContext(view_cache=view_cache, view_bag=ViewBag())


@pytest.fixture
def caching_context():
    return DefaultRenderContext(view_cache=DefaultViewCache(), view_bag=ViewBag())


@pytest.fixture
def startup(view_cache):
    """Factory for startup contexts over the given locations."""
    def _startup(*locations):
        return ViewEngineStartupContext(view_cache, locations, ("liquid",))
    return _startup
