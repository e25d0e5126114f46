"""
View locations - identity and source reader of a single view.
"""

from dataclasses import dataclass, field
from typing import Callable, TextIO


@dataclass(frozen=True)
class ViewLocationResult:
    """
    A view found by the host's view-location discovery.

    Identity (equality and hashing) is ``(location, name, extension)``;
    the ``contents`` reader is not part of it.

    Attributes:
        location: Directory-like location of the view ("" for the root)
        name: View name without extension
        extension: File extension without the leading dot
        contents: Zero-argument callable returning a readable text source
    """

    location: str
    name: str
    extension: str
    contents: Callable[[], TextIO] = field(compare=False, repr=False)

    @property
    def full_name(self) -> str:
        """``location/name`` with empty parts skipped."""
        parts = [p.strip("/") for p in (self.location, self.name) if p and p.strip("/")]
        return "/".join(parts)

    def read(self) -> str:
        """Invoke the reader and return the full source text."""
        reader = self.contents()
        try:
            return reader.read()
        finally:
            close = getattr(reader, "close", None)
            if callable(close):
                close()
