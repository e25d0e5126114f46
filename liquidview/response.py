"""
View response - rendered text plus a deferred, write-once stream writer.
"""

import inspect
import threading
from typing import Any, BinaryIO, Dict

from .faults import ResponseConsumedFault


class ViewResponse:
    """
    Result of rendering a view.

    Rendering has already happened; nothing is written until
    :meth:`contents` (or :meth:`write_async`) is invoked, and either may be
    invoked only once.

    Args:
        text: Rendered view text
        encoding: Encoding applied when writing
        content_type: Content type for the host response
        view: Name of the rendered view, for diagnostics

    Example:
        response = engine.render_view(location, model, render_context)
        response.contents(stream)
    """

    def __init__(
        self,
        text: str,
        *,
        encoding: str = "utf-8",
        content_type: str = "text/html; charset=utf-8",
        view: str = "",
    ):
        self.text = text
        self.encoding = encoding
        self.content_type = content_type
        self.view = view
        self._consumed = False
        self._lock = threading.Lock()

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def headers(self) -> Dict[str, str]:
        return {"content-type": self.content_type}

    def body(self) -> bytes:
        """Encoded view text. Does not consume the response."""
        return self.text.encode(self.encoding)

    def contents(self, stream: BinaryIO) -> None:
        """
        Write the encoded view to ``stream``.

        Raises:
            ResponseConsumedFault: If the response was already written
        """
        self._consume()
        data = memoryview(self.body())
        while data:
            written = stream.write(data)
            # Buffered streams write everything and may return None
            if written is None:
                break
            data = data[written:]
        flush = getattr(stream, "flush", None)
        if callable(flush):
            flush()

    async def write_async(self, writer: Any) -> None:
        """
        Write the encoded view to an asyncio-style writer.

        ``writer.write`` may be sync or async; ``writer.drain`` is awaited
        when present.

        Raises:
            ResponseConsumedFault: If the response was already written
        """
        self._consume()
        result = writer.write(self.body())
        if inspect.isawaitable(result):
            await result

        drain = getattr(writer, "drain", None)
        if callable(drain):
            result = drain()
            if inspect.isawaitable(result):
                await result

    def _consume(self) -> None:
        with self._lock:
            if self._consumed:
                raise ResponseConsumedFault(self.view)
            self._consumed = True

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "pending"
        return f"<ViewResponse view={self.view!r} {state}>"
