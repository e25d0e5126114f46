"""
View engine configuration.

Typed dataclass config with dict and environment loaders. Environment
variables use the ``LIQUIDVIEW_`` prefix (``LIQUIDVIEW_AUTOESCAPE=true``)
and may be supplemented by a ``.env`` file.
"""

from dataclasses import dataclass, fields
import codecs
import os
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

from .faults import ViewConfigFault


@dataclass(frozen=True)
class ViewEngineConfig:
    """
    Liquid view engine configuration.

    Attributes:
        encoding: Encoding used when writing rendered views to a stream
        content_type: Content type reported on rendered responses
        autoescape: HTML-escape output expressions (Liquid does not by default)
        sandbox: Render inside Jinja2's sandboxed environment
        strict_undefined: Raise on missing data instead of rendering empty
        trim_blocks: Remove the first newline after a block tag
        extensions: File extensions handled by the engine
    """

    encoding: str = "utf-8"
    content_type: str = "text/html; charset=utf-8"
    autoescape: bool = False
    sandbox: bool = True
    strict_undefined: bool = False
    trim_blocks: bool = False
    extensions: Tuple[str, ...] = ("liquid",)

    def __post_init__(self):
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ViewConfigFault("encoding", f"unknown encoding '{self.encoding}'")

        if isinstance(self.extensions, str):
            object.__setattr__(self, "extensions", (self.extensions,))
        else:
            object.__setattr__(self, "extensions", tuple(self.extensions))

        if not self.extensions:
            raise ViewConfigFault("extensions", "at least one extension is required")

        for ext in self.extensions:
            if not isinstance(ext, str) or not ext or ext.startswith("."):
                raise ViewConfigFault(
                    "extensions", f"'{ext}' must be a bare name such as 'liquid'"
                )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ViewEngineConfig":
        """Build config from a mapping, ignoring unknown keys."""
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                continue
            expected = known[key].type
            if expected in (bool, "bool"):
                value = _coerce_bool(key, value)
            elif key == "extensions" and isinstance(value, str):
                value = tuple(part.strip() for part in value.split(",") if part.strip())
            kwargs[key] = value

        return cls(**kwargs)

    @classmethod
    def from_env(
        cls,
        prefix: str = "LIQUIDVIEW_",
        env_file: Optional[str] = None,
    ) -> "ViewEngineConfig":
        """
        Build config from environment variables.

        Values from ``env_file`` are applied first; real environment
        variables override them.
        """
        source: Dict[str, Any] = {}
        if env_file:
            source.update(
                {k: v for k, v in dotenv_values(env_file).items() if v is not None}
            )
        source.update(os.environ)

        data = {
            key[len(prefix):].lower(): value
            for key, value in source.items()
            if key.startswith(prefix)
        }
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "encoding": self.encoding,
            "content_type": self.content_type,
            "autoescape": self.autoescape,
            "sandbox": self.sandbox,
            "strict_undefined": self.strict_undefined,
            "trim_blocks": self.trim_blocks,
            "extensions": list(self.extensions),
        }


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "1", "on"):
        return True
    if text in ("false", "no", "0", "off", ""):
        return False
    raise ViewConfigFault(key, f"expected a boolean, got {value!r}")
