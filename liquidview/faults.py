"""
Liquidview Faults - Structured fault types for the view engine.

Only the engine's own failure modes are modelled here. Errors raised by
Jinja2 (syntax and runtime), by view source readers and by the file-system
factory are never wrapped: they propagate to the caller as raised.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """Fault severity levels."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.VIEWS = FaultDomain("views", "View engine faults")


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "VIEW_CONFIG_INVALID")
        message: Human-readable summary
        domain: Fault domain
        severity: Fault severity
        retryable: Whether the failed operation may be retried by the host
        metadata: Additional context data
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Severity = Severity.ERROR,
        retryable: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity
        self.retryable = retryable
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, "
            f"domain={self.domain.value}, severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize fault to dictionary for logging."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }


# ============================================================================
# View Faults
# ============================================================================

class ViewConfigFault(Fault):
    """View engine configuration error."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="VIEW_CONFIG_INVALID",
            message=f"Invalid view engine configuration for '{key}': {reason}",
            domain=FaultDomain.VIEWS,
            severity=Severity.FATAL,
            metadata={"key": key, "reason": reason},
        )


class ResponseConsumedFault(Fault):
    """A rendered view was written more than once."""

    def __init__(self, view: str = ""):
        super().__init__(
            code="VIEW_RESPONSE_CONSUMED",
            message=f"Rendered view '{view}' has already been written",
            domain=FaultDomain.VIEWS,
            severity=Severity.ERROR,
            metadata={"view": view},
        )
