"""Exceptions raised by analysis providers."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ProviderError(Exception):
    """
    Raised when an analysis provider cannot produce a payload.

    Provider errors never reach callers of the provider chain; the chain
    logs them and falls back to the next tier.

    Attributes:
        message: Human-readable error description.
        provider: Name of the provider that failed.
        status_code: HTTP status returned by the provider, if any.
        details: Additional error details.
    """
    message: str
    provider: Optional[str] = None
    status_code: Optional[int] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        if self.details is None:
            self.details = {}
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [self.message]
        if self.provider:
            parts.append(f"Provider: {self.provider}")
        if self.status_code is not None:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "provider": self.provider,
            "status_code": self.status_code,
            "details": self.details,
        }


@dataclass
class ProviderTimeoutError(ProviderError):
    """Raised when a provider call outlives its cancellation deadline."""
    timeout: Optional[float] = None
