"""Configuration management for the document signing services."""

from .config_manager import ConfigurationManager
from .models import (
    ConfigurationError,
    HeuristicProviderConfig,
    LocalProviderConfig,
    ProviderConfig,
    ServiceSettings,
    ValidationResult,
)

__all__ = [
    "ConfigurationManager",
    "ConfigurationError",
    "HeuristicProviderConfig",
    "LocalProviderConfig",
    "ProviderConfig",
    "ServiceSettings",
    "ValidationResult",
]
