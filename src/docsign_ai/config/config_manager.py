"""Configuration Manager implementation for the document signing services.

This module provides functionality to load, validate, and manage the
service settings and the user profile used to fill documents.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..models.processing import UserProfile
from .models import (
    API_STYLES,
    ConfigurationError,
    ServiceSettings,
    ValidationResult,
    env_overrides,
)


logger = logging.getLogger(__name__)

Source = Union[str, Path, Dict[str, Any]]


class ConfigurationManager:
    """
    Manager for service configuration.

    Settings come from an optional JSON file or dict, overridden by
    DOCSIGN_* environment variables. The user profile is loaded once and
    then served from cache.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the configuration manager.

        Args:
            environ: Environment mapping; defaults to os.environ.
        """
        self._environ = environ
        self._settings = ServiceSettings()
        self._profile: Optional[UserProfile] = None
        self._is_loaded = False

    @property
    def settings(self) -> ServiceSettings:
        """Get the current service settings."""
        return self._settings

    @property
    def is_loaded(self) -> bool:
        """Check if settings have been loaded."""
        return self._is_loaded

    # =========================================================================
    # Service settings
    # =========================================================================

    def load_settings(self, source: Optional[Source] = None) -> ValidationResult:
        """
        Load and validate service settings.

        Supports loading from:
        - JSON file path
        - Dictionary of settings
        - Nothing, in which case only defaults and environment apply

        Args:
            source: File path or dictionary, optional.

        Returns:
            ValidationResult with any warnings.

        Raises:
            ConfigurationError: If validation fails.
        """
        raw_data = self._parse_source(source) if source is not None else {}
        if not isinstance(raw_data, dict):
            raise ConfigurationError("Settings must be a JSON object")

        merged = {**raw_data, **env_overrides(self._environ)}
        result = self._validate_settings(merged)

        if not result.is_valid:
            raise ConfigurationError(
                "Service settings validation failed",
                validation_result=result
            )

        self._settings = ServiceSettings.from_dict(merged)
        self._is_loaded = True

        provider = self._settings.provider_config()
        logger.info(f"Loaded service settings, analysis provider: {provider.kind}")
        for warning in result.warnings:
            logger.warning(warning)

        return result

    def _validate_settings(self, data: Dict[str, Any]) -> ValidationResult:
        """Validate a settings dictionary."""
        result = ValidationResult(is_valid=True)
        known = set(ServiceSettings.__dataclass_fields__)

        for key in data:
            if key not in known:
                result.add_warning(f"Unknown setting '{key}' ignored")

        for url_field in ["llm_url", "backend_url"]:
            value = data.get(url_field)
            if value is None:
                continue
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                result.add_error(f"'{url_field}' must be an http(s) URL")

        for int_field in ["llm_max_tokens", "excerpt_chars"]:
            if int_field in data:
                value = data[int_field]
                if isinstance(value, bool) or not isinstance(value, int):
                    result.add_error(f"'{int_field}' must be an integer")
                elif value <= 0:
                    result.add_error(f"'{int_field}' must be positive")

        for timeout_field in ["analysis_timeout", "interactive_timeout", "backend_timeout"]:
            if timeout_field in data:
                value = data[timeout_field]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    result.add_error(f"'{timeout_field}' must be a number")
                elif value <= 0:
                    result.add_error(f"'{timeout_field}' must be positive")

        if "llm_api_style" in data and data["llm_api_style"] not in API_STYLES:
            result.add_error(f"'llm_api_style' must be one of {list(API_STYLES)}")

        if "analysis_confidence" in data:
            value = data["analysis_confidence"]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                result.add_error("'analysis_confidence' must be a number")
            elif not 0.0 <= value <= 1.0:
                result.add_error("'analysis_confidence' must be between 0.0 and 1.0")

        for str_field in ["llm_model", "output_dir"]:
            if str_field in data:
                value = data[str_field]
                if not isinstance(value, str) or not value.strip():
                    result.add_error(f"'{str_field}' must be a non-empty string")

        if not data.get("llm_url"):
            result.add_warning("No LLM URL configured; using heuristic analysis only")

        return result

    # =========================================================================
    # User profile
    # =========================================================================

    def load_user_profile(self, source: Optional[Source] = None) -> UserProfile:
        """
        Load the user profile, once.

        The first call reads the profile from ``source`` or, when omitted,
        from the configured ``user_profile_path``; an empty profile is used
        when neither is given. Later calls return the cached profile.

        Raises:
            ConfigurationError: If the profile file is missing or invalid.
        """
        if self._profile is not None:
            return self._profile

        if source is None:
            source = self._settings.user_profile_path

        if source is None:
            self._profile = UserProfile()
        else:
            raw_data = self._parse_source(source)
            if not isinstance(raw_data, dict):
                raise ConfigurationError("User profile must be a JSON object")
            self._profile = UserProfile.from_dict(raw_data)
            logger.info("User profile loaded")

        return self._profile

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _parse_source(self, source: Source) -> Any:
        """Parse configuration source to raw data."""
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ConfigurationError(f"Configuration file not found: {path}")

            try:
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {path}: {e}")

        return source

    def save_to_file(self, file_path: Union[str, Path]) -> None:
        """
        Save current settings to a JSON file.

        Args:
            file_path: Destination path; parent directories are created.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._settings.to_dict(), f, indent=2, ensure_ascii=False)

    def reset(self) -> None:
        """Reset settings and the cached profile."""
        self._settings = ServiceSettings()
        self._profile = None
        self._is_loaded = False

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        return {
            "settings": self._settings.to_dict(),
            "provider": self._settings.provider_config().kind,
            "user_profile": self._profile.to_dict() if self._profile else None,
        }
