"""Data models for configuration management."""

import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union


API_STYLES = ("generate", "chat")

# Environment variable -> ServiceSettings attribute.
ENV_VARIABLES = {
    "DOCSIGN_LLM_URL": "llm_url",
    "DOCSIGN_LLM_MODEL": "llm_model",
    "DOCSIGN_LLM_MAX_TOKENS": "llm_max_tokens",
    "DOCSIGN_LLM_API_STYLE": "llm_api_style",
    "DOCSIGN_BACKEND_URL": "backend_url",
    "DOCSIGN_OUTPUT_DIR": "output_dir",
    "DOCSIGN_USER_PROFILE": "user_profile_path",
}


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings
        )


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, validation_result: Optional[ValidationResult] = None):
        super().__init__(message)
        self.message = message
        self.validation_result = validation_result


@dataclass(frozen=True)
class LocalProviderConfig:
    """Selects the locally hosted language model as primary provider."""
    endpoint: str
    model: str = "llama3"
    max_tokens: int = 4096
    api_style: Literal["generate", "chat"] = "generate"
    excerpt_chars: int = 4000
    kind: Literal["local"] = field(default="local", init=False)


@dataclass(frozen=True)
class HeuristicProviderConfig:
    """Selects the rule-based analyzer as the only provider."""
    kind: Literal["heuristic"] = field(default="heuristic", init=False)


ProviderConfig = Union[LocalProviderConfig, HeuristicProviderConfig]


@dataclass
class ServiceSettings:
    """
    Runtime settings for the analysis and signing services.

    A missing llm_url selects the heuristic provider for the lifetime of
    the process.
    """

    # Language model
    llm_url: Optional[str] = None
    llm_model: str = "llama3"
    llm_max_tokens: int = 4096
    llm_api_style: str = "generate"
    excerpt_chars: int = 4000
    analysis_timeout: float = 60.0
    interactive_timeout: float = 15.0

    # Signing backend
    backend_url: str = "http://localhost:3001"
    backend_timeout: float = 60.0

    # Output and profile
    output_dir: str = "data/signed"
    user_profile_path: Optional[str] = None

    # Confidence stamped on every analysis
    analysis_confidence: float = 0.91

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceSettings":
        """Build settings from DOCSIGN_* environment variables."""
        return cls.from_dict(env_overrides(environ))

    def provider_config(self) -> ProviderConfig:
        """Return the provider selection implied by these settings."""
        if not self.llm_url:
            return HeuristicProviderConfig()
        return LocalProviderConfig(
            endpoint=self.llm_url,
            model=self.llm_model,
            max_tokens=self.llm_max_tokens,
            api_style="chat" if self.llm_api_style == "chat" else "generate",
            excerpt_chars=self.excerpt_chars,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Collect settings overrides from the environment.

    Empty variables are ignored; the token budget is converted to int
    and raises ConfigurationError when it is not a number.
    """
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for variable, attribute in ENV_VARIABLES.items():
        value = environ.get(variable)
        if value is None or not value.strip():
            continue
        overrides[attribute] = value.strip()

    if "llm_max_tokens" in overrides:
        try:
            overrides["llm_max_tokens"] = int(overrides["llm_max_tokens"])
        except ValueError:
            raise ConfigurationError(
                f"DOCSIGN_LLM_MAX_TOKENS must be an integer, got {overrides['llm_max_tokens']!r}"
            )
    return overrides
