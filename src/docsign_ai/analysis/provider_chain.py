"""Provider selection and the fall-through provider chain."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config.models import HeuristicProviderConfig, LocalProviderConfig, ProviderConfig
from ..interfaces.provider import IAnalysisProvider
from ..models.enums import FileType
from ..parsers.language_detector import detect_language
from .heuristic_analyzer import HeuristicAnalyzer
from .local_llm import LocalLLMProvider
from .normalization import minimal_payload


logger = logging.getLogger(__name__)


class HeuristicProvider(IAnalysisProvider):
    """Provider wrapper around the rule-based analyzer."""

    name = "heuristic"

    def __init__(self, analyzer: Optional[HeuristicAnalyzer] = None):
        self._analyzer = analyzer or HeuristicAnalyzer()

    def analyze_content(self, content: str, file_type: FileType) -> Dict[str, Any]:
        return self._analyzer.build_payload(content, file_type)


@dataclass
class ProviderOutcome:
    """
    A payload together with how it was obtained.

    provider names the tier that produced the payload ("local",
    "heuristic" or "minimal"); fallback_reason is set whenever a higher
    tier failed first.
    """
    payload: Dict[str, Any]
    provider: str
    fallback_reason: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.fallback_reason is not None


def build_provider(config: ProviderConfig, **kwargs) -> IAnalysisProvider:
    """
    Create the primary provider for a provider configuration.

    Raises:
        TypeError: If the configuration type is not recognized.
    """
    if isinstance(config, LocalProviderConfig):
        return LocalLLMProvider(config, **kwargs)
    elif isinstance(config, HeuristicProviderConfig):
        return HeuristicProvider()
    else:
        raise TypeError(f"Unknown provider configuration: {type(config).__name__}")


class AnalysisProviderChain(IAnalysisProvider):
    """
    Primary provider with a guaranteed heuristic fallback.

    Any exception from the primary tier is logged and the heuristic tier
    runs instead. Should the heuristic tier fail too, a minimal payload
    with empty lists is returned, so the chain never raises.
    """

    name = "chain"

    def __init__(
        self,
        primary: IAnalysisProvider,
        fallback: Optional[IAnalysisProvider] = None,
    ):
        self.primary = primary
        if fallback is None:
            fallback = primary if isinstance(primary, HeuristicProvider) else HeuristicProvider()
        self.fallback = fallback

    @classmethod
    def from_config(cls, config: ProviderConfig, **kwargs) -> "AnalysisProviderChain":
        """Build a chain whose primary tier is selected by ``config``."""
        return cls(build_provider(config, **kwargs))

    def analyze_content(self, content: str, file_type: FileType) -> Dict[str, Any]:
        return self.analyze_with_provenance(content, file_type).payload

    def analyze_with_provenance(self, content: str, file_type: FileType) -> ProviderOutcome:
        """
        Run the chain and report which tier produced the payload.

        Args:
            content: Plain text of the document.
            file_type: Format of the source document.

        Returns:
            ProviderOutcome; never raises.
        """
        fallback_reason = None

        if self.primary is not self.fallback:
            try:
                payload = self.primary.analyze_content(content, file_type)
                if not isinstance(payload, dict):
                    raise TypeError(f"Provider returned {type(payload).__name__}, expected dict")
                logger.info(f"Analysis produced by {self.primary.name} provider")
                return ProviderOutcome(payload, self.primary.name)
            except Exception as e:
                fallback_reason = f"{self.primary.name} provider failed: {e}"
                logger.warning(f"{fallback_reason}; falling back to {self.fallback.name} analysis")

        try:
            payload = self.fallback.analyze_content(content, file_type)
            return ProviderOutcome(payload, self.fallback.name, fallback_reason)
        except Exception as e:
            logger.exception(f"{self.fallback.name} analysis failed, returning minimal analysis")
            reason = f"{self.fallback.name} provider failed: {e}"
            if fallback_reason:
                reason = f"{fallback_reason}; {reason}"
            return ProviderOutcome(minimal_payload(detect_language(content or "")), "minimal", reason)
