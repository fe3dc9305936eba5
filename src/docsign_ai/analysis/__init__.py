"""Document analysis providers for the document signing pipeline."""

from .cancellation import CancellationToken
from .exceptions import ProviderError, ProviderTimeoutError
from .heuristic_analyzer import HeuristicAnalyzer
from .local_llm import ConnectionCheck, LocalLLMProvider
from .normalization import minimal_payload, payload_to_analysis
from .provider_chain import (
    AnalysisProviderChain,
    HeuristicProvider,
    ProviderOutcome,
    build_provider,
)
from .response_recovery import RecoveryResult, recover, salvage_partial

__all__ = [
    "CancellationToken",
    "ProviderError",
    "ProviderTimeoutError",
    "HeuristicAnalyzer",
    "ConnectionCheck",
    "LocalLLMProvider",
    "minimal_payload",
    "payload_to_analysis",
    "AnalysisProviderChain",
    "HeuristicProvider",
    "ProviderOutcome",
    "build_provider",
    "RecoveryResult",
    "recover",
    "salvage_partial",
]
