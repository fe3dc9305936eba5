"""
DocSign AI

Document analysis, form filling and signature placement for uploaded
Word and PDF documents.
"""

__version__ = "0.1.0"

# Export main components
from .models import (
    AIProcessingResult,
    DocumentAnalysis,
    DocumentInsights,
    FieldType,
    FileType,
    FormField,
    Position,
    Question,
    QuestionType,
    RiskLevel,
    SignatureData,
    SignatureRequest,
    SignatureType,
    SignatureZone,
    UserProfile,
)
from .parsers import ContentExtractor, detect_file_type, detect_language
from .analysis import (
    AnalysisProviderChain,
    HeuristicAnalyzer,
    LocalLLMProvider,
    ProviderError,
    recover,
)
from .reconciliation import FieldReconciler, SignatureRequestBuilder, validate_form
from .backend import BackendError, SigningBackendClient
from .config import (
    ConfigurationManager,
    ConfigurationError,
    HeuristicProviderConfig,
    LocalProviderConfig,
    ServiceSettings,
    ValidationResult,
)
from .pipeline import (
    DocumentAnalysisOrchestrator,
    DocumentProcessingError,
    DocumentProcessingPipeline,
    PipelineConfig,
)

__all__ = [
    "AIProcessingResult",
    "DocumentAnalysis",
    "DocumentInsights",
    "FieldType",
    "FileType",
    "FormField",
    "Position",
    "Question",
    "QuestionType",
    "RiskLevel",
    "SignatureData",
    "SignatureRequest",
    "SignatureType",
    "SignatureZone",
    "UserProfile",
    "ContentExtractor",
    "detect_file_type",
    "detect_language",
    "AnalysisProviderChain",
    "HeuristicAnalyzer",
    "LocalLLMProvider",
    "ProviderError",
    "recover",
    "FieldReconciler",
    "SignatureRequestBuilder",
    "validate_form",
    "BackendError",
    "SigningBackendClient",
    "ConfigurationManager",
    "ConfigurationError",
    "HeuristicProviderConfig",
    "LocalProviderConfig",
    "ServiceSettings",
    "ValidationResult",
    "DocumentAnalysisOrchestrator",
    "DocumentProcessingError",
    "DocumentProcessingPipeline",
    "PipelineConfig",
]
