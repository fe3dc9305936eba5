"""Data models and enums for the document signing pipeline."""

from .enums import (
    FieldType,
    FileType,
    QuestionType,
    RiskLevel,
    SignatureType,
)
from .document import (
    DocumentAnalysis,
    DocumentInfo,
    DocumentInsights,
    FieldValidation,
    FormField,
    Position,
    Question,
    RiskAssessment,
    SignatureZone,
)
from .signature import SignatureData, SignaturePoint, SignatureRequest
from .processing import AIProcessingResult, UserProfile, ValidationReport

__all__ = [
    # Enums
    "FieldType",
    "FileType",
    "QuestionType",
    "RiskLevel",
    "SignatureType",
    # Analysis models
    "DocumentAnalysis",
    "DocumentInfo",
    "DocumentInsights",
    "FieldValidation",
    "FormField",
    "Position",
    "Question",
    "RiskAssessment",
    "SignatureZone",
    # Signature models
    "SignatureData",
    "SignaturePoint",
    "SignatureRequest",
    # Processing models
    "AIProcessingResult",
    "UserProfile",
    "ValidationReport",
]
