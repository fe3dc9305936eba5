"""Processing result models for the document signing pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .document import DocumentAnalysis, FormField, Question
from .signature import SignatureRequest


@dataclass(frozen=True)
class UserProfile:
    """
    Profile values used to fill fields the user left empty.

    Passed explicitly into reconciliation calls rather than held as
    service state.
    """
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    date_of_birth: str = ""
    occupation: str = ""
    company: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        known = {
            "name": "name",
            "email": "email",
            "phone": "phone",
            "address": "address",
            "dateOfBirth": "date_of_birth",
            "date_of_birth": "date_of_birth",
            "occupation": "occupation",
            "company": "company",
        }
        values: Dict[str, str] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            if key in known:
                values[known[key]] = "" if value is None else str(value)
            else:
                extra[key] = value
        return cls(extra=extra, **values)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "dateOfBirth": self.date_of_birth,
            "occupation": self.occupation,
            "company": self.company,
            **self.extra,
        }


@dataclass
class ValidationReport:
    """Outcome of validating a set of filled form fields."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_suggestion(self, message: str) -> None:
        self.suggestions.append(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }


@dataclass
class AIProcessingResult:
    """Result of a complete analyze, fill and sign run."""
    success: bool
    analysis: DocumentAnalysis
    filled_fields: List[FormField] = field(default_factory=list)
    answered_questions: List[Question] = field(default_factory=list)
    signed_document_uri: Optional[str] = None
    processing_time: float = 0.0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    signature_requests: List[SignatureRequest] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "success": self.success,
            "analysis": self.analysis.to_dict(),
            "filledFields": [f.to_dict() for f in self.filled_fields],
            "answeredQuestions": [q.to_dict() for q in self.answered_questions],
            "processingTime": self.processing_time,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "signatureRequests": [r.to_dict() for r in self.signature_requests],
        }
        if self.signed_document_uri is not None:
            result["signedDocumentUri"] = self.signed_document_uri
        return result
