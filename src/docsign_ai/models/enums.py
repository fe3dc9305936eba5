"""Enumerations for the document signing pipeline."""

from enum import Enum


class FileType(Enum):
    """Document formats accepted for analysis."""
    PDF = "pdf"
    DOCX = "docx"

    @property
    def mime_type(self) -> str:
        if self is FileType.PDF:
            return "application/pdf"
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class FieldType(Enum):
    """Types of fillable form fields."""
    TEXT = "text"
    CHECKBOX = "checkbox"
    SIGNATURE = "signature"
    RADIO = "radio"
    DATE = "date"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    SELECT = "select"


class QuestionType(Enum):
    """Types of questions embedded in a document."""
    YES_NO = "yes_no"
    MULTIPLE_CHOICE = "multiple_choice"
    TEXT = "text"
    DATE = "date"
    NUMBER = "number"
    RATING = "rating"


class SignatureType(Enum):
    """Kinds of user signature artifacts."""
    TYPED = "typed"
    IMAGE = "image"
    DRAWING = "drawing"


class RiskLevel(Enum):
    """Coarse risk level attached to an analysis."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def coerce_enum(enum_cls, value, default):
    """Return the member of enum_cls for value, or default when unknown."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        for member in enum_cls:
            if member.value == normalized:
                return member
    return default
