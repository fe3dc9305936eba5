"""Exceptions raised while extracting document content."""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ContentExtractionError(Exception):
    """
    Raised when the text of an uploaded document cannot be obtained.

    This is the only error family that aborts document processing, since
    there is nothing to analyze without content.

    Attributes:
        message: What went wrong.
        file_path: The uploaded document.
        location: Part of the package that failed, e.g. ``word/document.xml``.
        details: Extra context for API error bodies.
    """
    message: str
    file_path: Optional[str] = None
    location: Optional[str] = None
    details: Optional[dict] = field(default_factory=dict)

    def __post_init__(self):
        self.details = self.details or {}
        super().__init__(str(self))

    def __str__(self) -> str:
        text = self.message
        if self.file_path:
            text += f" ({self.file_path}"
            text += f", {self.location})" if self.location else ")"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "file_path": self.file_path,
            "location": self.location,
            "details": self.details,
        }


@dataclass
class DocumentNotFoundError(ContentExtractionError):
    """The uploaded file is gone from disk."""


@dataclass
class DocumentCorruptedError(ContentExtractionError):
    """
    The file exists but is not a readable document.

    Covers broken zip containers, missing document parts and uploads whose
    bytes do not match the claimed format.
    """


@dataclass
class UnsupportedFormatError(ContentExtractionError):
    """The file extension is neither .docx nor .pdf."""
