"""Document content extraction for the document signing pipeline."""

from .base import ContentExtractor, PDF_PLACEHOLDER_CONTENT, detect_file_type
from .word_parser import WordContentExtractor
from .language_detector import SUPPORTED_LANGUAGES, contains_hebrew, detect_language
from .exceptions import (
    ContentExtractionError,
    DocumentCorruptedError,
    DocumentNotFoundError,
    UnsupportedFormatError,
)

__all__ = [
    "ContentExtractor",
    "PDF_PLACEHOLDER_CONTENT",
    "detect_file_type",
    "WordContentExtractor",
    "SUPPORTED_LANGUAGES",
    "contains_hebrew",
    "detect_language",
    "ContentExtractionError",
    "DocumentCorruptedError",
    "DocumentNotFoundError",
    "UnsupportedFormatError",
]
