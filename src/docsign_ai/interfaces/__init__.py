"""Abstract interfaces for the document signing pipeline."""

from .backend import ISigningBackend
from .extractor import ExtractedContent, IContentExtractor
from .provider import IAnalysisProvider

__all__ = [
    "ExtractedContent",
    "IAnalysisProvider",
    "IContentExtractor",
    "ISigningBackend",
]
