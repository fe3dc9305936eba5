"""Signing backend collaborators."""

from .fallback_document import (
    SignedDocumentStore,
    is_encoding_failure,
    render_text_summary,
)
from .signing_client import BackendError, SigningBackendClient

__all__ = [
    "BackendError",
    "SigningBackendClient",
    "SignedDocumentStore",
    "is_encoding_failure",
    "render_text_summary",
]
