"""Reconciliation of analysis results with user data and signatures."""

from .field_reconciler import FieldReconciler, normalize_key
from .form_validator import is_valid_email, is_valid_phone, validate_form
from .signature_builder import (
    SignatureRequestBuilder,
    default_signatures,
    parse_points,
    serialize_requests,
)

__all__ = [
    "FieldReconciler",
    "normalize_key",
    "is_valid_email",
    "is_valid_phone",
    "validate_form",
    "SignatureRequestBuilder",
    "default_signatures",
    "parse_points",
    "serialize_requests",
]
