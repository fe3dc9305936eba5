"""Conversion of raw provider payloads into DocumentAnalysis objects."""

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..models.document import (
    DocumentAnalysis,
    DocumentInfo,
    FormField,
    Question,
    RiskAssessment,
    SignatureZone,
)


T = TypeVar("T")


def minimal_payload(language: str = "en") -> Dict[str, Any]:
    """Smallest payload that still satisfies the analysis shape."""
    return {
        "language": language,
        "category": "general_form",
        "summary": "Document analysis unavailable",
        "keyInsights": [],
        "formFields": [],
        "questions": [],
        "signatures": [],
    }


def payload_to_analysis(
    payload: Any,
    document_info: DocumentInfo,
    processing_time: float = 0.0,
    confidence: float = 0.0,
    content: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> DocumentAnalysis:
    """
    Normalize a raw provider payload into a DocumentAnalysis.

    Every optional key gets a neutral default: missing or non-list
    collections become empty lists, entries that are not objects are
    dropped, unknown enum values fall back to their defaults and
    duplicate ids are made unique by suffixing.

    Args:
        payload: Raw payload returned by a provider.
        document_info: Facts about the source document.
        processing_time: Seconds spent producing the analysis.
        confidence: Overall confidence stamped on the analysis.
        content: Document text to carry along, if any.
        metadata: Provenance information (provider, fallback reason).

    Returns:
        A fully populated DocumentAnalysis.
    """
    if not isinstance(payload, dict):
        payload = {}

    language = payload.get("language")
    category = payload.get("category")
    info = replace(
        document_info,
        language=language if isinstance(language, str) and language else document_info.language,
        category=category if isinstance(category, str) and category else document_info.category,
    )

    summary = payload.get("summary")
    insights = payload.get("keyInsights")

    return DocumentAnalysis(
        document_info=info,
        form_fields=_unique_ids(_parse_items(payload.get("formFields"), FormField.from_dict)),
        questions=_unique_ids(_parse_items(payload.get("questions"), Question.from_dict)),
        signatures=_unique_ids(_parse_items(payload.get("signatures"), SignatureZone.from_dict)),
        processing_time=processing_time,
        confidence=confidence,
        content=content,
        summary=summary if isinstance(summary, str) else None,
        key_insights=[str(i) for i in insights] if isinstance(insights, list) else [],
        risk_assessment=RiskAssessment.from_dict(payload.get("riskAssessment")),
        metadata=dict(metadata or {}),
    )


def _parse_items(raw: Any, factory: Callable[[Dict[str, Any], str], T]) -> List[T]:
    if not isinstance(raw, list):
        return []
    return [
        factory(item, str(index + 1))
        for index, item in enumerate(raw)
        if isinstance(item, dict)
    ]


def _unique_ids(items: List[T]) -> List[T]:
    """Suffix repeated ids (``3``, ``3_2``, ``3_3``) so each is unique."""
    seen: set = set()
    result: List[T] = []
    for item in items:
        candidate = item.id
        counter = 1
        while candidate in seen:
            counter += 1
            candidate = f"{item.id}_{counter}"
        seen.add(candidate)
        result.append(item if candidate == item.id else replace(item, id=candidate))
    return result
