"""Tolerant parsing of language model responses.

Models asked for JSON often wrap it in Markdown fences, add commentary
around it or leave trailing commas behind. ``recover`` repairs what it
can and otherwise salvages a partial analysis from keywords, reporting
the outcome as a value instead of raising.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional


_FENCE_OPEN = re.compile(r"^```(?:json|JSON)?\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMAS = re.compile(r",+(\s*[}\]])")

_EXPLICIT_LANGUAGE = re.compile(r'"language"\s*:\s*"([A-Za-z]{2})"')
_EXPLICIT_CATEGORY = re.compile(r'"category"\s*:\s*"([^"\n]{1,64})"')

ANALYSIS_KEYS = (
    "language", "category", "summary", "keyInsights",
    "riskAssessment", "formFields", "questions", "signatures",
)

LANGUAGE_MARKERS = (
    ("he", ("hebrew", "עברית")),
    ("ar", ("arabic", "عربي")),
    ("zh", ("chinese", "中文")),
)

CATEGORY_MARKERS = (
    ("legal_waiver", ("legal", "waiver", "ויתור", "פיטורים", "قانوني", "تنازل")),
    ("job_application", ("job", "employment", "עבודה", "توظيف")),
    ("medical", ("medical", "רפואי", "طبي")),
    ("financial", ("financial", "פיננסי", "مالي")),
)

INSIGHT_MARKERS = (
    ("Legal document detected", ("legal", "ויתור", "قانوني")),
    ("Contains waiver and termination clauses", ("waiver", "פיטורים", "تنازل")),
    ("Contains form fields", ("form",)),
)


@dataclass
class RecoveryResult:
    """
    Outcome of recovering a model response.

    payload is always a dict. When partial is True the JSON could not be
    parsed, failure says why and payload holds a keyword-based salvage
    with empty field, question and signature lists.
    """
    payload: Dict[str, Any]
    partial: bool = False
    failure: Optional[str] = None
    raw_text: str = ""

    @property
    def ok(self) -> bool:
        return not self.partial

    @property
    def has_analysis_markers(self) -> bool:
        """Whether the raw text mentioned any analysis key."""
        return any(key in self.raw_text for key in ANALYSIS_KEYS)


def clean_response(raw_text: str, repair_commas: bool = True) -> str:
    """
    Apply the textual repairs that precede parsing.

    Strips code fences, keeps the outermost object span and cuts anything
    after the last closing brace. Trailing commas are removed unless
    ``repair_commas`` is False; that rewrite is blind to string contents.
    """
    cleaned = (raw_text or "").strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", cleaned))

    match = _OBJECT_SPAN.search(cleaned)
    if match:
        cleaned = match.group(0)

    last_brace = cleaned.rfind("}")
    if last_brace != -1:
        cleaned = cleaned[:last_brace + 1]

    return _TRAILING_COMMAS.sub(r"\1", cleaned) if repair_commas else cleaned


def _parse(raw_text: str) -> Any:
    try:
        return json.loads(clean_response(raw_text, repair_commas=False))
    except ValueError:
        return json.loads(clean_response(raw_text))


def recover(raw_text: str) -> RecoveryResult:
    """
    Recover an analysis payload from free-form model output.

    Args:
        raw_text: Text returned by the model.

    Returns:
        RecoveryResult; never raises.
    """
    raw_text = raw_text if isinstance(raw_text, str) else ""

    try:
        parsed = _parse(raw_text)
    except ValueError as e:
        failure = f"Invalid JSON: {e}"
    else:
        if isinstance(parsed, dict):
            return RecoveryResult(payload=parsed, raw_text=raw_text)
        failure = f"Expected a JSON object, got {type(parsed).__name__}"

    return RecoveryResult(
        payload=salvage_partial(raw_text),
        partial=True,
        failure=failure,
        raw_text=raw_text,
    )


def salvage_partial(raw_text: str) -> Dict[str, Any]:
    """
    Build a partial analysis from keywords found in unparseable text.

    Explicit ``"language": "xx"`` and ``"category": "..."`` pairs win over
    keyword markers. Field, question and signature lists are empty.
    """
    text = raw_text or ""
    lowered = text.casefold()

    language_match = _EXPLICIT_LANGUAGE.search(text)
    language = language_match.group(1).lower() if language_match else _first_marker(
        lowered, LANGUAGE_MARKERS, "en"
    )

    category_match = _EXPLICIT_CATEGORY.search(text)
    category = category_match.group(1) if category_match else _first_marker(
        lowered, CATEGORY_MARKERS, "general_form"
    )

    insights = [
        insight for insight, markers in INSIGHT_MARKERS
        if any(marker in lowered for marker in markers)
    ]
    if language != "en":
        insights.insert(0, f"{language.upper()} document detected")

    return {
        "language": language,
        "category": category,
        "summary": f"{language.upper()} document analysis (partial)",
        "keyInsights": insights or ["Document analysis completed with partial results"],
        "riskAssessment": {
            "level": "medium",
            "issues": ["AI analysis returned partial results"],
            "recommendations": ["Review document carefully", "Verify all information"],
        },
        "formFields": [],
        "questions": [],
        "signatures": [],
    }


def _first_marker(lowered: str, markers, default: str) -> str:
    for value, keywords in markers:
        if any(keyword in lowered for keyword in keywords):
            return value
    return default
