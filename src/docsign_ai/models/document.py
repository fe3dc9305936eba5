"""Document analysis data models.

Models are built from untrusted provider payloads, so every ``from_dict``
accepts partial or mistyped input and fills neutral defaults instead of
raising. ``to_dict`` emits the camelCase wire format shared with the LLM
prompt and the HTTP API.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import FieldType, QuestionType, RiskLevel, coerce_enum


DEFAULT_CONFIDENCE = 0.5


_FALSE_STRINGS = {"false", "no", "0", "off", ""}


def _to_float(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    # NaN and infinities are valid JSON for the decoder but not usable geometry
    return number if math.isfinite(number) else default


def _to_int(value: Any, default: int) -> int:
    number = _to_float(value, float(default))
    return int(number)


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _to_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class Position:
    """Bounding box of an element on a page, in page points."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        self.width = max(0.0, self.width)
        self.height = max(0.0, self.height)

    @property
    def anchor(self) -> tuple:
        """The (x, y) pair used to compare positions."""
        return (self.x, self.y)

    @classmethod
    def from_dict(cls, data: Any, default: Optional["Position"] = None) -> "Position":
        base = default or cls()
        if not isinstance(data, dict):
            return cls(base.x, base.y, base.width, base.height)
        return cls(
            x=_to_float(data.get("x"), base.x),
            y=_to_float(data.get("y"), base.y),
            width=_to_float(data.get("width"), base.width),
            height=_to_float(data.get("height"), base.height),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class FieldValidation:
    """Optional format and bound constraints attached to a form field."""
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["FieldValidation"]:
        if not isinstance(data, dict) or not data:
            return None

        def optional_number(key: str, cast):
            value = data.get(key)
            if value is None or isinstance(value, bool):
                return None
            try:
                return cast(value)
            except (TypeError, ValueError):
                return None

        pattern = data.get("pattern")
        return cls(
            pattern=pattern if isinstance(pattern, str) and pattern else None,
            min_length=optional_number("minLength", int),
            max_length=optional_number("maxLength", int),
            min_value=optional_number("minValue", float),
            max_value=optional_number("maxValue", float),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.min_value is not None:
            result["minValue"] = self.min_value
        if self.max_value is not None:
            result["maxValue"] = self.max_value
        return result


@dataclass
class FormField:
    """
    A fillable field detected in a document.

    The id is unique within one document; confidence is always set and
    lies in [0, 1]; page numbers start at 1.
    """
    id: str
    type: FieldType
    label: str
    required: bool = False
    position: Position = field(default_factory=Position)
    page: int = 1
    confidence: float = DEFAULT_CONFIDENCE
    value: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)
    validation: Optional[FieldValidation] = None

    def __post_init__(self):
        if self.suggestions is None:
            self.suggestions = []
        self.page = max(1, self.page)
        self.confidence = _clamp(self.confidence, 0.0, 1.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_id: str = "1") -> "FormField":
        value = data.get("value")
        return cls(
            id=_to_str(data.get("id"), fallback_id) or fallback_id,
            type=coerce_enum(FieldType, data.get("type"), FieldType.TEXT),
            label=_to_str(data.get("label")).strip() or "Field",
            required=_to_bool(data.get("required"), False),
            position=Position.from_dict(data.get("position")),
            page=_to_int(data.get("page"), 1),
            confidence=_to_float(data.get("confidence"), DEFAULT_CONFIDENCE),
            value=None if value is None else str(value),
            suggestions=_to_str_list(data.get("suggestions")),
            validation=FieldValidation.from_dict(data.get("validation")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "required": self.required,
            "position": self.position.to_dict(),
            "page": self.page,
            "confidence": self.confidence,
        }
        if self.value is not None:
            result["value"] = self.value
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        if self.validation is not None:
            result["validation"] = self.validation.to_dict()
        return result


@dataclass
class Question:
    """A question embedded in a document that expects an answer."""
    id: str
    text: str
    type: QuestionType
    position: Position = field(default_factory=Position)
    page: int = 1
    confidence: float = DEFAULT_CONFIDENCE
    options: List[str] = field(default_factory=list)
    value: Optional[str] = None
    ai_suggestion: Optional[str] = None

    def __post_init__(self):
        if self.options is None:
            self.options = []
        self.page = max(1, self.page)
        self.confidence = _clamp(self.confidence, 0.0, 1.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_id: str = "1") -> "Question":
        value = data.get("value")
        suggestion = data.get("aiSuggestion")
        return cls(
            id=_to_str(data.get("id"), fallback_id) or fallback_id,
            text=_to_str(data.get("text")).strip(),
            type=coerce_enum(QuestionType, data.get("type"), QuestionType.TEXT),
            position=Position.from_dict(data.get("position")),
            page=_to_int(data.get("page"), 1),
            confidence=_to_float(data.get("confidence"), DEFAULT_CONFIDENCE),
            options=_to_str_list(data.get("options")),
            value=None if value is None else str(value),
            ai_suggestion=None if suggestion is None else str(suggestion),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "position": self.position.to_dict(),
            "page": self.page,
            "confidence": self.confidence,
        }
        if self.options:
            result["options"] = list(self.options)
        if self.value is not None:
            result["value"] = self.value
        if self.ai_suggestion is not None:
            result["aiSuggestion"] = self.ai_suggestion
        return result


@dataclass
class SignatureZone:
    """A detected location expected to receive a signature."""
    id: str
    label: str
    position: Position = field(default_factory=Position)
    page: int = 1
    required: bool = True

    def __post_init__(self):
        self.page = max(1, self.page)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_id: str = "1") -> "SignatureZone":
        return cls(
            id=_to_str(data.get("id"), fallback_id) or fallback_id,
            label=_to_str(data.get("label")).strip() or "Signature",
            position=Position.from_dict(data.get("position")),
            page=_to_int(data.get("page"), 1),
            required=_to_bool(data.get("required"), True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "position": self.position.to_dict(),
            "page": self.page,
            "required": self.required,
        }


@dataclass
class RiskAssessment:
    """Coarse risk summary produced alongside an analysis."""
    level: RiskLevel = RiskLevel.MEDIUM
    issues: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["RiskAssessment"]:
        if not isinstance(data, dict):
            return None
        return cls(
            level=coerce_enum(RiskLevel, data.get("level"), RiskLevel.MEDIUM),
            issues=_to_str_list(data.get("issues")),
            recommendations=_to_str_list(data.get("recommendations")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }


@dataclass
class DocumentInfo:
    """Basic facts about the analyzed document. ``type`` is the MIME type."""
    name: str
    size: int
    pages: int
    type: str
    language: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "size": self.size,
            "pages": self.pages,
            "type": self.type,
        }
        if self.language is not None:
            result["language"] = self.language
        if self.category is not None:
            result["category"] = self.category
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "DocumentInfo":
        data = data if isinstance(data, dict) else {}
        return cls(
            name=_to_str(data.get("name"), "document"),
            size=_to_int(data.get("size"), 0),
            pages=max(1, _to_int(data.get("pages"), 1)),
            type=_to_str(data.get("type")),
            language=data.get("language"),
            category=data.get("category"),
        )


@dataclass
class DocumentAnalysis:
    """
    Result of analyzing one uploaded document.

    Created once per upload and treated as immutable downstream:
    reconciliation works on copies. form_fields, questions and
    signatures are always lists, even when every provider failed.
    """
    document_info: DocumentInfo
    form_fields: List[FormField] = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
    signatures: List[SignatureZone] = field(default_factory=list)
    processing_time: float = 0.0
    confidence: float = 0.0
    content: Optional[str] = None
    summary: Optional[str] = None
    key_insights: List[str] = field(default_factory=list)
    risk_assessment: Optional[RiskAssessment] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.form_fields is None:
            self.form_fields = []
        if self.questions is None:
            self.questions = []
        if self.signatures is None:
            self.signatures = []
        if self.key_insights is None:
            self.key_insights = []
        if self.metadata is None:
            self.metadata = {}

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "documentInfo": self.document_info.to_dict(),
            "formFields": [f.to_dict() for f in self.form_fields],
            "questions": [q.to_dict() for q in self.questions],
            "signatures": [s.to_dict() for s in self.signatures],
            "processingTime": self.processing_time,
            "confidence": self.confidence,
            "keyInsights": list(self.key_insights),
            "metadata": dict(self.metadata),
        }
        if self.content is not None:
            result["content"] = self.content
        if self.summary is not None:
            result["summary"] = self.summary
        if self.risk_assessment is not None:
            result["riskAssessment"] = self.risk_assessment.to_dict()
        return result


@dataclass
class DocumentInsights:
    """Insights and recommendations distilled from an analysis."""
    insights: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insights": list(self.insights),
            "recommendations": list(self.recommendations),
            "riskLevel": self.risk_level.value,
        }
