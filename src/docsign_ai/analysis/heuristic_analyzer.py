"""Rule-based document analysis.

This module provides the terminal tier of the provider chain: a
line-oriented scan that finds fill-in fields, checkboxes, signature
lines and yes/no questions in plain text. It never touches the network
and never raises for string input.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from ..models.document import DocumentAnalysis, DocumentInfo
from ..models.enums import FieldType, FileType, QuestionType, RiskLevel
from ..parsers.language_detector import detect_language
from .normalization import payload_to_analysis


SIGNATURE_KEYWORDS = (
    "signature", "sign here",
    "חתימה",
    "توقيع",
    "签名",
    "署名",
    "서명",
    "подпись",
    "ลายเซ็น",
    "हस्ताक्षर",
)

CHECKBOX_PATTERN = re.compile(r"\[\s?\]|\[[xX]\]|[☐☑☒]")
UNDERSCORE_RUN = re.compile(r"_{3,}")
QUESTION_MARKS = ("?", "？", "؟")
INTERROGATIVE_PREFIXES = (
    "do you", "does", "did you",
    "have you", "has",
    "are you", "is there", "is this", "is your",
    "will you", "would you",
    "can you", "could you",
)

LABEL_STRIP_CHARS = "_ \t☐☑☒"

# Page geometry for line-derived positions, in page points.
LEFT_MARGIN = 50.0
TOP_MARGIN = 50.0
ROW_HEIGHT = 18.0
LINES_PER_PAGE = 40


@dataclass
class FieldShape:
    """Default box size and confidence per detected entity kind."""
    width: float
    height: float
    confidence: float


SHAPES = {
    "text": FieldShape(200.0, ROW_HEIGHT, 0.6),
    "checkbox": FieldShape(15.0, 15.0, 0.6),
    "signature": FieldShape(150.0, 50.0, 0.7),
    "question": FieldShape(300.0, ROW_HEIGHT, 0.6),
}

# Label hints that narrow an underscore field to a typed field.
TYPED_LABEL_HINTS = (
    (FieldType.EMAIL, re.compile(r'\be-?mail\b|דוא"ל|אימייל|البريد', re.IGNORECASE)),
    (FieldType.PHONE, re.compile(r"\b(?:phone|mobile|tel)\b|טלפון|נייד|هاتف", re.IGNORECASE)),
    (FieldType.DATE, re.compile(r"\bdate\b|תאריך|تاريخ", re.IGNORECASE)),
)

CATEGORY_KEYWORDS = (
    ("legal_waiver", ("waiver", "liability", "release", "legal", "ויתור", "פיטורים", "تنازل")),
    ("job_application", ("employment", "job", "position", "employer", "עבודה", "توظيف")),
    ("medical", ("medical", "patient", "health", "רפואי", "طبي")),
    ("financial", ("financial", "loan", "bank", "payment", "פיננסי", "مالي")),
)


class HeuristicAnalyzer:
    """
    Line-oriented analyzer used when no model is available or the model
    failed.

    Each non-blank line yields at most one entity; the first matching
    rule wins:

    1. signature keyword: signature field plus a signature zone
    2. checkbox glyph: checkbox field
    3. run of three or more underscores: text field
    4. question mark or interrogative prefix: yes/no question

    Ids are the 1-based line number, so they are unique per document.
    """

    def analyze(
        self,
        content: str,
        file_type: FileType,
        name: str = "document",
    ) -> DocumentAnalysis:
        """
        Analyze plain text into a DocumentAnalysis.

        Args:
            content: Plain text of the document.
            file_type: Format of the source document.
            name: Document name recorded in document info.

        Returns:
            DocumentAnalysis built from the heuristic payload.
        """
        content = content or ""
        payload = self.build_payload(content, file_type)
        pages = max(1, (len(content.splitlines()) - 1) // LINES_PER_PAGE + 1)
        info = DocumentInfo(
            name=name,
            size=len(content.encode("utf-8")),
            pages=pages,
            type=file_type.mime_type,
        )
        return payload_to_analysis(payload, info, metadata={"provider": "heuristic"})

    def build_payload(self, content: str, file_type: FileType) -> Dict[str, Any]:
        """
        Build the raw provider payload for the given text.

        The payload uses the same camelCase keys the language model is
        asked to return.
        """
        content = content or ""
        form_fields: List[Dict[str, Any]] = []
        questions: List[Dict[str, Any]] = []
        signatures: List[Dict[str, Any]] = []

        for index, line in enumerate(content.splitlines()):
            if not line.strip():
                continue
            entity_id = str(index + 1)
            page, y = self._line_geometry(index)

            if self._has_signature_keyword(line):
                label = self._extract_label(line)
                position = self._position("signature", y)
                form_fields.append(self._field(entity_id, FieldType.SIGNATURE, label, page, position, required=True))
                signatures.append({
                    "id": entity_id,
                    "label": label,
                    "required": True,
                    "position": dict(position),
                    "page": page,
                })
            elif CHECKBOX_PATTERN.search(line):
                label = self._extract_label(line)
                form_fields.append(self._field(
                    entity_id, FieldType.CHECKBOX, label, page, self._position("checkbox", y)
                ))
            elif UNDERSCORE_RUN.search(line):
                label = self._extract_label(line)
                form_fields.append(self._field(
                    entity_id, self._typed_field(label), label, page, self._position("text", y)
                ))
            elif self._is_question(line):
                questions.append({
                    "id": entity_id,
                    "text": line.strip(),
                    "type": QuestionType.YES_NO.value,
                    "options": ["Yes", "No"],
                    "position": self._position("question", y),
                    "page": page,
                    "confidence": SHAPES["question"].confidence,
                })

        language = detect_language(content)
        category = self._detect_category(content, language, file_type)
        risk = self._assess_risk(category, language)

        return {
            "language": language,
            "category": category,
            "summary": (
                f"{language.upper()} {file_type.value.upper()} document analysis: "
                f"{len(form_fields)} fields, {len(questions)} questions, "
                f"{len(signatures)} signature areas"
            ),
            "keyInsights": self._insights(form_fields, questions, signatures, language, category),
            "riskAssessment": risk,
            "formFields": form_fields,
            "questions": questions,
            "signatures": signatures,
        }

    def _has_signature_keyword(self, line: str) -> bool:
        lowered = line.casefold()
        return any(keyword in lowered for keyword in SIGNATURE_KEYWORDS)

    def _is_question(self, line: str) -> bool:
        stripped = line.strip()
        if any(mark in stripped for mark in QUESTION_MARKS):
            return True
        lowered = stripped.casefold()
        return any(lowered.startswith(prefix + " ") for prefix in INTERROGATIVE_PREFIXES)

    def _extract_label(self, line: str) -> str:
        """Strip checkbox glyphs, underscores and whitespace from a line."""
        label = CHECKBOX_PATTERN.sub(" ", line)
        label = label.strip(LABEL_STRIP_CHARS)
        return label or "Field"

    def _typed_field(self, label: str) -> FieldType:
        for field_type, pattern in TYPED_LABEL_HINTS:
            if pattern.search(label):
                return field_type
        return FieldType.TEXT

    def _line_geometry(self, index: int) -> Tuple[int, float]:
        page = index // LINES_PER_PAGE + 1
        y = TOP_MARGIN + (index % LINES_PER_PAGE) * ROW_HEIGHT
        return page, y

    def _position(self, kind: str, y: float) -> Dict[str, float]:
        shape = SHAPES[kind]
        return {"x": LEFT_MARGIN, "y": y, "width": shape.width, "height": shape.height}

    def _field(
        self,
        entity_id: str,
        field_type: FieldType,
        label: str,
        page: int,
        position: Dict[str, float],
        required: bool = False,
    ) -> Dict[str, Any]:
        kind = field_type.value if field_type.value in SHAPES else "text"
        return {
            "id": entity_id,
            "type": field_type.value,
            "label": label,
            "required": required,
            "position": position,
            "page": page,
            "confidence": SHAPES[kind].confidence,
        }

    def _detect_category(self, content: str, language: str, file_type: FileType) -> str:
        lowered = content.casefold()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return category
        if language != "en":
            return f"{language}_document"
        if file_type is FileType.DOCX:
            return "word_document"
        return "general_form"

    def _assess_risk(self, category: str, language: str) -> Dict[str, Any]:
        if category == "legal_waiver":
            return {
                "level": RiskLevel.HIGH.value,
                "issues": ["Document contains legal terms", "Automatic analysis only - manual review required"],
                "recommendations": [
                    "Review document manually",
                    "Consult legal expert if needed",
                    "Verify all terms before signing",
                ],
            }
        issues = ["Document requires careful review"]
        if language != "en":
            issues.append(f"Document language is {language}")
        return {
            "level": RiskLevel.MEDIUM.value,
            "issues": issues,
            "recommendations": ["Review all terms before signing", "Verify personal information"],
        }

    def _insights(
        self,
        form_fields: List[Dict[str, Any]],
        questions: List[Dict[str, Any]],
        signatures: List[Dict[str, Any]],
        language: str,
        category: str,
    ) -> List[str]:
        insights: List[str] = []
        if language != "en":
            insights.append(f"{language.upper()} document detected")
        if category == "legal_waiver":
            insights.append("Legal document detected")
        if form_fields:
            insights.append("Document contains form fields requiring user input")
        if questions:
            insights.append(f"Document asks {len(questions)} question(s)")
        if signatures:
            insights.append(f"Document has {len(signatures)} signature area(s)")
        if not insights:
            insights.append("No fillable elements detected")
        return insights

