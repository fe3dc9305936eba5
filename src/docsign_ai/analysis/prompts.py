"""Prompt templates for the local language model."""

import json

from ..models.enums import FileType
from ..parsers.language_detector import contains_hebrew


RESPONSE_SCHEMA = {
    "language": "en",
    "category": "general_form",
    "summary": "Summary of what the document actually contains",
    "keyInsights": ["Insight based on actual content"],
    "riskAssessment": {
        "level": "high|medium|low",
        "issues": ["Specific risks found in the content"],
        "recommendations": ["Specific recommendations based on content"],
    },
    "formFields": [
        {
            "id": "1",
            "type": "text|email|phone|date|checkbox|signature|number",
            "label": "EXACT field name from document content",
            "required": True,
            "position": {"x": 100, "y": 150, "width": 200, "height": 30},
            "page": 1,
            "confidence": 0.95,
            "suggestions": ["Relevant suggestions"],
        }
    ],
    "questions": [
        {
            "id": "1",
            "text": "EXACT question text from document content",
            "type": "yes_no|multiple_choice|text|date|number|rating",
            "position": {"x": 100, "y": 200, "width": 300, "height": 30},
            "page": 1,
            "confidence": 0.9,
            "aiSuggestion": "Suggestion based on content",
        }
    ],
    "signatures": [
        {
            "id": "1",
            "label": "EXACT signature label from document content",
            "required": True,
            "position": {"x": 100, "y": 300, "width": 150, "height": 50},
            "page": 1,
        }
    ],
}

_RULES = """**CRITICAL INSTRUCTIONS:**
- ONLY identify form fields, questions, and signatures that actually appear in the provided content
- DO NOT generate generic or template fields
- If no form fields, questions or signature areas exist in the content, return empty arrays"""

_CLOSING = """**IMPORTANT**:
- Ensure valid JSON syntax: NO trailing commas
- Return ONLY the JSON object"""

_GENERAL_INTRO = (
    "You are an expert document analyzer. Analyze the provided document content "
    "and extract ONLY the actual form fields, questions, and signatures that exist in the document."
)

_HEBREW_INTRO = (
    "You are an expert Hebrew document analyzer. Analyze the provided Hebrew document content "
    "and extract ONLY the actual form fields, questions, and signatures that exist in the document. "
    'Set "language" to "he" and keep field labels in the original Hebrew.'
)

_HEBREW_ELEMENTS = """**Common Hebrew Form Elements to Look For:**
- שם מלא (Full Name)
- תעודת זהות (ID Number)
- כתובת דוא"ל (Email Address)
- מספר טלפון (Phone Number)
- כתובת (Address)
- תאריך (Date)
- חתימה (Signature)"""

CONNECTION_TEST_PROMPT = 'Reply with exactly: "Connection successful"'


def excerpt(content: str, limit: int) -> str:
    """Return at most the first ``limit`` characters of the content."""
    return (content or "")[:max(0, limit)]


def build_system_prompt(document_excerpt: str) -> str:
    """Build the system prompt, using the Hebrew variant for Hebrew text."""
    schema = json.dumps(RESPONSE_SCHEMA, indent=2, ensure_ascii=False)
    sections = []
    if contains_hebrew(document_excerpt):
        sections.extend([_HEBREW_INTRO, _RULES, _HEBREW_ELEMENTS])
    else:
        sections.extend([_GENERAL_INTRO, _RULES])
    sections.append(f"Return ONLY a valid JSON object with this exact structure:\n\n{schema}")
    sections.append(_CLOSING)
    return "\n\n".join(sections)


def build_user_prompt(document_excerpt: str, file_type: FileType) -> str:
    return (
        f"Analyze this {file_type.value.upper()} document content:\n\n"
        f"{document_excerpt}\n\n"
        "Return the JSON analysis."
    )
