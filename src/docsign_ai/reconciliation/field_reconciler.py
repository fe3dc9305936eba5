"""Filling detected fields and questions from user data and profile."""

import re
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.document import FormField, Question
from ..models.enums import FieldType, QuestionType
from ..models.processing import UserProfile


_WHITESPACE = re.compile(r"\s+")

PLACEHOLDER = "N/A"

YES_VALUES = {"yes", "y", "true", "1", "on", "כן", "نعم"}
NO_VALUES = {"no", "n", "false", "0", "off", "לא", "لا"}

DEFAULT_QUESTION_SUGGESTION = "Consider carefully before answering"

# Normalized labels -> profile attribute, in English and Hebrew.
PROFILE_LABELS = {
    "name": "name",
    "full_name": "name",
    "שם": "name",
    "שם_מלא": "name",
    "email": "email",
    "email_address": "email",
    'כתובת_דוא"ל': "email",
    "phone": "phone",
    "phone_number": "phone",
    "מספר_טלפון": "phone",
    "טלפון": "phone",
    "address": "address",
    "כתובת": "address",
    "date_of_birth": "date_of_birth",
    "תאריך_לידה": "date_of_birth",
    "occupation": "occupation",
    "מקצוע": "occupation",
    "company": "company",
    "חברה": "company",
}


def normalize_key(text: Any) -> str:
    """
    Normalize a label or user-data key for matching.

    Lower-cases, trims, drops a trailing colon and joins whitespace runs
    with underscores: ``"Email Address:"`` becomes ``"email_address"``.
    """
    key = str(text).strip().lower()
    key = key.rstrip(":：").strip()
    return _WHITESPACE.sub("_", key)


class FieldReconciler:
    """
    Resolves values for detected fields and questions.

    Field resolution is a priority cascade; the first tier that yields a
    value wins:

    1. user data keyed by the normalized label
    2. a value already present on the field
    3. a type default taken from the profile or today's date
    4. the first suggestion
    5. a generic placeholder

    Inputs are never modified; new objects are returned.
    """

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    def fill(
        self,
        fields: List[FormField],
        user_data: Optional[Mapping[str, Any]],
        profile: UserProfile,
    ) -> List[FormField]:
        """
        Fill form fields.

        Args:
            fields: Fields detected by analysis.
            user_data: Values supplied by the user, keyed by label.
            profile: Profile used for type defaults.

        Returns:
            New FormField objects, each with a value.
        """
        normalized = self._normalize_user_data(user_data)
        return [replace(f, value=self._resolve_field(f, normalized, profile)) for f in fields]

    def answer(
        self,
        questions: List[Question],
        user_data: Optional[Mapping[str, Any]],
        profile: UserProfile,
    ) -> List[Question]:
        """
        Answer embedded questions.

        User answers are looked up as ``question_<id>`` or by normalized
        question text. Yes/no answers are normalized to ``Yes``/``No``.
        """
        normalized = self._normalize_user_data(user_data)
        answered = []
        for question in questions:
            value = normalized.get(f"question_{normalize_key(question.id)}")
            if value is None:
                value = normalized.get(normalize_key(question.text))
            if value is None and question.value:
                value = question.value

            if value is None:
                value = self._default_answer(question)
            elif question.type is QuestionType.YES_NO:
                value = self._normalize_yes_no(value)

            answered.append(replace(
                question,
                value=value,
                ai_suggestion=question.ai_suggestion or DEFAULT_QUESTION_SUGGESTION,
            ))
        return answered

    def suggestions_for(self, field: FormField, profile: UserProfile) -> List[str]:
        """Return profile values that fit a field's label or type."""
        attribute = PROFILE_LABELS.get(normalize_key(field.label))
        if attribute is None:
            attribute = {
                FieldType.EMAIL: "email",
                FieldType.PHONE: "phone",
                FieldType.SIGNATURE: "name",
            }.get(field.type)

        suggestions = []
        if attribute:
            value = getattr(profile, attribute)
            if value:
                suggestions.append(value)
        for suggestion in field.suggestions:
            if suggestion and suggestion not in suggestions:
                suggestions.append(suggestion)
        return suggestions

    def _normalize_user_data(self, user_data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        normalized: Dict[str, str] = {}
        for key, value in (user_data or {}).items():
            if value is None or value == "":
                continue
            normalized[normalize_key(key)] = str(value)
        return normalized

    def _resolve_field(
        self,
        field: FormField,
        normalized: Dict[str, str],
        profile: UserProfile,
    ) -> str:
        user_value = normalized.get(normalize_key(field.label))
        if user_value is not None:
            return user_value

        if field.value:
            return field.value

        default = self._type_default(field.type, profile)
        if default:
            return default

        for suggestion in field.suggestions:
            if suggestion:
                return suggestion

        if field.type is FieldType.NUMBER:
            return "0"
        if field.type is FieldType.CHECKBOX:
            return "Yes"
        return PLACEHOLDER

    def _type_default(self, field_type: FieldType, profile: UserProfile) -> str:
        if field_type is FieldType.EMAIL:
            return profile.email
        elif field_type is FieldType.PHONE:
            return profile.phone
        elif field_type is FieldType.DATE:
            return self._today().isoformat()
        elif field_type is FieldType.SIGNATURE:
            return profile.name
        return ""

    def _default_answer(self, question: Question) -> str:
        if question.type is QuestionType.YES_NO:
            return "Yes"
        elif question.type is QuestionType.MULTIPLE_CHOICE:
            return question.options[0] if question.options else PLACEHOLDER
        elif question.type is QuestionType.DATE:
            return self._today().isoformat()
        elif question.type is QuestionType.NUMBER:
            return "0"
        elif question.type is QuestionType.RATING:
            return "5"
        return question.ai_suggestion or PLACEHOLDER

    def _normalize_yes_no(self, value: str) -> str:
        lowered = value.strip().lower()
        if lowered in YES_VALUES:
            return "Yes"
        if lowered in NO_VALUES:
            return "No"
        return value
