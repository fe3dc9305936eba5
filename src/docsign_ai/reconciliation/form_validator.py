"""Validation of filled form fields."""

import re
from typing import Iterable

from ..models.document import FormField
from ..models.enums import FieldType
from ..models.processing import ValidationReport


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")

LOW_CONFIDENCE = 0.5


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", value)))


def validate_form(fields: Iterable[FormField]) -> ValidationReport:
    """
    Validate filled form fields.

    Errors make the form invalid; warnings and suggestions do not.

    - required field without a value: error
    - malformed email: error
    - malformed phone number: warning
    - value not matching ``validation.pattern``: error
    - below ``minLength`` or ``minValue``: error
    - above ``maxLength`` or ``maxValue``: warning
    - confidence under 0.5: suggestion to review the field

    Args:
        fields: Fields to validate.

    Returns:
        ValidationReport with the findings.
    """
    report = ValidationReport()

    for field in fields:
        value = field.value or ""

        if field.required and not value.strip():
            report.add_error(f"{field.label} is required")

        if value:
            if field.type is FieldType.EMAIL and not is_valid_email(value):
                report.add_error(f"{field.label} must be a valid email address")
            if field.type is FieldType.PHONE and not is_valid_phone(value):
                report.add_warning(f"{field.label} format may be incorrect")
            _check_bounds(field, value, report)

        if field.confidence < LOW_CONFIDENCE:
            report.add_suggestion(
                f"{field.label} was detected with low confidence ({field.confidence:.2f}); please review it"
            )

    return report


def _check_bounds(field: FormField, value: str, report: ValidationReport) -> None:
    rules = field.validation
    if rules is None:
        return

    if rules.pattern:
        try:
            matched = re.fullmatch(rules.pattern, value) is not None
        except re.error:
            report.add_warning(f"{field.label} has an invalid validation pattern")
        else:
            if not matched:
                report.add_error(f"{field.label} does not match the expected format")

    if rules.min_length is not None and len(value) < rules.min_length:
        report.add_error(f"{field.label} must be at least {rules.min_length} characters")
    if rules.max_length is not None and len(value) > rules.max_length:
        report.add_warning(f"{field.label} is longer than {rules.max_length} characters")

    if rules.min_value is None and rules.max_value is None:
        return
    try:
        number = float(value)
    except ValueError:
        report.add_error(f"{field.label} must be a number")
        return
    if rules.min_value is not None and number < rules.min_value:
        report.add_error(f"{field.label} must be at least {rules.min_value:g}")
    if rules.max_value is not None and number > rules.max_value:
        report.add_warning(f"{field.label} is above {rules.max_value:g}")
