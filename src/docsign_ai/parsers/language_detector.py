"""Language detection utilities for document analysis."""

import re
from typing import Literal

LanguageTag = Literal["he", "ar", "ja", "zh", "ko", "ru", "th", "hi", "en"]

DEFAULT_LANGUAGE: LanguageTag = "en"

# Checked in order; the first script found wins. Kana is tested before the
# shared CJK ideographs so Japanese text with kanji is not reported as Chinese.
_SCRIPT_PATTERNS = (
    ("he", re.compile(r'[\u0590-\u05ff\ufb1d-\ufb4f]')),
    ("ar", re.compile(r'[\u0600-\u06ff\u0750-\u077f\u08a0-\u08ff\ufb50-\ufdff\ufe70-\ufefc]')),
    ("ja", re.compile(r'[\u3040-\u309f\u30a0-\u30ff\u31f0-\u31ff]')),
    ("zh", re.compile(r'[\u4e00-\u9fff\u3400-\u4dbf\uf900-\ufaff]')),
    ("ko", re.compile(r'[\uac00-\ud7af\u1100-\u11ff\u3130-\u318f]')),
    ("ru", re.compile(r'[\u0400-\u04ff\u0500-\u052f]')),
    ("th", re.compile(r'[\u0e00-\u0e7f]')),
    ("hi", re.compile(r'[\u0900-\u097f]')),
)

SUPPORTED_LANGUAGES = tuple(tag for tag, _ in _SCRIPT_PATTERNS) + (DEFAULT_LANGUAGE,)


def detect_language(text: str) -> LanguageTag:
    """
    Detect the language of a text from the Unicode blocks it uses.

    This is a priority list, not a classifier: a single Hebrew letter in
    an otherwise English text makes the result "he".

    Args:
        text: The text to analyze.

    Returns:
        One of SUPPORTED_LANGUAGES; "en" when no listed script appears.
    """
    if not text:
        return DEFAULT_LANGUAGE

    for tag, pattern in _SCRIPT_PATTERNS:
        if pattern.search(text):
            return tag
    return DEFAULT_LANGUAGE


def contains_hebrew(text: str) -> bool:
    """Check whether text contains at least one Hebrew character."""
    return bool(text) and _SCRIPT_PATTERNS[0][1].search(text) is not None
