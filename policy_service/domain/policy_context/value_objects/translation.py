"""
Value Objects для переводов версий политик.
"""

import logging
from enum import Enum
from typing import Dict

logger = logging.getLogger("policy-service.domain.translation")


class TranslationSource(str, Enum):
    """Происхождение перевода."""
    AI = "AI"
    HUMAN = "HUMAN"
    IMPORT = "IMPORT"


class TranslationReviewStatus(str, Enum):
    """Статус ревью перевода."""
    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    NEEDS_REVISION = "NEEDS_REVISION"
    PUBLISHED = "PUBLISHED"


LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "sv": "Swedish",
    "ru": "Russian",
    "uk": "Ukrainian",
    "tr": "Turkish",
    "ar": "Arabic",
    "he": "Hebrew",
    "hi": "Hindi",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "zh-TW": "Chinese (Traditional)",
}


def is_supported_language(code: str) -> bool:
    return code in LANGUAGE_NAMES


def get_language_name(code: str) -> str:
    """
    Получить название языка по коду.

    Для неизвестного кода пишется предупреждение и возвращается сам код.
    """
    if not is_supported_language(code):
        logger.warning(f"Language code '{code}' is not in the supported language list")
        return code
    return LANGUAGE_NAMES[code]
