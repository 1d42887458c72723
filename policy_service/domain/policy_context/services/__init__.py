"""
Доменные сервисы контекста политик.
"""

from .text_extraction import extract_plain_text, has_content
from .slug_generator import slugify, generate_unique_slug, MAX_SLUG_ATTEMPTS

__all__ = [
    "extract_plain_text",
    "has_content",
    "slugify",
    "generate_unique_slug",
    "MAX_SLUG_ATTEMPTS",
]
