"""
DTO переводов версий политик.
"""

from typing import Optional

from pydantic import BaseModel, Field

from ...domain.policy_context.value_objects import TranslationReviewStatus


class CreateTranslationInput(BaseModel):
    """
    Создание перевода.

    use_ai=True: перевод через AI-навык; иначе обязательны content и title.
    """
    policy_version_id: str
    language_code: str = Field(..., min_length=2, max_length=10)
    use_ai: bool = True
    content: Optional[str] = None
    title: Optional[str] = Field(None, max_length=255)


class UpdateTranslationInput(BaseModel):
    content: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class ReviewTranslationInput(BaseModel):
    status: TranslationReviewStatus
    notes: Optional[str] = None
