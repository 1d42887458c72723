"""
API схемы переводов.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict


class TranslationResponse(BaseModel):
    """Перевод версии политики."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    policy_version_id: str
    language_code: str
    language_name: str
    title: str
    content: str
    plain_text: str
    translated_by: str
    ai_model: Optional[str] = None
    review_status: str
    reviewed_at: Optional[datetime] = None
    reviewed_by_id: Optional[str] = None
    review_notes: Optional[str] = None
    is_stale: bool
    created_by_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class LanguagesResponse(BaseModel):
    languages: Dict[str, str]
