"""
API схемы для операций с политиками.

Ответы строятся из ORM-моделей через from_attributes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PolicyResponse(BaseModel):
    """
    Головная запись политики.

    Пример:
        {
            "id": "8f0c...",
            "title": "Data Retention",
            "slug": "data-retention",
            "status": "DRAFT",
            "current_version": 0,
            ...
        }
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    title: str
    slug: str
    policy_type: str
    category: Optional[str] = None
    status: str
    current_version: int
    draft_content: Optional[str] = None
    draft_updated_at: Optional[datetime] = None
    draft_updated_by_id: Optional[str] = None
    owner_id: Optional[str] = None
    effective_date: Optional[datetime] = None
    review_date: Optional[datetime] = None
    retired_at: Optional[datetime] = None
    created_by_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PolicyListResponse(BaseModel):
    """Страница списка политик."""

    items: List[PolicyResponse]
    total: int = Field(description="Общее количество по фильтру")
    page: int
    limit: int


class PolicyVersionResponse(BaseModel):
    """Неизменяемая опубликованная версия."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    policy_id: str
    version: int
    version_label: Optional[str] = None
    content: str
    plain_text: str
    summary: Optional[str] = None
    change_notes: Optional[str] = None
    is_latest: bool
    published_at: datetime
    published_by_id: Optional[str] = None
    effective_date: Optional[datetime] = None


class ActivityResponse(BaseModel):
    """Запись журнала аудита."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: str
    entity_id: str
    action: str
    action_description: str
    actor_user_id: Optional[str] = None
    actor_type: str
    changes: Optional[Dict[str, Any]] = None
    context: Optional[Dict[str, Any]] = None
    created_at: datetime
