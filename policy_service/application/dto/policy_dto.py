"""
Входные и выходные DTO операций над политиками.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.policy_context.value_objects import PolicyStatus, PolicyType
from ...infrastructure.persistence.models import PolicyModel


class CreatePolicyInput(BaseModel):
    """Создание политики."""
    title: str = Field(..., min_length=1, max_length=255)
    policy_type: PolicyType
    category: Optional[str] = Field(None, max_length=100)
    content: Optional[str] = None
    owner_id: Optional[str] = None
    effective_date: Optional[datetime] = None
    review_date: Optional[datetime] = None


class UpdatePolicyInput(BaseModel):
    """
    Частичное обновление черновика.

    Меняются только поля, явно переданные в запросе (model_fields_set).
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    policy_type: Optional[PolicyType] = None
    category: Optional[str] = Field(None, max_length=100)
    content: Optional[str] = None
    owner_id: Optional[str] = None
    effective_date: Optional[datetime] = None
    review_date: Optional[datetime] = None


class PublishPolicyInput(BaseModel):
    """Публикация черновика как новой версии."""
    version_label: Optional[str] = Field(None, max_length=100)
    summary: Optional[str] = None
    change_notes: Optional[str] = None
    effective_date: Optional[datetime] = None


class ListPoliciesQuery(BaseModel):
    """Фильтры и пагинация списка политик."""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    status: Optional[PolicyStatus] = None
    policy_type: Optional[PolicyType] = None
    owner_id: Optional[str] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PolicyListResult:
    items: List[PolicyModel]
    total: int
    page: int
    limit: int
