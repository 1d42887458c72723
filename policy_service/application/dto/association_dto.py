"""
DTO связей политика -> дело.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.policy_context.value_objects import PolicyCaseLinkType, PolicyType
from ...infrastructure.persistence.models import PolicyCaseAssociationModel


class CreateCaseLinkInput(BaseModel):
    """
    Связать политику с делом.

    Без policy_version_id связь фиксируется на последней опубликованной версии.
    """
    policy_id: str
    case_id: str = Field(..., min_length=1, max_length=36)
    link_type: PolicyCaseLinkType
    policy_version_id: Optional[str] = None
    link_reason: Optional[str] = None
    violation_date: Optional[datetime] = None


class UpdateCaseLinkInput(BaseModel):
    """
    Частичное обновление связи.

    Меняются только поля, явно переданные в запросе; violation_date=None
    очищает дату.
    """
    link_type: Optional[PolicyCaseLinkType] = None
    link_reason: Optional[str] = None
    violation_date: Optional[datetime] = None


class ListCaseLinksQuery(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    policy_id: Optional[str] = None
    case_id: Optional[str] = None
    link_type: Optional[PolicyCaseLinkType] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ViolationStatsQuery(BaseModel):
    """Окно по дате создания связи и фильтр по типу политики."""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    policy_type: Optional[PolicyType] = None


@dataclass
class ViolationStatItem:
    policy_id: str
    policy_title: str
    policy_type: str
    violation_count: int


@dataclass
class CaseLinkListResult:
    items: List[PolicyCaseAssociationModel]
    total: int
    page: int
    limit: int
