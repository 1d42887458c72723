"""
API схемы связей политика -> дело.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CaseLinkResponse(BaseModel):
    """Связь политики с делом."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    policy_id: str
    policy_version_id: Optional[str] = None
    case_id: str
    link_type: str
    link_reason: Optional[str] = None
    violation_date: Optional[datetime] = None
    created_by_id: str
    created_at: datetime


class CaseLinkListResponse(BaseModel):
    items: List[CaseLinkResponse]
    total: int
    page: int
    limit: int


class ViolationStatResponse(BaseModel):
    """Число нарушений одной политики."""

    model_config = ConfigDict(from_attributes=True)

    policy_id: str
    policy_title: str
    policy_type: str
    violation_count: int
