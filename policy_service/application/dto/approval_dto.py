"""
DTO утверждения политик.
"""

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field

from ...domain.interfaces import WorkflowInstanceInfo
from ...infrastructure.persistence.models import PolicyModel


class SubmitForApprovalInput(BaseModel):
    template_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class CancelApprovalInput(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


@dataclass
class SubmitForApprovalResult:
    policy: PolicyModel
    workflow_instance_id: str


class CurrentStep(BaseModel):
    stage_id: str
    stage_name: str
    description: Optional[str] = None


class Reviewer(BaseModel):
    step_id: str
    user_id: str
    status: str = "completed"
    completed_at: Optional[str] = None


class ApprovalStatusView(BaseModel):
    """
    Состояние утверждения политики.

    Если политика ни разу не отправлялась, workflow_instance = None,
    reviewers пуст, is_active = False.
    """
    policy_id: str
    policy_status: str
    workflow_instance: Optional[WorkflowInstanceInfo] = None
    current_step: Optional[CurrentStep] = None
    reviewers: List[Reviewer] = Field(default_factory=list)
    is_active: bool = False
