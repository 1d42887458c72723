"""
API схемы встроенного движка workflow.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ....domain.interfaces import WorkflowStage


class WorkflowTransitionRule(BaseModel):
    """Разрешенный переход; from = "*" означает любой этап."""

    from_stage: str = Field(..., alias="from")
    to_stage: str = Field(..., alias="to")


class CreateWorkflowTemplateRequest(BaseModel):
    """
    Создание шаблона workflow.

    Пример:
        {
            "name": "Policy approval",
            "entity_type": "POLICY",
            "stages": [{"id": "review", "name": "Review"}, {"id": "signoff", "name": "Sign-off"}],
            "transitions": [{"from": "review", "to": "signoff"}],
            "initial_stage": "review",
            "is_default": true
        }
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    entity_type: str = "POLICY"
    stages: List[WorkflowStage] = Field(..., min_length=1)
    transitions: List[WorkflowTransitionRule] = Field(default_factory=list)
    initial_stage: str
    is_default: bool = False
    default_sla_days: Optional[int] = Field(None, ge=1)


class TransitionRequest(BaseModel):
    to_stage: str
    reason: Optional[str] = Field(None, max_length=2000)


class CompleteRequest(BaseModel):
    outcome: Optional[str] = Field(None, max_length=100)


class CancelWorkflowRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)
