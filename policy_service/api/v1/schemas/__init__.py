"""
API v1 схемы.
"""

from .policy_schemas import (
    PolicyResponse,
    PolicyListResponse,
    PolicyVersionResponse,
    ActivityResponse,
)
from .approval_schemas import SubmitForApprovalResponse
from .translation_schemas import TranslationResponse, LanguagesResponse
from .association_schemas import CaseLinkResponse, CaseLinkListResponse, ViolationStatResponse
from .workflow_schemas import (
    WorkflowTransitionRule,
    CreateWorkflowTemplateRequest,
    TransitionRequest,
    CompleteRequest,
    CancelWorkflowRequest,
)

__all__ = [
    "PolicyResponse",
    "PolicyListResponse",
    "PolicyVersionResponse",
    "ActivityResponse",
    "SubmitForApprovalResponse",
    "TranslationResponse",
    "LanguagesResponse",
    "WorkflowTransitionRule",
    "CreateWorkflowTemplateRequest",
    "TransitionRequest",
    "CompleteRequest",
    "CancelWorkflowRequest",
    "CaseLinkResponse",
    "CaseLinkListResponse",
    "ViolationStatResponse",
]
