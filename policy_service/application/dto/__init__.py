"""
Application DTOs.
"""

from .policy_dto import (
    CreatePolicyInput,
    UpdatePolicyInput,
    PublishPolicyInput,
    ListPoliciesQuery,
    PolicyListResult,
)
from .approval_dto import (
    SubmitForApprovalInput,
    CancelApprovalInput,
    SubmitForApprovalResult,
    CurrentStep,
    Reviewer,
    ApprovalStatusView,
)
from .translation_dto import (
    CreateTranslationInput,
    UpdateTranslationInput,
    ReviewTranslationInput,
)
from .association_dto import (
    CreateCaseLinkInput,
    UpdateCaseLinkInput,
    ListCaseLinksQuery,
    ViolationStatsQuery,
    ViolationStatItem,
    CaseLinkListResult,
)

__all__ = [
    "CreatePolicyInput",
    "UpdatePolicyInput",
    "PublishPolicyInput",
    "ListPoliciesQuery",
    "PolicyListResult",
    "SubmitForApprovalInput",
    "CancelApprovalInput",
    "SubmitForApprovalResult",
    "CurrentStep",
    "Reviewer",
    "ApprovalStatusView",
    "CreateTranslationInput",
    "UpdateTranslationInput",
    "ReviewTranslationInput",
    "CreateCaseLinkInput",
    "UpdateCaseLinkInput",
    "ListCaseLinksQuery",
    "ViolationStatsQuery",
    "ViolationStatItem",
    "CaseLinkListResult",
]
