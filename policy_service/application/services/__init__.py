"""
Прикладные сервисы.
"""

from .policy_service import PolicyService
from .approval_service import PolicyApprovalService
from .translation_service import PolicyTranslationService
from .association_service import PolicyCaseAssociationService

__all__ = [
    "PolicyService",
    "PolicyApprovalService",
    "PolicyTranslationService",
    "PolicyCaseAssociationService",
]
