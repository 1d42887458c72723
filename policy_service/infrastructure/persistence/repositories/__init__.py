"""
Реализации репозиториев на SQLAlchemy.
"""

from .policy_repository import PolicyRepository
from .translation_repository import TranslationRepository
from .workflow_repository import WorkflowRepository
from .audit_log_repository import AuditLogRepository
from .association_repository import PolicyCaseAssociationRepository

__all__ = [
    "PolicyRepository",
    "TranslationRepository",
    "WorkflowRepository",
    "AuditLogRepository",
    "PolicyCaseAssociationRepository",
]
