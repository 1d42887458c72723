"""
SQLAlchemy models for persistence layer.
"""
from .base import Base
from .policy import PolicyModel, PolicyVersionModel
from .translation import PolicyVersionTranslationModel
from .workflow import WorkflowTemplateModel, WorkflowInstanceModel
from .audit_log import AuditLogModel
from .association import PolicyCaseAssociationModel

__all__ = [
    "Base",
    "PolicyModel",
    "PolicyVersionModel",
    "PolicyVersionTranslationModel",
    "WorkflowTemplateModel",
    "WorkflowInstanceModel",
    "AuditLogModel",
    "PolicyCaseAssociationModel",
]
