"""
Интерфейсы внешних коллабораторов доменного слоя.
"""

from .workflow_engine import (
    IWorkflowEngine,
    WorkflowStage,
    WorkflowTemplateInfo,
    WorkflowInstanceInfo,
)
from .translation_skill import ITranslationSkill, SkillContext, SkillResult
from .audit_log import IAuditLog, AuditEntry

__all__ = [
    "IWorkflowEngine",
    "WorkflowStage",
    "WorkflowTemplateInfo",
    "WorkflowInstanceInfo",
    "ITranslationSkill",
    "SkillContext",
    "SkillResult",
    "IAuditLog",
    "AuditEntry",
]
