"""
Value Objects контекста политик.
"""

from .policy_status import PolicyStatus
from .policy_type import PolicyType
from .translation import (
    TranslationSource,
    TranslationReviewStatus,
    LANGUAGE_NAMES,
    get_language_name,
    is_supported_language,
)
from .workflow import WorkflowEntityType, WorkflowInstanceStatus, ActorType
from .template_resolution import (
    ExplicitTemplate,
    DefaultTemplate,
    NoTemplateConfigured,
    TemplateResolution,
)
from .field_change import FieldChange
from .case_link import PolicyCaseLinkType

__all__ = [
    "PolicyStatus",
    "PolicyType",
    "TranslationSource",
    "TranslationReviewStatus",
    "LANGUAGE_NAMES",
    "get_language_name",
    "is_supported_language",
    "WorkflowEntityType",
    "WorkflowInstanceStatus",
    "ActorType",
    "ExplicitTemplate",
    "DefaultTemplate",
    "NoTemplateConfigured",
    "TemplateResolution",
    "FieldChange",
    "PolicyCaseLinkType",
]
