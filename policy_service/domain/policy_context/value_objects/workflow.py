"""
Value Objects движка workflow, на которые опирается утверждение политик.
"""

from enum import Enum


class WorkflowEntityType(str, Enum):
    """Типы сущностей, для которых может запускаться workflow."""
    CASE = "CASE"
    INVESTIGATION = "INVESTIGATION"
    DISCLOSURE = "DISCLOSURE"
    POLICY = "POLICY"
    CAMPAIGN = "CAMPAIGN"


class WorkflowInstanceStatus(str, Enum):
    """Статусы экземпляра workflow."""
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    PAUSED = "PAUSED"


class ActorType(str, Enum):
    """Кто совершил действие в журнале аудита."""
    USER = "USER"
    SYSTEM = "SYSTEM"
