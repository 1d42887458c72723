"""
Интерфейс журнала аудита.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..policy_context.value_objects import ActorType


class AuditEntry(BaseModel):
    """Запись журнала аудита."""
    organization_id: str
    entity_type: str
    entity_id: str
    action: str
    action_description: str
    actor_user_id: Optional[str] = None
    actor_type: ActorType = ActorType.USER
    changes: Optional[Dict[str, Any]] = None
    context: Optional[Dict[str, Any]] = None


class IAuditLog(ABC):
    """
    Журнал аудита.

    Запись best-effort: вызывающая сторона перехватывает ошибки,
    основная операция к этому моменту уже зафиксирована.
    """

    @abstractmethod
    async def log(self, entry: AuditEntry) -> None:
        pass
