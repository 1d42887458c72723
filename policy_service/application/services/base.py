"""
Общая часть прикладных сервисов: аудит и публикация событий best-effort.
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.interfaces import IAuditLog, AuditEntry
from ...events.base_event import BaseEvent
from ...events.publisher import DomainEventPublisher

logger = logging.getLogger("policy-service.application")


def to_jsonable(value: Any) -> Any:
    """Значение поля в форме, пригодной для JSON-колонки и payload событий."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class ApplicationService:
    """
    Базовый класс сервисов.

    Побочные эффекты (аудит, события) выполняются после commit основной
    операции; их ошибки логируются и не пробрасываются вызывающему.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        event_publisher: DomainEventPublisher,
        audit_log: IAuditLog,
    ):
        self._session_factory = session_factory
        self._events = event_publisher
        self._audit = audit_log

    async def _log_activity(self, entry: AuditEntry) -> None:
        try:
            await self._audit.log(entry)
        except Exception as e:
            logger.error(
                f"Failed to write audit entry {entry.action} for "
                f"{entry.entity_type}:{entry.entity_id}: {e}",
                exc_info=True
            )

    async def _emit(self, event: BaseEvent) -> None:
        try:
            await self._events.publish(event)
        except Exception as e:
            logger.error(f"Failed to publish event {event.event_type.value}: {e}", exc_info=True)
