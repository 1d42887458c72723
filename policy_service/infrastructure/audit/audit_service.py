"""Audit service persisting the policy audit trail"""

import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.interfaces import IAuditLog, AuditEntry
from ..persistence.models import AuditLogModel
from ..persistence.unit_of_work import UnitOfWork

logger = logging.getLogger("policy-service.infrastructure.audit")


class AuditService(IAuditLog):
    """Service for audit logging"""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def log(self, entry: AuditEntry) -> None:
        """
        Persist an audit entry in its own transaction.

        Args:
            entry: Audit entry (organization, entity, action, actor, changes)
        """
        async with UnitOfWork(self._session_factory, operation="audit_log") as uow:
            await uow.audit_logs.add(
                AuditLogModel(
                    organization_id=entry.organization_id,
                    entity_type=entry.entity_type,
                    entity_id=entry.entity_id,
                    action=entry.action,
                    action_description=entry.action_description,
                    actor_user_id=entry.actor_user_id,
                    actor_type=entry.actor_type.value,
                    changes=entry.changes,
                    context=entry.context,
                )
            )

        logger.info(
            f"Audit: {entry.entity_type}:{entry.entity_id} {entry.action}",
            extra={
                "organization_id": entry.organization_id,
                "action": entry.action,
                "actor_user_id": entry.actor_user_id,
            },
        )
