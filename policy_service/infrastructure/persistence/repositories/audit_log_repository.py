"""
Репозиторий журнала аудита.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import AuditLogModel


class AuditLogRepository:
    """Append-only хранилище записей аудита."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def add(self, entry: AuditLogModel) -> AuditLogModel:
        self._db.add(entry)
        await self._db.flush()
        return entry

    async def list_for_entity(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        limit: int = 100,
    ) -> List[AuditLogModel]:
        result = await self._db.execute(
            select(AuditLogModel)
            .where(
                AuditLogModel.organization_id == organization_id,
                AuditLogModel.entity_type == entity_type,
                AuditLogModel.entity_id == entity_id,
            )
            .order_by(AuditLogModel.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
