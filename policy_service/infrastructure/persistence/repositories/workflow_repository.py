"""
Репозиторий шаблонов и экземпляров workflow.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....core.errors import RepositoryError
from ..models import WorkflowTemplateModel, WorkflowInstanceModel

logger = logging.getLogger("policy-service.infrastructure.workflow_repository")


class WorkflowRepository:
    """Репозиторий workflow для SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self._db = db

    # ==================== Templates ====================

    async def get_template(self, template_id: str, organization_id: str) -> Optional[WorkflowTemplateModel]:
        result = await self._db.execute(
            select(WorkflowTemplateModel).where(
                WorkflowTemplateModel.id == template_id,
                WorkflowTemplateModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_default_template(
        self, organization_id: str, entity_type: str
    ) -> Optional[WorkflowTemplateModel]:
        """Активный шаблон по умолчанию для типа сущности."""
        result = await self._db.execute(
            select(WorkflowTemplateModel)
            .where(
                WorkflowTemplateModel.organization_id == organization_id,
                WorkflowTemplateModel.entity_type == entity_type,
                WorkflowTemplateModel.is_default.is_(True),
                WorkflowTemplateModel.is_active.is_(True),
            )
            .order_by(WorkflowTemplateModel.version.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_templates(
        self, organization_id: str, entity_type: str, active_only: bool = True
    ) -> List[WorkflowTemplateModel]:
        query = select(WorkflowTemplateModel).where(
            WorkflowTemplateModel.organization_id == organization_id,
            WorkflowTemplateModel.entity_type == entity_type,
        )
        if active_only:
            query = query.where(WorkflowTemplateModel.is_active.is_(True))
        result = await self._db.execute(
            query.order_by(WorkflowTemplateModel.is_default.desc(), WorkflowTemplateModel.name.asc())
        )
        return list(result.scalars().all())

    async def add_template(self, template: WorkflowTemplateModel) -> WorkflowTemplateModel:
        try:
            self._db.add(template)
            await self._db.flush()
            return template
        except SQLAlchemyError as e:
            logger.error(f"Error adding workflow template: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="WorkflowTemplate", reason=str(e))

    # ==================== Instances ====================

    async def get_instance(self, instance_id: str, organization_id: str) -> Optional[WorkflowInstanceModel]:
        result = await self._db.execute(
            select(WorkflowInstanceModel).where(
                WorkflowInstanceModel.id == instance_id,
                WorkflowInstanceModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_latest_instance(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        status: Optional[str] = None,
    ) -> Optional[WorkflowInstanceModel]:
        """Последний созданный экземпляр для сущности (опционально с фильтром по статусу)."""
        query = select(WorkflowInstanceModel).where(
            WorkflowInstanceModel.organization_id == organization_id,
            WorkflowInstanceModel.entity_type == entity_type,
            WorkflowInstanceModel.entity_id == entity_id,
        )
        if status:
            query = query.where(WorkflowInstanceModel.status == status)
        result = await self._db.execute(
            query.order_by(WorkflowInstanceModel.created_at.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_instances(
        self,
        organization_id: str,
        entity_type: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
    ) -> List[WorkflowInstanceModel]:
        query = select(WorkflowInstanceModel).where(
            WorkflowInstanceModel.organization_id == organization_id
        )
        if entity_type:
            query = query.where(WorkflowInstanceModel.entity_type == entity_type)
        if status:
            query = query.where(WorkflowInstanceModel.status == status)
        result = await self._db.execute(
            query.order_by(WorkflowInstanceModel.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def add_instance(self, instance: WorkflowInstanceModel) -> WorkflowInstanceModel:
        try:
            self._db.add(instance)
            await self._db.flush()
            return instance
        except SQLAlchemyError as e:
            logger.error(f"Error adding workflow instance: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="WorkflowInstance", reason=str(e))
