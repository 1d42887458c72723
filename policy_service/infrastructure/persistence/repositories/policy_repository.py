"""
Репозиторий политик и их версий.

Все выборки ограничены организацией (tenant).
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....core.errors import RepositoryError
from ..models import PolicyModel, PolicyVersionModel

logger = logging.getLogger("policy-service.infrastructure.policy_repository")


class PolicyRepository:
    """
    Репозиторий политик для SQLAlchemy.

    Работает напрямую с моделями: сервисы используют ORM-объекты как
    агрегат, а UnitOfWork задает границы транзакции.

    Пример:
        >>> repository = PolicyRepository(session)
        >>> policy = await repository.get("policy-1", "org-1")
    """

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, policy_id: str, organization_id: str) -> Optional[PolicyModel]:
        """Получить политику по ID в пределах организации."""
        result = await self._db.execute(
            select(PolicyModel).where(
                PolicyModel.id == policy_id,
                PolicyModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, policy: PolicyModel) -> PolicyModel:
        try:
            self._db.add(policy)
            await self._db.flush()
            return policy
        except SQLAlchemyError as e:
            logger.error(f"Error adding policy: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="Policy", reason=str(e))

    async def slug_exists(
        self,
        organization_id: str,
        slug: str,
        exclude_policy_id: Optional[str] = None,
    ) -> bool:
        """
        Проверить, занят ли slug в организации.

        Args:
            exclude_policy_id: Политика, которую не учитывать (при переименовании)
        """
        query = (
            select(func.count())
            .select_from(PolicyModel)
            .where(PolicyModel.organization_id == organization_id, PolicyModel.slug == slug)
        )
        if exclude_policy_id:
            query = query.where(PolicyModel.id != exclude_policy_id)
        result = await self._db.execute(query)
        return result.scalar() > 0

    async def list(
        self,
        organization_id: str,
        status: Optional[str] = None,
        policy_type: Optional[str] = None,
        owner_id: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[PolicyModel], int]:
        """
        Список политик с фильтрами и пагинацией.

        Returns:
            (политики, общее количество), сортировка по updated_at desc
        """
        conditions = [PolicyModel.organization_id == organization_id]
        if status:
            conditions.append(PolicyModel.status == status)
        if policy_type:
            conditions.append(PolicyModel.policy_type == policy_type)
        if owner_id:
            conditions.append(PolicyModel.owner_id == owner_id)
        if search:
            conditions.append(func.lower(PolicyModel.title).contains(search.lower()))

        try:
            total = await self._db.execute(
                select(func.count()).select_from(PolicyModel).where(*conditions)
            )
            result = await self._db.execute(
                select(PolicyModel)
                .where(*conditions)
                .order_by(PolicyModel.updated_at.desc(), PolicyModel.id)
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all()), total.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error listing policies: {e}", exc_info=True)
            raise RepositoryError(operation="list", entity_type="Policy", reason=str(e))

    # ==================== Versions ====================

    async def get_version(self, version_id: str, organization_id: str) -> Optional[PolicyVersionModel]:
        result = await self._db.execute(
            select(PolicyVersionModel).where(
                PolicyVersionModel.id == version_id,
                PolicyVersionModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_version_by_number(
        self, policy_id: str, version: int, organization_id: str
    ) -> Optional[PolicyVersionModel]:
        result = await self._db.execute(
            select(PolicyVersionModel).where(
                PolicyVersionModel.policy_id == policy_id,
                PolicyVersionModel.version == version,
                PolicyVersionModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_latest_version(self, policy_id: str, organization_id: str) -> Optional[PolicyVersionModel]:
        result = await self._db.execute(
            select(PolicyVersionModel).where(
                PolicyVersionModel.policy_id == policy_id,
                PolicyVersionModel.organization_id == organization_id,
                PolicyVersionModel.is_latest.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def list_versions(self, policy_id: str, organization_id: str) -> List[PolicyVersionModel]:
        """Версии политики, новые первыми."""
        result = await self._db.execute(
            select(PolicyVersionModel)
            .where(
                PolicyVersionModel.policy_id == policy_id,
                PolicyVersionModel.organization_id == organization_id,
            )
            .order_by(PolicyVersionModel.version.desc())
        )
        return list(result.scalars().all())

    async def clear_latest_flag(self, policy_id: str, organization_id: str) -> int:
        """Снять is_latest со всех версий политики. Возвращает число строк."""
        try:
            result = await self._db.execute(
                update(PolicyVersionModel)
                .where(
                    PolicyVersionModel.policy_id == policy_id,
                    PolicyVersionModel.organization_id == organization_id,
                    PolicyVersionModel.is_latest.is_(True),
                )
                .values(is_latest=False)
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error clearing latest flag for policy {policy_id}: {e}", exc_info=True)
            raise RepositoryError(operation="update", entity_type="PolicyVersion", reason=str(e))

    async def add_version(self, version: PolicyVersionModel) -> PolicyVersionModel:
        try:
            self._db.add(version)
            await self._db.flush()
            return version
        except SQLAlchemyError as e:
            logger.error(f"Error adding policy version: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="PolicyVersion", reason=str(e))
