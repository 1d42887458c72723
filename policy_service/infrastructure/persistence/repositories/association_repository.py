"""
Репозиторий связей политика -> дело.

Все выборки ограничены организацией (tenant).
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....core.errors import ConflictError, RepositoryError
from ..models import PolicyCaseAssociationModel, PolicyModel

logger = logging.getLogger("policy-service.infrastructure.association_repository")


class PolicyCaseAssociationRepository:
    """Репозиторий PolicyCaseAssociation для SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, association_id: str, organization_id: str) -> Optional[PolicyCaseAssociationModel]:
        result = await self._db.execute(
            select(PolicyCaseAssociationModel).where(
                PolicyCaseAssociationModel.id == association_id,
                PolicyCaseAssociationModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def find_link(
        self, policy_id: str, case_id: str, organization_id: str
    ) -> Optional[PolicyCaseAssociationModel]:
        result = await self._db.execute(
            select(PolicyCaseAssociationModel).where(
                PolicyCaseAssociationModel.policy_id == policy_id,
                PolicyCaseAssociationModel.case_id == case_id,
                PolicyCaseAssociationModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, association: PolicyCaseAssociationModel) -> PolicyCaseAssociationModel:
        try:
            self._db.add(association)
            await self._db.flush()
            return association
        except IntegrityError as e:
            raise ConflictError(
                "Policy already linked to this case",
                details={"policy_id": association.policy_id, "case_id": association.case_id},
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding policy-case association: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="PolicyCaseAssociation", reason=str(e))

    async def delete(self, association: PolicyCaseAssociationModel) -> None:
        try:
            await self._db.execute(
                delete(PolicyCaseAssociationModel).where(PolicyCaseAssociationModel.id == association.id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Error deleting policy-case association {association.id}: {e}", exc_info=True)
            raise RepositoryError(operation="delete", entity_type="PolicyCaseAssociation", reason=str(e))

    async def list(
        self,
        organization_id: str,
        policy_id: Optional[str] = None,
        case_id: Optional[str] = None,
        link_type: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[PolicyCaseAssociationModel], int]:
        """
        Связи с фильтрами и пагинацией.

        Returns:
            (связи, общее количество), сортировка по created_at desc
        """
        conditions = [PolicyCaseAssociationModel.organization_id == organization_id]
        if policy_id:
            conditions.append(PolicyCaseAssociationModel.policy_id == policy_id)
        if case_id:
            conditions.append(PolicyCaseAssociationModel.case_id == case_id)
        if link_type:
            conditions.append(PolicyCaseAssociationModel.link_type == link_type)

        try:
            total = await self._db.execute(
                select(func.count()).select_from(PolicyCaseAssociationModel).where(*conditions)
            )
            result = await self._db.execute(
                select(PolicyCaseAssociationModel)
                .where(*conditions)
                .order_by(PolicyCaseAssociationModel.created_at.desc(), PolicyCaseAssociationModel.id)
                .limit(limit)
                .offset(offset)
            )
            return list(result.scalars().all()), total.scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Error listing policy-case associations: {e}", exc_info=True)
            raise RepositoryError(operation="list", entity_type="PolicyCaseAssociation", reason=str(e))

    async def list_by_policy(self, policy_id: str, organization_id: str) -> List[PolicyCaseAssociationModel]:
        result = await self._db.execute(
            select(PolicyCaseAssociationModel)
            .where(
                PolicyCaseAssociationModel.policy_id == policy_id,
                PolicyCaseAssociationModel.organization_id == organization_id,
            )
            .order_by(PolicyCaseAssociationModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_by_case(self, case_id: str, organization_id: str) -> List[PolicyCaseAssociationModel]:
        result = await self._db.execute(
            select(PolicyCaseAssociationModel)
            .where(
                PolicyCaseAssociationModel.case_id == case_id,
                PolicyCaseAssociationModel.organization_id == organization_id,
            )
            .order_by(PolicyCaseAssociationModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def count_violations_by_policy(
        self,
        organization_id: str,
        violation_type: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        policy_type: Optional[str] = None,
    ) -> List[Tuple[str, str, str, int]]:
        """
        Число связей-нарушений по политикам.

        Returns:
            [(policy_id, title, policy_type, count)], по убыванию count
        """
        violation_count = func.count(PolicyCaseAssociationModel.id).label("violation_count")
        query = (
            select(PolicyModel.id, PolicyModel.title, PolicyModel.policy_type, violation_count)
            .select_from(PolicyCaseAssociationModel)
            .join(
                PolicyModel,
                (PolicyModel.id == PolicyCaseAssociationModel.policy_id)
                & (PolicyModel.organization_id == PolicyCaseAssociationModel.organization_id),
            )
            .where(
                PolicyCaseAssociationModel.organization_id == organization_id,
                PolicyCaseAssociationModel.link_type == violation_type,
            )
            .group_by(PolicyModel.id, PolicyModel.title, PolicyModel.policy_type)
            .order_by(violation_count.desc(), PolicyModel.title)
        )
        if start_date:
            query = query.where(PolicyCaseAssociationModel.created_at >= start_date)
        if end_date:
            query = query.where(PolicyCaseAssociationModel.created_at <= end_date)
        if policy_type:
            query = query.where(PolicyModel.policy_type == policy_type)

        try:
            result = await self._db.execute(query)
            return [tuple(row) for row in result.all()]
        except SQLAlchemyError as e:
            logger.error(f"Error aggregating policy violations: {e}", exc_info=True)
            raise RepositoryError(operation="aggregate", entity_type="PolicyCaseAssociation", reason=str(e))
