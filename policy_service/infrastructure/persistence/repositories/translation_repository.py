"""
Репозиторий переводов версий политик.
"""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ....core.errors import ConflictError, RepositoryError
from ..models import PolicyVersionTranslationModel

logger = logging.getLogger("policy-service.infrastructure.translation_repository")


class TranslationRepository:
    """Репозиторий PolicyVersionTranslation для SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, translation_id: str, organization_id: str) -> Optional[PolicyVersionTranslationModel]:
        result = await self._db.execute(
            select(PolicyVersionTranslationModel).where(
                PolicyVersionTranslationModel.id == translation_id,
                PolicyVersionTranslationModel.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_version_and_language(
        self, policy_version_id: str, language_code: str
    ) -> Optional[PolicyVersionTranslationModel]:
        result = await self._db.execute(
            select(PolicyVersionTranslationModel).where(
                PolicyVersionTranslationModel.policy_version_id == policy_version_id,
                PolicyVersionTranslationModel.language_code == language_code,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_version(
        self, policy_version_id: str, organization_id: str
    ) -> List[PolicyVersionTranslationModel]:
        result = await self._db.execute(
            select(PolicyVersionTranslationModel)
            .where(
                PolicyVersionTranslationModel.policy_version_id == policy_version_id,
                PolicyVersionTranslationModel.organization_id == organization_id,
            )
            .order_by(PolicyVersionTranslationModel.language_code.asc())
        )
        return list(result.scalars().all())

    async def list_stale(self, organization_id: str) -> List[PolicyVersionTranslationModel]:
        result = await self._db.execute(
            select(PolicyVersionTranslationModel)
            .where(
                PolicyVersionTranslationModel.organization_id == organization_id,
                PolicyVersionTranslationModel.is_stale.is_(True),
            )
            .order_by(PolicyVersionTranslationModel.updated_at.desc())
        )
        return list(result.scalars().all())

    async def add(self, translation: PolicyVersionTranslationModel) -> PolicyVersionTranslationModel:
        try:
            self._db.add(translation)
            await self._db.flush()
            return translation
        except IntegrityError as e:
            raise ConflictError(
                f"Translation already exists for language {translation.language_code} "
                f"on policy version {translation.policy_version_id}",
                details={"policy_version_id": translation.policy_version_id},
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Error adding translation: {e}", exc_info=True)
            raise RepositoryError(operation="add", entity_type="PolicyVersionTranslation", reason=str(e))

    async def mark_stale_for_version(self, policy_version_id: str, organization_id: str) -> int:
        """
        Пометить устаревшими все переводы версии, которые еще не помечены.

        Returns:
            Количество измененных переводов
        """
        try:
            result = await self._db.execute(
                update(PolicyVersionTranslationModel)
                .where(
                    PolicyVersionTranslationModel.policy_version_id == policy_version_id,
                    PolicyVersionTranslationModel.organization_id == organization_id,
                    PolicyVersionTranslationModel.is_stale.is_(False),
                )
                .values(is_stale=True)
                .execution_options(synchronize_session="fetch")
            )
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(f"Error marking translations stale for version {policy_version_id}: {e}", exc_info=True)
            raise RepositoryError(operation="update", entity_type="PolicyVersionTranslation", reason=str(e))
