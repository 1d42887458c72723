"""
PolicyTranslationService - переводы, привязанные к неизменяемой версии политики.

Перевод создается через AI-навык или вручную, редактируется человеком,
проходит ревью и обновляется после того, как версия устарела.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ...core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PreconditionFailedError,
    UpstreamFailureError,
)
from ...domain.interfaces import AuditEntry, IAuditLog, ITranslationSkill, SkillContext
from ...domain.policy_context.services import extract_plain_text, has_content
from ...domain.policy_context.value_objects import (
    LANGUAGE_NAMES,
    TranslationReviewStatus,
    TranslationSource,
    get_language_name,
)
from ...events.publisher import DomainEventPublisher
from ...events.translation_events import (
    TranslationCreatedEvent,
    TranslationRefreshedEvent,
    TranslationReviewedEvent,
    TranslationUpdatedEvent,
)
from ...infrastructure.persistence.models import (
    PolicyModel,
    PolicyVersionModel,
    PolicyVersionTranslationModel,
)
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..dto import CreateTranslationInput, ReviewTranslationInput, UpdateTranslationInput
from .base import ApplicationService

logger = logging.getLogger("policy-service.application.translation_service")

POLICY_ENTITY = "POLICY"
SKILL_ENTITY_TYPE = "POLICY_VERSION"
TRANSLATE_PERMISSION = "ai:skills:translate"


class PolicyTranslationService(ApplicationService):
    """
    Сервис переводов версий политик.

    Атрибуты:
        _skill: Исполнитель AI-навыка "translate"
    """

    def __init__(
        self,
        session_factory,
        translation_skill: ITranslationSkill,
        event_publisher: DomainEventPublisher,
        audit_log: IAuditLog,
    ):
        super().__init__(session_factory, event_publisher, audit_log)
        self._skill = translation_skill

    async def translate(
        self,
        data: CreateTranslationInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyVersionTranslationModel:
        """
        Создать перевод версии на язык.

        Raises:
            NotFoundError: Версия не найдена
            ConflictError: Перевод на этот язык уже существует
            PreconditionFailedError: Для ручного перевода нет content/title
            UpstreamFailureError: AI-навык сообщил об ошибке
        """
        async with UnitOfWork(self._session_factory, operation="translation_precheck") as uow:
            version, policy = await self._require_version(uow, data.policy_version_id, organization_id)
            existing = await uow.translations.get_by_version_and_language(version.id, data.language_code)
            if existing is not None:
                raise ConflictError(
                    f"Translation already exists for language {data.language_code} "
                    f"on policy version {version.id}. Use update instead.",
                    details={"translation_id": existing.id, "policy_version_id": version.id},
                )

        language_name = get_language_name(data.language_code)

        if data.use_ai:
            content, title, ai_model = await self._translate_with_ai(
                version, policy.title, data.language_code, user_id, organization_id
            )
            translated_by = TranslationSource.AI
        else:
            if not has_content(data.content):
                raise PreconditionFailedError(
                    f"Content is required for manual translation (use_ai: false) of policy version {version.id}"
                )
            if not data.title:
                raise PreconditionFailedError(
                    f"Title is required for manual translation of policy version {version.id}"
                )
            content, title, ai_model = data.content, data.title, None
            translated_by = TranslationSource.HUMAN

        now = datetime.now(timezone.utc)
        async with UnitOfWork(self._session_factory, operation="translation_create") as uow:
            translation = await uow.translations.add(
                PolicyVersionTranslationModel(
                    organization_id=organization_id,
                    policy_version_id=version.id,
                    language_code=data.language_code,
                    language_name=language_name,
                    title=title,
                    content=content,
                    plain_text=extract_plain_text(content),
                    translated_by=translated_by.value,
                    ai_model=ai_model,
                    review_status=TranslationReviewStatus.PENDING_REVIEW.value,
                    is_stale=False,
                    created_by_id=user_id,
                    created_at=now,
                    updated_at=now,
                )
            )

        origin = "AI-generated" if translated_by is TranslationSource.AI else "manual"
        logger.info(f"Created {data.language_code} translation {translation.id} for version {version.id} ({origin})")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="translation_created",
                action_description=f'Created {language_name} translation for policy "{policy.title}" ({origin})',
                actor_user_id=user_id,
                context={
                    "translation_id": translation.id,
                    "policy_version_id": version.id,
                    "language_code": data.language_code,
                    "translated_by": translated_by.value,
                },
            )
        )
        await self._emit(
            TranslationCreatedEvent(
                organization_id=organization_id,
                translation_id=translation.id,
                actor_user_id=user_id,
                policy_version_id=version.id,
                language_code=data.language_code,
                translated_by=translated_by.value,
            )
        )
        return translation

    async def update_translation(
        self,
        translation_id: str,
        data: UpdateTranslationInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyVersionTranslationModel:
        """
        Заменить содержимое перевода.

        Правка человеком переводит AI-перевод в HUMAN и снимает is_stale.
        """
        async with UnitOfWork(self._session_factory, operation="translation_update") as uow:
            translation = await self._require_translation(uow, translation_id, organization_id)
            _, policy = await self._require_version(uow, translation.policy_version_id, organization_id)

            was_stale = translation.is_stale
            translation.content = data.content
            translation.plain_text = extract_plain_text(data.content)
            translation.title = data.title or translation.title
            if translation.translated_by == TranslationSource.AI.value:
                translation.translated_by = TranslationSource.HUMAN.value
            translation.is_stale = False
            translation.review_notes = data.notes or translation.review_notes
            translation.updated_at = datetime.now(timezone.utc)

        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="translation_updated",
                action_description=f'Updated {translation.language_name} translation for policy "{policy.title}"',
                actor_user_id=user_id,
                context={
                    "translation_id": translation.id,
                    "language_code": translation.language_code,
                    "was_stale": was_stale,
                },
            )
        )
        await self._emit(
            TranslationUpdatedEvent(
                organization_id=organization_id,
                translation_id=translation.id,
                actor_user_id=user_id,
                policy_version_id=translation.policy_version_id,
                language_code=translation.language_code,
                was_stale=was_stale,
            )
        )
        return translation

    async def review_translation(
        self,
        translation_id: str,
        data: ReviewTranslationInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyVersionTranslationModel:
        """Сменить статус ревью, проставив ревьюера и время. Контент не меняется."""
        async with UnitOfWork(self._session_factory, operation="translation_review") as uow:
            translation = await self._require_translation(uow, translation_id, organization_id)
            _, policy = await self._require_version(uow, translation.policy_version_id, organization_id)

            previous_status = translation.review_status
            now = datetime.now(timezone.utc)
            translation.review_status = data.status.value
            translation.reviewed_at = now
            translation.reviewed_by_id = user_id
            translation.review_notes = data.notes or translation.review_notes
            translation.updated_at = now

        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="translation_reviewed",
                action_description=(
                    f'Reviewed {translation.language_name} translation for policy '
                    f'"{policy.title}" - {data.status.value}'
                ),
                actor_user_id=user_id,
                context={
                    "translation_id": translation.id,
                    "language_code": translation.language_code,
                    "previous_status": previous_status,
                    "new_status": data.status.value,
                },
            )
        )
        await self._emit(
            TranslationReviewedEvent(
                organization_id=organization_id,
                translation_id=translation.id,
                actor_user_id=user_id,
                policy_version_id=translation.policy_version_id,
                language_code=translation.language_code,
                review_status=data.status.value,
            )
        )
        return translation

    async def refresh_stale_translation(
        self,
        translation_id: str,
        user_id: str,
        organization_id: str,
    ) -> PolicyVersionTranslationModel:
        """
        Перевести заново устаревший перевод через AI.

        Raises:
            InvalidStateError: Перевод не помечен устаревшим
            UpstreamFailureError: AI-навык сообщил об ошибке
        """
        async with UnitOfWork(self._session_factory, operation="translation_refresh_precheck") as uow:
            translation = await self._require_translation(uow, translation_id, organization_id)
            if not translation.is_stale:
                raise InvalidStateError(
                    f"Translation {translation_id} is not stale (required: stale, current: up to date)",
                    current_status="UP_TO_DATE",
                    required_status="STALE",
                )
            version, policy = await self._require_version(uow, translation.policy_version_id, organization_id)

        content, title, ai_model = await self._translate_with_ai(
            version, policy.title, translation.language_code, user_id, organization_id
        )

        async with UnitOfWork(self._session_factory, operation="translation_refresh") as uow:
            translation = await self._require_translation(uow, translation_id, organization_id)
            translation.content = content
            translation.plain_text = extract_plain_text(content)
            translation.title = title
            translation.translated_by = TranslationSource.AI.value
            translation.ai_model = ai_model
            translation.review_status = TranslationReviewStatus.PENDING_REVIEW.value
            translation.is_stale = False
            translation.reviewed_at = None
            translation.reviewed_by_id = None
            translation.review_notes = None
            translation.updated_at = datetime.now(timezone.utc)

        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="translation_refreshed",
                action_description=(
                    f'Re-translated stale {translation.language_name} translation for policy "{policy.title}"'
                ),
                actor_user_id=user_id,
                context={"translation_id": translation.id, "language_code": translation.language_code},
            )
        )
        await self._emit(
            TranslationRefreshedEvent(
                organization_id=organization_id,
                translation_id=translation.id,
                actor_user_id=user_id,
                policy_version_id=translation.policy_version_id,
                language_code=translation.language_code,
            )
        )
        return translation

    # ==================== Queries ====================

    async def get(self, translation_id: str, organization_id: str) -> PolicyVersionTranslationModel:
        async with UnitOfWork(self._session_factory, operation="translation_get") as uow:
            return await self._require_translation(uow, translation_id, organization_id)

    async def list_by_version(self, policy_version_id: str, organization_id: str) -> List[PolicyVersionTranslationModel]:
        async with UnitOfWork(self._session_factory, operation="translation_list") as uow:
            await self._require_version(uow, policy_version_id, organization_id)
            return await uow.translations.list_by_version(policy_version_id, organization_id)

    async def list_stale(self, organization_id: str) -> List[PolicyVersionTranslationModel]:
        async with UnitOfWork(self._session_factory, operation="translation_list_stale") as uow:
            return await uow.translations.list_stale(organization_id)

    @staticmethod
    def available_languages() -> Dict[str, str]:
        return dict(LANGUAGE_NAMES)

    # ==================== Helpers ====================

    async def _translate_with_ai(
        self,
        version: PolicyVersionModel,
        title: str,
        language_code: str,
        user_id: str,
        organization_id: str,
    ) -> Tuple[str, str, Optional[str]]:
        """
        Перевести тело (с сохранением форматирования) и заголовок (без него).

        Returns:
            (content, title, ai_model)
        """
        context = SkillContext(
            organization_id=organization_id,
            user_id=user_id,
            entity_type=SKILL_ENTITY_TYPE,
            entity_id=version.id,
            permissions=[TRANSLATE_PERMISSION],
        )

        body = await self._skill.execute_skill(
            "translate",
            {"content": version.content, "targetLanguage": language_code, "preserveFormatting": True},
            context,
        )
        translated_content = body.data.get("translated") if body.success else None
        if not translated_content:
            error = body.error or "Unknown error"
            raise UpstreamFailureError(
                f"AI translation failed for policy version {version.id}: {error}",
                upstream_error=body.error,
                details={"policy_version_id": version.id, "language_code": language_code},
            )

        heading = await self._skill.execute_skill(
            "translate",
            {"content": title, "targetLanguage": language_code, "preserveFormatting": False},
            context,
        )
        translated_title = heading.data.get("translated") if heading.success else None
        if not translated_title:
            error = heading.error or "Unknown error"
            raise UpstreamFailureError(
                f"AI title translation failed for policy version {version.id}: {error}",
                upstream_error=heading.error,
                details={"policy_version_id": version.id, "language_code": language_code},
            )

        return translated_content, translated_title, body.metadata.get("model")

    @staticmethod
    async def _require_version(
        uow: UnitOfWork, version_id: str, organization_id: str
    ) -> Tuple[PolicyVersionModel, PolicyModel]:
        version = await uow.policies.get_version(version_id, organization_id)
        if version is None:
            raise NotFoundError("Policy version", version_id)
        policy = await uow.policies.get(version.policy_id, organization_id)
        if policy is None:
            raise NotFoundError("Policy", version.policy_id)
        return version, policy

    @staticmethod
    async def _require_translation(
        uow: UnitOfWork, translation_id: str, organization_id: str
    ) -> PolicyVersionTranslationModel:
        translation = await uow.translations.get(translation_id, organization_id)
        if translation is None:
            raise NotFoundError("Translation", translation_id)
        return translation
