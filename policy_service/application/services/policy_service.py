"""
PolicyService - жизненный цикл политики: черновик, публикация, вывод из оборота.

Публикация выполняется в одной транзакции: снятие is_latest с прежней
версии, вставка новой версии и обновление головной записи политики.
"""

import logging
from datetime import datetime, timezone
from typing import List

from ...core.errors import NotFoundError, InvalidStateError, PreconditionFailedError
from ...domain.interfaces import AuditEntry
from ...domain.policy_context.services import extract_plain_text, generate_unique_slug, has_content
from ...domain.policy_context.value_objects import FieldChange, PolicyStatus
from ...events.policy_events import (
    PolicyCreatedEvent,
    PolicyPublishedEvent,
    PolicyRetiredEvent,
    PolicyStatusChangedEvent,
    PolicyUpdatedEvent,
)
from ...infrastructure.persistence.models import AuditLogModel, PolicyModel, PolicyVersionModel
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..dto import (
    CreatePolicyInput,
    ListPoliciesQuery,
    PolicyListResult,
    PublishPolicyInput,
    UpdatePolicyInput,
)
from .base import ApplicationService, to_jsonable

logger = logging.getLogger("policy-service.application.policy_service")

POLICY_ENTITY = "POLICY"
CONTENT_PLACEHOLDER = "[content]"


class PolicyService(ApplicationService):
    """
    Сервис политик.

    Пример:
        >>> service = PolicyService(session_factory, event_bus, audit_service)
        >>> policy = await service.create(CreatePolicyInput(...), "user-1", "org-1")
        >>> version = await service.publish(policy.id, PublishPolicyInput(), "user-1", "org-1")
    """

    async def create(self, data: CreatePolicyInput, user_id: str, organization_id: str) -> PolicyModel:
        """
        Создать политику в статусе DRAFT с current_version = 0.

        Raises:
            SlugExhaustedError: Не удалось подобрать уникальный slug
        """
        async with UnitOfWork(self._session_factory, operation="policy_create") as uow:
            slug = await generate_unique_slug(
                data.title,
                lambda candidate: uow.policies.slug_exists(organization_id, candidate),
            )
            now = datetime.now(timezone.utc)
            seeded = bool(data.content)
            policy = await uow.policies.add(
                PolicyModel(
                    organization_id=organization_id,
                    title=data.title,
                    slug=slug,
                    policy_type=data.policy_type.value,
                    category=data.category,
                    status=PolicyStatus.DRAFT.value,
                    current_version=0,
                    draft_content=data.content,
                    draft_updated_at=now if seeded else None,
                    draft_updated_by_id=user_id if seeded else None,
                    owner_id=data.owner_id or user_id,
                    effective_date=data.effective_date,
                    review_date=data.review_date,
                    created_by_id=user_id,
                    created_at=now,
                    updated_at=now,
                )
            )

        logger.info(f"Created policy {policy.id} ({policy.slug}) in organization {organization_id}")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="created",
                action_description=f'Created policy "{policy.title}"',
                actor_user_id=user_id,
            )
        )
        await self._emit(
            PolicyCreatedEvent(
                organization_id=organization_id,
                policy_id=policy.id,
                actor_user_id=user_id,
                title=policy.title,
                owner_id=policy.owner_id,
            )
        )
        return policy

    async def get(self, policy_id: str, organization_id: str) -> PolicyModel:
        async with UnitOfWork(self._session_factory, operation="policy_get") as uow:
            return await self._require_policy(uow, policy_id, organization_id)

    async def list(self, query: ListPoliciesQuery, organization_id: str) -> PolicyListResult:
        async with UnitOfWork(self._session_factory, operation="policy_list") as uow:
            items, total = await uow.policies.list(
                organization_id,
                status=query.status.value if query.status else None,
                policy_type=query.policy_type.value if query.policy_type else None,
                owner_id=query.owner_id,
                search=query.search,
                limit=query.limit,
                offset=query.offset,
            )
        return PolicyListResult(items=items, total=total, page=query.page, limit=query.limit)

    async def update_draft(
        self,
        policy_id: str,
        data: UpdatePolicyInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyModel:
        """
        Обновить черновик политики.

        Если политика опубликована и черновика нет, сначала копирует в
        черновик содержимое последней версии, затем применяет изменения.

        Raises:
            NotFoundError: Политика не найдена
            InvalidStateError: Политика на утверждении
        """
        async with UnitOfWork(self._session_factory, operation="policy_update_draft") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            status = PolicyStatus(policy.status)
            if not status.is_editable():
                raise InvalidStateError(
                    f"Cannot update policy {policy_id} while pending approval "
                    f"(current status: {status.value}, required: any status except {status.value})",
                    current_status=status.value,
                )

            now = datetime.now(timezone.utc)
            if status is PolicyStatus.PUBLISHED and not has_content(policy.draft_content):
                latest = await uow.policies.get_latest_version(policy.id, organization_id)
                if latest is not None:
                    policy.draft_content = latest.content
                    policy.draft_updated_at = now
                    policy.draft_updated_by_id = user_id
                    logger.debug(f"Seeded draft of policy {policy_id} from version {latest.version}")

            changes = await self._apply_changes(uow, policy, data, user_id, organization_id, now)
            if changes:
                policy.updated_at = now

        if changes:
            changed_fields = ", ".join(change.field for change in changes)
            await self._log_activity(
                AuditEntry(
                    organization_id=organization_id,
                    entity_type=POLICY_ENTITY,
                    entity_id=policy.id,
                    action="updated",
                    action_description=f'Updated {changed_fields} on policy "{policy.title}"',
                    actor_user_id=user_id,
                    changes={
                        "old_value": {c.field: to_jsonable(c.old) for c in changes},
                        "new_value": {c.field: to_jsonable(c.new) for c in changes},
                    },
                )
            )
            await self._emit(
                PolicyUpdatedEvent(
                    organization_id=organization_id,
                    policy_id=policy.id,
                    actor_user_id=user_id,
                    changes=[
                        {"field": c.field, "old": to_jsonable(c.old), "new": to_jsonable(c.new)}
                        for c in changes
                    ],
                )
            )
        return policy

    async def _apply_changes(
        self,
        uow: UnitOfWork,
        policy: PolicyModel,
        data: UpdatePolicyInput,
        user_id: str,
        organization_id: str,
        now: datetime,
    ) -> List[FieldChange]:
        provided = data.model_fields_set
        changes: List[FieldChange] = []

        if "title" in provided and data.title is not None and data.title != policy.title:
            changes.append(FieldChange("title", policy.title, data.title))
            policy.title = data.title
            policy.slug = await generate_unique_slug(
                data.title,
                lambda candidate: uow.policies.slug_exists(
                    organization_id, candidate, exclude_policy_id=policy.id
                ),
            )

        if (
            "policy_type" in provided
            and data.policy_type is not None
            and data.policy_type.value != policy.policy_type
        ):
            changes.append(FieldChange("policy_type", policy.policy_type, data.policy_type.value))
            policy.policy_type = data.policy_type.value

        if "category" in provided and data.category != policy.category:
            changes.append(FieldChange("category", policy.category, data.category))
            policy.category = data.category

        if "content" in provided and data.content is not None:
            changes.append(FieldChange("content", CONTENT_PLACEHOLDER, CONTENT_PLACEHOLDER))
            policy.draft_content = data.content
            policy.draft_updated_at = now
            policy.draft_updated_by_id = user_id

        if "owner_id" in provided and data.owner_id is not None and data.owner_id != policy.owner_id:
            changes.append(FieldChange("owner_id", policy.owner_id, data.owner_id))
            policy.owner_id = data.owner_id

        if "effective_date" in provided:
            changes.append(FieldChange("effective_date", policy.effective_date, data.effective_date))
            policy.effective_date = data.effective_date

        if "review_date" in provided:
            changes.append(FieldChange("review_date", policy.review_date, data.review_date))
            policy.review_date = data.review_date

        return changes

    async def publish(
        self,
        policy_id: str,
        data: PublishPolicyInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyVersionModel:
        """
        Опубликовать черновик как новую неизменяемую версию.

        Raises:
            NotFoundError: Политика не найдена
            InvalidStateError: Политика выведена из оборота
            PreconditionFailedError: Черновик пуст
        """
        async with UnitOfWork(self._session_factory, operation="policy_publish") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            previous_status = PolicyStatus(policy.status)
            if not previous_status.can_transition_to(PolicyStatus.PUBLISHED):
                raise InvalidStateError(
                    f"Cannot publish policy {policy_id} in status {previous_status.value} "
                    f"(required: any status except {PolicyStatus.RETIRED.value})",
                    current_status=previous_status.value,
                )
            if not has_content(policy.draft_content):
                raise PreconditionFailedError(
                    f"Cannot publish policy {policy_id} without draft content",
                    details={"policy_id": policy_id},
                )

            new_version = policy.current_version + 1
            now = datetime.now(timezone.utc)

            await uow.policies.clear_latest_flag(policy.id, organization_id)
            version = await uow.policies.add_version(
                PolicyVersionModel(
                    organization_id=organization_id,
                    policy_id=policy.id,
                    version=new_version,
                    version_label=data.version_label or f"v{new_version}",
                    content=policy.draft_content,
                    plain_text=extract_plain_text(policy.draft_content),
                    summary=data.summary,
                    change_notes=data.change_notes,
                    is_latest=True,
                    published_at=now,
                    published_by_id=user_id,
                    effective_date=data.effective_date or now,
                    created_at=now,
                )
            )

            policy.status = PolicyStatus.PUBLISHED.value
            policy.current_version = new_version
            policy.draft_content = None
            policy.draft_updated_at = None
            policy.draft_updated_by_id = None
            policy.updated_at = now

        logger.info(f"Published policy {policy_id} version {new_version}")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="published",
                action_description=f'Published version {new_version} of policy "{policy.title}"',
                actor_user_id=user_id,
                context={"policy_version_id": version.id, "version": new_version},
            )
        )
        await self._emit(
            PolicyPublishedEvent(
                organization_id=organization_id,
                policy_id=policy.id,
                actor_user_id=user_id,
                policy_version_id=version.id,
                version=new_version,
            )
        )
        if previous_status is not PolicyStatus.PUBLISHED:
            await self._emit(
                PolicyStatusChangedEvent(
                    organization_id=organization_id,
                    policy_id=policy.id,
                    actor_user_id=user_id,
                    from_status=previous_status.value,
                    to_status=PolicyStatus.PUBLISHED.value,
                )
            )
        return version

    async def retire(self, policy_id: str, user_id: str, organization_id: str) -> PolicyModel:
        """
        Вывести политику из оборота.

        Raises:
            NotFoundError: Политика не найдена
            InvalidStateError: Политика уже RETIRED
        """
        async with UnitOfWork(self._session_factory, operation="policy_retire") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            if PolicyStatus(policy.status).is_terminal():
                raise InvalidStateError(
                    f"Policy {policy_id} is already retired "
                    f"(current status: {policy.status}, required: any status except RETIRED)",
                    current_status=policy.status,
                )
            now = datetime.now(timezone.utc)
            policy.status = PolicyStatus.RETIRED.value
            policy.retired_at = now
            policy.updated_at = now

        logger.info(f"Retired policy {policy_id}")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="retired",
                action_description=f'Retired policy "{policy.title}"',
                actor_user_id=user_id,
            )
        )
        await self._emit(
            PolicyRetiredEvent(
                organization_id=organization_id,
                policy_id=policy.id,
                actor_user_id=user_id,
            )
        )
        return policy

    async def list_versions(self, policy_id: str, organization_id: str) -> List[PolicyVersionModel]:
        async with UnitOfWork(self._session_factory, operation="policy_list_versions") as uow:
            await self._require_policy(uow, policy_id, organization_id)
            return await uow.policies.list_versions(policy_id, organization_id)

    async def get_version(self, version_id: str, organization_id: str) -> PolicyVersionModel:
        async with UnitOfWork(self._session_factory, operation="policy_get_version") as uow:
            version = await uow.policies.get_version(version_id, organization_id)
            if version is None:
                raise NotFoundError("Policy version", version_id)
            return version

    async def get_activity(self, policy_id: str, organization_id: str, limit: int = 100) -> List[AuditLogModel]:
        """Журнал аудита политики, новые записи первыми."""
        async with UnitOfWork(self._session_factory, operation="policy_activity") as uow:
            await self._require_policy(uow, policy_id, organization_id)
            return await uow.audit_logs.list_for_entity(
                organization_id, POLICY_ENTITY, policy_id, limit=limit
            )

    @staticmethod
    async def _require_policy(uow: UnitOfWork, policy_id: str, organization_id: str) -> PolicyModel:
        policy = await uow.policies.get(policy_id, organization_id)
        if policy is None:
            raise NotFoundError("Policy", policy_id)
        return policy
