"""
PolicyCaseAssociationService - связи политик с делами расследований.

Дело хранится во внешней системе: сервис видит только его идентификатор
в пределах организации. Связь фиксирует версию политики, действовавшую
на момент нарушения, и учитывается в статистике нарушений.
"""

import logging
from typing import List

from ...core.errors import ConflictError, NotFoundError
from ...domain.interfaces import AuditEntry
from ...domain.policy_context.value_objects import (
    FieldChange,
    PolicyCaseLinkType,
    WorkflowEntityType,
)
from ...events.association_events import PolicyLinkedToCaseEvent, PolicyUnlinkedFromCaseEvent
from ...infrastructure.persistence.models import PolicyCaseAssociationModel, PolicyModel
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..dto import (
    CaseLinkListResult,
    CreateCaseLinkInput,
    ListCaseLinksQuery,
    UpdateCaseLinkInput,
    ViolationStatItem,
    ViolationStatsQuery,
)
from .base import ApplicationService, to_jsonable

logger = logging.getLogger("policy-service.application.association_service")

POLICY_ENTITY = WorkflowEntityType.POLICY.value
CASE_ENTITY = WorkflowEntityType.CASE.value


class PolicyCaseAssociationService(ApplicationService):
    """
    Сервис связей политика -> дело.

    Типы связи:
    - VIOLATION: политика нарушена в деле
    - GOVERNING: политика регулирует ситуацию в деле
    - REFERENCE: дело ссылается на политику

    Все операции ограничены организацией; на одну пару (политика, дело)
    приходится не больше одной связи.
    """

    async def create(
        self,
        data: CreateCaseLinkInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyCaseAssociationModel:
        """
        Связать политику с делом.

        Raises:
            NotFoundError: Политика или указанная версия не найдены
            ConflictError: Политика уже связана с этим делом
        """
        async with UnitOfWork(self._session_factory, operation="case_link_create") as uow:
            policy = await self._require_policy(uow, data.policy_id, organization_id)

            if data.policy_version_id:
                version = await uow.policies.get_version(data.policy_version_id, organization_id)
                if version is None or version.policy_id != policy.id:
                    raise NotFoundError(
                        "PolicyVersion",
                        data.policy_version_id,
                        message=f"Policy version with ID {data.policy_version_id} not found",
                    )
                policy_version_id = version.id
            else:
                latest = await uow.policies.get_latest_version(policy.id, organization_id)
                policy_version_id = latest.id if latest is not None else None

            if await uow.case_links.find_link(policy.id, data.case_id, organization_id) is not None:
                raise ConflictError(
                    "Policy already linked to this case",
                    details={"policy_id": policy.id, "case_id": data.case_id},
                )

            association = await uow.case_links.add(
                PolicyCaseAssociationModel(
                    organization_id=organization_id,
                    policy_id=policy.id,
                    policy_version_id=policy_version_id,
                    case_id=data.case_id,
                    link_type=data.link_type.value,
                    link_reason=data.link_reason,
                    violation_date=data.violation_date,
                    created_by_id=user_id,
                )
            )

        logger.info(f"Linked policy {policy.id} to case {data.case_id} ({data.link_type.value})")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=CASE_ENTITY,
                entity_id=data.case_id,
                action="policy_linked",
                action_description=f'Policy linked: "{policy.title}" ({data.link_type.value})',
                actor_user_id=user_id,
                context={
                    "policy_id": policy.id,
                    "policy_version_id": policy_version_id,
                    "link_type": data.link_type.value,
                },
            )
        )
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy.id,
                action="linked_to_case",
                action_description=f"Linked to case: {data.case_id} ({data.link_type.value})",
                actor_user_id=user_id,
                context={"case_id": data.case_id, "link_type": data.link_type.value},
            )
        )
        await self._emit(
            PolicyLinkedToCaseEvent(
                organization_id=organization_id,
                association_id=association.id,
                policy_id=policy.id,
                case_id=data.case_id,
                link_type=data.link_type.value,
                actor_user_id=user_id,
            )
        )
        return association

    async def update(
        self,
        association_id: str,
        data: UpdateCaseLinkInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyCaseAssociationModel:
        """
        Изменить тип, причину или дату нарушения.

        Raises:
            NotFoundError: Связь не найдена
        """
        provided = data.model_fields_set
        changes: List[FieldChange] = []
        async with UnitOfWork(self._session_factory, operation="case_link_update") as uow:
            association = await self._require_association(uow, association_id, organization_id)

            if (
                "link_type" in provided
                and data.link_type is not None
                and data.link_type.value != association.link_type
            ):
                changes.append(FieldChange("link_type", association.link_type, data.link_type.value))
                association.link_type = data.link_type.value

            if "link_reason" in provided and data.link_reason != association.link_reason:
                changes.append(FieldChange("link_reason", association.link_reason, data.link_reason))
                association.link_reason = data.link_reason

            if "violation_date" in provided and data.violation_date != association.violation_date:
                changes.append(FieldChange("violation_date", association.violation_date, data.violation_date))
                association.violation_date = data.violation_date

            policy = await uow.policies.get(association.policy_id, organization_id)

        if changes:
            changed_fields = ", ".join(change.field for change in changes)
            policy_title = policy.title if policy is not None else association.policy_id
            logger.info(f"Updated policy-case association {association_id}: {changed_fields}")
            await self._log_activity(
                AuditEntry(
                    organization_id=organization_id,
                    entity_type=CASE_ENTITY,
                    entity_id=association.case_id,
                    action="policy_link_updated",
                    action_description=f'Policy link updated: "{policy_title}" - {changed_fields}',
                    actor_user_id=user_id,
                    changes={
                        "old_value": {c.field: to_jsonable(c.old) for c in changes},
                        "new_value": {c.field: to_jsonable(c.new) for c in changes},
                    },
                )
            )
        return association

    async def delete(self, association_id: str, user_id: str, organization_id: str) -> None:
        """
        Удалить связь.

        Raises:
            NotFoundError: Связь не найдена
        """
        async with UnitOfWork(self._session_factory, operation="case_link_delete") as uow:
            association = await self._require_association(uow, association_id, organization_id)
            policy = await uow.policies.get(association.policy_id, organization_id)
            await uow.case_links.delete(association)

        policy_title = policy.title if policy is not None else association.policy_id
        logger.info(f"Unlinked policy {association.policy_id} from case {association.case_id}")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=CASE_ENTITY,
                entity_id=association.case_id,
                action="policy_unlinked",
                action_description=f'Policy unlinked: "{policy_title}"',
                actor_user_id=user_id,
                context={"policy_id": association.policy_id},
            )
        )
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=association.policy_id,
                action="unlinked_from_case",
                action_description=f"Unlinked from case: {association.case_id}",
                actor_user_id=user_id,
                context={"case_id": association.case_id},
            )
        )
        await self._emit(
            PolicyUnlinkedFromCaseEvent(
                organization_id=organization_id,
                association_id=association.id,
                policy_id=association.policy_id,
                case_id=association.case_id,
                actor_user_id=user_id,
            )
        )

    async def get(self, association_id: str, organization_id: str) -> PolicyCaseAssociationModel:
        async with UnitOfWork(self._session_factory, operation="case_link_get") as uow:
            return await self._require_association(uow, association_id, organization_id)

    async def list(self, query: ListCaseLinksQuery, organization_id: str) -> CaseLinkListResult:
        async with UnitOfWork(self._session_factory, operation="case_link_list") as uow:
            items, total = await uow.case_links.list(
                organization_id,
                policy_id=query.policy_id,
                case_id=query.case_id,
                link_type=query.link_type.value if query.link_type else None,
                limit=query.limit,
                offset=query.offset,
            )
        return CaseLinkListResult(items=items, total=total, page=query.page, limit=query.limit)

    async def list_by_policy(self, policy_id: str, organization_id: str) -> List[PolicyCaseAssociationModel]:
        """
        Связи политики, новые первыми.

        Raises:
            NotFoundError: Политика не найдена
        """
        async with UnitOfWork(self._session_factory, operation="case_link_by_policy") as uow:
            await self._require_policy(uow, policy_id, organization_id)
            return await uow.case_links.list_by_policy(policy_id, organization_id)

    async def list_by_case(self, case_id: str, organization_id: str) -> List[PolicyCaseAssociationModel]:
        """Связи дела: сначала нарушения, затем регулирующие, затем ссылки."""
        async with UnitOfWork(self._session_factory, operation="case_link_by_case") as uow:
            links = await uow.case_links.list_by_case(case_id, organization_id)
        # sorted() стабилен: внутри типа остается порядок created_at desc
        return sorted(links, key=lambda link: PolicyCaseLinkType(link.link_type).priority)

    async def get_violation_stats(
        self, query: ViolationStatsQuery, organization_id: str
    ) -> List[ViolationStatItem]:
        """Число нарушений по политикам, самые нарушаемые первыми."""
        async with UnitOfWork(self._session_factory, operation="case_link_violation_stats") as uow:
            rows = await uow.case_links.count_violations_by_policy(
                organization_id,
                PolicyCaseLinkType.VIOLATION.value,
                start_date=query.start_date,
                end_date=query.end_date,
                policy_type=query.policy_type.value if query.policy_type else None,
            )
        return [
            ViolationStatItem(
                policy_id=policy_id,
                policy_title=title,
                policy_type=policy_type,
                violation_count=count,
            )
            for policy_id, title, policy_type, count in rows
        ]

    @staticmethod
    async def _require_policy(uow: UnitOfWork, policy_id: str, organization_id: str) -> PolicyModel:
        policy = await uow.policies.get(policy_id, organization_id)
        if policy is None:
            raise NotFoundError("Policy", policy_id, message=f"Policy with ID {policy_id} not found in organization")
        return policy

    @staticmethod
    async def _require_association(
        uow: UnitOfWork, association_id: str, organization_id: str
    ) -> PolicyCaseAssociationModel:
        association = await uow.case_links.get(association_id, organization_id)
        if association is None:
            raise NotFoundError(
                "PolicyCaseAssociation",
                association_id,
                message=f"Policy-case association with ID {association_id} not found",
            )
        return association
