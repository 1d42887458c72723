"""
PolicyApprovalService - связка статуса политики с внешним движком workflow.

Политика не хранит правила утверждения: сервис переводит намерения
пользователя (отправить, отозвать) в вызовы движка и обновляет статус.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ...core.errors import NotFoundError, InvalidStateError, PreconditionFailedError
from ...domain.interfaces import AuditEntry, IAuditLog, IWorkflowEngine, WorkflowTemplateInfo
from ...domain.policy_context.services import has_content
from ...domain.policy_context.value_objects import (
    DefaultTemplate,
    ExplicitTemplate,
    NoTemplateConfigured,
    PolicyStatus,
    TemplateResolution,
    WorkflowEntityType,
    WorkflowInstanceStatus,
)
from ...events.policy_events import PolicyApprovalCancelledEvent, PolicySubmittedForApprovalEvent
from ...events.publisher import DomainEventPublisher
from ...infrastructure.persistence.models import PolicyModel
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..dto import (
    ApprovalStatusView,
    CancelApprovalInput,
    CurrentStep,
    Reviewer,
    SubmitForApprovalInput,
    SubmitForApprovalResult,
)
from .base import ApplicationService

logger = logging.getLogger("policy-service.application.approval_service")

POLICY_ENTITY = WorkflowEntityType.POLICY.value


class PolicyApprovalService(ApplicationService):
    """
    Сервис утверждения политик.

    Атрибуты:
        _workflow_engine: Движок workflow (запуск, отмена, чтение экземпляров)
    """

    def __init__(
        self,
        session_factory,
        workflow_engine: IWorkflowEngine,
        event_publisher: DomainEventPublisher,
        audit_log: IAuditLog,
    ):
        super().__init__(session_factory, event_publisher, audit_log)
        self._workflow_engine = workflow_engine

    async def resolve_template(self, organization_id: str, template_id: Optional[str] = None) -> TemplateResolution:
        """Явный шаблон, шаблон POLICY по умолчанию или NoTemplateConfigured."""
        if template_id:
            return ExplicitTemplate(template_id)
        template = await self._workflow_engine.find_default_template(organization_id, POLICY_ENTITY)
        if template is None:
            return NoTemplateConfigured()
        return DefaultTemplate(template)

    async def submit_for_approval(
        self,
        policy_id: str,
        data: SubmitForApprovalInput,
        user_id: str,
        organization_id: str,
    ) -> SubmitForApprovalResult:
        """
        Отправить черновик политики на утверждение.

        Экземпляр workflow запускается до смены статуса: если запуск не
        удался, политика остается в DRAFT.

        Raises:
            NotFoundError: Политика не найдена
            InvalidStateError: Статус не DRAFT
            PreconditionFailedError: Пустой черновик или нет шаблона workflow
        """
        async with UnitOfWork(self._session_factory, operation="approval_precheck") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            self._ensure_submittable(policy)

        resolution = await self.resolve_template(organization_id, data.template_id)
        if isinstance(resolution, NoTemplateConfigured):
            raise PreconditionFailedError(
                "No approval workflow configured for policies. "
                "Please create a default workflow template for POLICY entity type.",
                details={"policy_id": policy_id},
            )

        workflow_instance_id = await self._workflow_engine.start_workflow(
            organization_id=organization_id,
            entity_type=POLICY_ENTITY,
            entity_id=policy_id,
            template_id=resolution.template_id,
            actor_user_id=user_id,
        )

        async with UnitOfWork(self._session_factory, operation="approval_submit") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            policy.status = PolicyStatus.PENDING_APPROVAL.value
            policy.updated_at = datetime.now(timezone.utc)

        logger.info(f"Policy {policy_id} submitted for approval (workflow {workflow_instance_id})")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy_id,
                action="submitted_for_approval",
                action_description=f'Policy "{policy.title}" submitted for approval',
                actor_user_id=user_id,
                context={
                    "workflow_instance_id": workflow_instance_id,
                    "template_id": resolution.template_id,
                    "notes": data.notes,
                },
            )
        )
        await self._emit(
            PolicySubmittedForApprovalEvent(
                organization_id=organization_id,
                policy_id=policy_id,
                actor_user_id=user_id,
                title=policy.title,
                workflow_instance_id=workflow_instance_id,
                notes=data.notes,
            )
        )
        return SubmitForApprovalResult(policy=policy, workflow_instance_id=workflow_instance_id)

    async def cancel_approval(
        self,
        policy_id: str,
        data: CancelApprovalInput,
        user_id: str,
        organization_id: str,
    ) -> PolicyModel:
        """
        Отозвать политику с утверждения и вернуть в DRAFT.

        Статус меняется до отмены экземпляра в движке, чтобы слушатель
        workflow.cancelled видел уже выполненный переход и не писал
        отказ в аудит. Если движок не смог отменить экземпляр, прежний
        статус восстанавливается.

        Raises:
            NotFoundError: Политика не найдена
            InvalidStateError: Нет активного экземпляра workflow
        """
        async with UnitOfWork(self._session_factory, operation="approval_cancel_precheck") as uow:
            await self._require_policy(uow, policy_id, organization_id)

        instance = await self._workflow_engine.find_active_instance(organization_id, POLICY_ENTITY, policy_id)
        if instance is None:
            raise InvalidStateError(
                f"No active approval workflow found for policy {policy_id}",
                required_status=WorkflowInstanceStatus.ACTIVE.value,
            )

        async with UnitOfWork(self._session_factory, operation="approval_cancel") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)
            previous_status = policy.status
            previous_updated_at = policy.updated_at
            policy.status = PolicyStatus.DRAFT.value
            policy.updated_at = datetime.now(timezone.utc)

        try:
            await self._workflow_engine.cancel(
                instance.id,
                organization_id,
                actor_user_id=user_id,
                reason=data.reason,
            )
        except Exception:
            logger.error(
                f"Workflow {instance.id} cancellation failed, restoring policy {policy_id} "
                f"to {previous_status}"
            )
            async with UnitOfWork(self._session_factory, operation="approval_cancel_rollback") as uow:
                restored = await self._require_policy(uow, policy_id, organization_id)
                restored.status = previous_status
                restored.updated_at = previous_updated_at
            raise

        logger.info(f"Approval of policy {policy_id} cancelled (workflow {instance.id})")
        await self._log_activity(
            AuditEntry(
                organization_id=organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy_id,
                action="approval_cancelled",
                action_description=(
                    f'Policy "{policy.title}" approval workflow cancelled'
                    + (f": {data.reason}" if data.reason else "")
                ),
                actor_user_id=user_id,
                context={"workflow_instance_id": instance.id, "reason": data.reason},
            )
        )
        await self._emit(
            PolicyApprovalCancelledEvent(
                organization_id=organization_id,
                policy_id=policy_id,
                actor_user_id=user_id,
                workflow_instance_id=instance.id,
                reason=data.reason,
            )
        )
        return policy

    async def get_approval_status(self, policy_id: str, organization_id: str) -> ApprovalStatusView:
        """
        Состояние утверждения по последнему созданному экземпляру workflow.

        Raises:
            NotFoundError: Политика не найдена
        """
        async with UnitOfWork(self._session_factory, operation="approval_status") as uow:
            policy = await self._require_policy(uow, policy_id, organization_id)

        instance = await self._workflow_engine.find_latest_instance(organization_id, POLICY_ENTITY, policy_id)
        if instance is None:
            return ApprovalStatusView(policy_id=policy_id, policy_status=policy.status)

        current_step = None
        stage = instance.template.find_stage(instance.current_stage) if instance.template else None
        if stage is not None:
            current_step = CurrentStep(
                stage_id=stage.id,
                stage_name=stage.name,
                description=stage.description,
            )

        reviewers: List[Reviewer] = []
        for step_id, state in (instance.step_states or {}).items():
            if isinstance(state, dict) and state.get("completedBy"):
                reviewers.append(
                    Reviewer(
                        step_id=step_id,
                        user_id=state["completedBy"],
                        status=state.get("status") or "completed",
                        completed_at=state.get("completedAt"),
                    )
                )

        return ApprovalStatusView(
            policy_id=policy_id,
            policy_status=policy.status,
            workflow_instance=instance,
            current_step=current_step,
            reviewers=reviewers,
            is_active=instance.status == WorkflowInstanceStatus.ACTIVE.value,
        )

    async def list_available_templates(self, organization_id: str) -> List[WorkflowTemplateInfo]:
        """Активные шаблоны POLICY: сначала по умолчанию, затем по имени."""
        return await self._workflow_engine.list_templates(organization_id, POLICY_ENTITY, active_only=True)

    @staticmethod
    def _ensure_submittable(policy: PolicyModel) -> None:
        if policy.status != PolicyStatus.DRAFT.value:
            raise InvalidStateError(
                f"Policy {policy.id} must be in DRAFT status to submit for approval. "
                f"Current status: {policy.status}",
                current_status=policy.status,
                required_status=PolicyStatus.DRAFT.value,
            )
        if not has_content(policy.draft_content):
            raise PreconditionFailedError(
                f"Policy {policy.id} must have draft content before submitting for approval",
                details={"policy_id": policy.id},
            )

    @staticmethod
    async def _require_policy(uow: UnitOfWork, policy_id: str, organization_id: str) -> PolicyModel:
        policy = await uow.policies.get(policy_id, organization_id)
        if policy is None:
            raise NotFoundError("Policy", policy_id, message=f"Policy {policy_id} not found")
        return policy
