"""
Встроенный движок workflow поверх той же БД.

Реализует IWorkflowEngine: запуск, переходы между этапами, завершение и
отмена экземпляров. После фиксации изменений публикует события
workflow.* через DomainEventPublisher.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.errors import NotFoundError, InvalidStateError, PreconditionFailedError
from ...domain.interfaces import IWorkflowEngine, WorkflowInstanceInfo, WorkflowTemplateInfo
from ...domain.policy_context.value_objects import WorkflowInstanceStatus
from ...events.publisher import DomainEventPublisher
from ...events.workflow_events import (
    WorkflowCancelledEvent,
    WorkflowCompletedEvent,
    WorkflowTransitionedEvent,
)
from ..persistence.models import WorkflowInstanceModel, WorkflowTemplateModel
from ..persistence.unit_of_work import UnitOfWork

logger = logging.getLogger("policy-service.infrastructure.workflow_engine")

WILDCARD_STAGE = "*"


class WorkflowEngine(IWorkflowEngine):
    """
    SQL-реализация движка workflow.

    Атрибуты:
        _session_factory: Фабрика сессий для UnitOfWork
        _events: Публикатор событий workflow.*

    Пример:
        >>> engine = WorkflowEngine(session_factory, event_bus)
        >>> instance_id = await engine.start_workflow("org-1", "POLICY", "policy-1", template_id)
        >>> await engine.complete(instance_id, "org-1", outcome="approved", actor_user_id="user-1")
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        event_publisher: DomainEventPublisher,
    ):
        self._session_factory = session_factory
        self._events = event_publisher

    # ==================== Lifecycle ====================

    async def start_workflow(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        template_id: str,
        actor_user_id: Optional[str] = None,
    ) -> str:
        async with UnitOfWork(self._session_factory, operation="workflow_start") as uow:
            template = await uow.workflows.get_template(template_id, organization_id)
            if template is None or not template.is_active:
                raise NotFoundError("Workflow template", template_id)
            if template.entity_type != entity_type:
                raise PreconditionFailedError(
                    f"Workflow template {template_id} is for {template.entity_type}, not {entity_type}",
                    details={"template_id": template_id},
                )
            if not any(stage.get("id") == template.initial_stage for stage in template.stages):
                raise PreconditionFailedError(
                    f"Initial stage '{template.initial_stage}' not found in template {template_id}",
                    details={"template_id": template_id},
                )

            now = datetime.now(timezone.utc)
            due_date = None
            if template.default_sla_days:
                due_date = now + timedelta(days=template.default_sla_days)

            instance = await uow.workflows.add_instance(
                WorkflowInstanceModel(
                    organization_id=organization_id,
                    template_id=template.id,
                    template_version=template.version,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    current_stage=template.initial_stage,
                    status=WorkflowInstanceStatus.ACTIVE.value,
                    step_states={},
                    due_date=due_date,
                    started_by_id=actor_user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
            instance_id = instance.id

        logger.info(
            f"Started workflow {instance_id} for {entity_type}:{entity_id} "
            f"(template={template_id}, stage={template.initial_stage})"
        )
        return instance_id

    async def transition(
        self,
        instance_id: str,
        organization_id: str,
        to_stage: str,
        actor_user_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> WorkflowInstanceInfo:
        """
        Перевести экземпляр на следующий этап.

        Raises:
            NotFoundError: Экземпляр не найден
            InvalidStateError: Экземпляр не активен или переход запрещен
        """
        async with UnitOfWork(self._session_factory, operation="workflow_transition") as uow:
            instance = await self._get_active_instance(uow, instance_id, organization_id)
            template = await uow.workflows.get_template(instance.template_id, organization_id)
            if template is None:
                raise NotFoundError("Workflow template", instance.template_id)

            previous_stage = instance.current_stage
            if not self._is_transition_allowed(template, previous_stage, to_stage):
                raise InvalidStateError(
                    f"Transition from '{previous_stage}' to '{to_stage}' is not allowed "
                    f"for workflow instance {instance_id}",
                    current_status=previous_stage,
                    required_status=to_stage,
                )

            now = datetime.now(timezone.utc)
            step_states: Dict[str, Any] = dict(instance.step_states or {})
            step_states[previous_stage] = {
                "status": "completed",
                "completedAt": now.isoformat(),
                "completedBy": actor_user_id,
            }
            instance.step_states = step_states
            instance.current_stage = to_stage
            instance.updated_at = now
            info = self._to_info(instance, template)

        logger.info(f"Workflow {instance_id} transitioned {previous_stage} -> {to_stage}")
        await self._events.publish(
            WorkflowTransitionedEvent(
                organization_id=organization_id,
                instance_id=instance_id,
                entity_type=info.entity_type,
                entity_id=info.entity_id,
                previous_stage=previous_stage,
                new_stage=to_stage,
                actor_user_id=actor_user_id,
                reason=reason,
            )
        )
        return info

    async def complete(
        self,
        instance_id: str,
        organization_id: str,
        outcome: Optional[str] = None,
        actor_user_id: Optional[str] = None,
    ) -> WorkflowInstanceInfo:
        async with UnitOfWork(self._session_factory, operation="workflow_complete") as uow:
            instance = await self._get_active_instance(uow, instance_id, organization_id)
            now = datetime.now(timezone.utc)
            instance.status = WorkflowInstanceStatus.COMPLETED.value
            instance.completed_at = now
            instance.outcome = outcome
            instance.updated_at = now
            template = await uow.workflows.get_template(instance.template_id, organization_id)
            info = self._to_info(instance, template)

        logger.info(f"Workflow {instance_id} completed (outcome={outcome})")
        await self._events.publish(
            WorkflowCompletedEvent(
                organization_id=organization_id,
                instance_id=instance_id,
                entity_type=info.entity_type,
                entity_id=info.entity_id,
                outcome=outcome,
                actor_user_id=actor_user_id,
            )
        )
        return info

    async def cancel(
        self,
        instance_id: str,
        organization_id: str,
        actor_user_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        async with UnitOfWork(self._session_factory, operation="workflow_cancel") as uow:
            instance = await self._get_active_instance(uow, instance_id, organization_id)
            instance.status = WorkflowInstanceStatus.CANCELLED.value
            instance.updated_at = datetime.now(timezone.utc)
            entity_type = instance.entity_type
            entity_id = instance.entity_id

        logger.info(f"Workflow {instance_id} cancelled (reason={reason})")
        await self._events.publish(
            WorkflowCancelledEvent(
                organization_id=organization_id,
                instance_id=instance_id,
                entity_type=entity_type,
                entity_id=entity_id,
                actor_user_id=actor_user_id,
                reason=reason,
            )
        )

    # ==================== Queries ====================

    async def get_instance(self, instance_id: str, organization_id: str) -> WorkflowInstanceInfo:
        async with UnitOfWork(self._session_factory, operation="workflow_get") as uow:
            instance = await uow.workflows.get_instance(instance_id, organization_id)
            if instance is None:
                raise NotFoundError("Workflow instance", instance_id)
            template = await uow.workflows.get_template(instance.template_id, organization_id)
            return self._to_info(instance, template)

    async def list_instances(
        self,
        organization_id: str,
        entity_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[WorkflowInstanceInfo]:
        async with UnitOfWork(self._session_factory, operation="workflow_list") as uow:
            instances = await uow.workflows.list_instances(organization_id, entity_type, status)
            return [self._to_info(instance) for instance in instances]

    async def find_active_instance(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> Optional[WorkflowInstanceInfo]:
        return await self._find_instance(
            organization_id, entity_type, entity_id, WorkflowInstanceStatus.ACTIVE.value
        )

    async def find_latest_instance(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> Optional[WorkflowInstanceInfo]:
        return await self._find_instance(organization_id, entity_type, entity_id)

    async def find_default_template(
        self, organization_id: str, entity_type: str
    ) -> Optional[WorkflowTemplateInfo]:
        async with UnitOfWork(self._session_factory, operation="workflow_default_template") as uow:
            template = await uow.workflows.find_default_template(organization_id, entity_type)
            return WorkflowTemplateInfo.model_validate(template) if template else None

    async def list_templates(
        self, organization_id: str, entity_type: str, active_only: bool = True
    ) -> List[WorkflowTemplateInfo]:
        async with UnitOfWork(self._session_factory, operation="workflow_list_templates") as uow:
            templates = await uow.workflows.list_templates(organization_id, entity_type, active_only)
            return [WorkflowTemplateInfo.model_validate(t) for t in templates]

    async def create_template(
        self,
        organization_id: str,
        name: str,
        entity_type: str,
        stages: List[Dict[str, Any]],
        transitions: List[Dict[str, str]],
        initial_stage: str,
        description: Optional[str] = None,
        is_default: bool = False,
        default_sla_days: Optional[int] = None,
    ) -> WorkflowTemplateInfo:
        """
        Создать шаблон workflow.

        Raises:
            PreconditionFailedError: Начальный этап или переход ссылается
                на несуществующий этап
        """
        stage_ids = {stage["id"] for stage in stages}
        if initial_stage not in stage_ids:
            raise PreconditionFailedError(f"Initial stage '{initial_stage}' is not one of the template stages")
        for transition in transitions:
            if transition["to"] not in stage_ids or (
                transition["from"] != WILDCARD_STAGE and transition["from"] not in stage_ids
            ):
                raise PreconditionFailedError(
                    f"Transition {transition['from']} -> {transition['to']} references an unknown stage"
                )

        async with UnitOfWork(self._session_factory, operation="workflow_create_template") as uow:
            template = await uow.workflows.add_template(
                WorkflowTemplateModel(
                    organization_id=organization_id,
                    name=name,
                    description=description,
                    entity_type=entity_type,
                    stages=stages,
                    transitions=transitions,
                    initial_stage=initial_stage,
                    is_default=is_default,
                    default_sla_days=default_sla_days,
                )
            )
            return WorkflowTemplateInfo.model_validate(template)

    # ==================== Helpers ====================

    async def _find_instance(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        status: Optional[str] = None,
    ) -> Optional[WorkflowInstanceInfo]:
        async with UnitOfWork(self._session_factory, operation="workflow_find") as uow:
            instance = await uow.workflows.find_latest_instance(
                organization_id, entity_type, entity_id, status=status
            )
            if instance is None:
                return None
            template = await uow.workflows.get_template(instance.template_id, organization_id)
            return self._to_info(instance, template)

    @staticmethod
    async def _get_active_instance(
        uow: UnitOfWork, instance_id: str, organization_id: str
    ) -> WorkflowInstanceModel:
        instance = await uow.workflows.get_instance(instance_id, organization_id)
        if instance is None:
            raise NotFoundError("Workflow instance", instance_id)
        if instance.status != WorkflowInstanceStatus.ACTIVE.value:
            raise InvalidStateError(
                f"Workflow instance {instance_id} is not active. Current status: {instance.status}",
                current_status=instance.status,
                required_status=WorkflowInstanceStatus.ACTIVE.value,
            )
        return instance

    @staticmethod
    def _is_transition_allowed(template: WorkflowTemplateModel, from_stage: str, to_stage: str) -> bool:
        if not any(stage.get("id") == to_stage for stage in template.stages):
            return False
        return any(
            t.get("to") == to_stage and t.get("from") in (from_stage, WILDCARD_STAGE)
            for t in template.transitions
        )

    @staticmethod
    def _to_info(
        instance: WorkflowInstanceModel,
        template: Optional[WorkflowTemplateModel] = None,
    ) -> WorkflowInstanceInfo:
        info = WorkflowInstanceInfo.model_validate(instance)
        if template is not None:
            info.template = WorkflowTemplateInfo.model_validate(template)
        return info
