"""
Синхронизация статуса политики с событиями движка workflow.

Обработчики зарегистрированы по закрытому набору EventType и фильтруют
события по entity_type = POLICY. Ошибки перехватываются внутри: сбой здесь
не должен прерывать транзакцию движка или блокировать других подписчиков.
Аудит пишется best-effort: событие policy.* публикуется даже при сбое записи.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from ...domain.interfaces import AuditEntry, IAuditLog
from ...domain.policy_context.value_objects import ActorType, PolicyStatus, WorkflowEntityType
from ...infrastructure.persistence.models import PolicyModel
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..base_event import BaseEvent
from ..event_bus import EventBus
from ..event_types import EventType
from ..policy_events import (
    PolicyApprovalStepCompletedEvent,
    PolicyApprovedEvent,
    PolicyRejectedEvent,
)
from ..publisher import DomainEventPublisher

logger = logging.getLogger("policy-service.events.workflow_listener")

POLICY_ENTITY = WorkflowEntityType.POLICY.value


class PolicyWorkflowListener:
    """
    Реакция политики на завершение, отмену и переходы workflow.

    - workflow.completed: статус APPROVED, событие policy.approved
    - workflow.cancelled: DRAFT только из PENDING_APPROVAL, policy.rejected всегда
    - workflow.transitioned: только аудит и policy.approval_step_completed
    """

    def __init__(
        self,
        session_factory,
        event_publisher: DomainEventPublisher,
        audit_log: IAuditLog,
    ):
        self._session_factory = session_factory
        self._events = event_publisher
        self._audit = audit_log
        self._handlers: Dict[EventType, Callable[[BaseEvent], Awaitable[None]]] = {
            EventType.WORKFLOW_COMPLETED: self.on_workflow_completed,
            EventType.WORKFLOW_CANCELLED: self.on_workflow_cancelled,
            EventType.WORKFLOW_TRANSITIONED: self.on_workflow_transitioned,
        }

    def register(self, bus: EventBus) -> None:
        """Подписать обработчики на шину."""
        for event_type, handler in self._handlers.items():
            bus.subscribe(event_type=event_type, handler=self._guarded(handler), priority=10)
        logger.info("PolicyWorkflowListener subscribed to workflow events")

    def _guarded(self, handler: Callable[[BaseEvent], Awaitable[None]]):
        async def run(event: BaseEvent) -> None:
            if event.data.get("entity_type") != POLICY_ENTITY:
                return
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    f"Failed to handle {event.event_type.value} for policy "
                    f"{event.data.get('entity_id')}: {e}",
                    exc_info=True
                )
        run.__qualname__ = f"PolicyWorkflowListener.{handler.__name__}"
        return run

    async def on_workflow_completed(self, event: BaseEvent) -> None:
        policy_id = event.data["entity_id"]
        async with UnitOfWork(self._session_factory, operation="workflow_completed") as uow:
            policy = await uow.policies.get(policy_id, event.organization_id)
            if policy is None:
                logger.warning(f"Workflow {event.aggregate_id} completed for unknown policy {policy_id}")
                return
            policy.status = PolicyStatus.APPROVED.value
            policy.updated_at = datetime.now(timezone.utc)

        logger.info(f"Policy {policy_id} approved via workflow {event.aggregate_id}")
        await self._log_activity(
            AuditEntry(
                organization_id=event.organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy_id,
                action="approved",
                action_description=f'Policy "{policy.title}" approved via workflow',
                actor_user_id=event.actor_user_id,
                actor_type=self._actor_type(event.actor_user_id),
                context={"workflow_instance_id": event.aggregate_id, "outcome": event.data.get("outcome")},
            )
        )
        await self._events.publish(
            PolicyApprovedEvent(
                organization_id=event.organization_id,
                policy_id=policy_id,
                actor_user_id=event.actor_user_id,
                workflow_instance_id=event.aggregate_id,
                outcome=event.data.get("outcome"),
                correlation_id=event.event_id,
            )
        )

    async def on_workflow_cancelled(self, event: BaseEvent) -> None:
        policy_id = event.data["entity_id"]
        reason = event.data.get("reason")
        async with UnitOfWork(self._session_factory, operation="workflow_cancelled") as uow:
            policy = await uow.policies.get(policy_id, event.organization_id)
            if policy is None:
                logger.warning(f"Workflow {event.aggregate_id} cancelled for unknown policy {policy_id}")
                return
            reverted = self._revert_to_draft(policy)

        if reverted:
            logger.info(f"Policy {policy_id} returned to DRAFT after workflow {event.aggregate_id} cancellation")
            await self._log_activity(
                AuditEntry(
                    organization_id=event.organization_id,
                    entity_type=POLICY_ENTITY,
                    entity_id=policy_id,
                    action="rejected",
                    action_description=(
                        f'Policy "{policy.title}" approval workflow cancelled'
                        + (f": {reason}" if reason else "")
                    ),
                    actor_user_id=event.actor_user_id,
                    actor_type=self._actor_type(event.actor_user_id),
                    context={"workflow_instance_id": event.aggregate_id, "reason": reason},
                )
            )
        await self._events.publish(
            PolicyRejectedEvent(
                organization_id=event.organization_id,
                policy_id=policy_id,
                actor_user_id=event.actor_user_id,
                workflow_instance_id=event.aggregate_id,
                reason=reason,
                correlation_id=event.event_id,
            )
        )

    async def on_workflow_transitioned(self, event: BaseEvent) -> None:
        policy_id = event.data["entity_id"]
        previous_stage = event.data.get("previous_stage")
        new_stage = event.data.get("new_stage")
        async with UnitOfWork(self._session_factory, operation="workflow_transitioned") as uow:
            policy = await uow.policies.get(policy_id, event.organization_id)
        if policy is None:
            logger.warning(f"Workflow {event.aggregate_id} transitioned for unknown policy {policy_id}")
            return

        await self._log_activity(
            AuditEntry(
                organization_id=event.organization_id,
                entity_type=POLICY_ENTITY,
                entity_id=policy_id,
                action="approval_step_completed",
                action_description=(
                    f'Policy "{policy.title}" approval progressed from "{previous_stage}" to "{new_stage}"'
                ),
                actor_user_id=event.actor_user_id,
                actor_type=self._actor_type(event.actor_user_id),
                context={
                    "workflow_instance_id": event.aggregate_id,
                    "previous_stage": previous_stage,
                    "new_stage": new_stage,
                    "reason": event.data.get("reason"),
                },
            )
        )
        await self._events.publish(
            PolicyApprovalStepCompletedEvent(
                organization_id=event.organization_id,
                policy_id=policy_id,
                actor_user_id=event.actor_user_id,
                workflow_instance_id=event.aggregate_id,
                previous_stage=previous_stage,
                new_stage=new_stage,
                correlation_id=event.event_id,
            )
        )

    async def _log_activity(self, entry: AuditEntry) -> None:
        try:
            await self._audit.log(entry)
        except Exception as e:
            logger.error(
                f"Failed to write audit entry {entry.action} for policy {entry.entity_id}: {e}",
                exc_info=True
            )

    @staticmethod
    def _revert_to_draft(policy: PolicyModel) -> bool:
        """PENDING_APPROVAL -> DRAFT. Возвращает False, если переход уже выполнен."""
        if policy.status != PolicyStatus.PENDING_APPROVAL.value:
            return False
        policy.status = PolicyStatus.DRAFT.value
        policy.updated_at = datetime.now(timezone.utc)
        return True

    @staticmethod
    def _actor_type(actor_user_id: Optional[str]) -> ActorType:
        return ActorType.USER if actor_user_id else ActorType.SYSTEM
