"""
Policy lifecycle and approval events.
"""
from typing import Any, Dict, List, Optional

from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class PolicyCreatedEvent(BaseEvent):
    """Event when a policy is created"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        title: str,
        owner_id: Optional[str],
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_CREATED,
            event_category=EventCategory.POLICY,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"title": title, "owner_id": owner_id},
            source="policy_service",
            **kwargs,
        )


class PolicyUpdatedEvent(BaseEvent):
    """Event when draft fields of a policy change"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        changes: List[Dict[str, Any]],
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_UPDATED,
            event_category=EventCategory.POLICY,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"changes": changes},
            source="policy_service",
            **kwargs,
        )


class PolicyPublishedEvent(BaseEvent):
    """Event when a new immutable version is published"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        policy_version_id: str,
        version: int,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_PUBLISHED,
            event_category=EventCategory.POLICY,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"policy_version_id": policy_version_id, "version": version},
            source="policy_service",
            **kwargs,
        )


class PolicyRetiredEvent(BaseEvent):
    """Event when a policy is retired"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_RETIRED,
            event_category=EventCategory.POLICY,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={},
            source="policy_service",
            **kwargs,
        )


class PolicyStatusChangedEvent(BaseEvent):
    """Event when policy status moves to a different value"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        from_status: str,
        to_status: str,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_STATUS_CHANGED,
            event_category=EventCategory.POLICY,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"from_status": from_status, "to_status": to_status},
            source="policy_service",
            **kwargs,
        )


class PolicySubmittedForApprovalEvent(BaseEvent):
    """Event when a policy draft is submitted to an approval workflow"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        title: str,
        workflow_instance_id: str,
        notes: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_SUBMITTED_FOR_APPROVAL,
            event_category=EventCategory.APPROVAL,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={
                "title": title,
                "workflow_instance_id": workflow_instance_id,
                "notes": notes,
            },
            source="policy_approval_service",
            **kwargs,
        )


class PolicyApprovalCancelledEvent(BaseEvent):
    """Event when the submitter withdraws a policy from approval"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        workflow_instance_id: str,
        reason: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_APPROVAL_CANCELLED,
            event_category=EventCategory.APPROVAL,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"workflow_instance_id": workflow_instance_id, "reason": reason},
            source="policy_approval_service",
            **kwargs,
        )


class PolicyApprovedEvent(BaseEvent):
    """Event when the approval workflow of a policy completes"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        workflow_instance_id: str,
        outcome: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_APPROVED,
            event_category=EventCategory.APPROVAL,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"workflow_instance_id": workflow_instance_id, "outcome": outcome},
            source="policy_workflow_listener",
            **kwargs,
        )


class PolicyRejectedEvent(BaseEvent):
    """Event when the approval workflow of a policy is cancelled"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        workflow_instance_id: str,
        reason: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_REJECTED,
            event_category=EventCategory.APPROVAL,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"workflow_instance_id": workflow_instance_id, "reason": reason},
            source="policy_workflow_listener",
            **kwargs,
        )


class PolicyApprovalStepCompletedEvent(BaseEvent):
    """Event when an approval workflow moves to its next stage"""

    def __init__(
        self,
        organization_id: str,
        policy_id: str,
        actor_user_id: Optional[str],
        workflow_instance_id: str,
        previous_stage: str,
        new_stage: str,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_APPROVAL_STEP_COMPLETED,
            event_category=EventCategory.APPROVAL,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={
                "workflow_instance_id": workflow_instance_id,
                "previous_stage": previous_stage,
                "new_stage": new_stage,
            },
            source="policy_workflow_listener",
            **kwargs,
        )
