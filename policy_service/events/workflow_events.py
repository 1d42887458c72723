"""
Workflow engine lifecycle events.

Published by the workflow engine for every entity type; consumers filter
on data["entity_type"].
"""
from typing import Any, Optional

from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class WorkflowTransitionedEvent(BaseEvent):
    """Event when a workflow instance moves between stages"""

    def __init__(
        self,
        organization_id: str,
        instance_id: str,
        entity_type: str,
        entity_id: str,
        previous_stage: str,
        new_stage: str,
        actor_user_id: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.WORKFLOW_TRANSITIONED,
            event_category=EventCategory.WORKFLOW,
            organization_id=organization_id,
            aggregate_id=instance_id,
            actor_user_id=actor_user_id,
            data={
                "instance_id": instance_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "previous_stage": previous_stage,
                "new_stage": new_stage,
                "reason": reason,
            },
            source="workflow_engine",
            **kwargs,
        )


class WorkflowCompletedEvent(BaseEvent):
    """Event when a workflow instance completes"""

    def __init__(
        self,
        organization_id: str,
        instance_id: str,
        entity_type: str,
        entity_id: str,
        outcome: Optional[str] = None,
        actor_user_id: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.WORKFLOW_COMPLETED,
            event_category=EventCategory.WORKFLOW,
            organization_id=organization_id,
            aggregate_id=instance_id,
            actor_user_id=actor_user_id,
            data={
                "instance_id": instance_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "outcome": outcome,
            },
            source="workflow_engine",
            **kwargs,
        )


class WorkflowCancelledEvent(BaseEvent):
    """Event when a workflow instance is cancelled"""

    def __init__(
        self,
        organization_id: str,
        instance_id: str,
        entity_type: str,
        entity_id: str,
        actor_user_id: Optional[str] = None,
        reason: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.WORKFLOW_CANCELLED,
            event_category=EventCategory.WORKFLOW,
            organization_id=organization_id,
            aggregate_id=instance_id,
            actor_user_id=actor_user_id,
            data={
                "instance_id": instance_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "reason": reason,
            },
            source="workflow_engine",
            **kwargs,
        )
