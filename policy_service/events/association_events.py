"""
Events for links between policies and cases.
"""
from typing import Any, Optional

from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class PolicyLinkedToCaseEvent(BaseEvent):
    """Event when a policy is linked to a case"""

    def __init__(
        self,
        organization_id: str,
        association_id: str,
        policy_id: str,
        case_id: str,
        link_type: str,
        actor_user_id: Optional[str],
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_LINKED_TO_CASE,
            event_category=EventCategory.ASSOCIATION,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={
                "association_id": association_id,
                "case_id": case_id,
                "link_type": link_type,
            },
            source="policy_case_association_service",
            **kwargs,
        )


class PolicyUnlinkedFromCaseEvent(BaseEvent):
    """Event when a policy-case link is removed"""

    def __init__(
        self,
        organization_id: str,
        association_id: str,
        policy_id: str,
        case_id: str,
        actor_user_id: Optional[str],
        **kwargs: Any,
    ):
        super().__init__(
            event_type=EventType.POLICY_UNLINKED_FROM_CASE,
            event_category=EventCategory.ASSOCIATION,
            organization_id=organization_id,
            aggregate_id=policy_id,
            actor_user_id=actor_user_id,
            data={"association_id": association_id, "case_id": case_id},
            source="policy_case_association_service",
            **kwargs,
        )
