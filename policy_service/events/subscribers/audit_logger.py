"""
Audit trail subscriber that logs policy, approval and translation events.
"""

from collections import deque
from typing import Any, Deque, Dict, List, Optional

import structlog

from ..base_event import BaseEvent
from ..event_bus import EventBus
from ..event_types import EventCategory

logger = structlog.get_logger("policy-service.events.audit_trail")

AUDITED_CATEGORIES = (
    EventCategory.POLICY,
    EventCategory.APPROVAL,
    EventCategory.TRANSLATION,
    EventCategory.ASSOCIATION,
)


class AuditTrailSubscriber:
    """
    Logs every policy-facing event with full context.

    Keeps the most recent entries in memory for inspection:
    - Policy lifecycle (created, updated, published, retired)
    - Approval outcomes
    - Translation changes and staleness
    - Policy-case links
    """

    def __init__(self, max_entries: int = 1000):
        self._audit_log: Deque[Dict[str, Any]] = deque(maxlen=max_entries)

    def register(self, bus: EventBus) -> None:
        """Subscribe to audited event categories."""
        for category in AUDITED_CATEGORIES:
            bus.subscribe(
                event_category=category,
                handler=self._log_event,
                priority=10  # High priority for audit logging
            )
        logger.info("audit_trail_subscribed", categories=[c.value for c in AUDITED_CATEGORIES])

    async def _log_event(self, event: BaseEvent):
        """Log a single event."""
        log_entry = {
            "timestamp": event.timestamp.isoformat(),
            "event_type": event.event_type.value,
            "event_id": event.event_id,
            "organization_id": event.organization_id,
            "aggregate_id": event.aggregate_id,
            "actor_user_id": event.actor_user_id,
            "correlation_id": event.correlation_id,
            "data": event.data,
        }

        self._audit_log.append(log_entry)

        logger.info(
            event.event_type.value,
            organization_id=event.organization_id,
            aggregate_id=event.aggregate_id,
            actor_user_id=event.actor_user_id,
            correlation_id=event.correlation_id,
            event_id=event.event_id,
            source=event.source,
        )

    def get_audit_log(
        self,
        organization_id: Optional[str] = None,
        aggregate_id: Optional[str] = None,
        event_type: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Get audit log entries with optional filtering.

        Args:
            organization_id: Filter by organization
            aggregate_id: Filter by policy or translation ID
            event_type: Filter by event type value
            limit: Maximum number of entries to return (most recent)
        """
        filtered_log = list(self._audit_log)

        if organization_id:
            filtered_log = [e for e in filtered_log if e["organization_id"] == organization_id]

        if aggregate_id:
            filtered_log = [e for e in filtered_log if e["aggregate_id"] == aggregate_id]

        if event_type:
            filtered_log = [e for e in filtered_log if e["event_type"] == event_type]

        if limit:
            filtered_log = filtered_log[-limit:]

        return filtered_log

    def clear_audit_log(self):
        """Clear audit log (for testing)."""
        self._audit_log.clear()
        logger.info("audit_log_cleared")
