"""
Пометка переводов устаревшими после публикации новой версии политики.
"""

import logging

from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ..base_event import BaseEvent
from ..event_bus import EventBus
from ..event_types import EventType
from ..publisher import DomainEventPublisher
from ..translation_events import TranslationsMarkedStaleEvent

logger = logging.getLogger("policy-service.events.staleness_listener")


class TranslationStalenessListener:
    """
    На policy.published с версией N > 1 помечает is_stale у переводов версии N-1.

    Первая публикация и версия без переводов ничего не меняют.
    """

    def __init__(self, session_factory, event_publisher: DomainEventPublisher):
        self._session_factory = session_factory
        self._events = event_publisher

    def register(self, bus: EventBus) -> None:
        bus.subscribe(event_type=EventType.POLICY_PUBLISHED, handler=self.on_policy_published, priority=5)
        logger.info("TranslationStalenessListener subscribed to policy.published")

    async def on_policy_published(self, event: BaseEvent) -> None:
        try:
            await self._mark_previous_version_stale(event)
        except Exception as e:
            logger.error(
                f"Failed to mark translations stale for policy {event.aggregate_id}: {e}",
                exc_info=True
            )

    async def _mark_previous_version_stale(self, event: BaseEvent) -> int:
        version = event.data.get("version") or 0
        if version <= 1:
            return 0

        policy_id = event.aggregate_id
        async with UnitOfWork(self._session_factory, operation="translations_mark_stale") as uow:
            previous = await uow.policies.get_version_by_number(policy_id, version - 1, event.organization_id)
            if previous is None:
                logger.debug(f"Policy {policy_id} has no version {version - 1}")
                return 0
            count = await uow.translations.mark_stale_for_version(previous.id, event.organization_id)

        if count:
            logger.info(f"Marked {count} translations of policy {policy_id} version {version - 1} stale")
            await self._events.publish(
                TranslationsMarkedStaleEvent(
                    organization_id=event.organization_id,
                    policy_id=policy_id,
                    previous_version_id=previous.id,
                    count=count,
                    correlation_id=event.event_id,
                )
            )
        return count
