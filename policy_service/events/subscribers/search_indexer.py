"""
Переиндексация документа политики во внешнем поиске.
"""

import logging
from typing import Any, Dict, Optional

from ...core.errors import SearchIndexError
from ...infrastructure.persistence.models import PolicyModel, PolicyVersionModel
from ...infrastructure.persistence.unit_of_work import UnitOfWork
from ...infrastructure.search import SearchIndexClient
from ..base_event import BaseEvent
from ..event_bus import EventBus
from ..event_types import EventType

logger = logging.getLogger("policy-service.events.search_indexer")

REINDEX_EVENTS = (
    EventType.POLICY_CREATED,
    EventType.POLICY_UPDATED,
    EventType.POLICY_PUBLISHED,
    EventType.POLICY_RETIRED,
    EventType.POLICY_STATUS_CHANGED,
    EventType.POLICY_APPROVED,
    EventType.POLICY_REJECTED,
)


def build_document(policy: PolicyModel, latest: Optional[PolicyVersionModel]) -> Dict[str, Any]:
    """Документ индекса: головная запись политики и текст последней версии."""
    return {
        "id": policy.id,
        "organization_id": policy.organization_id,
        "title": policy.title,
        "slug": policy.slug,
        "policy_type": policy.policy_type,
        "category": policy.category,
        "status": policy.status,
        "current_version": policy.current_version,
        "owner_id": policy.owner_id,
        "plain_text": latest.plain_text if latest else None,
        "published_at": latest.published_at.isoformat() if latest and latest.published_at else None,
        "updated_at": policy.updated_at.isoformat() if policy.updated_at else None,
    }


class SearchIndexSubscriber:
    """
    Держит поисковый индекс в согласии с политиками.

    Ошибки индекса логируются: индекс восстанавливается переиндексацией.
    """

    def __init__(self, session_factory, client: SearchIndexClient):
        self._session_factory = session_factory
        self._client = client

    def register(self, bus: EventBus) -> None:
        for event_type in REINDEX_EVENTS:
            bus.subscribe(event_type=event_type, handler=self.on_policy_changed, priority=1)
        logger.info(f"SearchIndexSubscriber subscribed ({self._client.base_url}/indexes/{self._client.index})")

    async def on_policy_changed(self, event: BaseEvent) -> None:
        try:
            await self.reindex(event.aggregate_id, event.organization_id)
        except SearchIndexError as e:
            logger.error(f"Failed to index policy {event.aggregate_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error indexing policy {event.aggregate_id}: {e}", exc_info=True)

    async def reindex(self, policy_id: str, organization_id: str) -> bool:
        """
        Проиндексировать политику.

        Returns:
            False, если политика не найдена
        """
        async with UnitOfWork(self._session_factory, operation="search_reindex") as uow:
            policy = await uow.policies.get(policy_id, organization_id)
            if policy is None:
                logger.warning(f"Policy {policy_id} not found for indexing")
                return False
            latest = await uow.policies.get_latest_version(policy_id, organization_id)

        await self._client.index_document(policy.id, build_document(policy, latest))
        logger.debug(f"Indexed policy {policy_id} (status {policy.status})")
        return True
