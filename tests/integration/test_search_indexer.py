"""
Integration-тесты SearchIndexSubscriber с httpx.MockTransport.
"""

import json

import httpx
import pytest

from conftest import ORG_ID, USER_ID
from policy_service.application.dto import CreatePolicyInput, PublishPolicyInput
from policy_service.core.container import build_container
from policy_service.domain.policy_context.value_objects import PolicyType
from policy_service.infrastructure.search import SearchIndexClient


class RecordingIndex:
    """Фейковый поисковый сервис: запоминает PUT-запросы."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.documents = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            self.documents.append(json.loads(request.content))
        return httpx.Response(self.status_code)

    def client(self) -> SearchIndexClient:
        return SearchIndexClient(
            "http://search:9200",
            max_attempts=1,
            min_wait=0,
            max_wait=0,
            transport=httpx.MockTransport(self.handler),
        )


def make_container(session_factory, settings, translation_skill, index):
    container = build_container(
        session_factory, settings, translation_skill=translation_skill, search_client=index.client()
    )
    assert container.search_indexer is not None
    return container


class TestSearchIndexSubscriber:

    @pytest.mark.asyncio
    async def test_policy_changes_are_indexed(self, session_factory, settings, translation_skill):
        index = RecordingIndex()
        container = make_container(session_factory, settings, translation_skill, index)

        policy = await container.policy_service.create(
            CreatePolicyInput(title="Travel", policy_type=PolicyType.TRAVEL_EXPENSE, content="<p>Economy</p>"),
            USER_ID,
            ORG_ID,
        )
        assert index.documents[-1]["status"] == "DRAFT"
        assert index.documents[-1]["plain_text"] is None

        await container.policy_service.publish(policy.id, PublishPolicyInput(), USER_ID, ORG_ID)

        document = index.documents[-1]
        assert document["id"] == policy.id
        assert document["status"] == "PUBLISHED"
        assert document["current_version"] == 1
        assert document["plain_text"] == "Economy"
        assert document["published_at"] is not None

    @pytest.mark.asyncio
    async def test_index_failure_does_not_fail_operation(self, session_factory, settings, translation_skill):
        index = RecordingIndex(status_code=500)
        container = make_container(session_factory, settings, translation_skill, index)

        policy = await container.policy_service.create(
            CreatePolicyInput(title="Travel", policy_type=PolicyType.TRAVEL_EXPENSE), USER_ID, ORG_ID
        )

        assert policy.status == "DRAFT"
        assert len(index.documents) == 1

    @pytest.mark.asyncio
    async def test_reindex_unknown_policy(self, session_factory, settings, translation_skill):
        index = RecordingIndex()
        container = make_container(session_factory, settings, translation_skill, index)

        assert await container.search_indexer.reindex("missing", ORG_ID) is False
        assert index.documents == []

    def test_disabled_without_client(self, container):
        assert container.search_indexer is None
