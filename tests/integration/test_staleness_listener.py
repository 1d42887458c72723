"""
Integration-тесты TranslationStalenessListener.
"""

import pytest

from conftest import ORG_ID, USER_ID, publish_new_version
from policy_service.application.dto import CreateTranslationInput
from policy_service.events import EventType
from policy_service.events.policy_events import PolicyPublishedEvent


async def translate(translation_service, version_id, *languages):
    return [
        await translation_service.translate(
            CreateTranslationInput(policy_version_id=version_id, language_code=code), USER_ID, ORG_ID
        )
        for code in languages
    ]


class TestTranslationStaleness:

    @pytest.mark.asyncio
    async def test_new_version_marks_previous_translations_stale(
        self, translation_service, policy_service, draft_policy, published_version, published_events
    ):
        await translate(translation_service, published_version.id, "de", "fr")

        v2 = await publish_new_version(policy_service, draft_policy.id, "<p>Keep records for 10 years</p>")

        translations = await translation_service.list_by_version(published_version.id, ORG_ID)
        assert [t.is_stale for t in translations] == [True, True]

        marked = [e for e in published_events if e.event_type == EventType.TRANSLATIONS_MARKED_STALE]
        assert len(marked) == 1
        assert marked[0].data == {
            "policy_id": draft_policy.id,
            "previous_version_id": published_version.id,
            "count": 2,
        }
        published = [e for e in published_events if e.event_type == EventType.POLICY_PUBLISHED][-1]
        assert published.data["policy_version_id"] == v2.id
        assert marked[0].correlation_id == published.event_id

    @pytest.mark.asyncio
    async def test_first_publish_marks_nothing(self, translation_service, published_version, published_events):
        assert not [e for e in published_events if e.event_type == EventType.TRANSLATIONS_MARKED_STALE]

    @pytest.mark.asyncio
    async def test_only_immediately_previous_version_is_marked(
        self, translation_service, policy_service, draft_policy, published_version
    ):
        v2 = await publish_new_version(policy_service, draft_policy.id, "<p>v2</p>")
        await translate(translation_service, v2.id, "es")

        await publish_new_version(policy_service, draft_policy.id, "<p>v3</p>")

        stale = await translation_service.list_stale(ORG_ID)
        assert [(t.policy_version_id, t.language_code) for t in stale] == [(v2.id, "es")]

    @pytest.mark.asyncio
    async def test_already_stale_translations_not_counted_twice(
        self, translation_service, event_bus, policy_service, draft_policy, published_version, published_events
    ):
        await translate(translation_service, published_version.id, "de")
        v2 = await publish_new_version(policy_service, draft_policy.id, "<p>v2</p>")

        # Повторная доставка того же события
        await event_bus.publish(
            PolicyPublishedEvent(
                organization_id=ORG_ID,
                policy_id=draft_policy.id,
                actor_user_id=USER_ID,
                policy_version_id=v2.id,
                version=2,
            )
        )

        marked = [e for e in published_events if e.event_type == EventType.TRANSLATIONS_MARKED_STALE]
        assert len(marked) == 1
