"""
Integration-тесты PolicyService на SQLite in-memory.

Проверяют:
- Создание и уникальность slug в пределах организации
- Правку черновика (копирование последней версии, блокировку на утверждении)
- Публикацию версий и монотонность номеров
- Вывод из оборота
- Журнал активности
"""

import pytest

from conftest import ORG_ID, OTHER_ORG_ID, USER_ID, publish_new_version
from policy_service.application.dto import (
    CreatePolicyInput,
    ListPoliciesQuery,
    PublishPolicyInput,
    UpdatePolicyInput,
)
from policy_service.core.errors import InvalidStateError, NotFoundError, PreconditionFailedError
from policy_service.domain.policy_context.value_objects import PolicyStatus, PolicyType
from policy_service.events import EventType
from policy_service.infrastructure.persistence.models import PolicyModel
from policy_service.infrastructure.persistence.unit_of_work import UnitOfWork


def create_input(title="Gift Policy", content=None):
    return CreatePolicyInput(title=title, policy_type=PolicyType.GIFT_ENTERTAINMENT, content=content)


class TestCreatePolicy:

    @pytest.mark.asyncio
    async def test_create_starts_as_draft(self, policy_service, published_events):
        policy = await policy_service.create(create_input(content="<p>No gifts</p>"), USER_ID, ORG_ID)

        assert policy.status == PolicyStatus.DRAFT.value
        assert policy.current_version == 0
        assert policy.slug == "gift-policy"
        assert policy.owner_id == USER_ID
        assert policy.draft_content == "<p>No gifts</p>"
        assert policy.draft_updated_by_id == USER_ID
        assert [e.event_type for e in published_events] == [EventType.POLICY_CREATED]

    @pytest.mark.asyncio
    async def test_slug_unique_within_organization(self, policy_service):
        first = await policy_service.create(create_input(), USER_ID, ORG_ID)
        second = await policy_service.create(create_input(), USER_ID, ORG_ID)
        other_org = await policy_service.create(create_input(), USER_ID, OTHER_ORG_ID)

        assert first.slug == "gift-policy"
        assert second.slug == "gift-policy-1"
        assert other_org.slug == "gift-policy"

    @pytest.mark.asyncio
    async def test_get_is_tenant_scoped(self, policy_service, draft_policy):
        assert (await policy_service.get(draft_policy.id, ORG_ID)).id == draft_policy.id

        with pytest.raises(NotFoundError):
            await policy_service.get(draft_policy.id, OTHER_ORG_ID)


class TestUpdateDraft:

    @pytest.mark.asyncio
    async def test_update_records_changes(self, policy_service, draft_policy, published_events):
        updated = await policy_service.update_draft(
            draft_policy.id,
            UpdatePolicyInput(title="Records Retention", category="Legal"),
            USER_ID,
            ORG_ID,
        )

        assert updated.title == "Records Retention"
        assert updated.slug == "records-retention"
        assert updated.category == "Legal"

        event = published_events[-1]
        assert event.event_type == EventType.POLICY_UPDATED
        assert {c["field"] for c in event.data["changes"]} == {"title", "category"}

    @pytest.mark.asyncio
    async def test_content_change_is_not_logged_verbatim(self, policy_service, draft_policy):
        await policy_service.update_draft(
            draft_policy.id, UpdatePolicyInput(content="<p>secret wording</p>"), USER_ID, ORG_ID
        )

        activity = await policy_service.get_activity(draft_policy.id, ORG_ID)
        update_entry = next(a for a in activity if a.action == "updated")
        assert update_entry.changes == {
            "old_value": {"content": "[content]"},
            "new_value": {"content": "[content]"},
        }

    @pytest.mark.asyncio
    async def test_rename_keeps_own_slug(self, policy_service, draft_policy):
        renamed = await policy_service.update_draft(
            draft_policy.id, UpdatePolicyInput(title="Data  Retention"), USER_ID, ORG_ID
        )

        assert renamed.slug == "data-retention"

    @pytest.mark.asyncio
    async def test_no_changes_no_event(self, policy_service, draft_policy, published_events):
        await policy_service.update_draft(
            draft_policy.id, UpdatePolicyInput(title=draft_policy.title), USER_ID, ORG_ID
        )

        assert published_events == []

    @pytest.mark.asyncio
    async def test_published_policy_seeds_draft_from_latest_version(
        self, policy_service, draft_policy, published_version
    ):
        updated = await policy_service.update_draft(
            draft_policy.id, UpdatePolicyInput(category="HR"), USER_ID, ORG_ID
        )

        assert updated.status == PolicyStatus.PUBLISHED.value
        assert updated.draft_content == published_version.content
        assert updated.category == "HR"

    @pytest.mark.asyncio
    async def test_empty_draft_is_seeded_from_latest_version(
        self, policy_service, draft_policy, published_version, session_factory
    ):
        async with UnitOfWork(session_factory) as uow:
            policy = await uow.policies.get(draft_policy.id, ORG_ID)
            policy.draft_content = ""

        updated = await policy_service.update_draft(
            draft_policy.id, UpdatePolicyInput(category="HR"), USER_ID, ORG_ID
        )

        assert updated.draft_content == published_version.content

    @pytest.mark.asyncio
    async def test_cannot_edit_while_pending_approval(self, policy_service, draft_policy, session_factory):
        async with UnitOfWork(session_factory) as uow:
            policy = await uow.policies.get(draft_policy.id, ORG_ID)
            policy.status = PolicyStatus.PENDING_APPROVAL.value

        with pytest.raises(InvalidStateError) as exc_info:
            await policy_service.update_draft(draft_policy.id, UpdatePolicyInput(title="X"), USER_ID, ORG_ID)

        assert draft_policy.id in exc_info.value.message
        assert exc_info.value.current_status == PolicyStatus.PENDING_APPROVAL.value


class TestPublish:

    @pytest.mark.asyncio
    async def test_first_publish(self, policy_service, draft_policy, published_events):
        version = await policy_service.publish(
            draft_policy.id, PublishPolicyInput(change_notes="Initial"), USER_ID, ORG_ID
        )

        assert version.version == 1
        assert version.version_label == "v1"
        assert version.is_latest is True
        assert version.plain_text == "Keep records for 7 years"
        assert version.change_notes == "Initial"

        policy = await policy_service.get(draft_policy.id, ORG_ID)
        assert policy.status == PolicyStatus.PUBLISHED.value
        assert policy.current_version == 1
        assert policy.draft_content is None
        assert policy.draft_updated_at is None

        assert [e.event_type for e in published_events] == [
            EventType.POLICY_PUBLISHED,
            EventType.POLICY_STATUS_CHANGED,
        ]
        assert published_events[1].data == {"from_status": "DRAFT", "to_status": "PUBLISHED"}

    @pytest.mark.asyncio
    async def test_versions_are_monotonic_and_single_latest(self, policy_service, draft_policy):
        await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)
        await publish_new_version(policy_service, draft_policy.id, "<p>v2</p>")
        third = await publish_new_version(policy_service, draft_policy.id, "<p>v3</p>")

        versions = await policy_service.list_versions(draft_policy.id, ORG_ID)

        assert third.version == 3
        assert [v.version for v in versions] == [3, 2, 1]
        assert [v.is_latest for v in versions] == [True, False, False]
        assert versions[2].content == "<p>Keep records for <b>7</b> years</p>"

    @pytest.mark.asyncio
    async def test_republish_does_not_emit_status_change(self, policy_service, draft_policy, published_events):
        await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)
        published_events.clear()

        await publish_new_version(policy_service, draft_policy.id, "<p>v2</p>")

        assert EventType.POLICY_STATUS_CHANGED not in [e.event_type for e in published_events]

    @pytest.mark.asyncio
    async def test_publish_requires_draft_content(self, policy_service):
        policy = await policy_service.create(create_input(content="   "), USER_ID, ORG_ID)

        with pytest.raises(PreconditionFailedError):
            await policy_service.publish(policy.id, PublishPolicyInput(), USER_ID, ORG_ID)

        assert await policy_service.list_versions(policy.id, ORG_ID) == []

    @pytest.mark.asyncio
    async def test_publish_after_publish_without_new_draft_fails(
        self, policy_service, draft_policy, published_version
    ):
        with pytest.raises(PreconditionFailedError):
            await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)

    @pytest.mark.asyncio
    async def test_publish_retired_policy_fails(self, policy_service, draft_policy):
        await policy_service.retire(draft_policy.id, USER_ID, ORG_ID)

        with pytest.raises(InvalidStateError) as exc_info:
            await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)

        assert "RETIRED" in exc_info.value.message


class TestRetire:

    @pytest.mark.asyncio
    async def test_retire(self, policy_service, draft_policy, published_events):
        policy = await policy_service.retire(draft_policy.id, USER_ID, ORG_ID)

        assert policy.status == PolicyStatus.RETIRED.value
        assert policy.retired_at is not None
        assert published_events[-1].event_type == EventType.POLICY_RETIRED

    @pytest.mark.asyncio
    async def test_retire_twice_fails(self, policy_service, draft_policy, published_events):
        await policy_service.retire(draft_policy.id, USER_ID, ORG_ID)
        events_before = len(published_events)

        with pytest.raises(InvalidStateError) as exc_info:
            await policy_service.retire(draft_policy.id, USER_ID, ORG_ID)

        assert exc_info.value.current_status == PolicyStatus.RETIRED.value
        assert len(published_events) == events_before


class TestQueries:

    @pytest.mark.asyncio
    async def test_list_filters_and_paginates(self, policy_service):
        for i in range(3):
            await policy_service.create(create_input(title=f"Gift {i}"), USER_ID, ORG_ID)
        retired = await policy_service.create(create_input(title="Old Travel"), USER_ID, ORG_ID)
        await policy_service.retire(retired.id, USER_ID, ORG_ID)
        await policy_service.create(create_input(title="Foreign"), USER_ID, OTHER_ORG_ID)

        page = await policy_service.list(ListPoliciesQuery(page=1, limit=2), ORG_ID)
        assert page.total == 4
        assert len(page.items) == 2

        drafts = await policy_service.list(ListPoliciesQuery(status=PolicyStatus.DRAFT), ORG_ID)
        assert drafts.total == 3

        search = await policy_service.list(ListPoliciesQuery(search="travel"), ORG_ID)
        assert [p.title for p in search.items] == ["Old Travel"]

    @pytest.mark.asyncio
    async def test_get_version_not_found(self, policy_service):
        with pytest.raises(NotFoundError):
            await policy_service.get_version("missing", ORG_ID)

    @pytest.mark.asyncio
    async def test_activity_newest_first(self, policy_service, draft_policy, published_version):
        activity = await policy_service.get_activity(draft_policy.id, ORG_ID)

        assert [a.action for a in activity] == ["published", "created"]
        assert activity[0].context["version"] == 1

    @pytest.mark.asyncio
    async def test_publish_rolls_back_on_failure(self, policy_service, draft_policy, session_factory, monkeypatch):
        from policy_service.infrastructure.persistence.repositories import PolicyRepository

        async def broken_add_version(self, version):
            raise RuntimeError("disk full")

        monkeypatch.setattr(PolicyRepository, "add_version", broken_add_version)

        with pytest.raises(RuntimeError):
            await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)

        async with UnitOfWork(session_factory) as uow:
            policy: PolicyModel = await uow.policies.get(draft_policy.id, ORG_ID)
            assert policy.status == PolicyStatus.DRAFT.value
            assert policy.current_version == 0
            assert policy.draft_content is not None
