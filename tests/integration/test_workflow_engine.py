"""
Integration-тесты встроенного движка workflow.
"""

import pytest

from conftest import ORG_ID, OTHER_ORG_ID
from policy_service.core.errors import InvalidStateError, NotFoundError, PreconditionFailedError
from policy_service.events import EventType


STAGES = [
    {"id": "draft_review", "name": "Draft review"},
    {"id": "legal", "name": "Legal"},
    {"id": "done", "name": "Done"},
]


@pytest.fixture
def make_template(workflow_engine):
    async def make(transitions, **kwargs):
        return await workflow_engine.create_template(
            organization_id=ORG_ID,
            name=kwargs.pop("name", "Three step"),
            entity_type=kwargs.pop("entity_type", "POLICY"),
            stages=STAGES,
            transitions=transitions,
            initial_stage="draft_review",
            **kwargs,
        )

    return make


class TestCreateTemplate:

    @pytest.mark.asyncio
    async def test_unknown_initial_stage(self, workflow_engine):
        with pytest.raises(PreconditionFailedError):
            await workflow_engine.create_template(
                organization_id=ORG_ID,
                name="Broken",
                entity_type="POLICY",
                stages=STAGES,
                transitions=[],
                initial_stage="missing",
            )

    @pytest.mark.asyncio
    async def test_transition_to_unknown_stage(self, make_template):
        with pytest.raises(PreconditionFailedError) as exc_info:
            await make_template([{"from": "legal", "to": "archive"}])

        assert "legal -> archive" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_template_info(self, make_template):
        template = await make_template([{"from": "*", "to": "done"}], default_sla_days=3)

        assert template.version == 1
        assert template.is_active is True
        assert template.is_default is False
        assert template.find_stage("legal").name == "Legal"
        assert template.find_stage("missing") is None


class TestInstanceLifecycle:

    @pytest.mark.asyncio
    async def test_start_without_sla_has_no_due_date(self, workflow_engine, make_template):
        template = await make_template([])

        instance_id = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id, "user-1")

        instance = await workflow_engine.get_instance(instance_id, ORG_ID)
        assert instance.current_stage == "draft_review"
        assert instance.due_date is None
        assert instance.started_by_id == "user-1"
        assert instance.template.name == "Three step"

    @pytest.mark.asyncio
    async def test_start_with_wrong_entity_type(self, workflow_engine, make_template):
        template = await make_template([], entity_type="CASE")

        with pytest.raises(PreconditionFailedError):
            await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)

    @pytest.mark.asyncio
    async def test_start_with_template_of_other_organization(self, workflow_engine, make_template):
        template = await make_template([])

        with pytest.raises(NotFoundError):
            await workflow_engine.start_workflow(OTHER_ORG_ID, "POLICY", "policy-1", template.id)

    @pytest.mark.asyncio
    async def test_transition_stamps_step_states(self, workflow_engine, make_template, published_events):
        template = await make_template([{"from": "draft_review", "to": "legal"}])
        instance_id = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)

        info = await workflow_engine.transition(instance_id, ORG_ID, "legal", actor_user_id="reviewer-1")

        assert info.current_stage == "legal"
        assert info.step_states["draft_review"]["status"] == "completed"
        assert info.step_states["draft_review"]["completedBy"] == "reviewer-1"
        transitioned = published_events[-1]
        assert transitioned.event_type == EventType.WORKFLOW_TRANSITIONED
        assert transitioned.data["entity_id"] == "policy-1"

    @pytest.mark.asyncio
    async def test_transition_not_allowed(self, workflow_engine, make_template):
        template = await make_template([{"from": "draft_review", "to": "legal"}])
        instance_id = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)

        with pytest.raises(InvalidStateError) as exc_info:
            await workflow_engine.transition(instance_id, ORG_ID, "done")

        assert exc_info.value.current_status == "draft_review"

    @pytest.mark.asyncio
    async def test_wildcard_transition(self, workflow_engine, make_template):
        template = await make_template(
            [{"from": "draft_review", "to": "legal"}, {"from": "*", "to": "done"}]
        )
        instance_id = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)
        await workflow_engine.transition(instance_id, ORG_ID, "legal")

        info = await workflow_engine.transition(instance_id, ORG_ID, "done")

        assert info.current_stage == "done"
        assert set(info.step_states) == {"draft_review", "legal"}

    @pytest.mark.asyncio
    async def test_complete_and_cancel_require_active(self, workflow_engine, make_template):
        template = await make_template([])
        instance_id = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)

        info = await workflow_engine.complete(instance_id, ORG_ID, outcome="approved")
        assert info.status == "COMPLETED"
        assert info.outcome == "approved"
        assert info.completed_at is not None

        with pytest.raises(InvalidStateError):
            await workflow_engine.complete(instance_id, ORG_ID)
        with pytest.raises(InvalidStateError):
            await workflow_engine.cancel(instance_id, ORG_ID)
        with pytest.raises(InvalidStateError):
            await workflow_engine.transition(instance_id, ORG_ID, "legal")

    @pytest.mark.asyncio
    async def test_unknown_instance(self, workflow_engine):
        with pytest.raises(NotFoundError):
            await workflow_engine.get_instance("missing", ORG_ID)
        with pytest.raises(NotFoundError):
            await workflow_engine.cancel("missing", ORG_ID)


class TestQueries:

    @pytest.mark.asyncio
    async def test_find_active_and_latest(self, workflow_engine, make_template):
        template = await make_template([])
        first = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)
        await workflow_engine.cancel(first, ORG_ID)

        assert await workflow_engine.find_active_instance(ORG_ID, "POLICY", "policy-1") is None
        assert (await workflow_engine.find_latest_instance(ORG_ID, "POLICY", "policy-1")).id == first

        second = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)
        assert (await workflow_engine.find_active_instance(ORG_ID, "POLICY", "policy-1")).id == second

    @pytest.mark.asyncio
    async def test_list_instances_filters(self, workflow_engine, make_template):
        template = await make_template([])
        first = await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-1", template.id)
        await workflow_engine.start_workflow(ORG_ID, "POLICY", "policy-2", template.id)
        await workflow_engine.complete(first, ORG_ID)

        active = await workflow_engine.list_instances(ORG_ID, status="ACTIVE")
        assert [i.entity_id for i in active] == ["policy-2"]
        assert await workflow_engine.list_instances(OTHER_ORG_ID) == []

    @pytest.mark.asyncio
    async def test_default_template_lookup(self, workflow_engine, make_template):
        await make_template([], name="Plain")
        default = await make_template([], name="Default", is_default=True)

        found = await workflow_engine.find_default_template(ORG_ID, "POLICY")

        assert found.id == default.id
        assert await workflow_engine.find_default_template(ORG_ID, "CASE") is None
