"""
Unit-тесты AuditTrailSubscriber.
"""

import pytest

from policy_service.events import EventBus
from policy_service.events.event_types import EventType
from policy_service.events.policy_events import PolicyRetiredEvent
from policy_service.events.subscribers import AuditTrailSubscriber
from policy_service.events.workflow_events import WorkflowCompletedEvent


@pytest.fixture
def bus():
    return EventBus(await_handlers=True)


@pytest.fixture
def audit_trail(bus):
    subscriber = AuditTrailSubscriber(max_entries=3)
    subscriber.register(bus)
    return subscriber


def retired(policy_id, organization_id="org-1"):
    return PolicyRetiredEvent(organization_id=organization_id, policy_id=policy_id, actor_user_id="user-1")


@pytest.mark.asyncio
async def test_policy_events_are_recorded(bus, audit_trail):
    event = retired("policy-1")

    await bus.publish(event)

    entry = audit_trail.get_audit_log()[0]
    assert entry["event_type"] == EventType.POLICY_RETIRED.value
    assert entry["event_id"] == event.event_id
    assert entry["aggregate_id"] == "policy-1"
    assert entry["actor_user_id"] == "user-1"


@pytest.mark.asyncio
async def test_workflow_events_are_not_recorded(bus, audit_trail):
    await bus.publish(
        WorkflowCompletedEvent(
            organization_id="org-1", instance_id="wf-1", entity_type="POLICY", entity_id="policy-1"
        )
    )

    assert audit_trail.get_audit_log() == []


@pytest.mark.asyncio
async def test_filters_and_limit(bus, audit_trail):
    await bus.publish(retired("policy-1"))
    await bus.publish(retired("policy-2", organization_id="org-2"))
    await bus.publish(retired("policy-3"))

    assert [e["aggregate_id"] for e in audit_trail.get_audit_log(organization_id="org-1")] == [
        "policy-1",
        "policy-3",
    ]
    assert [e["aggregate_id"] for e in audit_trail.get_audit_log(aggregate_id="policy-2")] == ["policy-2"]
    assert [e["aggregate_id"] for e in audit_trail.get_audit_log(limit=1)] == ["policy-3"]
    assert audit_trail.get_audit_log(event_type="policy.created") == []


@pytest.mark.asyncio
async def test_keeps_only_recent_entries(bus, audit_trail):
    for index in range(5):
        await bus.publish(retired(f"policy-{index}"))

    assert [e["aggregate_id"] for e in audit_trail.get_audit_log()] == ["policy-2", "policy-3", "policy-4"]

    audit_trail.clear_audit_log()
    assert audit_trail.get_audit_log() == []
