"""
Pytest configuration and fixtures.

In-memory SQLite (aiosqlite + StaticPool) и EventBus, выполняющий
обработчики до возврата из publish().
"""

from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from policy_service.application.dto import CreatePolicyInput, PublishPolicyInput, UpdatePolicyInput
from policy_service.core.config import Settings
from policy_service.core.container import build_container
from policy_service.domain.interfaces import ITranslationSkill, SkillContext, SkillResult
from policy_service.domain.policy_context.value_objects import PolicyType
from policy_service.infrastructure.persistence.models import Base

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"
USER_ID = "user-1"


class FakeTranslationSkill(ITranslationSkill):
    """
    Фейковый AI-навык: "[<lang>] <content>".

    fail_on: номер вызова (с 1), который вернет success=False.
    """

    def __init__(self, fail_on: Optional[int] = None, error: Optional[str] = "LLM unavailable"):
        self.calls: List[Dict[str, Any]] = []
        self.fail_on = fail_on
        self.error = error

    async def execute_skill(self, skill_name: str, params: Dict[str, Any], context: SkillContext) -> SkillResult:
        self.calls.append({"skill_name": skill_name, "params": params, "context": context})
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            return SkillResult(success=False, error=self.error)
        return SkillResult(
            success=True,
            data={"translated": f"[{params['targetLanguage']}] {params['content']}"},
            metadata={"model": "fake-llm"},
        )


@pytest_asyncio.fixture
async def db_engine():
    """In-memory БД на одном соединении для всех сессий теста."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def settings():
    return Settings(event_bus_await_handlers=True, search_index_url="")


@pytest.fixture
def translation_skill():
    return FakeTranslationSkill()


@pytest.fixture
def container(session_factory, settings, translation_skill):
    return build_container(session_factory, settings, translation_skill=translation_skill)


@pytest.fixture
def event_bus(container):
    return container.event_bus


@pytest.fixture
def policy_service(container):
    return container.policy_service


@pytest.fixture
def approval_service(container):
    return container.approval_service


@pytest.fixture
def translation_service(container):
    return container.translation_service


@pytest.fixture
def case_link_service(container):
    return container.case_link_service


@pytest.fixture
def workflow_engine(container):
    return container.workflow_engine


@pytest.fixture
def published_events(event_bus):
    """Все события, прошедшие через шину."""
    received = []

    async def record(event):
        received.append(event)

    event_bus.subscribe(handler=record)
    return received


@pytest_asyncio.fixture
async def approval_template(workflow_engine):
    """Шаблон утверждения POLICY по умолчанию: review -> signoff."""
    return await workflow_engine.create_template(
        organization_id=ORG_ID,
        name="Policy approval",
        entity_type="POLICY",
        stages=[
            {"id": "review", "name": "Review", "description": "Compliance review"},
            {"id": "signoff", "name": "Sign-off", "description": "Executive sign-off"},
        ],
        transitions=[{"from": "review", "to": "signoff"}],
        initial_stage="review",
        is_default=True,
        default_sla_days=14,
    )


@pytest_asyncio.fixture
async def draft_policy(policy_service):
    """Политика в DRAFT с непустым черновиком."""
    return await policy_service.create(
        CreatePolicyInput(
            title="Data Retention",
            policy_type=PolicyType.DATA_PRIVACY,
            content="<p>Keep records for <b>7</b> years</p>",
        ),
        USER_ID,
        ORG_ID,
    )


@pytest_asyncio.fixture
async def published_version(policy_service, draft_policy):
    """Версия 1 политики draft_policy."""
    return await policy_service.publish(draft_policy.id, PublishPolicyInput(), USER_ID, ORG_ID)


async def publish_new_version(policy_service, policy_id: str, content: str):
    """Отредактировать черновик и опубликовать следующую версию."""
    await policy_service.update_draft(policy_id, UpdatePolicyInput(content=content), USER_ID, ORG_ID)
    return await policy_service.publish(policy_id, PublishPolicyInput(), USER_ID, ORG_ID)
