"""
Сборка зависимостей приложения.

Один EventBus на процесс, все сервисы получают его через порт
DomainEventPublisher. Подписчики регистрируются здесь явно.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from ..application.services import (
    PolicyApprovalService,
    PolicyCaseAssociationService,
    PolicyService,
    PolicyTranslationService,
)
from ..domain.interfaces import ITranslationSkill
from ..events import EventBus
from ..events.subscribers import (
    AuditTrailSubscriber,
    PolicyWorkflowListener,
    SearchIndexSubscriber,
    TranslationStalenessListener,
)
from ..infrastructure.ai import LLMTranslationSkill
from ..infrastructure.audit import AuditService
from ..infrastructure.search import SearchIndexClient
from ..infrastructure.workflow import WorkflowEngine
from .config import Settings

logger = logging.getLogger("policy-service.container")


@dataclass
class ServiceContainer:
    """Все долгоживущие компоненты сервиса."""

    event_bus: EventBus
    audit_service: AuditService
    workflow_engine: WorkflowEngine
    policy_service: PolicyService
    approval_service: PolicyApprovalService
    translation_service: PolicyTranslationService
    case_link_service: PolicyCaseAssociationService
    audit_trail: AuditTrailSubscriber
    search_indexer: Optional[SearchIndexSubscriber] = None


def build_container(
    session_factory: async_sessionmaker,
    config: Settings,
    translation_skill: Optional[ITranslationSkill] = None,
    search_client: Optional[SearchIndexClient] = None,
) -> ServiceContainer:
    """
    Создать и связать компоненты.

    Args:
        session_factory: Фабрика сессий для UnitOfWork
        config: Настройки приложения
        translation_skill: Исполнитель AI-перевода (по умолчанию LLM proxy)
        search_client: Клиент поиска (по умолчанию из настроек, если URL задан)
    """
    bus = EventBus(await_handlers=config.event_bus_await_handlers)
    audit_service = AuditService(session_factory)
    workflow_engine = WorkflowEngine(session_factory, bus)

    if translation_skill is None:
        translation_skill = LLMTranslationSkill(
            api_url=config.llm_proxy_url,
            api_key=config.internal_api_key,
            model=config.llm_model,
            timeout=config.translation_timeout,
        )

    audit_trail = AuditTrailSubscriber()
    audit_trail.register(bus)
    PolicyWorkflowListener(session_factory, bus, audit_service).register(bus)
    TranslationStalenessListener(session_factory, bus).register(bus)

    if search_client is None and config.search_indexing_enabled:
        search_client = SearchIndexClient(
            base_url=config.search_index_url,
            api_key=config.internal_api_key,
            timeout=config.search_index_timeout,
            max_attempts=config.search_index_max_attempts,
        )
    search_indexer = None
    if search_client is not None:
        search_indexer = SearchIndexSubscriber(session_factory, search_client)
        search_indexer.register(bus)
    else:
        logger.info("Search indexing disabled")

    return ServiceContainer(
        event_bus=bus,
        audit_service=audit_service,
        workflow_engine=workflow_engine,
        policy_service=PolicyService(session_factory, bus, audit_service),
        approval_service=PolicyApprovalService(session_factory, workflow_engine, bus, audit_service),
        translation_service=PolicyTranslationService(session_factory, translation_skill, bus, audit_service),
        case_link_service=PolicyCaseAssociationService(session_factory, bus, audit_service),
        audit_trail=audit_trail,
        search_indexer=search_indexer,
    )
