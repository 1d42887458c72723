"""
FastAPI dependency injection providers.

Сервисы берутся из ServiceContainer, собранного в lifespan
(app.state.container). Контекст запроса: заголовки X-Organization-Id
и X-User-Id, проставляемые шлюзом.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, Request

from ..application.services import (
    PolicyApprovalService,
    PolicyCaseAssociationService,
    PolicyService,
    PolicyTranslationService,
)
from ..infrastructure.workflow import WorkflowEngine
from .container import ServiceContainer


@dataclass(frozen=True)
class RequestContext:
    """Организация и пользователь, от имени которых выполняется запрос."""

    organization_id: str
    user_id: str


def get_request_context(
    organization_id: str = Header(..., alias="X-Organization-Id"),
    user_id: str = Header(..., alias="X-User-Id"),
) -> RequestContext:
    return RequestContext(organization_id=organization_id, user_id=user_id)


def get_container(request: Request) -> ServiceContainer:
    """Get service container built on startup"""
    return request.app.state.container


def get_policy_service(container: ServiceContainer = Depends(get_container)) -> PolicyService:
    return container.policy_service


def get_approval_service(container: ServiceContainer = Depends(get_container)) -> PolicyApprovalService:
    return container.approval_service


def get_translation_service(container: ServiceContainer = Depends(get_container)) -> PolicyTranslationService:
    return container.translation_service


def get_case_link_service(container: ServiceContainer = Depends(get_container)) -> PolicyCaseAssociationService:
    return container.case_link_service


def get_workflow_engine(container: ServiceContainer = Depends(get_container)) -> WorkflowEngine:
    return container.workflow_engine
