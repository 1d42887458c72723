"""
Policies роутер.

Жизненный цикл политики (черновик, публикация, вывод из оборота),
версии, журнал активности и утверждение.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..schemas import (
    ActivityResponse,
    PolicyListResponse,
    PolicyResponse,
    PolicyVersionResponse,
    SubmitForApprovalResponse,
)
from ....application.dto import (
    ApprovalStatusView,
    CancelApprovalInput,
    CreatePolicyInput,
    ListPoliciesQuery,
    PublishPolicyInput,
    SubmitForApprovalInput,
    UpdatePolicyInput,
)
from ....application.services import PolicyApprovalService, PolicyService
from ....core.dependencies import (
    RequestContext,
    get_approval_service,
    get_policy_service,
    get_request_context,
)
from ....domain.interfaces import WorkflowTemplateInfo
from ....domain.policy_context.value_objects import PolicyStatus, PolicyType

logger = logging.getLogger("policy-service.api.policies")

router = APIRouter(prefix="/policies", tags=["policies"])


@router.post("", response_model=PolicyResponse, status_code=201)
async def create_policy(
    request: CreatePolicyInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    """
    Создать политику в статусе DRAFT.

    Пример запроса:
        POST /api/v1/policies
        {
            "title": "Data Retention",
            "policy_type": "DATA_PRIVACY",
            "content": "<p>Keep records for 7 years</p>"
        }
    """
    return await service.create(request, ctx.user_id, ctx.organization_id)


@router.get("", response_model=PolicyListResponse)
async def list_policies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[PolicyStatus] = None,
    policy_type: Optional[PolicyType] = None,
    owner_id: Optional[str] = None,
    search: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    query = ListPoliciesQuery(
        page=page,
        limit=limit,
        status=status,
        policy_type=policy_type,
        owner_id=owner_id,
        search=search,
    )
    result = await service.list(query, ctx.organization_id)
    return PolicyListResponse(
        items=[PolicyResponse.model_validate(p) for p in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/versions/{version_id}", response_model=PolicyVersionResponse)
async def get_policy_version(
    version_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    return await service.get_version(version_id, ctx.organization_id)


@router.get("/approval-templates", response_model=List[WorkflowTemplateInfo])
async def list_approval_templates(
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyApprovalService = Depends(get_approval_service),
):
    """Активные шаблоны утверждения политик, шаблон по умолчанию первым."""
    return await service.list_available_templates(ctx.organization_id)


@router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    return await service.get(policy_id, ctx.organization_id)


@router.patch("/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: str,
    request: UpdatePolicyInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    """
    Обновить черновик.

    Raises:
        HTTPException 422: Политика на утверждении
    """
    return await service.update_draft(policy_id, request, ctx.user_id, ctx.organization_id)


@router.post("/{policy_id}/publish", response_model=PolicyVersionResponse, status_code=201)
async def publish_policy(
    policy_id: str,
    request: PublishPolicyInput = Body(default=PublishPolicyInput()),
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    """
    Опубликовать черновик как новую версию.

    Raises:
        HTTPException 400: Черновик пуст
        HTTPException 422: Политика выведена из оборота
    """
    return await service.publish(policy_id, request, ctx.user_id, ctx.organization_id)


@router.post("/{policy_id}/retire", response_model=PolicyResponse)
async def retire_policy(
    policy_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    return await service.retire(policy_id, ctx.user_id, ctx.organization_id)


@router.get("/{policy_id}/versions", response_model=List[PolicyVersionResponse])
async def list_policy_versions(
    policy_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    return await service.list_versions(policy_id, ctx.organization_id)


@router.get("/{policy_id}/activity", response_model=List[ActivityResponse])
async def get_policy_activity(
    policy_id: str,
    limit: int = Query(100, ge=1, le=500),
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyService = Depends(get_policy_service),
):
    return await service.get_activity(policy_id, ctx.organization_id, limit=limit)


# ==================== Approval ====================


@router.post("/{policy_id}/approval", response_model=SubmitForApprovalResponse, status_code=201)
async def submit_for_approval(
    policy_id: str,
    request: SubmitForApprovalInput = Body(default=SubmitForApprovalInput()),
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyApprovalService = Depends(get_approval_service),
):
    """
    Отправить черновик на утверждение.

    Raises:
        HTTPException 400: Пустой черновик или не настроен шаблон workflow
        HTTPException 422: Политика не в статусе DRAFT
    """
    result = await service.submit_for_approval(policy_id, request, ctx.user_id, ctx.organization_id)
    logger.info(f"Policy {policy_id} submitted, workflow {result.workflow_instance_id}")
    return SubmitForApprovalResponse(
        policy=PolicyResponse.model_validate(result.policy),
        workflow_instance_id=result.workflow_instance_id,
    )


@router.post("/{policy_id}/approval/cancel", response_model=PolicyResponse)
async def cancel_approval(
    policy_id: str,
    request: CancelApprovalInput = Body(default=CancelApprovalInput()),
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyApprovalService = Depends(get_approval_service),
):
    return await service.cancel_approval(policy_id, request, ctx.user_id, ctx.organization_id)


@router.get("/{policy_id}/approval", response_model=ApprovalStatusView)
async def get_approval_status(
    policy_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyApprovalService = Depends(get_approval_service),
):
    return await service.get_approval_status(policy_id, ctx.organization_id)
