"""
Policy-case associations роутер.

Связи политик с делами расследований и статистика нарушений.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from ..schemas import CaseLinkListResponse, CaseLinkResponse, ViolationStatResponse
from ....application.dto import (
    CreateCaseLinkInput,
    ListCaseLinksQuery,
    UpdateCaseLinkInput,
    ViolationStatsQuery,
)
from ....application.services import PolicyCaseAssociationService
from ....core.dependencies import RequestContext, get_case_link_service, get_request_context
from ....domain.policy_context.value_objects import PolicyCaseLinkType, PolicyType

logger = logging.getLogger("policy-service.api.case_links")

router = APIRouter(prefix="/policy-case-associations", tags=["policy-case-associations"])


@router.post("", response_model=CaseLinkResponse, status_code=201)
async def create_case_link(
    request: CreateCaseLinkInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    """
    Связать политику с делом.

    Пример запроса:
        POST /api/v1/policy-case-associations
        {
            "policy_id": "8f0c...",
            "case_id": "case-42",
            "link_type": "VIOLATION",
            "link_reason": "Gift above threshold"
        }

    Raises:
        HTTPException 404: Политика или версия не найдены
        HTTPException 409: Политика уже связана с делом
    """
    return await service.create(request, ctx.user_id, ctx.organization_id)


@router.get("", response_model=CaseLinkListResponse)
async def list_case_links(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    policy_id: Optional[str] = None,
    case_id: Optional[str] = None,
    link_type: Optional[PolicyCaseLinkType] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    query = ListCaseLinksQuery(
        page=page, limit=limit, policy_id=policy_id, case_id=case_id, link_type=link_type
    )
    result = await service.list(query, ctx.organization_id)
    return CaseLinkListResponse(
        items=[CaseLinkResponse.model_validate(link) for link in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/by-policy/{policy_id}", response_model=List[CaseLinkResponse])
async def list_links_by_policy(
    policy_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    return await service.list_by_policy(policy_id, ctx.organization_id)


@router.get("/by-case/{case_id}", response_model=List[CaseLinkResponse])
async def list_links_by_case(
    case_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    """Связи дела: нарушения первыми."""
    return await service.list_by_case(case_id, ctx.organization_id)


@router.get("/violation-stats", response_model=List[ViolationStatResponse])
async def get_violation_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    policy_type: Optional[PolicyType] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    query = ViolationStatsQuery(start_date=start_date, end_date=end_date, policy_type=policy_type)
    return await service.get_violation_stats(query, ctx.organization_id)


@router.get("/{association_id}", response_model=CaseLinkResponse)
async def get_case_link(
    association_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    return await service.get(association_id, ctx.organization_id)


@router.put("/{association_id}", response_model=CaseLinkResponse)
async def update_case_link(
    association_id: str,
    request: UpdateCaseLinkInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    return await service.update(association_id, request, ctx.user_id, ctx.organization_id)


@router.delete("/{association_id}", status_code=204)
async def delete_case_link(
    association_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyCaseAssociationService = Depends(get_case_link_service),
):
    await service.delete(association_id, ctx.user_id, ctx.organization_id)
    return Response(status_code=204)
