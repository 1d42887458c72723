"""
Workflows роутер.

Администрирование шаблонов и управление экземплярами встроенного
движка workflow.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from ..schemas import (
    CancelWorkflowRequest,
    CompleteRequest,
    CreateWorkflowTemplateRequest,
    TransitionRequest,
)
from ....core.dependencies import RequestContext, get_request_context, get_workflow_engine
from ....domain.interfaces import WorkflowInstanceInfo, WorkflowTemplateInfo
from ....infrastructure.workflow import WorkflowEngine

logger = logging.getLogger("policy-service.api.workflows")

router = APIRouter(prefix="/workflows", tags=["workflows"])


@router.post("/templates", response_model=WorkflowTemplateInfo, status_code=201)
async def create_template(
    request: CreateWorkflowTemplateRequest,
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.create_template(
        organization_id=ctx.organization_id,
        name=request.name,
        entity_type=request.entity_type,
        stages=[stage.model_dump() for stage in request.stages],
        transitions=[rule.model_dump(by_alias=True) for rule in request.transitions],
        initial_stage=request.initial_stage,
        description=request.description,
        is_default=request.is_default,
        default_sla_days=request.default_sla_days,
    )


@router.get("/templates", response_model=List[WorkflowTemplateInfo])
async def list_templates(
    entity_type: str = "POLICY",
    active_only: bool = True,
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.list_templates(ctx.organization_id, entity_type, active_only=active_only)


@router.get("/instances", response_model=List[WorkflowInstanceInfo])
async def list_instances(
    entity_type: Optional[str] = None,
    status: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.list_instances(ctx.organization_id, entity_type=entity_type, status=status)


@router.get("/instances/{instance_id}", response_model=WorkflowInstanceInfo)
async def get_instance(
    instance_id: str,
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.get_instance(instance_id, ctx.organization_id)


@router.post("/instances/{instance_id}/transition", response_model=WorkflowInstanceInfo)
async def transition_instance(
    instance_id: str,
    request: TransitionRequest,
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    """
    Перевести экземпляр на следующий этап.

    Raises:
        HTTPException 422: Экземпляр не активен или переход запрещен
    """
    return await engine.transition(
        instance_id,
        ctx.organization_id,
        to_stage=request.to_stage,
        actor_user_id=ctx.user_id,
        reason=request.reason,
    )


@router.post("/instances/{instance_id}/complete", response_model=WorkflowInstanceInfo)
async def complete_instance(
    instance_id: str,
    request: CompleteRequest = Body(default=CompleteRequest()),
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    return await engine.complete(
        instance_id,
        ctx.organization_id,
        outcome=request.outcome,
        actor_user_id=ctx.user_id,
    )


@router.post("/instances/{instance_id}/cancel", status_code=204)
async def cancel_instance(
    instance_id: str,
    request: CancelWorkflowRequest = Body(default=CancelWorkflowRequest()),
    ctx: RequestContext = Depends(get_request_context),
    engine: WorkflowEngine = Depends(get_workflow_engine),
):
    await engine.cancel(instance_id, ctx.organization_id, actor_user_id=ctx.user_id, reason=request.reason)
