"""
Translations роутер.

Переводы опубликованных версий политик.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ..schemas import LanguagesResponse, TranslationResponse
from ....application.dto import CreateTranslationInput, ReviewTranslationInput, UpdateTranslationInput
from ....application.services import PolicyTranslationService
from ....core.dependencies import RequestContext, get_request_context, get_translation_service

logger = logging.getLogger("policy-service.api.translations")

router = APIRouter(prefix="/translations", tags=["translations"])


@router.post("", response_model=TranslationResponse, status_code=201)
async def create_translation(
    request: CreateTranslationInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    """
    Создать перевод версии.

    Raises:
        HTTPException 404: Версия не найдена
        HTTPException 409: Перевод на этот язык уже есть
        HTTPException 400: Нет content/title для ручного перевода
        HTTPException 502: Ошибка AI-перевода
    """
    return await service.translate(request, ctx.user_id, ctx.organization_id)


@router.get("/languages", response_model=LanguagesResponse)
async def list_languages(service: PolicyTranslationService = Depends(get_translation_service)):
    return LanguagesResponse(languages=service.available_languages())


@router.get("/stale", response_model=List[TranslationResponse])
async def list_stale_translations(
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    return await service.list_stale(ctx.organization_id)


@router.get("/by-version/{policy_version_id}", response_model=List[TranslationResponse])
async def list_version_translations(
    policy_version_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    return await service.list_by_version(policy_version_id, ctx.organization_id)


@router.get("/{translation_id}", response_model=TranslationResponse)
async def get_translation(
    translation_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    return await service.get(translation_id, ctx.organization_id)


@router.put("/{translation_id}", response_model=TranslationResponse)
async def update_translation(
    translation_id: str,
    request: UpdateTranslationInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    return await service.update_translation(translation_id, request, ctx.user_id, ctx.organization_id)


@router.post("/{translation_id}/review", response_model=TranslationResponse)
async def review_translation(
    translation_id: str,
    request: ReviewTranslationInput,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    return await service.review_translation(translation_id, request, ctx.user_id, ctx.organization_id)


@router.post("/{translation_id}/refresh", response_model=TranslationResponse)
async def refresh_translation(
    translation_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: PolicyTranslationService = Depends(get_translation_service),
):
    """
    Перевести заново устаревший перевод.

    Raises:
        HTTPException 422: Перевод не устарел
    """
    return await service.refresh_stale_translation(translation_id, ctx.user_id, ctx.organization_id)
