"""
API v1 роутеры.
"""

from fastapi import APIRouter

from .policies_router import router as policies_router
from .translations_router import router as translations_router
from .workflows_router import router as workflows_router
from .case_links_router import router as case_links_router

router = APIRouter(prefix="/api/v1")
router.include_router(policies_router)
router.include_router(translations_router)
router.include_router(workflows_router)
router.include_router(case_links_router)

__all__ = ["router"]
