"""
Преобразование исключений Policy Service в HTTP ответы.

Тело ответа: PolicyServiceError.to_dict().
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PolicyServiceError,
    PreconditionFailedError,
    SlugExhaustedError,
    UpstreamFailureError,
)

logger = logging.getLogger("policy-service.api.errors")

# Порядок важен: UpstreamFailureError наследует PreconditionFailedError
STATUS_CODES = (
    (NotFoundError, 404),
    (InvalidStateError, 422),
    (UpstreamFailureError, 502),
    (PreconditionFailedError, 400),
    (SlugExhaustedError, 409),
    (ConflictError, 409),
)


def status_code_for(error: PolicyServiceError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500


async def policy_service_error_handler(request: Request, exc: PolicyServiceError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.warning(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PolicyServiceError, policy_service_error_handler)
