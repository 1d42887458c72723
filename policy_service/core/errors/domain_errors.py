"""
Доменные исключения.

Таксономия ошибок жизненного цикла политики: NotFound, InvalidState,
PreconditionFailed, Conflict, UpstreamFailure, Exhausted.
"""

from typing import Optional, Dict, Any
from .base import DomainError


class NotFoundError(DomainError):
    """
    Исключение: сущность не найдена (или принадлежит другой организации).

    Пример:
        >>> raise NotFoundError("Policy", "policy-123")
    """

    def __init__(
        self,
        resource: str,
        resource_id: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            message=message or f"{resource} with ID {resource_id} not found",
            details={"resource": resource, "resource_id": resource_id, **(details or {})},
            error_code="NOT_FOUND"
        )


class InvalidStateError(DomainError):
    """
    Исключение: операция запрещена в текущем статусе агрегата.

    Сообщение всегда содержит требуемый и фактический статус,
    если они известны.
    """

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        required_status: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.current_status = current_status
        self.required_status = required_status
        extra: Dict[str, Any] = {}
        if current_status is not None:
            extra["current_status"] = current_status
        if required_status is not None:
            extra["required_status"] = required_status
        super().__init__(
            message=message,
            details={**extra, **(details or {})},
            error_code="INVALID_STATE"
        )


class PreconditionFailedError(DomainError):
    """
    Исключение: отсутствуют обязательные данные.

    Пустой черновик при публикации/отправке, нет контента для ручного
    перевода, не найден шаблон workflow.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "PRECONDITION_FAILED"
    ):
        super().__init__(message=message, details=details, error_code=error_code)


class UpstreamFailureError(PreconditionFailedError):
    """
    Исключение: внешний AI-навык сообщил об ошибке.

    Не повторяется автоматически; сообщение содержит текст ошибки
    внешнего сервиса.
    """

    def __init__(
        self,
        message: str,
        upstream_error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.upstream_error = upstream_error
        super().__init__(
            message=message,
            details={"upstream_error": upstream_error, **(details or {})},
            error_code="UPSTREAM_FAILURE"
        )


class ConflictError(DomainError):
    """Исключение: нарушение уникальности (например, дублирующий перевод)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, details=details, error_code="CONFLICT")


class SlugExhaustedError(DomainError):
    """
    Исключение: не удалось подобрать уникальный slug.

    Защита от патологических коллизий, на практике не должна срабатывать.
    """

    def __init__(self, base_slug: str, attempts: int):
        super().__init__(
            message="Unable to generate unique slug for policy",
            details={"base_slug": base_slug, "attempts": attempts},
            error_code="SLUG_EXHAUSTED"
        )
