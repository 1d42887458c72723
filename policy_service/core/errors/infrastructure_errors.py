"""
Инфраструктурные исключения.

Ошибки работы с БД и внешними HTTP-сервисами.
"""

from typing import Optional, Dict, Any
from .base import InfrastructureError


class RepositoryError(InfrastructureError):
    """
    Исключение: ошибка репозитория.

    Пример:
        >>> raise RepositoryError(operation="save", entity_type="Policy", reason="Constraint violation")
    """

    def __init__(
        self,
        operation: str,
        entity_type: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        message = f"Repository error during {operation} of {entity_type}: {reason}"
        super().__init__(
            message=message,
            details={
                "operation": operation,
                "entity_type": entity_type,
                "reason": reason,
                **(details or {})
            },
            error_code="REPOSITORY_ERROR"
        )


class SearchIndexError(InfrastructureError):
    """Исключение: сервис поискового индекса недоступен или вернул ошибку."""

    def __init__(self, document_id: str, reason: str):
        super().__init__(
            message=f"Failed to index document {document_id}: {reason}",
            details={"document_id": document_id, "reason": reason},
            error_code="SEARCH_INDEX_ERROR"
        )
