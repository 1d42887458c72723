"""
Базовые исключения для Policy Service.

Определяет иерархию исключений для различных слоев приложения.
"""

from typing import Optional, Dict, Any


class PolicyServiceError(Exception):
    """
    Базовое исключение для всех ошибок Policy Service.

    Атрибуты:
        message: Сообщение об ошибке
        details: Дополнительные детали ошибки
        error_code: Код ошибки для идентификации

    Пример:
        >>> try:
        ...     raise PolicyServiceError("Something went wrong")
        ... except PolicyServiceError as e:
        ...     print(f"Error: {e}")
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Преобразовать исключение в словарь.

        Используется для логирования и тела HTTP ответов.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class DomainError(PolicyServiceError):
    """
    Базовое исключение для ошибок доменного слоя.

    Нарушения бизнес-правил и инвариантов политики, версии, перевода.
    """
    pass


class InfrastructureError(PolicyServiceError):
    """
    Базовое исключение для ошибок инфраструктурного слоя.

    БД, HTTP-клиенты внешних сервисов и т.д.
    """
    pass

