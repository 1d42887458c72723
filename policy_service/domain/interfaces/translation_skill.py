"""
Интерфейс AI-навыков (перевод контента).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SkillContext(BaseModel):
    """Контекст вызова навыка: кто, для какой сущности, с какими правами."""
    organization_id: str
    user_id: Optional[str] = None
    entity_type: str
    entity_id: str
    permissions: List[str] = Field(default_factory=list)


class SkillResult(BaseModel):
    """
    Результат навыка.

    Навык не выбрасывает исключения при ошибке внешнего сервиса,
    а возвращает success=False с текстом ошибки.
    """
    success: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class ITranslationSkill(ABC):
    """Исполнитель AI-навыков."""

    @abstractmethod
    async def execute_skill(
        self,
        skill_name: str,
        params: Dict[str, Any],
        context: SkillContext,
    ) -> SkillResult:
        """
        Выполнить навык.

        Для "translate" params = {content, targetLanguage, preserveFormatting},
        при успехе data = {"translated": str}, metadata может содержать "model".
        """
        pass
