"""
Интерфейс внешнего движка workflow.

Утверждение политик только запускает, отменяет и читает экземпляры
workflow; бизнес-правила этапов живут в движке.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkflowStage(BaseModel):
    """Этап шаблона workflow."""
    id: str
    name: str
    description: Optional[str] = None


class WorkflowTemplateInfo(BaseModel):
    """Шаблон workflow в форме, нужной потребителям движка."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    entity_type: str
    version: int = 1
    is_active: bool = True
    is_default: bool = False
    stages: List[WorkflowStage] = Field(default_factory=list)
    transitions: List[Dict[str, str]] = Field(default_factory=list)
    initial_stage: str
    default_sla_days: Optional[int] = None

    def find_stage(self, stage_id: str) -> Optional[WorkflowStage]:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None


class WorkflowInstanceInfo(BaseModel):
    """Экземпляр workflow вместе с шаблоном."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    template_id: str
    template_version: int
    entity_type: str
    entity_id: str
    current_stage: str
    status: str
    step_states: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    outcome: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    started_by_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    template: Optional[WorkflowTemplateInfo] = None


class IWorkflowEngine(ABC):
    """
    Контракт движка workflow.

    События жизненного цикла (workflow.completed / cancelled / transitioned)
    движок публикует сам через DomainEventPublisher.
    """

    @abstractmethod
    async def start_workflow(
        self,
        organization_id: str,
        entity_type: str,
        entity_id: str,
        template_id: str,
        actor_user_id: Optional[str] = None,
    ) -> str:
        """
        Запустить экземпляр workflow.

        Returns:
            ID созданного экземпляра

        Raises:
            NotFoundError: Шаблон не найден или неактивен
            PreconditionFailedError: Начальный этап отсутствует в шаблоне
        """
        pass

    @abstractmethod
    async def cancel(
        self,
        instance_id: str,
        organization_id: str,
        actor_user_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        """Отменить активный экземпляр workflow."""
        pass

    @abstractmethod
    async def find_active_instance(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> Optional[WorkflowInstanceInfo]:
        pass

    @abstractmethod
    async def find_latest_instance(
        self, organization_id: str, entity_type: str, entity_id: str
    ) -> Optional[WorkflowInstanceInfo]:
        """Последний созданный экземпляр (не обязательно активный)."""
        pass

    @abstractmethod
    async def find_default_template(
        self, organization_id: str, entity_type: str
    ) -> Optional[WorkflowTemplateInfo]:
        pass

    @abstractmethod
    async def list_templates(
        self, organization_id: str, entity_type: str, active_only: bool = True
    ) -> List[WorkflowTemplateInfo]:
        """Шаблоны: сначала шаблон по умолчанию, затем по имени."""
        pass
