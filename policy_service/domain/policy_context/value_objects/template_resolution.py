"""
Результат выбора шаблона workflow для отправки политики на утверждение.

Явный шаблон, шаблон организации по умолчанию или отсутствие шаблона.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ExplicitTemplate:
    """Шаблон указан вызывающей стороной."""
    template_id: str


@dataclass(frozen=True)
class DefaultTemplate:
    """Найден шаблон по умолчанию для POLICY."""
    template: Any

    @property
    def template_id(self) -> str:
        return self.template.id


@dataclass(frozen=True)
class NoTemplateConfigured:
    """Ни явного шаблона, ни шаблона по умолчанию."""


TemplateResolution = Union[ExplicitTemplate, DefaultTemplate, NoTemplateConfigured]
