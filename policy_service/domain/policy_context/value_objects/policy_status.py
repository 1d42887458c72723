"""
PolicyStatus Value Object.

Статус политики с таблицей допустимых переходов.
"""

from enum import Enum
from typing import Dict, Set


class PolicyStatus(str, Enum):
    """
    Возможные статусы политики.

    Жизненный цикл:
    - DRAFT: черновик, редактируется
    - PENDING_APPROVAL: отправлена на утверждение, редактирование запрещено
    - APPROVED: workflow утверждения завершен
    - PUBLISHED: опубликована как неизменяемая версия
    - RETIRED: выведена из оборота (терминальный статус)

    Примеры:
        >>> PolicyStatus.DRAFT.can_transition_to(PolicyStatus.PENDING_APPROVAL)
        True
        >>> PolicyStatus.RETIRED.is_terminal()
        True
    """
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    RETIRED = "RETIRED"

    def can_transition_to(self, target: "PolicyStatus") -> bool:
        """Проверить, допустим ли переход в target."""
        return target in _VALID_TRANSITIONS[self]

    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self]

    def is_editable(self) -> bool:
        """Черновик нельзя менять, пока политика на утверждении."""
        return self is not PolicyStatus.PENDING_APPROVAL


# Публикация не зависит от утверждения: из DRAFT/APPROVED/PENDING_APPROVAL
# можно опубликовать напрямую, PUBLISHED допускает повторную публикацию.
_VALID_TRANSITIONS: Dict[PolicyStatus, Set[PolicyStatus]] = {
    PolicyStatus.DRAFT: {
        PolicyStatus.PENDING_APPROVAL,
        PolicyStatus.PUBLISHED,
        PolicyStatus.RETIRED,
    },
    PolicyStatus.PENDING_APPROVAL: {
        PolicyStatus.APPROVED,
        PolicyStatus.DRAFT,
        PolicyStatus.PUBLISHED,
        PolicyStatus.RETIRED,
    },
    PolicyStatus.APPROVED: {
        PolicyStatus.PUBLISHED,
        PolicyStatus.RETIRED,
    },
    PolicyStatus.PUBLISHED: {
        PolicyStatus.PUBLISHED,
        PolicyStatus.RETIRED,
    },
    PolicyStatus.RETIRED: set(),
}
