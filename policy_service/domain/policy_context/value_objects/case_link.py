"""
PolicyCaseLinkType Value Object.

Тип связи политики с делом (case) расследования.
"""

from enum import Enum


class PolicyCaseLinkType(str, Enum):
    """
    Типы связи политика -> дело.

    - VIOLATION: в деле нарушена политика
    - GOVERNING: политика регулирует ситуацию в деле
    - REFERENCE: дело ссылается на политику
    """
    VIOLATION = "VIOLATION"
    REFERENCE = "REFERENCE"
    GOVERNING = "GOVERNING"

    @property
    def priority(self) -> int:
        """Порядок вывода в списке связей дела: нарушения первыми."""
        return _PRIORITY[self]


_PRIORITY = {
    PolicyCaseLinkType.VIOLATION: 0,
    PolicyCaseLinkType.GOVERNING: 1,
    PolicyCaseLinkType.REFERENCE: 2,
}
