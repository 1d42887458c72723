"""
FieldChange Value Object.
"""

from typing import Any, NamedTuple


class FieldChange(NamedTuple):
    """Изменение одного поля черновика: (field, old, new)."""
    field: str
    old: Any
    new: Any
