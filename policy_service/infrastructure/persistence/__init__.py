"""
Persistence layer: models, repositories, unit of work and database bootstrap.
"""

from .unit_of_work import UnitOfWork

__all__ = ["UnitOfWork"]
