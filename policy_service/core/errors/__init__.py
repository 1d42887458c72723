"""
Иерархия исключений Policy Service.
"""

from .base import (
    PolicyServiceError,
    DomainError,
    InfrastructureError,
)
from .domain_errors import (
    NotFoundError,
    InvalidStateError,
    PreconditionFailedError,
    UpstreamFailureError,
    ConflictError,
    SlugExhaustedError,
)
from .infrastructure_errors import (
    RepositoryError,
    SearchIndexError,
)

__all__ = [
    "PolicyServiceError",
    "DomainError",
    "InfrastructureError",
    "NotFoundError",
    "InvalidStateError",
    "PreconditionFailedError",
    "UpstreamFailureError",
    "ConflictError",
    "SlugExhaustedError",
    "RepositoryError",
    "SearchIndexError",
]
