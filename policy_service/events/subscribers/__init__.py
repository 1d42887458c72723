"""
Event subscribers.

Subscribers react to published events after the originating operation
committed:
- Sync policy status with the workflow engine
- Mark translations stale on publish
- Keep the audit trail
- Re-index policies for search

Each subscriber is wired to an EventBus explicitly via register(bus).
"""

from .audit_logger import AuditTrailSubscriber
from .search_indexer import SearchIndexSubscriber, build_document
from .staleness_listener import TranslationStalenessListener
from .workflow_listener import PolicyWorkflowListener

__all__ = [
    "AuditTrailSubscriber",
    "SearchIndexSubscriber",
    "build_document",
    "TranslationStalenessListener",
    "PolicyWorkflowListener",
]
