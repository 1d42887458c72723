"""
Base event model for the event fan-out.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
import uuid

from .event_types import EventType, EventCategory


class BaseEvent(BaseModel):
    """
    Base class for all events in the system.

    Provides common metadata and structure for events.
    """

    # Event metadata
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: EventType
    event_category: EventCategory
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Context
    organization_id: str
    aggregate_id: str  # Policy, translation or workflow instance ID
    actor_user_id: Optional[str] = None
    correlation_id: Optional[str] = None

    # Event data
    data: Dict[str, Any] = Field(default_factory=dict)

    # Source metadata
    source: str  # Component that created the event
    version: str = "1.0"

    def to_log_dict(self) -> Dict[str, Any]:
        """Flat JSON-friendly representation."""
        return self.model_dump(mode="json")
