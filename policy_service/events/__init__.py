"""
Event fan-out: closed event kinds, typed events and the in-process dispatcher.
"""

from .event_types import EventType, EventCategory
from .base_event import BaseEvent
from .publisher import DomainEventPublisher
from .event_bus import EventBus, EventBusStats

__all__ = [
    "EventType",
    "EventCategory",
    "BaseEvent",
    "DomainEventPublisher",
    "EventBus",
    "EventBusStats",
]
