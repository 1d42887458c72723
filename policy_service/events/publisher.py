"""
DomainEventPublisher port.

Components receive the publisher through their constructor; the
dispatcher behind it decides how subscribers are run.
"""

from abc import ABC, abstractmethod

from .base_event import BaseEvent


class DomainEventPublisher(ABC):
    """Narrow publishing interface injected into services and listeners."""

    @abstractmethod
    async def publish(self, event: BaseEvent) -> None:
        """
        Publish an event.

        Must never raise because of a subscriber failure: the operation
        that produced the event has already committed.
        """
        pass
