"""
In-process event dispatcher for pub/sub event handling.
"""

from typing import Awaitable, Callable, List, Dict, Optional, Set
from collections import defaultdict
import asyncio
import logging
from datetime import datetime, timezone

from .base_event import BaseEvent
from .event_types import EventType, EventCategory
from .publisher import DomainEventPublisher

logger = logging.getLogger("policy-service.events.event_bus")

Handler = Callable[[BaseEvent], Awaitable[None]]


class EventHandler:
    """Wrapper for event handler with metadata."""

    def __init__(
        self,
        handler: Handler,
        priority: int = 0,
        event_type: Optional[EventType] = None,
        event_category: Optional[EventCategory] = None
    ):
        self.handler = handler
        self.priority = priority
        self.event_type = event_type
        self.event_category = event_category

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))

    def __repr__(self):
        return f"EventHandler(handler={self.name}, priority={self.priority})"


class EventBusStats:
    """Statistics for event bus operations."""

    def __init__(self):
        self.total_published: int = 0
        self.successful_handlers: int = 0
        self.failed_handlers: int = 0
        self.last_event_time: Optional[datetime] = None


class EventBus(DomainEventPublisher):
    """
    Dispatcher wiring publishers to subscribers.

    Features:
    - Subscribe to events by type or category
    - Wildcard subscriptions (all events)
    - Handler priorities
    - Handler errors are logged and counted, never re-raised
    - Inline or background execution of handlers

    Args:
        await_handlers: Run handlers before publish() returns. When False,
            handlers run in a background task tracked until drain().
    """

    def __init__(self, await_handlers: bool = False):
        self._await_handlers = await_handlers

        # Subscribers by event type
        self._subscribers: Dict[EventType, List[EventHandler]] = defaultdict(list)

        # Subscribers by category
        self._category_subscribers: Dict[EventCategory, List[EventHandler]] = defaultdict(list)

        # Wildcard subscribers (receive all events)
        self._wildcard_subscribers: List[EventHandler] = []

        # Background dispatch tasks
        self._pending: Set[asyncio.Task] = set()

        self._stats = EventBusStats()

    def subscribe(
        self,
        event_type: Optional[EventType] = None,
        event_category: Optional[EventCategory] = None,
        handler: Optional[Handler] = None,
        priority: int = 0
    ):
        """
        Subscribe to events.

        Args:
            event_type: Specific event type to subscribe to
            event_category: Event category to subscribe to
            handler: Async function to handle events
            priority: Handler priority (higher = executed first)

        Returns:
            Unsubscribe function or decorator

        Examples:
            bus.subscribe(event_type=EventType.POLICY_PUBLISHED, handler=on_published)

            @bus.subscribe(event_category=EventCategory.WORKFLOW)
            async def on_workflow(event):
                pass
        """
        if handler is None:
            def decorator(func: Handler):
                self._add_subscriber(event_type, event_category, func, priority)
                return func
            return decorator

        self._add_subscriber(event_type, event_category, handler, priority)

        def unsubscribe():
            self.unsubscribe(event_type, event_category, handler)
        return unsubscribe

    def _add_subscriber(
        self,
        event_type: Optional[EventType],
        event_category: Optional[EventCategory],
        handler: Handler,
        priority: int
    ):
        """Add a subscriber to the appropriate list."""
        event_handler = EventHandler(
            handler=handler,
            priority=priority,
            event_type=event_type,
            event_category=event_category
        )

        if event_type:
            target = self._subscribers[EventType(event_type)]
        elif event_category:
            target = self._category_subscribers[EventCategory(event_category)]
        else:
            target = self._wildcard_subscribers
        target.append(event_handler)
        target.sort(key=lambda h: h.priority, reverse=True)

        logger.debug(
            f"Subscribed {event_handler.name} to "
            f"{'type=' + str(event_type) if event_type else ''}"
            f"{'category=' + str(event_category) if event_category else ''}"
            f"{'wildcard' if not event_type and not event_category else ''}"
        )

    def unsubscribe(
        self,
        event_type: Optional[EventType],
        event_category: Optional[EventCategory],
        handler: Handler
    ):
        """Unsubscribe a handler from events."""
        if event_type:
            key = EventType(event_type)
            self._subscribers[key] = [
                h for h in self._subscribers[key] if h.handler != handler
            ]
        elif event_category:
            key = EventCategory(event_category)
            self._category_subscribers[key] = [
                h for h in self._category_subscribers[key] if h.handler != handler
            ]
        else:
            self._wildcard_subscribers = [
                h for h in self._wildcard_subscribers if h.handler != handler
            ]

    async def publish(
        self,
        event: BaseEvent,
        wait_for_handlers: Optional[bool] = None
    ) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: Event to publish
            wait_for_handlers: Override the bus default execution mode
        """
        self._stats.total_published += 1
        self._stats.last_event_time = datetime.now(timezone.utc)

        handlers = self._get_handlers_for_event(event)
        if not handlers:
            logger.debug(f"No handlers for event {event.event_type.value}")
            return

        logger.debug(
            f"Publishing event {event.event_type.value} to {len(handlers)} handlers"
        )

        inline = self._await_handlers if wait_for_handlers is None else wait_for_handlers
        if inline:
            for handler in handlers:
                await self._execute_single_handler(event, handler)
            return

        task = asyncio.create_task(self._execute_handlers(event, handlers))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _get_handlers_for_event(self, event: BaseEvent) -> List[EventHandler]:
        """Get all subscribers for an event ordered by priority."""
        handlers: List[EventHandler] = []
        handlers.extend(self._subscribers.get(event.event_type, []))
        handlers.extend(self._category_subscribers.get(event.event_category, []))
        handlers.extend(self._wildcard_subscribers)
        handlers.sort(key=lambda h: h.priority, reverse=True)
        return handlers

    async def _execute_handlers(self, event: BaseEvent, handlers: List[EventHandler]):
        """Run handlers one after another in a background task."""
        for handler in handlers:
            await self._execute_single_handler(event, handler)

    async def _execute_single_handler(self, event: BaseEvent, handler: EventHandler):
        """Execute a single handler with error handling."""
        try:
            await handler.handler(event)
            self._stats.successful_handlers += 1
        except Exception as e:
            logger.error(
                f"Error in event handler {handler.name} "
                f"for event {event.event_type.value}: {e}",
                exc_info=True
            )
            self._stats.failed_handlers += 1

    async def drain(self):
        """Wait until background dispatch tasks finish (shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_stats(self) -> EventBusStats:
        """Get event bus statistics."""
        return self._stats

    def clear(self):
        """Clear all subscriptions (for testing)."""
        self._subscribers.clear()
        self._category_subscribers.clear()
        self._wildcard_subscribers.clear()
        logger.debug("Event bus cleared")
