"""
Message Bus

Routes domain events to the handlers subscribed to them. Handlers are
wired once at startup (see ``BookingsConfig.ready``) and run after the
transaction that produced the events has committed.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Event bus: multiple handlers per event type (1:N)

    A failing handler is logged and does not stop the remaining ones,
    because the state change that produced the event is already committed.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler in handlers:
            return
        handlers.append(handler)
        logger.debug(f"Registered {getattr(handler, '__name__', handler)} for {event_type.__name__}")

    def unregister_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._event_handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        for event in events:
            event_type = type(event)
            handlers = self.handlers_for(event_type)

            if not handlers:
                logger.warning(f"No handlers registered for event {event_type.__name__}")
                continue

            logger.info(f"Publishing event: {event_type.__name__} (aggregate {event.aggregate_id})")

            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.error(
                        f"Error in event handler {getattr(handler, '__name__', handler)} for event {event_type.__name__}",
                        exc_info=True,
                    )


# Global message bus instance
message_bus = MessageBus()
