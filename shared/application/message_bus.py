"""
Message Bus

Routes booking commands to their single handler and fans committed
domain events out to subscribers. The bookings app registers its command
handlers on startup; the notifications app subscribes to booking events.
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

CommandHandler = Callable[[Any], Any]
EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    In-process dispatcher

    A command type maps to exactly one handler whose return value (and
    exceptions) reach the caller. An event type maps to any number of
    subscribers; a failing subscriber is logged and skipped, because the
    change that raised the event is already committed.
    """

    def __init__(self):
        self._commands: Dict[Type, CommandHandler] = {}
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    # ----- commands -----

    def register_command_handler(self, command_type: Type, handler: CommandHandler, *, replace: bool = False):
        if command_type in self._commands and not replace:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._commands[command_type] = handler
        logger.debug(f"{command_type.__name__} -> {getattr(handler, '__qualname__', handler)}")

    def handle_command(self, command: Any) -> Any:
        name = type(command).__name__
        try:
            handler = self._commands[type(command)]
        except KeyError:
            raise LookupError(f"No handler registered for {name}") from None

        logger.info(f"Handling {name}")
        try:
            return handler(command)
        except Exception as e:
            logger.warning(f"{name} failed with {type(e).__name__}: {e}")
            raise

    # ----- events -----

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe ``handler`` to ``event_type``. Subscribing twice is a no-op."""
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)

    def subscribe(self, event_types: Iterable[Type[DomainEvent]], handler: EventHandler):
        for event_type in event_types:
            self.register_event_handler(event_type, handler)

    def subscribers(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._subscribers.get(event_type, ()))

    def publish_events(self, events: Iterable[DomainEvent]):
        for event in events:
            subscribers = self._subscribers.get(type(event), ())
            if not subscribers:
                logger.debug(f"Event {event.name} has no subscribers")
                continue

            logger.info(f"Publishing {event.name} ({event.event_id}) to {len(subscribers)} subscriber(s)")
            for handler in subscribers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Subscriber {getattr(handler, '__qualname__', handler)} failed on {event.name}: {e}",
                        exc_info=True,
                    )


message_bus = MessageBus()
