"""
Message Bus

Central hub for routing commands and events to their handlers.
Implements the Mediator pattern for decoupling components.
"""

from typing import Dict, List, Callable, Type, Any
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Message bus for commands and events

    Commands: One handler per command (1:1)
    Events: Multiple handlers per event (1:N)
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        """
        Register an event handler

        Multiple handlers can be registered for the same event type.
        Registering the same handler twice is a no-op.
        """
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered event handler for %s", event_type.__name__)

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any],
        *,
        replace: bool = False,
    ):
        """
        Register a command handler

        Only one handler can be registered per command type.
        """
        if command_type in self._command_handlers and not replace:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug("Registered command handler for %s", command_type.__name__)

    def handle_command(self, command: Any) -> Any:
        """
        Handle a command

        Returns the result from the command handler.
        Raises LookupError if no handler is registered.
        """
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise LookupError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.info("Handling command: %s", command_type.__name__)
        return handler(command)

    def publish_events(self, events: List[DomainEvent]):
        """
        Publish domain events

        All registered handlers for each event type will be called.
        Errors in handlers are logged but don't stop other handlers.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug("No handlers registered for event %s", event_type.__name__)
                continue

            logger.info("Publishing event: %s (ID: %s)", event.name, event.event_id)

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        "Error in event handler %s for event %s: %s",
                        getattr(handler, '__name__', repr(handler)),
                        event_type.__name__,
                        e,
                        exc_info=True,
                    )

    def clear(self):
        self._event_handlers.clear()
        self._command_handlers.clear()


# Global message bus instance
message_bus = MessageBus()
