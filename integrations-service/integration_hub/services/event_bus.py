"""In-process event bus for integration events."""

from collections import deque
from typing import Callable, Deque, List
import logging

from integration_hub.models import IntegrationEvent


logger = logging.getLogger(__name__)

EventHandler = Callable[[IntegrationEvent], None]


class EventBus:
    """Synchronous publish/subscribe with a bounded history.

    Handlers run in subscription order on the publisher's call stack. A
    handler that raises is logged and skipped; the remaining handlers and
    the publisher are unaffected.
    """

    def __init__(self, history_limit: int = 200):
        self._handlers: List[EventHandler] = []
        self._history: Deque[IntegrationEvent] = deque(maxlen=history_limit)

    def subscribe(self, handler: EventHandler) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: IntegrationEvent) -> None:
        self._history.append(event)

        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    f"Event handler {getattr(handler, '__name__', handler)!r} failed on {event.type.value}: {e}",
                    exc_info=True,
                )

    def history(self) -> List[IntegrationEvent]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)


class NullEventBus(EventBus):
    """Event bus for headless contexts: accepts everything, keeps nothing."""

    def __init__(self):
        super().__init__(history_limit=0)

    def subscribe(self, handler: EventHandler) -> None:
        pass

    def unsubscribe(self, handler: EventHandler) -> None:
        pass

    def publish(self, event: IntegrationEvent) -> None:
        logger.debug(f"Dropped {event.type.value} event for {event.integration_id}")
