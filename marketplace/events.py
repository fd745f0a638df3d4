"""In-process notification dispatcher.

Services emit events after their work is done; listeners decide what to do
with them (store a notification, send an email, ...). Emitting never fails
because of a listener.
"""

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

ORDER_CREATED = "order_created"
ORDER_CANCELLED = "order_cancelled"
LOW_STOCK = "low_stock"

Listener = Callable[[dict[str, Any]], None]


class NotificationDispatcher:
    """Fire-and-forget event fan-out"""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def emit(self, event: str, payload: dict[str, Any]) -> None:
        listeners = list(self._listeners.get(event, []))
        logger.debug(f"Emitting {event} to {len(listeners)} listener(s)")
        for listener in listeners:
            try:
                listener(payload)
            except Exception:
                logger.exception(f"Listener for {event} failed")


# Singleton instance
dispatcher = NotificationDispatcher()
