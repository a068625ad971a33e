"""Synchronous in-process event emitter."""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class EventEmitter:
    """
    Named-event pub/sub with synchronous delivery.

    Listeners run inline, in registration order. A listener that raises is
    logged and skipped so the remaining listeners still receive the event.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes this listener when called
        """
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def once(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register a listener that is removed after its first delivery."""
        def wrapper(data: Any) -> None:
            self.off(event, wrapper)
            listener(data)

        return self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener; unknown events or listeners are ignored."""
        listeners = self._listeners.get(event)
        if not listeners:
            return
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            del self._listeners[event]

    def emit(self, event: str, data: Any = None) -> None:
        """Deliver data to every listener of the event."""
        # Copy so listeners may unsubscribe while the event is being delivered
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(data)
            except Exception:
                logger.error(
                    "Error in event listener for %s",
                    event,
                    exc_info=True,
                    extra={"component": "EventEmitter", "action": "emit", "event": event},
                )

    def remove_all_listeners(self, event: str = None) -> None:
        """Remove every listener of one event, or of all events when event is None."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def event_names(self) -> List[str]:
        return list(self._listeners.keys())
