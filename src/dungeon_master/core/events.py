import logging
from enum import Enum
from threading import RLock
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    """Notification levels surfaced to the player log."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class EventName:
    """Centralized event names emitted by the simulation."""

    NOTIFICATION = "notification"
    REDRAW = "redraw"
    DP_CHANGED = "dp.changed"
    ADVENTURER_SPAWNED = "adventurer.spawned"
    ADVENTURER_DIED = "adventurer.died"
    ADVENTURER_ESCAPED = "adventurer.escaped"
    GAME_OVER = "game.over"


class EventBus:
    """A lightweight publish/subscribe event bus.

    - Subscribers register handlers for event names (strings).
    - Emit broadcasts payloads to all handlers of that event.

    Used as the sink for notifications and redraw requests so the simulation
    never depends on how (or whether) they are presented.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Subscribe a handler to an event name."""
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)
            logger.debug("Subscribed handler %s to event '%s'", getattr(handler, "__name__", str(handler)), event)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler from an event name. Silently ignores if not present."""
        with self._lock:
            if event in self._handlers and handler in self._handlers[event]:
                self._handlers[event].remove(handler)
                logger.debug("Unsubscribed handler %s from event '%s'", getattr(handler, "__name__", str(handler)), event)

    def emit(self, event: str, payload: Any = None) -> None:
        """Emit an event with an optional payload to all subscribed handlers.

        Handlers exceptions are caught and logged, allowing other handlers to still run.
        """
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        logger.debug("Emitting event '%s' to %d handlers with payload: %r", event, len(handlers), payload)
        for handler in handlers:
            try:
                handler(payload)
            except Exception as exc:  # noqa: BLE001 - we want to log any exception from handlers
                logger.exception("Error in event handler for '%s': %s", event, exc)
