"""
Typed notifications emitted by the world state and the markup interpreter.

Events carry keys and world indices rather than entity objects. Handlers are
subscribed per event type and called synchronously in subscription order.
"""
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

MAX_DEPTH = 8  # Maximum nesting of events emitted from within handlers

@dataclass(frozen=True)
class FocusLost:
    location: int

@dataclass(frozen=True)
class FocusChanged:
    previous: Optional[int]
    current: int

@dataclass(frozen=True)
class FocusGained:
    location: int

@dataclass(frozen=True)
class TagChanged:
    holder: str             # Entity key (or name, if unkeyed), or "player"
    tag: str
    added: bool

@dataclass(frozen=True)
class ItemChanged:
    item: str
    added: bool

@dataclass(frozen=True)
class ImpactEvent:
    """Raised by a '#ref' impact. 'target' is None for the player."""
    target: Optional[str]
    argument: str
    source: Optional[str]

@dataclass(frozen=True)
class ScriptEvent:
    """Raised by a '[#]{argument}' markup directive while rendering."""
    argument: str

E = TypeVar("E")
EventHandler = Callable[[Any], None]

class EventBus:
    """
    Synchronous event bus.

        bus = EventBus()
        bus.subscribe(FocusChanged, on_focus_changed)
        bus.emit(FocusChanged(previous=None, current=3))
    """
    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)
        self._depth = 0

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed %s to %s", getattr(handler, "__qualname__", handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        try:
            self._handlers[event_type].remove(handler)
        except ValueError:
            logger.warning("Handler not subscribed to %s: %s", event_type.__name__, handler)

    def emit(self, event: Any) -> None:
        if self._depth >= MAX_DEPTH:
            logger.warning("Event depth exceeded (%d), dropping %r", MAX_DEPTH, event)
            return

        handlers = list(self._handlers.get(type(event), []))
        logger.debug("Emit %r to %d handler(s)", event, len(handlers))

        self._depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception("Event handler failed: %s (event=%r)", getattr(handler, "__qualname__", handler), event)
        finally:
            self._depth -= 1

    def clear(self) -> None:
        self._handlers.clear()
        self._depth = 0

    @property
    def handler_count(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())
