"""Synchronous in-process event bus."""
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, DefaultDict, List, Type

from loguru import logger


@dataclass(frozen=True)
class UnitRemoveRequested:
    """Emitted by the display layer when the user asks to delete a unit."""

    unit_id: str


class EventBus:
    def __init__(self):
        self._handlers: DefaultDict[Type, List[Callable]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Callable) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: Type, handler: Callable) -> None:
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def emit(self, event) -> int:
        """Call every handler subscribed to the event's type, in order; return how many ran."""
        handlers = list(self._handlers[type(event)])
        if not handlers:
            logger.debug(f"No subscribers for {type(event).__name__}")
        for handler in handlers:
            handler(event)
        return len(handlers)
