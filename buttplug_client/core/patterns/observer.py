"""
Observer Pattern Implementation for Client Events

Each emitting component (log sink, transport, protocol client) owns one
EventSubject per event it publishes. Delivery is synchronous and in
subscription order.
"""

import logging
from collections import deque
from typing import Any, Callable, Deque, List, Tuple


Observer = Callable[..., Any]


class EventSubject:
    """Subject that notifies its observers of a single named event."""

    def __init__(self, name: str):
        self.name = name
        self._observers: List[Observer] = []
        self._pending: Deque[Tuple[Any, ...]] = deque()
        self._emitting = False
        self._logger = logging.getLogger(self.__class__.__name__)

    def subscribe(self, observer: Observer) -> None:
        """Subscribe an observer to this event."""
        if observer not in self._observers:
            self._observers.append(observer)
            self._logger.debug(f"Subscribed observer to '{self.name}': {observer!r}")
        else:
            self._logger.warning(f"Observer already subscribed to '{self.name}': {observer!r}")

    def unsubscribe(self, observer: Observer) -> None:
        """Unsubscribe an observer from this event."""
        if observer in self._observers:
            self._observers.remove(observer)
        else:
            self._logger.warning(f"Observer not found for unsubscription from '{self.name}': {observer!r}")

    def notify(self, *args: Any) -> None:
        """
        Deliver the event to every observer.

        A notify issued from inside an observer is queued and delivered after
        the current emission finishes, so every observer sees events in the
        order they were raised.
        """
        self._pending.append(args)
        if self._emitting:
            return

        self._emitting = True
        try:
            while self._pending:
                payload = self._pending.popleft()
                for observer in list(self._observers):
                    self._safe_notify_observer(observer, payload)
        finally:
            self._emitting = False

    def _safe_notify_observer(self, observer: Observer, payload: Tuple[Any, ...]) -> None:
        """Safely notify a single observer, catching and logging any exceptions."""
        try:
            observer(*payload)
        except Exception as e:
            self._logger.error(f"Error notifying observer of '{self.name}': {e}", exc_info=True)

    def get_observer_count(self) -> int:
        """Get the number of registered observers."""
        return len(self._observers)
