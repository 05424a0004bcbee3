"""
In-Memory Event Log - EventLogPort that keeps events in a list.
"""

import logging
import threading

from ...core.domain.entities import CreateEventInput
from ...core.ports.event_log import EventLogPort


class InMemoryEventLog(EventLogPort):
    """Collects appended events in order."""

    def __init__(self):
        self._events: list[CreateEventInput] = []
        self._lock = threading.Lock()
        self.logger = logging.getLogger("InMemoryEventLog")

    def append(self, events: list[CreateEventInput]) -> None:
        with self._lock:
            self._events.extend(events)
        self.logger.debug(f"Appended {len(events)} events")

    @property
    def events(self) -> list[CreateEventInput]:
        with self._lock:
            return list(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
