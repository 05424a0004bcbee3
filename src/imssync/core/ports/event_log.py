"""
Event Log Port - Sink for events replayed into the Scrum game.
"""

from abc import ABC, abstractmethod

from ..domain.entities import CreateEventInput


class EventLogPort(ABC):
    """The Scrum game's event log."""

    @abstractmethod
    def append(self, events: list[CreateEventInput]) -> None:
        """Store events in the given order."""
        ...
