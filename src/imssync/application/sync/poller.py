"""
Event Poller - Feed tracker changes into the Scrum game's event log.

Each tracked issue has a cursor. A poll asks the connector for events at
or after the cursor; since that bound is inclusive, events at the cursor
timestamp come back again on the next poll and are dropped by source_id.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from ...core.domain.entities import CreateEventInput
from ...core.domain.mapping import IssueMappingConfiguration
from ...core.domain.timestamps import ensure_aware, utc_now
from ...core.exceptions import ImsConnectorError
from ...core.ports.event_log import EventLogPort
from ...core.ports.ims_connector import ImsConnectorPort


@dataclass
class IssueCursor:
    """Polling position of one issue."""

    issue_id: str
    since: datetime
    # source_ids already delivered with timestamp == since
    delivered: set[str] = field(default_factory=set)


@dataclass
class FailedPoll:
    """A poll of one issue that raised."""

    issue_id: str
    error: str
    exception: ImsConnectorError


@dataclass
class PollResult:
    """Result of one poll over all tracked issues."""

    events: list[CreateEventInput] = field(default_factory=list)
    issues_polled: int = 0
    duplicates_dropped: int = 0
    failures: list[FailedPoll] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def events_delivered(self) -> int:
        return len(self.events)


class EventPoller:
    """
    Polls a connector for issue events and appends new ones to an event log.

    A failure for one issue leaves its cursor untouched and does not stop
    the other issues from being polled.
    """

    def __init__(
        self,
        connector: ImsConnectorPort,
        mapping_configuration: IssueMappingConfiguration,
        event_log: EventLogPort,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.connector = connector
        self.mapping_configuration = mapping_configuration
        self.event_log = event_log
        self._clock = clock
        self._cursors: dict[str, IssueCursor] = {}
        self.logger = logging.getLogger("EventPoller")

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------

    def track(self, issue_id: str, since: Optional[datetime] = None) -> None:
        """Start polling an issue; defaults to changes from now on."""
        if issue_id in self._cursors:
            return
        start = ensure_aware(since) if since is not None else self._clock()
        self._cursors[issue_id] = IssueCursor(issue_id=issue_id, since=start)
        self.logger.debug(f"Tracking {issue_id} since {start.isoformat()}")

    def untrack(self, issue_id: str) -> bool:
        return self._cursors.pop(issue_id, None) is not None

    def cursor(self, issue_id: str) -> Optional[IssueCursor]:
        return self._cursors.get(issue_id)

    @property
    def tracked_issues(self) -> list[str]:
        return list(self._cursors)

    # -------------------------------------------------------------------------
    # Polling
    # -------------------------------------------------------------------------

    def poll(self) -> PollResult:
        """Poll every tracked issue once."""
        result = PollResult()

        for cursor in list(self._cursors.values()):
            try:
                events = self.connector.get_events_for_issue(
                    cursor.issue_id, cursor.since, self.mapping_configuration
                )
            except ImsConnectorError as e:
                self.logger.error(f"Polling {cursor.issue_id} failed: {e}")
                result.failures.append(FailedPoll(cursor.issue_id, str(e), e))
                continue

            result.issues_polled += 1
            fresh = self._new_events(cursor, events)
            result.duplicates_dropped += len(events) - len(fresh)

            if fresh:
                self.event_log.append(fresh)
                self._advance(cursor, fresh)
                result.events.extend(fresh)
                self.logger.info(f"Delivered {len(fresh)} events for {cursor.issue_id}")

        return result

    def _new_events(
        self,
        cursor: IssueCursor,
        events: list[CreateEventInput],
    ) -> list[CreateEventInput]:
        fresh = []
        seen = set(cursor.delivered)
        for event in events:
            timestamp = ensure_aware(event.timestamp)
            if timestamp < cursor.since:
                continue
            if event.source_id is not None:
                if event.source_id in seen:
                    continue
                seen.add(event.source_id)
            fresh.append(event)
        return fresh

    def _advance(self, cursor: IssueCursor, delivered: list[CreateEventInput]) -> None:
        newest = max(ensure_aware(event.timestamp) for event in delivered)
        at_newest = {
            event.source_id for event in delivered
            if event.source_id is not None and ensure_aware(event.timestamp) == newest
        }
        if newest > cursor.since:
            cursor.since = newest
            cursor.delivered = at_newest
        else:
            cursor.delivered |= at_newest
