"""Tests for the event poller."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from imssync.adapters.memory import InMemoryEventLog, InMemoryImsConnector
from imssync.application.sync import EventPoller
from imssync.core.domain import CreateIssueInput, EventType, IssueState
from imssync.core.exceptions import TrackerUnreachableError


@pytest.fixture
def event_log():
    return InMemoryEventLog()


@pytest.fixture
def issue(memory_connector, memory_config, project_id):
    return memory_connector.create_issue(
        project_id, CreateIssueInput(title="Build the login page"), memory_config
    )


@pytest.fixture
def poller(memory_connector, memory_config, event_log, clock):
    return EventPoller(memory_connector, memory_config, event_log, clock=clock)


class TestTracking:
    """Tests for track/untrack."""

    def test_track_defaults_to_now(self, poller, clock):
        poller.track("GAME-1")

        assert poller.cursor("GAME-1").since == clock.current
        assert poller.tracked_issues == ["GAME-1"]

    def test_track_twice_keeps_cursor(self, poller):
        poller.track("GAME-1", since=datetime(2024, 1, 1, tzinfo=timezone.utc))
        poller.track("GAME-1", since=datetime(2024, 6, 1, tzinfo=timezone.utc))

        assert poller.cursor("GAME-1").since.month == 1

    def test_naive_since_is_utc(self, poller):
        poller.track("GAME-1", since=datetime(2024, 1, 1))

        assert poller.cursor("GAME-1").since.tzinfo is not None

    def test_untrack(self, poller):
        poller.track("GAME-1")

        assert poller.untrack("GAME-1")
        assert not poller.untrack("GAME-1")
        assert poller.cursor("GAME-1") is None


class TestPoll:
    """Tests for EventPoller.poll."""

    def test_delivers_changes_after_tracking(
        self, poller, memory_connector, memory_config, event_log, issue
    ):
        poller.track(issue.id)
        memory_connector.change_issue_state(issue.id, IssueState.DONE, memory_config)

        result = poller.poll()

        assert result.success
        assert result.issues_polled == 1
        assert [e.event_type for e in result.events] == [EventType.ISSUE_STATE_CHANGED]
        assert event_log.events == result.events

    def test_history_from_since(self, poller, event_log, issue):
        poller.track(issue.id, since=datetime(2000, 1, 1, tzinfo=timezone.utc))

        poller.poll()

        assert [e.event_type for e in event_log.events] == [EventType.ISSUE_CREATED]

    def test_repeated_poll_drops_boundary_event(
        self, poller, memory_connector, memory_config, event_log, issue
    ):
        poller.track(issue.id)
        memory_connector.change_issue_title(issue.id, "Renamed", memory_config)

        poller.poll()
        second = poller.poll()

        assert second.events == []
        assert second.duplicates_dropped == 1
        assert len(event_log.events) == 1

    def test_cursor_advances_to_newest_event(
        self, poller, memory_connector, memory_config, issue
    ):
        poller.track(issue.id)
        updated = memory_connector.change_issue_title(issue.id, "Renamed", memory_config)

        poller.poll()

        cursor = poller.cursor(issue.id)
        assert cursor.since == updated.updated_at
        assert len(cursor.delivered) == 1

    def test_events_sharing_a_timestamp(self, memory_config, project_id, event_log):
        instant = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        connector = InMemoryImsConnector(actor="alice", clock=lambda: instant)
        issue = connector.create_issue(project_id, CreateIssueInput(title="A"), memory_config)
        poller = EventPoller(connector, memory_config, event_log, clock=lambda: instant)
        poller.track(issue.id, since=instant)

        first = poller.poll()
        connector.change_issue_title(issue.id, "B", memory_config)
        second = poller.poll()

        assert [e.event_type for e in first.events] == [EventType.ISSUE_CREATED]
        assert [e.event_type for e in second.events] == [EventType.ISSUE_TITLE_CHANGED]
        assert second.duplicates_dropped == 1

    def test_failure_does_not_stop_other_issues(
        self, poller, memory_connector, memory_config, issue
    ):
        poller.track("GAME-404")
        poller.track(issue.id)
        memory_connector.add_comment_to_issue(issue.id, "hi", memory_config)

        result = poller.poll()

        assert not result.success
        assert [f.issue_id for f in result.failures] == ["GAME-404"]
        assert result.events_delivered == 1

    def test_failed_issue_keeps_cursor(self, memory_config, event_log):
        connector = Mock()
        connector.get_events_for_issue.side_effect = TrackerUnreachableError("down")
        since = datetime(2024, 5, 1, tzinfo=timezone.utc)
        poller = EventPoller(connector, memory_config, event_log)
        poller.track("GAME-1", since=since)

        result = poller.poll()

        assert isinstance(result.failures[0].exception, TrackerUnreachableError)
        assert poller.cursor("GAME-1").since == since
        assert event_log.events == []
