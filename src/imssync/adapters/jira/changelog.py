"""
Jira Changelog - Translate Jira history into Scrum game events.

Jira reports changes as histories, each holding one item per changed
field. Every item becomes one CreateEventInput; comments and the issue's
creation become events of their own.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from ...core.domain.entities import CreateEventInput
from ...core.domain.enums import EventType
from ...core.domain.timestamps import ensure_aware
from ..formatters.adf import ADFFormatter
from .mapping import JiraMappingConfiguration


logger = logging.getLogger("JiraChangelog")

# Jira changelog field name -> event type
FIELD_EVENTS = {
    "summary": EventType.ISSUE_TITLE_CHANGED,
    "description": EventType.ISSUE_DESCRIPTION_CHANGED,
    "status": EventType.ISSUE_STATE_CHANGED,
    "priority": EventType.ISSUE_PRIORITY_CHANGED,
    "issuetype": EventType.ISSUE_TYPE_CHANGED,
    "sprint": EventType.ISSUE_SPRINT_CHANGED,
    "assignee": EventType.ISSUE_ASSIGNED,
}


def parse_jira_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse Jira's '2024-01-15T10:30:00.000+0000' timestamps."""
    if not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return datetime.fromisoformat(value)


class ChangelogTranslator:
    """Builds CreateEventInputs for one Jira issue."""

    def __init__(
        self,
        issue_key: str,
        mapping_configuration: JiraMappingConfiguration,
        formatter: Optional[ADFFormatter] = None,
    ):
        self.issue_key = issue_key
        self.config = mapping_configuration
        self.formatter = formatter or ADFFormatter()

    def translate(
        self,
        issue_data: dict[str, Any],
        histories: list[dict],
        comments: list[dict],
        since: datetime,
    ) -> list[CreateEventInput]:
        """Return all events at or after since, oldest first."""
        since = ensure_aware(since)
        events: list[CreateEventInput] = []

        created = parse_jira_datetime(issue_data.get("fields", {}).get("created"))
        if created and created >= since:
            reporter = issue_data.get("fields", {}).get("reporter") or {}
            events.append(self._event(
                EventType.ISSUE_CREATED,
                created,
                reporter,
                {"title": issue_data.get("fields", {}).get("summary", "")},
                f"{self.issue_key}:created",
            ))

        for history in histories:
            timestamp = parse_jira_datetime(history.get("created"))
            if timestamp is None or timestamp < since:
                continue
            for index, item in enumerate(history.get("items", [])):
                event = self._history_item_event(history, item, index, timestamp)
                if event is not None:
                    events.append(event)

        for comment in comments:
            timestamp = parse_jira_datetime(comment.get("created"))
            if timestamp is None or timestamp < since:
                continue
            events.append(self._event(
                EventType.COMMENT_ADDED,
                timestamp,
                comment.get("author") or {},
                {"comment": self.formatter.to_text(comment.get("body"))},
                f"{self.issue_key}:comment:{comment.get('id')}",
            ))

        events.sort(key=lambda e: e.timestamp)
        return events

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _history_item_event(
        self,
        history: dict,
        item: dict,
        index: int,
        timestamp: datetime,
    ) -> Optional[CreateEventInput]:
        event_type = self._event_type(item)
        if event_type is None:
            logger.debug(f"Ignoring change of field {item.get('field')!r} on {self.issue_key}")
            return None

        old_value, new_value = self._values(event_type, item)
        return self._event(
            event_type,
            timestamp,
            history.get("author") or {},
            {"old_value": old_value, "new_value": new_value},
            f"{self.issue_key}:{history.get('id')}:{index}",
        )

    def _event_type(self, item: dict) -> Optional[EventType]:
        field_id = item.get("fieldId") or ""
        if field_id and field_id == self.config.story_points_field:
            return EventType.ISSUE_ESTIMATION_CHANGED
        if field_id and field_id == self.config.sprint_field:
            return EventType.ISSUE_SPRINT_CHANGED
        return FIELD_EVENTS.get((item.get("field") or "").lower())

    def _values(self, event_type: EventType, item: dict) -> tuple[str, str]:
        """Render old/new values in Scrum game vocabulary where a mapping exists."""
        old, new = item.get("fromString") or "", item.get("toString") or ""

        if event_type == EventType.ISSUE_STATE_CHANGED:
            return self._name(self.config.generic_state(old), old), \
                self._name(self.config.generic_state(new), new)

        if event_type == EventType.ISSUE_PRIORITY_CHANGED:
            return self._name(self.config.generic_priority(old), old), \
                self._name(self.config.generic_priority(new), new)

        if event_type == EventType.ISSUE_TYPE_CHANGED:
            return self.config.generic_type(old), self.config.generic_type(new)

        if event_type == EventType.ISSUE_ESTIMATION_CHANGED:
            return self._estimation(old), self._estimation(new)

        if event_type == EventType.ISSUE_SPRINT_CHANGED:
            return self._sprint(item.get("from")), self._sprint(item.get("to"))

        if event_type == EventType.ISSUE_ASSIGNED:
            return self._user(item.get("from")) or old, self._user(item.get("to")) or new

        return old, new

    def _estimation(self, raw: str) -> str:
        if not raw:
            return ""
        try:
            points = float(raw)
        except ValueError:
            return raw
        return self._name(self.config.generic_estimation(points), raw)

    def _sprint(self, raw: Optional[str]) -> str:
        # Sprint items list comma-separated ids of every sprint the issue was in
        if not raw:
            return ""
        last = raw.split(",")[-1].strip()
        try:
            number = self.config.generic_sprint(int(last))
        except ValueError:
            return last
        return str(number) if number is not None else last

    def _user(self, account_id: Optional[str]) -> str:
        user_id = self.config.generic_user(account_id)
        return str(user_id) if user_id else ""

    def _name(self, member: Any, fallback: str) -> str:
        return member.name if member is not None else fallback

    def _event(
        self,
        event_type: EventType,
        timestamp: datetime,
        author: dict,
        data: dict[str, str],
        source_id: str,
    ) -> CreateEventInput:
        return CreateEventInput(
            event_type=event_type,
            project_id=self.config.project_id,
            issue_id=self.issue_key,
            timestamp=timestamp,
            user_id=self.config.generic_user(author.get("accountId")),
            data=data,
            source_id=source_id,
        )
