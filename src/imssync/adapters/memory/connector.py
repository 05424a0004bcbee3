"""
In-Memory Connector - A fake tracker that lives in process memory.

Issues are stored in tracker vocabulary, exactly as a remote tracker
would hold them, so every read and write goes through the mapping
configuration. Each change is recorded in a history that backs
get_events_for_issue. Useful for tests, demos and local development.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional
from uuid import UUID

from ...core.domain.entities import (
    CreateEventInput,
    CreateIssueInput,
    Issue,
    IssueComment,
)
from ...core.domain.enums import EventType, IssuePriority, IssueState, TShirtSizeEstimation
from ...core.domain.lookup import FoundIssue, IssueLookup, IssueNotFound
from ...core.domain.mapping import IssueMappingConfiguration
from ...core.domain.timestamps import ensure_aware, utc_now
from ...core.exceptions import ConfigurationError, NotFoundError, annotate_errors
from ...core.ports.ims_connector import ImsConnectorPort


@dataclass
class InMemoryMappingConfiguration(IssueMappingConfiguration):
    """Mapping configuration for the in-memory tracker."""

    project_key: str = "MEM"


@dataclass
class _StoredIssue:
    """An issue in tracker vocabulary."""

    key: str
    project_key: str
    summary: str
    description: str
    status: Optional[str]
    priority: Optional[str]
    issue_type: str
    sprint: Optional[int]
    points: Any
    assignee: Optional[str]
    created: datetime
    updated: datetime
    reference: Optional[str] = None
    comments: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class _Change:
    """One recorded change of one field."""

    change_id: int
    issue_key: str
    timestamp: datetime
    event_type: EventType
    author: Optional[str]
    old_value: Any = None
    new_value: Any = None


class InMemoryImsConnector(ImsConnectorPort[InMemoryMappingConfiguration]):
    """
    ImsConnectorPort backed by a dict.

    Thread-safe: all access to the store happens under one lock.
    """

    mapping_configuration_type = InMemoryMappingConfiguration

    def __init__(
        self,
        actor: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            actor: Tracker user id recorded as author of every change
            clock: Source of change timestamps
        """
        self.actor = actor
        self._clock = clock
        self._issues: dict[str, _StoredIssue] = {}
        self._history: list[_Change] = []
        self._ids = itertools.count(1)
        self._change_ids = itertools.count(1)
        self._lock = threading.Lock()
        self.logger = logging.getLogger("InMemoryImsConnector")

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Properties
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "InMemory"

    def test_connection(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Read Operations
    # -------------------------------------------------------------------------

    def list_issues(
        self,
        project_id: UUID,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> list[Issue]:
        with annotate_errors("list_issues"):
            self._check_project(project_id, mapping_configuration)
            with self._lock:
                stored = [
                    issue for issue in self._issues.values()
                    if issue.project_key == mapping_configuration.project_key
                ]
                return [self._to_issue(issue, mapping_configuration) for issue in stored]

    def find_issue(
        self,
        issue_id: str,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> IssueLookup:
        with annotate_errors("find_issue", issue_id):
            self.check_configuration(mapping_configuration)
            with self._lock:
                stored = self._issues.get(issue_id)
                if stored is None or stored.project_key != mapping_configuration.project_key:
                    return IssueNotFound(issue_id)
                return FoundIssue(self._to_issue(stored, mapping_configuration))

    def get_events_for_issue(
        self,
        issue_id: str,
        since: datetime,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> list[CreateEventInput]:
        with annotate_errors("get_events_for_issue", issue_id):
            self.check_configuration(mapping_configuration)
            since = ensure_aware(since)
            with self._lock:
                self._get(issue_id, mapping_configuration)
                changes = [
                    change for change in self._history
                    if change.issue_key == issue_id and change.timestamp >= since
                ]
            changes.sort(key=lambda c: (c.timestamp, c.change_id))
            return [self._to_event(change, mapping_configuration) for change in changes]

    # -------------------------------------------------------------------------
    # ImsConnectorPort Implementation - Write Operations
    # -------------------------------------------------------------------------

    def change_issue_title(self, issue_id, title, mapping_configuration) -> Issue:
        return self._set("change_issue_title", issue_id, mapping_configuration,
                         "summary", title, EventType.ISSUE_TITLE_CHANGED)

    def change_issue_description(self, issue_id, description, mapping_configuration) -> Issue:
        return self._set("change_issue_description", issue_id, mapping_configuration,
                         "description", description, EventType.ISSUE_DESCRIPTION_CHANGED)

    def change_issue_state(
        self,
        issue_id: str,
        issue_state: IssueState,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_state", issue_id):
            vendor = mapping_configuration.vendor_state(issue_state)
        return self._set("change_issue_state", issue_id, mapping_configuration,
                         "status", vendor, EventType.ISSUE_STATE_CHANGED)

    def change_issue_priority(
        self,
        issue_id: str,
        priority: IssuePriority,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_issue_priority", issue_id):
            vendor = mapping_configuration.vendor_priority(priority)
        return self._set("change_issue_priority", issue_id, mapping_configuration,
                         "priority", vendor, EventType.ISSUE_PRIORITY_CHANGED)

    def change_issue_type(self, issue_id, type_name, mapping_configuration) -> Issue:
        with annotate_errors("change_issue_type", issue_id):
            vendor = mapping_configuration.vendor_type(type_name)
        return self._set("change_issue_type", issue_id, mapping_configuration,
                         "issue_type", vendor, EventType.ISSUE_TYPE_CHANGED)

    def change_sprint_of_issue(self, issue_id, sprint_number, mapping_configuration) -> Issue:
        return self._set("change_sprint_of_issue", issue_id, mapping_configuration,
                         "sprint", sprint_number, EventType.ISSUE_SPRINT_CHANGED)

    def change_estimation_of_issue(
        self,
        issue_id: str,
        estimation: TShirtSizeEstimation,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("change_estimation_of_issue", issue_id):
            vendor = mapping_configuration.vendor_estimation(estimation)
        return self._set("change_estimation_of_issue", issue_id, mapping_configuration,
                         "points", vendor, EventType.ISSUE_ESTIMATION_CHANGED)

    def assign_issue(
        self,
        issue_id: str,
        assignee_id: UUID,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("assign_issue", issue_id):
            vendor = mapping_configuration.vendor_user(assignee_id)
        return self._set("assign_issue", issue_id, mapping_configuration,
                         "assignee", vendor, EventType.ISSUE_ASSIGNED)

    def add_comment_to_issue(
        self,
        issue_id: str,
        comment: str,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("add_comment_to_issue", issue_id):
            self.check_configuration(mapping_configuration)
            with self._lock:
                stored = self._get(issue_id, mapping_configuration)
                now = self._clock()
                comment_id = str(len(stored.comments) + 1)
                stored.comments.append({
                    "id": comment_id,
                    "body": comment,
                    "author": self.actor,
                    "created": now,
                })
                stored.updated = now
                self._record(issue_id, now, EventType.COMMENT_ADDED, None, comment)
                self.logger.info(f"Added comment to {issue_id}")
                return self._to_issue(stored, mapping_configuration)

    def create_issue(
        self,
        project_id: UUID,
        create_issue_input: CreateIssueInput,
        mapping_configuration: InMemoryMappingConfiguration,
    ) -> Issue:
        with annotate_errors("create_issue"):
            self._check_project(project_id, mapping_configuration)
            cfg = mapping_configuration
            data = create_issue_input

            # Translate before touching the store
            status = cfg.vendor_state(data.state) if data.state is not None else None
            if status is None and cfg.state_mapping:
                status = next(iter(cfg.state_mapping.values()))
            priority = cfg.vendor_priority(data.priority) if data.priority is not None else None
            points = cfg.vendor_estimation(data.estimation) if data.estimation is not None else None
            assignee = cfg.vendor_user(data.assignee_ids[0]) if data.assignee_ids else None
            issue_type = cfg.vendor_type(data.type_name or cfg.default_issue_type)

            with self._lock:
                if data.client_reference:
                    for stored in self._issues.values():
                        if (
                            stored.project_key == cfg.project_key
                            and stored.reference == data.client_reference
                        ):
                            self.logger.info(
                                f"Issue {stored.key} already exists for reference "
                                f"{data.client_reference}"
                            )
                            return self._to_issue(stored, cfg)

                now = self._clock()
                key = f"{cfg.project_key}-{next(self._ids)}"
                stored = _StoredIssue(
                    key=key,
                    project_key=cfg.project_key,
                    summary=data.title,
                    description=data.description or "",
                    status=status,
                    priority=priority,
                    issue_type=issue_type,
                    sprint=data.sprint_number,
                    points=points,
                    assignee=assignee,
                    created=now,
                    updated=now,
                    reference=data.client_reference,
                )
                self._issues[key] = stored
                self._record(key, now, EventType.ISSUE_CREATED, None, data.title)
                self.logger.info(f"Created issue {key}")
                return self._to_issue(stored, cfg)

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _check_project(self, project_id: UUID, cfg: InMemoryMappingConfiguration) -> None:
        self.check_configuration(cfg)
        if cfg.project_id != project_id:
            raise ConfigurationError(
                f"Mapping configuration belongs to project {cfg.project_id}, not {project_id}"
            )

    def _get(self, issue_id: str, cfg: InMemoryMappingConfiguration) -> _StoredIssue:
        # Issues of other projects are invisible through this configuration
        stored = self._issues.get(issue_id)
        if stored is None or stored.project_key != cfg.project_key:
            raise NotFoundError(
                f"Issue {issue_id} does not exist in project {cfg.project_key}",
                issue_id=issue_id,
            )
        return stored

    def _set(
        self,
        operation: str,
        issue_id: str,
        cfg: InMemoryMappingConfiguration,
        attribute: str,
        value: Any,
        event_type: EventType,
    ) -> Issue:
        with annotate_errors(operation, issue_id):
            self.check_configuration(cfg)
            with self._lock:
                stored = self._get(issue_id, cfg)
                old_value = getattr(stored, attribute)
                if old_value != value:
                    now = self._clock()
                    setattr(stored, attribute, value)
                    stored.updated = now
                    self._record(issue_id, now, event_type, old_value, value)
                    self.logger.info(f"{operation}: {issue_id} {attribute} -> {value!r}")
                return self._to_issue(stored, cfg)

    def _record(
        self,
        issue_key: str,
        timestamp: datetime,
        event_type: EventType,
        old_value: Any,
        new_value: Any,
    ) -> None:
        self._history.append(_Change(
            change_id=next(self._change_ids),
            issue_key=issue_key,
            timestamp=timestamp,
            event_type=event_type,
            author=self.actor,
            old_value=old_value,
            new_value=new_value,
        ))

    def _to_issue(self, stored: _StoredIssue, cfg: InMemoryMappingConfiguration) -> Issue:
        assignee_id = cfg.generic_user(stored.assignee)
        return Issue(
            id=stored.key,
            project_id=cfg.project_id,
            title=stored.summary,
            description=stored.description,
            state=cfg.generic_state(stored.status),
            priority=cfg.generic_priority(stored.priority),
            type_name=cfg.generic_type(stored.issue_type),
            sprint_number=stored.sprint,
            estimation=cfg.generic_estimation(stored.points),
            assignee_ids=[assignee_id] if assignee_id else [],
            comments=[
                IssueComment(
                    id=comment["id"],
                    body=comment["body"],
                    author_id=cfg.generic_user(comment["author"]),
                    created_at=comment["created"],
                )
                for comment in stored.comments
            ],
            created_at=stored.created,
            updated_at=stored.updated,
        )

    def _to_event(self, change: _Change, cfg: InMemoryMappingConfiguration) -> CreateEventInput:
        if change.event_type in (EventType.ISSUE_CREATED, EventType.COMMENT_ADDED):
            key = "title" if change.event_type == EventType.ISSUE_CREATED else "comment"
            data = {key: str(change.new_value)}
        else:
            data = {
                "old_value": self._render(change.event_type, change.old_value, cfg),
                "new_value": self._render(change.event_type, change.new_value, cfg),
            }

        return CreateEventInput(
            event_type=change.event_type,
            project_id=cfg.project_id,
            issue_id=change.issue_key,
            timestamp=change.timestamp,
            user_id=cfg.generic_user(change.author),
            data=data,
            source_id=f"{change.issue_key}:{change.change_id}",
        )

    def _render(self, event_type: EventType, value: Any, cfg: InMemoryMappingConfiguration) -> str:
        """Render a stored value in Scrum game vocabulary."""
        if value is None:
            return ""
        generic: Any = None
        if event_type == EventType.ISSUE_STATE_CHANGED:
            generic = cfg.generic_state(value)
        elif event_type == EventType.ISSUE_PRIORITY_CHANGED:
            generic = cfg.generic_priority(value)
        elif event_type == EventType.ISSUE_ESTIMATION_CHANGED:
            generic = cfg.generic_estimation(value)
        elif event_type == EventType.ISSUE_TYPE_CHANGED:
            return cfg.generic_type(value)
        elif event_type == EventType.ISSUE_ASSIGNED:
            user = cfg.generic_user(value)
            return str(user) if user else str(value)

        if generic is not None:
            return generic.name
        return str(value)
