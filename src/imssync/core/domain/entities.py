"""
Domain Entities - Issues and the payloads exchanged with connectors.

Connectors produce Issue and CreateEventInput objects and consume
CreateIssueInput objects. All enumerated fields use the Scrum game's
vocabulary; translation to tracker vocabulary happens in the connectors.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
from uuid import UUID

from .enums import (
    EventType,
    EventVisibility,
    IssuePriority,
    IssueState,
    TShirtSizeEstimation,
)


@dataclass(frozen=True)
class IssueComment:
    """A comment on an issue."""

    id: str
    body: str
    author_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


@dataclass
class Issue:
    """
    A unit of work tracked in the IMS.

    Identified by the tracker's own string id. Enumerated fields are None
    when the tracker holds a value the mapping configuration does not know.
    """

    id: str
    project_id: Optional[UUID]
    title: str
    description: str = ""
    state: Optional[IssueState] = None
    priority: Optional[IssuePriority] = None
    type_name: str = ""
    sprint_number: Optional[int] = None
    estimation: Optional[TShirtSizeEstimation] = None
    assignee_ids: list[UUID] = field(default_factory=list)
    comments: list[IssueComment] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_assigned(self) -> bool:
        return bool(self.assignee_ids)

    def copy(self, **changes) -> "Issue":
        """Return a copy with some fields replaced."""
        changes.setdefault("assignee_ids", list(self.assignee_ids))
        changes.setdefault("comments", list(self.comments))
        return replace(self, **changes)


@dataclass
class CreateIssueInput:
    """Caller-supplied data for a new issue."""

    title: str
    description: str = ""
    type_name: Optional[str] = None
    state: Optional[IssueState] = None
    priority: Optional[IssuePriority] = None
    estimation: Optional[TShirtSizeEstimation] = None
    sprint_number: Optional[int] = None
    assignee_ids: list[UUID] = field(default_factory=list)

    # Retrying a create with the same reference returns the issue created
    # by the first attempt.
    client_reference: Optional[str] = None


@dataclass(frozen=True)
class CreateEventInput:
    """
    A tracker change translated into a Scrum game event.

    source_id identifies the underlying tracker change and is stable across
    repeated queries, so consumers can drop events they already stored.
    """

    event_type: EventType
    project_id: Optional[UUID]
    issue_id: str
    timestamp: datetime
    user_id: Optional[UUID] = None
    data: dict[str, str] = field(default_factory=dict)
    visibility: EventVisibility = EventVisibility.PUBLIC
    source_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "eventType": self.event_type.value,
            "projectId": str(self.project_id) if self.project_id else None,
            "issueId": self.issue_id,
            "timestamp": self.timestamp.isoformat(),
            "userId": str(self.user_id) if self.user_id else None,
            "data": dict(self.data),
            "visibility": self.visibility.value,
            "sourceId": self.source_id,
        }
