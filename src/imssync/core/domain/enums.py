"""
Domain Enums - The Scrum game's fixed issue vocabulary.

Trackers use their own names for these; mapping configurations translate
between the two.
"""

from enum import Enum


class IssueState(Enum):
    """Workflow state of an issue."""

    NEW = "New"
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    IN_REVIEW = "In Review"
    DONE = "Done"

    @classmethod
    def from_string(cls, value: str) -> "IssueState":
        """Parse by member name or display value (case-insensitive)."""
        return _parse(cls, value)


class IssuePriority(Enum):
    """Priority level of an issue."""

    LOWEST = "Lowest"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    HIGHEST = "Highest"

    @classmethod
    def from_string(cls, value: str) -> "IssuePriority":
        return _parse(cls, value)


class TShirtSizeEstimation(Enum):
    """Relative size estimation."""

    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"

    @classmethod
    def from_string(cls, value: str) -> "TShirtSizeEstimation":
        return _parse(cls, value)


class EventType(Enum):
    """Kinds of events replayed into the Scrum game's event log."""

    ISSUE_CREATED = "ISSUE_CREATED"
    ISSUE_TITLE_CHANGED = "ISSUE_TITLE_CHANGED"
    ISSUE_DESCRIPTION_CHANGED = "ISSUE_DESCRIPTION_CHANGED"
    ISSUE_STATE_CHANGED = "ISSUE_STATE_CHANGED"
    ISSUE_PRIORITY_CHANGED = "ISSUE_PRIORITY_CHANGED"
    ISSUE_TYPE_CHANGED = "ISSUE_TYPE_CHANGED"
    ISSUE_SPRINT_CHANGED = "ISSUE_SPRINT_CHANGED"
    ISSUE_ESTIMATION_CHANGED = "ISSUE_ESTIMATION_CHANGED"
    ISSUE_ASSIGNED = "ISSUE_ASSIGNED"
    COMMENT_ADDED = "COMMENT_ADDED"


class EventVisibility(Enum):
    """Who can see an event in the Scrum game."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class IssueField(Enum):
    """Single-field write operations of a connector."""

    TITLE = "title"
    DESCRIPTION = "description"
    STATE = "state"
    PRIORITY = "priority"
    TYPE = "type"
    SPRINT = "sprint"
    ESTIMATION = "estimation"
    ASSIGNEE = "assignee"


def _parse(enum_cls, value: str):
    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    for member in enum_cls:
        if member.name.lower() == normalized:
            return member
        if member.value.lower().replace(" ", "_") == normalized:
            return member
    raise ValueError(f"Unknown {enum_cls.__name__}: {value!r}")
