"""
Domain Layer - Issues, vocabularies and mapping configuration.
"""

from .enums import (
    EventType,
    EventVisibility,
    IssueField,
    IssuePriority,
    IssueState,
    TShirtSizeEstimation,
)
from .entities import CreateEventInput, CreateIssueInput, Issue, IssueComment
from .lookup import FoundIssue, IssueLookup, IssueNotFound
from .mapping import IssueMappingConfiguration

__all__ = [
    "EventType",
    "EventVisibility",
    "IssueField",
    "IssuePriority",
    "IssueState",
    "TShirtSizeEstimation",
    "CreateEventInput",
    "CreateIssueInput",
    "Issue",
    "IssueComment",
    "FoundIssue",
    "IssueLookup",
    "IssueNotFound",
    "IssueMappingConfiguration",
]
