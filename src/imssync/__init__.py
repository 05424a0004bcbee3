"""
imssync - Synchronize Scrum game issues with issue management systems.

The ImsConnectorPort contract describes every read and write the Scrum game
needs on a remote tracker; connectors implement it per tracker vendor.
"""

__version__ = "0.1.0"

from .core.domain import (
    CreateEventInput,
    CreateIssueInput,
    FoundIssue,
    Issue,
    IssueComment,
    IssueLookup,
    IssueMappingConfiguration,
    IssueNotFound,
    IssuePriority,
    IssueState,
    TShirtSizeEstimation,
)
from .core.ports import ImsConnectorPort

__all__ = [
    "__version__",
    "CreateEventInput",
    "CreateIssueInput",
    "FoundIssue",
    "Issue",
    "IssueComment",
    "IssueLookup",
    "IssueMappingConfiguration",
    "IssueNotFound",
    "IssuePriority",
    "IssueState",
    "TShirtSizeEstimation",
    "ImsConnectorPort",
]
