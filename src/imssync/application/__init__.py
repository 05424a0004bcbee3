"""
Application Layer - Use cases, commands, and orchestration.

This layer contains:
- commands/: Individual write operations (ChangeIssueField, AddComment, CreateIssue)
- sync/: Event polling into the Scrum game's event log
"""

from .sync import EventPoller, PollResult
from .commands import (
    Command,
    CommandBatch,
    CommandResult,
    AddCommentCommand,
    ChangeIssueFieldCommand,
    CreateIssueCommand,
)

__all__ = [
    "EventPoller",
    "PollResult",
    "Command",
    "CommandBatch",
    "CommandResult",
    "AddCommentCommand",
    "ChangeIssueFieldCommand",
    "CreateIssueCommand",
]
