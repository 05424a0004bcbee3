"""
Commands - Individual write operations that can be executed.

Commands can be:
- Validated before touching the tracker
- Previewed in dry-run mode
- Batched
"""

from .base import Command, CommandBatch, CommandResult
from .issue_commands import (
    AddCommentCommand,
    ChangeIssueFieldCommand,
    CreateIssueCommand,
)

__all__ = [
    "Command",
    "CommandBatch",
    "CommandResult",
    "AddCommentCommand",
    "ChangeIssueFieldCommand",
    "CreateIssueCommand",
]
