"""
Issue Lookup - Result of finding an issue by id.

"Not found" is an expected outcome of a lookup, not a failure, so it is a
value of its own instead of None or an exception.
"""

from dataclasses import dataclass
from typing import Union

from .entities import Issue


@dataclass(frozen=True)
class FoundIssue:
    """The tracker returned the issue."""

    issue: Issue

    @property
    def found(self) -> bool:
        return True


@dataclass(frozen=True)
class IssueNotFound:
    """The tracker has no issue with this id."""

    issue_id: str

    @property
    def found(self) -> bool:
        return False


IssueLookup = Union[FoundIssue, IssueNotFound]
