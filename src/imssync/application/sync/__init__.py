"""
Sync Module - Replaying tracker changes into the Scrum game.
"""

from .poller import EventPoller, FailedPoll, IssueCursor, PollResult

__all__ = [
    "EventPoller",
    "FailedPoll",
    "IssueCursor",
    "PollResult",
]
