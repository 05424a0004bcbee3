"""Shared fixtures."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from imssync.adapters.memory import InMemoryImsConnector, InMemoryMappingConfiguration
from imssync.core.domain import IssuePriority, IssueState, TShirtSizeEstimation


PROJECT_ID = UUID("7b0e6f4c-1c0a-4d55-9d8e-2f0b7a1c9e01")
ALICE = UUID("0f8fad5b-d9cb-469f-a165-70867728950e")
BOB = UUID("7c9e6679-7425-40de-944b-e07fc1f90ae7")


class StepClock:
    """Returns a new timestamp one second later on every call."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def memory_config():
    return InMemoryMappingConfiguration(
        project_id=PROJECT_ID,
        project_key="GAME",
        state_mapping={
            IssueState.TODO: "Open",
            IssueState.IN_PROGRESS: "Working",
            IssueState.DONE: "Closed",
        },
        priority_mapping={
            IssuePriority.LOW: "P3",
            IssuePriority.MEDIUM: "P2",
            IssuePriority.HIGH: "P1",
        },
        estimation_mapping={
            TShirtSizeEstimation.S: 2,
            TShirtSizeEstimation.M: 3,
            TShirtSizeEstimation.L: 5,
        },
        user_mapping={ALICE: "alice", BOB: "bob"},
    )


@pytest.fixture
def memory_connector(clock):
    return InMemoryImsConnector(actor="alice", clock=clock)


@pytest.fixture
def project_id():
    return PROJECT_ID


@pytest.fixture
def alice():
    return ALICE


@pytest.fixture
def bob():
    return BOB
