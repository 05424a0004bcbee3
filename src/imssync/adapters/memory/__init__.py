"""
In-Memory Adapters - Fake tracker and event log for tests and demos.
"""

from .connector import InMemoryImsConnector, InMemoryMappingConfiguration
from .event_log import InMemoryEventLog

__all__ = [
    "InMemoryImsConnector",
    "InMemoryMappingConfiguration",
    "InMemoryEventLog",
]
