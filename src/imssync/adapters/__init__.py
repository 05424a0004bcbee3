"""
Adapters - Concrete implementations of ports.

This module contains implementations for:
- IMS connectors: Jira, InMemory
- Formatters: ADF (Atlassian Document Format)
- Config: Environment variables, JSON mapping files
- Event logs: InMemory
"""

from .jira import JiraConnector, JiraMappingConfiguration
from .memory import InMemoryEventLog, InMemoryImsConnector, InMemoryMappingConfiguration
from .formatters import ADFFormatter
from .config import EnvironmentConfigProvider, load_mapping_configuration

__all__ = [
    "JiraConnector",
    "JiraMappingConfiguration",
    "InMemoryImsConnector",
    "InMemoryMappingConfiguration",
    "InMemoryEventLog",
    "ADFFormatter",
    "EnvironmentConfigProvider",
    "load_mapping_configuration",
]
