"""
Jira Adapter - Implementation of ImsConnectorPort for Atlassian Jira.
"""

from .adapter import JiraConnector
from .changelog import ChangelogTranslator
from .client import JiraApiClient
from .mapping import JiraMappingConfiguration

__all__ = [
    "JiraConnector",
    "ChangelogTranslator",
    "JiraApiClient",
    "JiraMappingConfiguration",
]
