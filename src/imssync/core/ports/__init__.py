"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .ims_connector import ImsConnectorPort
from .event_log import EventLogPort
from .config_provider import AppConfig, ConfigProviderPort, TrackerConfig

__all__ = [
    "ImsConnectorPort",
    "EventLogPort",
    "ConfigProviderPort",
    "AppConfig",
    "TrackerConfig",
]
