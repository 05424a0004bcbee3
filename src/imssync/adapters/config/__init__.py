"""
Configuration Adapters - Load configuration from various sources.
"""

from .environment import EnvironmentConfigProvider
from .mapping_file import load_mapping_configuration

__all__ = ["EnvironmentConfigProvider", "load_mapping_configuration"]
