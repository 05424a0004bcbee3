"""
Config Provider Port - Abstract interface for configuration loading.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class TrackerConfig:
    """Connection settings for one tracker instance."""

    url: str
    email: str
    api_token: str
    timeout: float = 30.0

    def is_valid(self) -> bool:
        return bool(self.url and self.email and self.api_token)


@dataclass
class AppConfig:
    """Complete application configuration."""

    tracker: TrackerConfig
    mapping_path: Optional[Path] = None
    dry_run: bool = True
    verbose: bool = False


class ConfigProviderPort(ABC):
    """Abstract interface for configuration sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """Load the complete configuration."""
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """Return a list of configuration problems (empty when valid)."""
        ...
