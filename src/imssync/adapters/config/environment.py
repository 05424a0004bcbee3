"""
Environment Config Provider - Load configuration from environment variables.

Supports:
- .env files
- Environment variables (JIRA_URL, JIRA_EMAIL, JIRA_API_TOKEN, ...)
- Command line argument overrides

Later sources win over earlier ones.
"""

import os
from pathlib import Path
from typing import Any, Optional

from ...core.ports.config_provider import AppConfig, ConfigProviderPort, TrackerConfig


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads from environment variables and .env files.
    """

    ENV_MAPPING = {
        "JIRA_URL": "jira_url",
        "JIRA_EMAIL": "jira_email",
        "JIRA_API_TOKEN": "jira_api_token",
        "JIRA_TIMEOUT": "timeout",
        "IMSSYNC_MAPPING_FILE": "mapping_file",
        "IMSSYNC_VERBOSE": "verbose",
    }

    CLI_MAPPING = {
        "jira_url": "jira_url",
        "mapping": "mapping_file",
        "execute": "execute",
        "verbose": "verbose",
    }

    def __init__(
        self,
        env_file: Optional[Path] = None,
        cli_overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the config provider.

        Args:
            env_file: Path to .env file (auto-detected if not specified)
            cli_overrides: Command line argument overrides
            environ: Environment to read instead of os.environ
        """
        self._values: dict[str, Any] = {}
        self._env_file = env_file
        self._cli_overrides = cli_overrides or {}
        self._environ = os.environ if environ is None else environ

        self._load_env_file()
        self._load_environment()
        self._apply_cli_overrides()

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "Environment"

    def load(self) -> AppConfig:
        """Load complete configuration."""
        tracker = TrackerConfig(
            url=self.get("jira_url", ""),
            email=self.get("jira_email", ""),
            api_token=self.get("jira_api_token", ""),
            timeout=float(self.get("timeout", 30.0)),
        )

        mapping_file = self.get("mapping_file")

        return AppConfig(
            tracker=tracker,
            mapping_path=Path(mapping_file) if mapping_file else None,
            dry_run=not _as_bool(self.get("execute", False)),
            verbose=_as_bool(self.get("verbose", False)),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        key = key.lower().replace("-", "_")
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        key = key.lower().replace("-", "_")
        self._values[key] = value

    def validate(self) -> list[str]:
        """Validate configuration."""
        errors = []

        if not self.get("jira_url"):
            errors.append("Missing JIRA_URL - set in environment or .env file")
        if not self.get("jira_email"):
            errors.append("Missing JIRA_EMAIL - set in environment or .env file")
        if not self.get("jira_api_token"):
            errors.append("Missing JIRA_API_TOKEN - set in environment or .env file")
        if not self.get("mapping_file"):
            errors.append("Missing mapping file - set IMSSYNC_MAPPING_FILE or pass --mapping")

        timeout = self.get("timeout")
        if timeout is not None:
            try:
                if float(timeout) <= 0:
                    errors.append("JIRA_TIMEOUT must be positive")
            except (TypeError, ValueError):
                errors.append(f"JIRA_TIMEOUT is not a number: {timeout!r}")

        return errors

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _load_env_file(self) -> None:
        """Load values from .env file."""
        env_file = self._find_env_file()
        if not env_file:
            return

        for line in env_file.read_text().splitlines():
            line = line.strip()

            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export "):].strip()
            value = value.strip().strip('"').strip("'")

            config_key = self.ENV_MAPPING.get(key.upper(), key.lower())
            self._values[config_key] = value

    def _find_env_file(self) -> Optional[Path]:
        if self._env_file is not None:
            return self._env_file if self._env_file.exists() else None

        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            return cwd_env

        return None

    def _load_environment(self) -> None:
        for env_key, config_key in self.ENV_MAPPING.items():
            raw_value = self._environ.get(env_key)
            if raw_value is not None:
                self._values[config_key] = raw_value

    def _apply_cli_overrides(self) -> None:
        for cli_key, config_key in self.CLI_MAPPING.items():
            if self._cli_overrides.get(cli_key) is not None:
                self._values[config_key] = self._cli_overrides[cli_key]


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
