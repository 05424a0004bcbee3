"""
Mapping File Loader - Read mapping configurations from JSON files.

Example:

    {
        "project_id": "3f2b...",
        "project_key": "GAME",
        "states": {"TODO": "To Do", "IN_PROGRESS": "In Progress", "DONE": "Done"},
        "priorities": {"LOW": "Low", "MEDIUM": "Medium", "HIGH": "High"},
        "estimations": {"S": 2, "M": 3, "L": 5},
        "users": {"6a1c...": "557058:f58131cb-..."},
        "sprints": {"1": 10, "2": 11}
    }
"""

import json
import logging
from pathlib import Path

from ...core.exceptions import ConfigurationError
from ..jira.mapping import JiraMappingConfiguration


logger = logging.getLogger("MappingFile")


def load_mapping_configuration(path: Path) -> JiraMappingConfiguration:
    """Load a Jira mapping configuration from a JSON file."""
    if not path.exists():
        raise ConfigurationError(f"Mapping file not found: {path}")

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Mapping file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Mapping file {path} must contain a JSON object")

    config = JiraMappingConfiguration.from_dict(data)
    logger.debug(
        f"Loaded mapping for {config.project_key}: "
        f"{len(config.state_mapping)} states, {len(config.priority_mapping)} priorities, "
        f"{len(config.estimation_mapping)} estimations"
    )
    return config
