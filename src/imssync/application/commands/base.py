"""
Command Base - Common structure for write operations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ...core.exceptions import ImsConnectorError


@dataclass
class CommandResult:
    """Outcome of executing a command."""

    success: bool = True
    data: Any = None
    error: Optional[str] = None
    exception: Optional[ImsConnectorError] = None
    dry_run: bool = False
    skipped: bool = False

    @classmethod
    def ok(cls, data: Any = None, dry_run: bool = False) -> "CommandResult":
        return cls(success=True, data=data, dry_run=dry_run)

    @classmethod
    def fail(cls, error: str, exception: Optional[ImsConnectorError] = None) -> "CommandResult":
        return cls(success=False, error=error, exception=exception)

    @classmethod
    def skip(cls, reason: str) -> "CommandResult":
        return cls(success=True, skipped=True, error=reason)


class Command(ABC):
    """
    A single write operation against a connector.

    Subclasses implement validate() and _run(), and may override
    check_mapping(). execute() handles dry-run and turns connector failures
    into failed results that keep the original exception.
    """

    def __init__(self, dry_run: bool = True):
        self.dry_run = dry_run
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable description of the command."""
        ...

    @abstractmethod
    def validate(self) -> Optional[str]:
        """Return an error message if the command cannot run."""
        ...

    @abstractmethod
    def _run(self) -> Any:
        ...

    def check_mapping(self) -> None:
        """Translate the command's values, raising UnmappedValueError on a gap."""
        return None

    def execute(self) -> CommandResult:
        error = self.validate()
        if error:
            return CommandResult.fail(error)

        try:
            # Mapping gaps fail the preview the same way they fail the write
            self.check_mapping()
            if self.dry_run:
                self.logger.info(f"[DRY-RUN] Would {self.name}")
                return CommandResult.ok(dry_run=True)
            return CommandResult.ok(self._run())
        except ImsConnectorError as e:
            self.logger.error(f"Failed to {self.name}: {e}")
            return CommandResult.fail(str(e), exception=e)


class CommandBatch:
    """Runs commands in order, optionally stopping at the first failure."""

    def __init__(self, stop_on_error: bool = False):
        self.commands: list[Command] = []
        self.results: list[CommandResult] = []
        self.stop_on_error = stop_on_error

    def add(self, command: Command) -> "CommandBatch":
        self.commands.append(command)
        return self

    def execute_all(self) -> list[CommandResult]:
        self.results = []
        for command in self.commands:
            result = command.execute()
            self.results.append(result)
            if not result.success and self.stop_on_error:
                break
        return self.results

    @property
    def all_succeeded(self) -> bool:
        return all(result.success for result in self.results)

    @property
    def executed_count(self) -> int:
        return len(self.results)
