"""
Exit Codes - Process exit status of the imssync CLI.
"""

from enum import IntEnum

from ..core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ImsConnectorError,
    NotFoundError,
    PermissionError,
    TrackerUnreachableError,
    UnmappedValueError,
)


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    CONNECTION_ERROR = 3
    NOT_FOUND = 4
    MAPPING_ERROR = 5

    @classmethod
    def from_exception(cls, error: ImsConnectorError) -> "ExitCode":
        """Exit code for a connector failure."""
        if isinstance(error, NotFoundError):
            return cls.NOT_FOUND
        if isinstance(error, UnmappedValueError):
            return cls.MAPPING_ERROR
        if isinstance(error, ConfigurationError):
            return cls.CONFIG_ERROR
        if isinstance(error, (TrackerUnreachableError, AuthenticationError, PermissionError)):
            return cls.CONNECTION_ERROR
        return cls.ERROR
