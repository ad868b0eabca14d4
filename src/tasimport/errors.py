from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure taxonomy for movie imports.

    Only the fatal kinds are ever raised. `MALFORMED_FIELD` and
    `UNRECOGNIZED_COMMAND` name the recovery paths and tag advisories.
    """

    INVALID_SIGNATURE = "invalid_signature"
    UNSUPPORTED_START_STATE = "unsupported_start_state"
    UNRECOGNIZED_VERSION = "unrecognized_version"
    INVALID_HEADER = "invalid_header"
    TRUNCATED_STREAM = "truncated_stream"
    IO_ERROR = "io_error"
    MALFORMED_FIELD = "malformed_field"
    UNRECOGNIZED_COMMAND = "unrecognized_command"

    @property
    def fatal(self) -> bool:
        return self not in (ErrorKind.MALFORMED_FIELD, ErrorKind.UNRECOGNIZED_COMMAND)


SAVESTATE_UNSUPPORTED = "Movies that begin with a savestate are not supported."


class MovieImportError(ValueError):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = str(message)

    def __str__(self) -> str:
        return f"{self.message} ({self.kind})"


class MovieImportWarning(UserWarning):
    """Non-fatal advisories raised while importing a legacy movie."""
