"""
Exception hierarchy for tagreflector.

Every error raised by the store, the filter and the policies derives from
TagReflectorError and carries the exit code the CLI should use. Failures of
the underlying SQLite engine are not wrapped; they surface as sqlite3.Error.
"""

from typing import Optional

from .exit_codes import (
    GENERAL_ERROR, CONFIG_ERROR, NO_TAGS_FOUND, NO_MATCH, DATA_ERROR,
)


class TagReflectorError(Exception):
    """Base class for all tagreflector errors."""

    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class PolicyConfigError(TagReflectorError, ValueError):
    """Raised when a policy, filter or rule is constructed from bad input."""

    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class EmptyInputError(TagReflectorError, ValueError):
    """Raised when a policy is asked to pick from zero tags."""

    def __init__(self, message: str = "version list argument cannot be empty"):
        super().__init__(message, NO_TAGS_FOUND)


class TagParseError(TagReflectorError, ValueError):
    """Raised when a tag name cannot be parsed by a policy that requires it."""

    def __init__(self, tag: str, reason: Optional[str] = None):
        message = f"failed to parse invalid numeric value '{tag}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, DATA_ERROR)
        self.tag = tag


class NoMatchError(TagReflectorError):
    """Raised when tags exist but none satisfies the configured policy."""

    def __init__(self, message: str = "unable to determine latest version from provided list"):
        super().__init__(message, NO_MATCH)


class DecodeError(TagReflectorError):
    """
    Raised when a stored record matches neither the current nor the legacy
    encoding. Both underlying failures are kept for diagnosis.
    """

    def __init__(self, first_error: Exception, second_error: Exception):
        super().__init__(
            f"failed unmarshaling values. First error: {first_error}. "
            f"Second error: {second_error}",
            DATA_ERROR,
        )
        self.first_error = first_error
        self.second_error = second_error
