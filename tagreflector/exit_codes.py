"""
Standard exit codes for tagreflector commands.

Following Unix/POSIX conventions for command-line tools.
"""
import sqlite3

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_TAGS_FOUND = 64       # Repository has no tags to evaluate
NO_MATCH = 65            # Tags exist but none satisfied the policy
CONFIG_ERROR = 66        # Policy or configuration file error
STORAGE_ERROR = 67       # Underlying database failure
DATA_ERROR = 70          # Stored or supplied data could not be parsed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for exceptions that do not carry their own
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ValueError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Exceptions from tagreflector.errors carry their own exit_code;
    any sqlite3 failure maps to STORAGE_ERROR.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    code = getattr(exc, 'exit_code', None)
    if isinstance(code, int):
        return code
    if isinstance(exc, sqlite3.Error):
        return STORAGE_ERROR
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)
