"""
Exit codes for the reltag CLI.

0-2 follow shell conventions; the 64-78 range (sysexits.h) carries the
failures a CI step may want to branch on, e.g. ``64`` when the release
is already tagged.
"""

SUCCESS = 0
GENERAL_ERROR = 1
USAGE_ERROR = 2          # Bad or contradictory options

# Failures specific to tagging
ALREADY_RELEASED = 64    # Release version is already tagged
GIT_ERROR = 65           # A git command failed
CONFIG_ERROR = 66        # Unreadable or invalid config file
TAG_CONFLICT = 67        # Tag push kept conflicting after all retries
DATA_ERROR = 70          # Invalid version or input data
INTERRUPTED = 130        # SIGINT

# Keyed by class name; the closest class in the MRO wins
EXCEPTION_EXIT_CODES = {
    'AlreadyReleasedError': ALREADY_RELEASED,
    'InvariantViolation': DATA_ERROR,
    'InvalidVersionError': DATA_ERROR,
    'TagConflictError': TAG_CONFLICT,
    'GitError': GIT_ERROR,
    'ValueError': DATA_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """Exit code for ``exc``: its own for command errors, else by class."""
    if isinstance(exc, CommandError):
        return exc.exit_code
    for cls in type(exc).__mro__:
        if cls.__name__ in EXCEPTION_EXIT_CODES:
            return EXCEPTION_EXIT_CODES[cls.__name__]
    return GENERAL_ERROR


class CommandError(Exception):
    """An error raised by a command together with the code to exit with."""
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """The config file cannot be read or holds invalid values."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class UsageError(CommandError):
    """Raised when command options contradict each other."""
    def __init__(self, message: str):
        super().__init__(message, USAGE_ERROR)


def error_type(exc: BaseException) -> str:
    """Short snake_case error type for JSON error output."""
    name = type(exc).__name__
    if name.endswith('Error') and name != 'Error':
        name = name[:-len('Error')]
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i:
            out.append('_')
        out.append(ch.lower())
    return ''.join(out)
