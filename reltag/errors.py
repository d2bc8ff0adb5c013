"""
Exception hierarchy for reltag.

Library code raises these; the CLI maps them to exit codes in
``reltag.exit_codes``.
"""

from typing import Optional


class ReltagError(Exception):
    """Base class for all reltag errors."""


class InvariantViolation(ReltagError):
    """A precondition of a pure version operation does not hold."""


class AlreadyReleasedError(InvariantViolation):
    """Raised when the next release version is already among the tags."""

    def __init__(self, version: str):
        super().__init__(f"Current tags already include next release version: {version}")
        self.version = version


class InvalidVersionError(ReltagError, ValueError):
    """Raised when a string is not a valid semantic version."""

    def __init__(self, version: str):
        super().__init__(f"Invalid semantic version: {version!r}")
        self.version = version


class GitError(ReltagError):
    """A git command exited with a non-zero status."""

    def __init__(
        self,
        command: str,
        returncode: int,
        stderr: Optional[str] = None
    ):
        message = f"git command failed ({returncode}): {command}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr or ""


class TagConflictError(GitError):
    """Pushing a tag was rejected because it already exists on the remote."""

    def __init__(self, tag: str, command: str, returncode: int, stderr: Optional[str] = None):
        super().__init__(command, returncode, stderr)
        self.tag = tag
