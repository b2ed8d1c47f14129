"""Error types for lock file updates."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """How a failure should be handled by the caller."""
    TRANSIENT = "transient"
    ARTIFACT_FAILURE = "artifact_failure"


class NuGetLockError(Exception):
    """Base error carrying an error kind."""
    kind: ErrorKind = ErrorKind.ARTIFACT_FAILURE

    @property
    def is_transient(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT


class TemporaryError(NuGetLockError):
    """Infrastructure problem; the whole update should be retried later."""
    kind = ErrorKind.TRANSIENT


class ArtifactUpdateError(NuGetLockError):
    """The lock file could not be regenerated."""
    kind = ErrorKind.ARTIFACT_FAILURE


class ExecError(ArtifactUpdateError):
    """A command exited with a non-zero status or timed out."""

    def __init__(
        self,
        cmd: str,
        exit_code: Optional[int],
        stdout: str = "",
        stderr: str = "",
        message: Optional[str] = None
    ):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message or stderr.strip() or f"Command failed with exit code {exit_code}: {cmd}")
