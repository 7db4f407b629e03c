"""Domain errors for dualrotate."""

from typing import Optional


class RotatorError(RuntimeError):
    """Raised when a rotation cannot continue safely."""


class RemoteExecError(RotatorError):
    """The remote command could not be run or exited abnormally."""


class TransportFailure(RotatorError):
    """The remote invocation of the database client failed."""

    def __init__(self, message: str, command: str = "", stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stdout = stdout
        self.stderr = stderr


class SQLFailure(RotatorError):
    """The database client ran but reported an error on stderr."""


class OperationFailure(RotatorError):
    """A statement of a rotation batch failed and the transaction was rolled back."""

    def __init__(
        self,
        operation: str,
        cause: Exception,
        username: Optional[str] = None,
        host: Optional[str] = None,
    ):
        self.operation = operation
        self.username = username
        self.host = host
        self.cause = cause
        label = operation
        if username is not None:
            label = f"{operation} '{username}'@'{host}'"
        super().__init__(f"{label}: {cause}")


class RollbackFailure(RotatorError):
    """A rollback issued after a failed statement failed as well."""

    def __init__(self, cause: Exception, rollback_error: Exception):
        self.cause = cause
        self.rollback_error = rollback_error
        super().__init__(f"{cause}: rollback: {rollback_error}")


class CommitAmbiguous(RotatorError):
    """COMMIT failed; the transaction outcome is unknown and must be verified externally."""
