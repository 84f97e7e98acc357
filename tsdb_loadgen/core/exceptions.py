"""Exception hierarchy for the load generator.

Every failure is classified by kind so the driver can tag checks and the
log output stays uniform. Failures are local to one invocation: a write or
read error is recorded and re-raised to the load runtime, never turned into
a process-wide abort.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure categories, mirroring the check tags of the load test."""

    CONFIGURATION = "configuration"
    WRITE = "write"
    READ = "read"
    INTERNAL = "internal"


class LoadGenError(Exception):
    """Base exception for all load generator errors.

    Attributes:
        message: Human-readable error description.
        kind: Failure category.
        details: Additional structured error details.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize LoadGenError.

        Args:
            message: Human-readable error description.
            kind: Failure category.
            details: Optional list of additional error details.
        """
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or []

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a structured log payload.

        Returns:
            Dictionary with the error kind, message and details.
        """
        return {
            "error": {
                "kind": self.kind.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(LoadGenError):
    """Raised when a required setting is missing or invalid.

    Fatal at startup: the load test does not proceed.
    """

    def __init__(
        self,
        message: str,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            kind=ErrorKind.CONFIGURATION,
            details=details,
        )


class RequestFailedError(LoadGenError):
    """Base for failed write and read requests.

    Attributes:
        status: HTTP status returned by the backend (0 when no response).
        body: Response body, kept for diagnostics.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        status: int,
        body: str = "",
    ) -> None:
        super().__init__(
            message=message,
            kind=kind,
            details=[{"status": status, "body": body}],
        )
        self.status = status
        self.body = body


class WriteFailedError(RequestFailedError):
    """Raised when a remote write is answered with anything but 200 or 202."""

    def __init__(self, status: int, body: str = "") -> None:
        super().__init__(
            message=f"write failed. Status: {status}. Body: {body}",
            kind=ErrorKind.WRITE,
            status=status,
            body=body,
        )


class ReadFailedError(RequestFailedError):
    """Raised when a query fails or returns an unexpected response shape."""

    def __init__(self, status: int, body: str = "", reason: str = "") -> None:
        message = f"read failed. Status: {status}. Body: {body}"
        if reason:
            message = f"read failed ({reason}). Status: {status}. Body: {body}"
        super().__init__(
            message=message,
            kind=ErrorKind.READ,
            status=status,
            body=body,
        )
        self.reason = reason
