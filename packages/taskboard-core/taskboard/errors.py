"""
Error taxonomy for Taskboard.

Only network-bound operations raise these. Normalization, filtering and
sorting never fail on data.
"""


class TaskboardError(Exception):
    """Base class for all Taskboard errors."""


class MissingCredentialError(TaskboardError):
    """Raised before any network attempt when no auth token is available."""

    def __init__(self, message: str = "No auth token found") -> None:
        super().__init__(message)


class MalformedResponseError(TaskboardError):
    """Raised when a response body cannot be decoded."""


class RemoteError(TaskboardError):
    """A remote call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(RemoteError):
    """The server rejected the credential. Ends the session."""

    def __init__(self, message: str = "Unauthorized", status_code: int | None = 401) -> None:
        super().__init__(message, status_code)


class NetworkError(RemoteError):
    """Transport-level failure (connection refused, timeout, ...)."""


class ServerError(RemoteError):
    """The server answered with an error status other than 401."""
