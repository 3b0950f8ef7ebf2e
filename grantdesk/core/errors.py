from typing import Optional


class GrantDeskError(Exception):
    """Base exception for all console errors."""


class RepositoryError(GrantDeskError):
    """A records API call failed. ``message`` is safe to show to staff."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(RepositoryError):
    """The records API could not be reached or the request timed out."""


class ServerError(RepositoryError):
    """The request reached the server but was rejected with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedResponseError(RepositoryError):
    """A 2xx response whose body does not have the expected shape."""


class SessionTransitionError(GrantDeskError):
    """An edit session transition that the state machine does not define."""
