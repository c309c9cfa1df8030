class PrRescueError(Exception):
    """Base class for every error raised by prrescue."""


class AuthError(PrRescueError):
    pass


class ApiError(PrRescueError):
    pass


class MalformedResponseError(ApiError):
    """The API answered, but the payload did not have the expected shape."""


class NetworkError(PrRescueError):
    pass


class RateLimitError(PrRescueError):
    pass


class RepoNotFoundError(PrRescueError):
    pass


class SnapshotError(PrRescueError):
    """The snapshot state file could not be read or written."""
