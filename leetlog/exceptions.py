"""
Errors raised by the services. Routers translate them into HTTP responses.
"""


class LeetLogError(Exception):
    """Base class for service errors."""


class NotFoundError(LeetLogError):
    """A requested record does not exist."""


class ForbiddenError(LeetLogError):
    """A record exists but belongs to another user."""


class DuplicateProblemError(LeetLogError):
    """The problem is already on the user's list."""


class InvalidProblemURL(LeetLogError):
    """The URL does not point at a LeetCode problem."""


class ProblemNotFound(LeetLogError):
    """The metadata source has no problem for the slug."""


class ProblemFetchError(LeetLogError):
    """The metadata source could not be reached or returned garbage."""


class SnapshotConflictError(LeetLogError):
    """Concurrent writers kept invalidating the snapshot update."""
