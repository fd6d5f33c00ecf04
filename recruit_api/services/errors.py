"""Domain errors raised by the team services."""


class TeamsServiceError(Exception):
    """Base exception for team directory, membership and transfer errors."""

    pass


class NotFoundError(TeamsServiceError):
    """Referenced entity does not exist, or the caller cannot see it."""

    pass


class ConflictError(TeamsServiceError):
    """Uniqueness, state or business-rule violation."""

    pass
