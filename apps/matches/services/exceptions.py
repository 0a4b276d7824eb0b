"""
Domain-specific exceptions for matches app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class MatchesServiceError(Exception):
    """Base exception for all matches service errors."""
    pass


class MatchNotFoundError(MatchesServiceError):
    """Raised when a match does not exist."""
    pass


class MatchFullError(MatchesServiceError):
    """Raised when confirming on a match whose confirmed roster is at capacity."""
    pass


class MatchClosedError(MatchesServiceError):
    """Raised when changing the roster of a completed or cancelled match."""
    pass


class AlreadyParticipantError(MatchesServiceError):
    """Raised when inviting a user who is already on the roster."""
    pass


class NotParticipantError(MatchesServiceError):
    """Raised when a user is absent from the match roster."""
    pass


class InsufficientPermissionsError(MatchesServiceError):
    """Raised when a user lacks required permissions for an action."""
    pass


class InvalidMatchDataError(MatchesServiceError):
    """Raised when match fields are inconsistent."""
    pass
