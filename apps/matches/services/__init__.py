"""
Matches app services layer.

Services contain business logic and orchestrate operations across models.
All roster-changing operations lock the match row inside a transaction.
"""

from .exceptions import (
    MatchesServiceError,
    MatchNotFoundError,
    MatchFullError,
    MatchClosedError,
    AlreadyParticipantError,
    NotParticipantError,
    InsufficientPermissionsError,
    InvalidMatchDataError,
)

from .match_management import (
    create_match,
    get_match_by_id,
    update_match,
    complete_match,
    cancel_match,
    delete_match,
    get_upcoming_matches,
    get_past_matches,
    get_all_matches,
    get_unpaid_matches,
    get_outstanding_summary,
    get_match_summary,
)

from .participation import (
    invite_user,
    confirm_participation,
    decline_participation,
    cancel_participation,
    get_participation_status,
    get_match_participants,
)


__all__ = [
    # Exceptions
    'MatchesServiceError',
    'MatchNotFoundError',
    'MatchFullError',
    'MatchClosedError',
    'AlreadyParticipantError',
    'NotParticipantError',
    'InsufficientPermissionsError',
    'InvalidMatchDataError',

    # Match Management
    'create_match',
    'get_match_by_id',
    'update_match',
    'complete_match',
    'cancel_match',
    'delete_match',
    'get_upcoming_matches',
    'get_past_matches',
    'get_all_matches',
    'get_unpaid_matches',
    'get_outstanding_summary',
    'get_match_summary',

    # Participation
    'invite_user',
    'confirm_participation',
    'decline_participation',
    'cancel_participation',
    'get_participation_status',
    'get_match_participants',
]
