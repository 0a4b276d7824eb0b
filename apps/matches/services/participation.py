"""
Participation service.

Implements the per-(match, user) roster state machine:

    absent --invite--> pending
    absent/pending/declined/confirmed --confirm--> confirmed
    absent/pending/confirmed/declined --decline--> declined
    any --cancel--> absent

Confirmation is capacity-checked under a row lock on the match. Declining
or cancelling a participant whose fee was already charged refunds it
through the credit ledger in the same transaction.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.matches.models import Match, Participation, ParticipationStatus
from apps.payments.services.ledger import refund_match_fee

from .exceptions import (
    MatchNotFoundError,
    MatchFullError,
    MatchClosedError,
    AlreadyParticipantError,
    NotParticipantError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)


def _lock_open_match(match_id: UUID) -> Match:
    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    if not match.is_open:
        raise MatchClosedError(f"Match is {match.status}; the roster can no longer change")

    return match


def _lock_participation(match: Match, user: User) -> Optional[Participation]:
    return (
        Participation.objects
        .select_for_update()
        .filter(match=match, user=user)
        .first()
    )


@transaction.atomic
def invite_user(*, match_id: UUID, user: User, invited_by: User) -> Participation:
    """
    Put a user on the roster as pending (invited, not yet responded).

    Raises:
        InsufficientPermissionsError: If invited_by can't manage the match
        AlreadyParticipantError: If the user already has an entry
    """
    match = _lock_open_match(match_id)

    if not match.can_manage(invited_by):
        raise InsufficientPermissionsError("Only the match owner or an admin can invite players")

    if _lock_participation(match, user) is not None:
        raise AlreadyParticipantError(f"{user.get_display_name()} is already on the roster")

    try:
        participation = Participation.objects.create(
            match=match,
            user=user,
            status=ParticipationStatus.PENDING,
            paid=False,
            invited_by=invited_by,
        )
    except IntegrityError:
        raise AlreadyParticipantError(f"{user.get_display_name()} is already on the roster")

    return participation


@transaction.atomic
def confirm_participation(*, match_id: UUID, user: User) -> Participation:
    """
    Confirm presence.

    Re-confirming is an overwrite that keeps the current paid flag; a new
    entry starts unpaid.

    Raises:
        MatchFullError: If the user isn't confirmed yet and the match is full
    """
    match = _lock_open_match(match_id)
    participation = _lock_participation(match, user)

    if participation is not None and participation.status == ParticipationStatus.CONFIRMED:
        return participation

    if match.is_full():
        raise MatchFullError(f"{match.title} is full ({match.max_players} players)")

    if participation is None:
        participation = Participation.objects.create(
            match=match,
            user=user,
            status=ParticipationStatus.CONFIRMED,
            paid=False,
        )
    else:
        participation.status = ParticipationStatus.CONFIRMED
        participation.save(update_fields=['status', 'updated_at'])

    logger.info("User %s confirmed for match %s", user.id, match.id)
    return participation


@transaction.atomic
def decline_participation(*, match_id: UUID, user: User) -> Participation:
    """
    Decline presence; the entry stays on the roster as declined and unpaid.
    """
    match = _lock_open_match(match_id)
    participation = _lock_participation(match, user)

    if participation is None:
        return Participation.objects.create(
            match=match,
            user=user,
            status=ParticipationStatus.DECLINED,
            paid=False,
        )

    if participation.paid:
        refund_match_fee(participation=participation, actor=user)

    participation.status = ParticipationStatus.DECLINED
    participation.paid = False
    participation.save(update_fields=['status', 'paid', 'updated_at'])

    return participation


@transaction.atomic
def cancel_participation(*, match_id: UUID, user: User, cancelled_by: User) -> None:
    """
    Remove a user's entry entirely (back to absent, not declined).

    Players may cancel themselves; the match owner or an admin may remove
    anybody.

    Raises:
        InsufficientPermissionsError: If cancelled_by is someone else without rights
        NotParticipantError: If the user has no entry
    """
    match = _lock_open_match(match_id)

    if cancelled_by.id != user.id and not match.can_manage(cancelled_by):
        raise InsufficientPermissionsError("Only the match owner or an admin can remove other players")

    participation = _lock_participation(match, user)
    if participation is None:
        raise NotParticipantError(f"{user.get_display_name()} is not on the roster")

    if participation.paid:
        refund_match_fee(participation=participation, actor=cancelled_by)

    participation.delete()
    logger.info("User %s removed from match %s by %s", user.id, match.id, cancelled_by.id)


def get_participation_status(*, match: Match, user: User) -> str:
    """Return the user's status on the match, or 'absent' when there is no entry."""
    participation = match.get_participation(user)
    return participation.status if participation else 'absent'


def get_match_participants(*, match_id: UUID) -> QuerySet[Participation]:
    if not Match.objects.filter(id=match_id).exists():
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    return (
        Participation.objects
        .filter(match_id=match_id)
        .select_related('user')
        .order_by('status', 'created_at')
    )
