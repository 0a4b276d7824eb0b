"""
Match management service.

Handles match CRUD, lifecycle transitions and the derived match listings.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.payments.models import CreditTransaction, TransactionRefType, TransactionType
from apps.payments.services.ledger import refund_match_fee
from apps.matches.models import Match, MatchStatus, Participation, ParticipationStatus

from .exceptions import (
    MatchNotFoundError,
    MatchClosedError,
    InsufficientPermissionsError,
    InvalidMatchDataError,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'title',
    'description',
    'date',
    'location',
    'max_players',
    'price_per_player',
    'is_recurring',
    'recurring_day',
)


def _validate_recurrence(is_recurring: bool, recurring_day: Optional[int]) -> Optional[int]:
    if is_recurring:
        if recurring_day is None:
            raise InvalidMatchDataError("Recurring matches need a weekday (0=Sunday ... 6=Saturday)")
        return recurring_day
    return None


def create_match(
    *,
    created_by: User,
    title: str,
    date,
    location: str,
    max_players: int,
    price_per_player: Decimal,
    description: str = '',
    is_recurring: bool = False,
    recurring_day: Optional[int] = None
) -> Match:
    """
    Schedule a new match with an empty roster.

    Returns:
        Created Match instance with status 'upcoming'

    Raises:
        InvalidMatchDataError: If recurrence fields are inconsistent
    """
    recurring_day = _validate_recurrence(is_recurring, recurring_day)

    match = Match.objects.create(
        created_by=created_by,
        title=title,
        description=description,
        date=date,
        location=location,
        max_players=max_players,
        price_per_player=price_per_player,
        is_recurring=is_recurring,
        recurring_day=recurring_day,
        status=MatchStatus.UPCOMING,
    )
    logger.info("Match %s created by %s", match.id, created_by.id)

    return match


def get_match_by_id(*, match_id: UUID) -> Match:
    try:
        return Match.objects.select_related('created_by').get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")


@transaction.atomic
def update_match(*, match_id: UUID, user: User, **fields) -> Match:
    """
    Update match details (owner or admin only).

    Raises:
        MatchNotFoundError: If match doesn't exist
        InsufficientPermissionsError: If user can't manage the match
        InvalidMatchDataError: If a field is not updatable or recurrence is inconsistent
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidMatchDataError(f"Fields not updatable: {', '.join(sorted(unknown))}")

    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    if not match.can_manage(user):
        raise InsufficientPermissionsError("Only the match owner or an admin can edit it")

    for field, value in fields.items():
        setattr(match, field, value)

    match.recurring_day = _validate_recurrence(match.is_recurring, match.recurring_day)
    match.save()

    return match


@transaction.atomic
def complete_match(*, match_id: UUID, user: User) -> Match:
    """Mark an upcoming match as played."""
    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    if not match.can_manage(user):
        raise InsufficientPermissionsError("Only the match owner or an admin can close it")

    if match.status != MatchStatus.UPCOMING:
        raise MatchClosedError(f"Match is already {match.status}")

    match.status = MatchStatus.COMPLETED
    match.save(update_fields=['status', 'updated_at'])

    return match


@transaction.atomic
def cancel_match(*, match_id: UUID, user: User) -> Match:
    """
    Cancel an upcoming match and refund every fee already charged.

    Refunds go through the credit ledger in the same transaction as the
    status change.
    """
    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    if not match.can_manage(user):
        raise InsufficientPermissionsError("Only the match owner or an admin can cancel it")

    if match.status != MatchStatus.UPCOMING:
        raise MatchClosedError(f"Match is already {match.status}")

    paid = match.participations.select_for_update().filter(paid=True)
    for participation in paid:
        refund_match_fee(participation=participation, actor=user)

    match.status = MatchStatus.CANCELLED
    match.save(update_fields=['status', 'updated_at'])
    logger.info("Match %s cancelled by %s", match.id, user.id)

    return match


@transaction.atomic
def delete_match(*, match_id: UUID, user: User) -> None:
    """
    Delete a match that has no charged fees.

    A match with paid participants must be cancelled instead so the
    refunds land in the ledger.
    """
    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise MatchNotFoundError(f"Match with ID {match_id} not found")

    if not match.can_manage(user):
        raise InsufficientPermissionsError("Only the match owner or an admin can delete it")

    if match.participations.filter(paid=True).exists():
        raise MatchClosedError("Match has paid participants; cancel it instead")

    match.delete()


def _annotated(queryset: QuerySet) -> QuerySet:
    return queryset.select_related('created_by').annotate(
        confirmed_total=Count(
            'participations',
            filter=Q(participations__status=ParticipationStatus.CONFIRMED)
        )
    )


def get_upcoming_matches(*, now=None) -> QuerySet[Match]:
    """Upcoming matches that haven't started yet, soonest first."""
    now = now or timezone.now()
    return _annotated(
        Match.objects.filter(status=MatchStatus.UPCOMING, date__gte=now)
    ).order_by('date')


def get_past_matches(*, now=None) -> QuerySet[Match]:
    """Completed matches plus anything whose date has passed, newest first."""
    now = now or timezone.now()
    return _annotated(
        Match.objects.filter(Q(status=MatchStatus.COMPLETED) | Q(date__lt=now))
    ).order_by('-date')


def get_all_matches() -> QuerySet[Match]:
    return _annotated(Match.objects.all()).order_by('date')


def get_unpaid_matches(*, user: User) -> List[Match]:
    """Matches where the user is confirmed but the fee hasn't been settled, newest first."""
    return list(
        Match.objects.filter(
            participations__user=user,
            participations__status=ParticipationStatus.CONFIRMED,
            participations__paid=False,
        ).exclude(status=MatchStatus.CANCELLED).order_by('-date')
    )


def get_outstanding_summary(*, user: User) -> dict:
    """
    Summarize what a player still owes.

    Returns:
        dict with 'matches', 'count' and 'total_debt' (sum of match fees)
    """
    matches = get_unpaid_matches(user=user)
    total = sum((m.price_per_player for m in matches), Decimal('0.00'))

    return {
        'matches': matches,
        'count': len(matches),
        'total_debt': total,
    }


def _collected_for_match(match: Match) -> Decimal:
    """Net match fees the ledger shows were charged, minus refunds."""
    totals = CreditTransaction.objects.filter(
        match=match,
        ref_type=TransactionRefType.MATCH,
    ).aggregate(
        debits=Sum('amount', filter=Q(type=TransactionType.DEBIT)),
        credits=Sum('amount', filter=Q(type=TransactionType.CREDIT)),
    )
    return (totals['debits'] or Decimal('0.00')) - (totals['credits'] or Decimal('0.00'))


def get_match_summary(*, match_id: UUID) -> dict:
    """
    Roster and money overview of a match.

    Returns:
        dict with participants grouped by status, paid counts and the
        amount collected so far
    """
    match = get_match_by_id(match_id=match_id)
    participations = list(match.participations.select_related('user'))

    confirmed = [p for p in participations if p.status == ParticipationStatus.CONFIRMED]
    paid = [p for p in confirmed if p.paid]

    return {
        'match': match,
        'confirmed': confirmed,
        'pending': [p for p in participations if p.status == ParticipationStatus.PENDING],
        'declined': [p for p in participations if p.status == ParticipationStatus.DECLINED],
        'confirmed_count': len(confirmed),
        'paid_count': len(paid),
        'is_full': len(confirmed) >= match.max_players,
        'collected_amount': _collected_for_match(match),
        'expected_amount': match.price_per_player * len(confirmed),
    }
