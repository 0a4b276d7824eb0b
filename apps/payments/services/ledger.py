"""
Credit ledger service.

Every change to ``User.credits`` goes through :func:`apply_balance_change`,
which locks the user row, moves the balance with an ``F()`` expression and
appends exactly one :class:`CreditTransaction` inside the caller's
transaction. Public operations are wrapped in ``transaction.atomic`` so the
state change that caused the movement (payment status, paid flag) commits
together with the balance and the ledger record, or not at all.

Example:
    Validating a pending payment::

        from apps.payments.services import validate_payment

        payment = validate_payment(payment_id=payment.id, validated_by=admin)
        # payment.user.credits went up by payment.amount, once
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, Sum, Q
from django.utils import timezone

from apps.accounts.models import User
from apps.matches.models import Match, MatchStatus, Participation, ParticipationStatus
from apps.payments.models import (
    Payment,
    PaymentStatus,
    CreditTransaction,
    TransactionType,
    TransactionRefType,
)

from .exceptions import (
    InvalidAmountError,
    MatchCancelledError,
    NotConfirmedError,
    ParticipantNotFoundError,
    PaymentNotFoundError,
    PaymentAlreadyProcessedError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def _money(value) -> Decimal:
    return Decimal(value).quantize(Decimal('0.01'))


def apply_balance_change(
    *,
    user_id: UUID,
    type: str,
    amount: Decimal,
    ref_type: str,
    description: str,
    payment: Optional[Payment] = None,
    match: Optional[Match] = None,
    created_by: Optional[User] = None
) -> CreditTransaction:
    """
    Move a user's balance and record it.

    Must run inside a transaction; callers own the atomic block.

    Args:
        user_id: Whose balance moves
        type: TransactionType.CREDIT adds, TransactionType.DEBIT subtracts
        amount: Positive amount
        ref_type: What caused the movement
        description: Human readable reason shown in the statement

    Returns:
        The created CreditTransaction

    Raises:
        InvalidAmountError: If amount is not positive
    """
    amount = _money(amount)
    if amount <= ZERO:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")

    delta = amount if type == TransactionType.CREDIT else -amount

    user = User.objects.select_for_update().get(id=user_id)
    User.objects.filter(id=user.id).update(credits=F('credits') + delta)
    user.refresh_from_db(fields=['credits'])

    record = CreditTransaction.objects.create(
        user=user,
        type=type,
        amount=amount,
        ref_type=ref_type,
        payment=payment,
        match=match,
        description=description,
        balance_after=user.credits,
        created_by=created_by,
    )
    logger.info(
        "Ledger %s %s R$ %s for user %s (balance R$ %s)",
        type, ref_type, amount, user.id, user.credits
    )

    return record


# =============================================================================
# Payments
# =============================================================================

def create_payment(
    *,
    user: User,
    amount: Decimal,
    entered_by: Optional[User] = None,
    match: Optional[Match] = None,
    receipt_url: str = '',
    description: str = '',
    vision_analysis: Optional[dict] = None
) -> Payment:
    """
    Register a payment claim as pending. The balance doesn't move until an
    admin validates it.

    Raises:
        InvalidAmountError: If amount is not positive
        InsufficientPermissionsError: If a player tries to enter a payment for someone else
    """
    entered_by = entered_by or user

    if _money(amount) <= ZERO:
        raise InvalidAmountError("Amount must be positive")

    if entered_by.id != user.id and not entered_by.is_group_admin:
        raise InsufficientPermissionsError()

    return Payment.objects.create(
        user=user,
        match=match,
        amount=_money(amount),
        receipt_url=receipt_url,
        description=description,
        status=PaymentStatus.PENDING,
        entered_by=entered_by,
        entered_by_admin=entered_by.is_group_admin and entered_by.id != user.id,
        vision_analysis=vision_analysis,
    )


def _lock_pending_payment(payment_id: UUID) -> Payment:
    try:
        payment = Payment.objects.select_for_update().get(id=payment_id)
    except (Payment.DoesNotExist, ValidationError):
        raise PaymentNotFoundError()

    if payment.status != PaymentStatus.PENDING:
        raise PaymentAlreadyProcessedError(
            f"Pagamento já está {payment.get_status_display().lower()}."
        )

    return payment


@transaction.atomic
def validate_payment(*, payment_id: UUID, validated_by: User) -> Payment:
    """
    Accept a pending payment and credit its amount to the payer.

    The payment row is locked and must still be pending, so a second call
    (double click, two admins racing) raises instead of crediting twice.

    Raises:
        InsufficientPermissionsError: If validated_by is not an admin
        PaymentNotFoundError: If the payment doesn't exist
        PaymentAlreadyProcessedError: If the payment isn't pending
    """
    if not validated_by.is_group_admin:
        raise InsufficientPermissionsError()

    payment = _lock_pending_payment(payment_id)

    payment.status = PaymentStatus.VALIDATED
    payment.validated_at = timezone.now()
    payment.validated_by = validated_by
    payment.save(update_fields=['status', 'validated_at', 'validated_by', 'updated_at'])

    apply_balance_change(
        user_id=payment.user_id,
        type=TransactionType.CREDIT,
        amount=payment.amount,
        ref_type=TransactionRefType.PAYMENT,
        payment=payment,
        match=payment.match,
        description=f"Pagamento validado: R$ {payment.amount:.2f}",
        created_by=validated_by,
    )

    return payment


@transaction.atomic
def reject_payment(*, payment_id: UUID, rejected_by: User) -> Payment:
    """
    Refuse a pending payment. No balance change, no ledger record.

    Raises:
        InsufficientPermissionsError: If rejected_by is not an admin
        PaymentNotFoundError: If the payment doesn't exist
        PaymentAlreadyProcessedError: If the payment isn't pending
    """
    if not rejected_by.is_group_admin:
        raise InsufficientPermissionsError()

    payment = _lock_pending_payment(payment_id)

    payment.status = PaymentStatus.REJECTED
    payment.validated_at = timezone.now()
    payment.validated_by = rejected_by
    payment.save(update_fields=['status', 'validated_at', 'validated_by', 'updated_at'])

    logger.info("Payment %s rejected by %s", payment.id, rejected_by.id)
    return payment


@transaction.atomic
def create_manual_payment(
    *,
    user_id: UUID,
    amount: Decimal,
    entered_by: User,
    description: str = ''
) -> Payment:
    """
    Record cash or transfer received outside the app (admin only).

    The payment is created and validated in one transaction, so the player
    is credited immediately.
    """
    if not entered_by.is_group_admin:
        raise InsufficientPermissionsError()

    user = User.objects.get(id=user_id)
    payment = create_payment(
        user=user,
        amount=amount,
        entered_by=entered_by,
        description=description or 'Pagamento manual (admin)',
    )
    payment.entered_by_admin = True
    payment.save(update_fields=['entered_by_admin'])

    return validate_payment(payment_id=payment.id, validated_by=entered_by)


# =============================================================================
# Match fees
# =============================================================================

def _charged_for_match(user_id: UUID, match: Match) -> Decimal:
    """Net amount currently debited from the user for this match."""
    totals = CreditTransaction.objects.filter(
        user_id=user_id,
        match=match,
        ref_type=TransactionRefType.MATCH,
    ).aggregate(
        debits=Sum('amount', filter=Q(type=TransactionType.DEBIT)),
        credits=Sum('amount', filter=Q(type=TransactionType.CREDIT)),
    )
    return (totals['debits'] or ZERO) - (totals['credits'] or ZERO)


def refund_match_fee(*, participation: Participation, actor: User) -> Optional[CreditTransaction]:
    """
    Give back a charged match fee and clear the paid flag.

    Refunds exactly what the ledger shows was charged for this match, so a
    fee marked paid while the match was free gives nothing back even if the
    price went up since. Must run inside the caller's transaction.

    Returns:
        The credit record, or None when there was nothing to refund
    """
    match = participation.match
    amount = _charged_for_match(participation.user_id, match)

    record = None
    if amount > ZERO:
        record = apply_balance_change(
            user_id=participation.user_id,
            type=TransactionType.CREDIT,
            amount=amount,
            ref_type=TransactionRefType.MATCH,
            match=match,
            description=f"Reembolso de partida: {match.title}",
            created_by=actor,
        )

    participation.paid = False
    participation.save(update_fields=['paid', 'updated_at'])

    return record


@transaction.atomic
def toggle_payment_status(*, match_id: UUID, user_id: UUID, toggled_by: User) -> Participation:
    """
    Flip a participant's paid flag and settle the fee against their credits.

    unpaid -> paid debits the match fee; paid -> unpaid credits it back.
    The flag, the balance and the ledger record commit together.

    Raises:
        InsufficientPermissionsError: If toggled_by can't manage the match
        ParticipantNotFoundError: If the user isn't on the roster
        NotConfirmedError: If marking paid someone who isn't confirmed
        MatchCancelledError: If marking paid on a cancelled match
    """
    try:
        match = Match.objects.select_for_update().get(id=match_id)
    except Match.DoesNotExist:
        raise ParticipantNotFoundError(f"Match with ID {match_id} not found")

    if not match.can_manage(toggled_by):
        raise InsufficientPermissionsError()

    try:
        participation = (
            Participation.objects
            .select_for_update()
            .select_related('match')
            .get(match=match, user_id=user_id)
        )
    except Participation.DoesNotExist:
        raise ParticipantNotFoundError("User is not on the roster of this match")

    if participation.paid:
        refund_match_fee(participation=participation, actor=toggled_by)
        return participation

    if match.status == MatchStatus.CANCELLED:
        raise MatchCancelledError("Cannot charge a fee for a cancelled match")

    if participation.status != ParticipationStatus.CONFIRMED:
        raise NotConfirmedError("Only confirmed players can be marked as paid")

    if match.price_per_player > ZERO:
        apply_balance_change(
            user_id=user_id,
            type=TransactionType.DEBIT,
            amount=match.price_per_player,
            ref_type=TransactionRefType.MATCH,
            match=match,
            description=f"Pagamento de partida: {match.title}",
            created_by=toggled_by,
        )

    participation.paid = True
    participation.save(update_fields=['paid', 'updated_at'])

    return participation


# =============================================================================
# Statements and reconciliation
# =============================================================================

def get_credit_transactions(*, user_id: UUID):
    """User's statement, newest first."""
    return (
        CreditTransaction.objects
        .filter(user_id=user_id)
        .select_related('payment', 'match')
        .order_by('-created_at')
    )


def ledger_balance(*, user_id: UUID) -> Decimal:
    """Balance implied by the ledger: sum of credits minus sum of debits."""
    totals = CreditTransaction.objects.filter(user_id=user_id).aggregate(
        credits=Sum('amount', filter=Q(type=TransactionType.CREDIT)),
        debits=Sum('amount', filter=Q(type=TransactionType.DEBIT)),
    )
    return (totals['credits'] or ZERO) - (totals['debits'] or ZERO)


@transaction.atomic
def reconcile_balance(*, user_id: UUID, apply: bool = False) -> dict:
    """
    Compare the stored balance with the ledger.

    The ledger is the source of truth. With ``apply=True`` a drifted stored
    balance is overwritten with the ledger total; no record is appended
    since the ledger already explains the correct figure.

    Returns:
        dict with 'user', 'stored', 'expected', 'drift' and 'adjusted'
    """
    user = User.objects.select_for_update().get(id=user_id)
    stored = user.credits
    expected = ledger_balance(user_id=user_id)
    drift = stored - expected

    adjusted = False
    if apply and drift != ZERO:
        User.objects.filter(id=user.id).update(credits=expected)
        user.refresh_from_db(fields=['credits'])
        adjusted = True
        logger.warning(
            "Reconciled user %s: stored R$ %s, ledger R$ %s", user.id, stored, expected
        )

    return {
        'user': user,
        'stored': stored,
        'expected': expected,
        'drift': drift,
        'adjusted': adjusted,
    }


@transaction.atomic
def adjust_credits(
    *,
    user_id: UUID,
    amount: Decimal,
    adjusted_by: User,
    description: str = ''
) -> CreditTransaction:
    """
    Admin correction of a balance. Positive amounts credit, negative debit.

    Raises:
        InsufficientPermissionsError: If adjusted_by is not an admin
        InvalidAmountError: If amount is zero
    """
    if not adjusted_by.is_group_admin:
        raise InsufficientPermissionsError()

    amount = _money(amount)
    if amount == ZERO:
        raise InvalidAmountError("Adjustment can't be zero")

    return apply_balance_change(
        user_id=user_id,
        type=TransactionType.CREDIT if amount > ZERO else TransactionType.DEBIT,
        amount=abs(amount),
        ref_type=TransactionRefType.ADJUSTMENT,
        description=description or 'Ajuste manual de saldo',
        created_by=adjusted_by,
    )
