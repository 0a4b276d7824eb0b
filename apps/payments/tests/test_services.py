"""
Service layer tests for payments and the credit ledger.
"""

import pytest
from decimal import Decimal

from apps.matches.models import MatchStatus, Participation, ParticipationStatus
from apps.payments.models import (
    Payment,
    PaymentStatus,
    CreditTransaction,
    TransactionType,
    TransactionRefType,
)
from apps.payments.services import (
    create_payment,
    validate_payment,
    reject_payment,
    create_manual_payment,
    toggle_payment_status,
    refund_match_fee,
    get_credit_transactions,
    ledger_balance,
    reconcile_balance,
    adjust_credits,
    InvalidAmountError,
    MatchCancelledError,
    NotConfirmedError,
    ParticipantNotFoundError,
    PaymentAlreadyProcessedError,
    PaymentNotFoundError,
    InsufficientPermissionsError,
)


# =============================================================================
# Payment lifecycle
# =============================================================================

@pytest.mark.django_db
class TestCreatePayment:

    def test_payment_starts_pending_without_moving_balance(self, player):
        payment = create_payment(user=player, amount=Decimal('30.00'))

        player.refresh_from_db()
        assert payment.status == PaymentStatus.PENDING
        assert payment.entered_by == player
        assert payment.entered_by_admin is False
        assert player.credits == Decimal('0.00')
        assert not CreditTransaction.objects.exists()

    def test_zero_amount_rejected(self, player):
        with pytest.raises(InvalidAmountError):
            create_payment(user=player, amount=Decimal('0'))

    def test_player_cannot_enter_payment_for_someone_else(self, player, other_player):
        with pytest.raises(InsufficientPermissionsError):
            create_payment(user=other_player, amount=Decimal('10.00'), entered_by=player)

    def test_admin_entry_is_flagged(self, player, admin_user):
        payment = create_payment(user=player, amount=Decimal('10.00'), entered_by=admin_user)

        assert payment.entered_by_admin is True


@pytest.mark.django_db
class TestValidatePayment:

    def test_validate_credits_amount_once(self, pending_payment, admin_user, player):
        """Balance 0.00 plus a validated R$ 50,00 payment ends at 50.00."""
        payment = validate_payment(payment_id=pending_payment.id, validated_by=admin_user)

        player.refresh_from_db()
        assert payment.status == PaymentStatus.VALIDATED
        assert payment.validated_by == admin_user
        assert payment.validated_at is not None
        assert player.credits == Decimal('50.00')

        record = CreditTransaction.objects.get(payment=payment)
        assert record.type == TransactionType.CREDIT
        assert record.ref_type == TransactionRefType.PAYMENT
        assert record.amount == Decimal('50.00')
        assert record.balance_after == Decimal('50.00')

    def test_second_validation_raises_and_does_not_credit(self, pending_payment, admin_user, player):
        validate_payment(payment_id=pending_payment.id, validated_by=admin_user)

        with pytest.raises(PaymentAlreadyProcessedError):
            validate_payment(payment_id=pending_payment.id, validated_by=admin_user)

        player.refresh_from_db()
        assert player.credits == Decimal('50.00')
        assert CreditTransaction.objects.filter(user=player).count() == 1

    def test_player_cannot_validate(self, pending_payment, player):
        with pytest.raises(InsufficientPermissionsError):
            validate_payment(payment_id=pending_payment.id, validated_by=player)

    def test_malformed_payment_id(self, admin_user):
        with pytest.raises(PaymentNotFoundError):
            validate_payment(payment_id='not-a-uuid', validated_by=admin_user)

    def test_unknown_payment(self, admin_user):
        from uuid import uuid4

        with pytest.raises(PaymentNotFoundError):
            validate_payment(payment_id=uuid4(), validated_by=admin_user)


@pytest.mark.django_db
class TestRejectPayment:

    def test_reject_leaves_balance_untouched(self, pending_payment, admin_user, player):
        payment = reject_payment(payment_id=pending_payment.id, rejected_by=admin_user)

        player.refresh_from_db()
        assert payment.status == PaymentStatus.REJECTED
        assert player.credits == Decimal('0.00')
        assert not CreditTransaction.objects.exists()

    def test_rejected_payment_cannot_be_validated(self, pending_payment, admin_user):
        reject_payment(payment_id=pending_payment.id, rejected_by=admin_user)

        with pytest.raises(PaymentAlreadyProcessedError):
            validate_payment(payment_id=pending_payment.id, validated_by=admin_user)


@pytest.mark.django_db
class TestManualPayment:

    def test_manual_payment_is_credited_immediately(self, player, admin_user):
        payment = create_manual_payment(
            user_id=player.id,
            amount=Decimal('40.00'),
            entered_by=admin_user,
        )

        player.refresh_from_db()
        assert payment.status == PaymentStatus.VALIDATED
        assert payment.entered_by_admin is True
        assert player.credits == Decimal('40.00')

    def test_player_cannot_enter_manual_payment(self, player, other_player):
        with pytest.raises(InsufficientPermissionsError):
            create_manual_payment(user_id=other_player.id, amount=Decimal('10.00'), entered_by=player)

        assert not Payment.objects.exists()


# =============================================================================
# Match fees
# =============================================================================

@pytest.mark.django_db
class TestTogglePaymentStatus:

    def test_marking_paid_debits_fee(self, match, confirmed_participation, player, admin_user):
        """Fee 25.00 with balance 0.00 leaves the player at -25.00."""
        participation = toggle_payment_status(
            match_id=match.id,
            user_id=player.id,
            toggled_by=admin_user,
        )

        player.refresh_from_db()
        assert participation.paid is True
        assert player.credits == Decimal('-25.00')

        record = CreditTransaction.objects.get(user=player)
        assert record.type == TransactionType.DEBIT
        assert record.ref_type == TransactionRefType.MATCH
        assert record.match == match
        assert record.balance_after == Decimal('-25.00')

    def test_unmarking_refunds_fee(self, match, confirmed_participation, player, admin_user):
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)
        participation = toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert participation.paid is False
        assert player.credits == Decimal('0.00')
        assert CreditTransaction.objects.filter(user=player).count() == 2

    def test_pay_unpay_pay_nets_one_fee(self, match, confirmed_participation, player, admin_user):
        for _ in range(3):
            toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert player.credits == Decimal('-25.00')
        assert ledger_balance(user_id=player.id) == player.credits

    def test_only_confirmed_can_be_marked_paid(self, match, player, admin_user):
        Participation.objects.create(match=match, user=player, status=ParticipationStatus.PENDING)

        with pytest.raises(NotConfirmedError):
            toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

    def test_not_on_roster(self, match, player, admin_user):
        with pytest.raises(ParticipantNotFoundError):
            toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

    def test_player_cannot_toggle(self, match, confirmed_participation, player):
        with pytest.raises(InsufficientPermissionsError):
            toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=player)

    def test_fee_uses_current_price(self, match, confirmed_participation, player, admin_user):
        match.price_per_player = Decimal('30.00')
        match.save()

        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert player.credits == Decimal('-30.00')

    def test_cancelled_match_cannot_be_charged(self, match, confirmed_participation, player, admin_user):
        match.status = MatchStatus.CANCELLED
        match.save()

        with pytest.raises(MatchCancelledError):
            toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert player.credits == Decimal('0.00')
        assert not CreditTransaction.objects.filter(user=player).exists()

    def test_completed_match_stays_payable(self, match, confirmed_participation, player, admin_user):
        match.status = MatchStatus.COMPLETED
        match.save()

        participation = toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert participation.paid is True
        assert player.credits == Decimal('-25.00')

    def test_paid_on_cancelled_match_can_still_be_refunded(self, match, confirmed_participation, player, admin_user):
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)
        match.status = MatchStatus.CANCELLED
        match.save()

        participation = toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert participation.paid is False
        assert player.credits == Decimal('0.00')


@pytest.mark.django_db
class TestRefundMatchFee:

    def test_refunds_what_was_charged(self, match, confirmed_participation, player, admin_user):
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)
        match.price_per_player = Decimal('40.00')
        match.save()

        participation = Participation.objects.get(match=match, user=player)
        record = refund_match_fee(participation=participation, actor=admin_user)

        player.refresh_from_db()
        assert record.amount == Decimal('25.00')
        assert player.credits == Decimal('0.00')
        assert participation.paid is False

    def test_fee_marked_paid_while_free_refunds_nothing(self, match, confirmed_participation, player, admin_user):
        """A later price increase must not be paid out on unmarking."""
        match.price_per_player = Decimal('0.00')
        match.save()
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        match.price_per_player = Decimal('25.00')
        match.save()
        participation = toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        player.refresh_from_db()
        assert participation.paid is False
        assert player.credits == Decimal('0.00')
        assert not CreditTransaction.objects.filter(user=player).exists()

    def test_paid_flag_without_charge_refunds_nothing(self, match, player, admin_user):
        participation = Participation.objects.create(
            match=match,
            user=player,
            status=ParticipationStatus.CONFIRMED,
            paid=True,
        )

        record = refund_match_fee(participation=participation, actor=admin_user)

        player.refresh_from_db()
        assert record is None
        assert player.credits == Decimal('0.00')
        assert participation.paid is False


# =============================================================================
# Statements and reconciliation
# =============================================================================

@pytest.mark.django_db
class TestCreditHistory:

    def test_history_covers_every_movement(self, pending_payment, match, confirmed_participation, player, admin_user):
        validate_payment(payment_id=pending_payment.id, validated_by=admin_user)
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        history = list(get_credit_transactions(user_id=player.id))
        debit = next(t for t in history if t.type == TransactionType.DEBIT)

        assert len(history) == 2
        assert debit.balance_after == Decimal('25.00')
        assert history[0].created_at >= history[1].created_at

    def test_ledger_matches_stored_balance(self, pending_payment, match, confirmed_participation, player, admin_user):
        validate_payment(payment_id=pending_payment.id, validated_by=admin_user)
        toggle_payment_status(match_id=match.id, user_id=player.id, toggled_by=admin_user)

        result = reconcile_balance(user_id=player.id)

        assert result['drift'] == Decimal('0.00')
        assert result['adjusted'] is False


@pytest.mark.django_db
class TestReconcileBalance:

    def test_reports_drift_without_fixing(self, player):
        player.credits = Decimal('15.00')
        player.save()

        result = reconcile_balance(user_id=player.id)

        player.refresh_from_db()
        assert result['drift'] == Decimal('15.00')
        assert result['adjusted'] is False
        assert player.credits == Decimal('15.00')

    def test_apply_restores_ledger_balance(self, player, admin_user):
        adjust_credits(user_id=player.id, amount=Decimal('10.00'), adjusted_by=admin_user)
        player.credits = Decimal('99.00')
        player.save()

        result = reconcile_balance(user_id=player.id, apply=True)

        player.refresh_from_db()
        assert result['adjusted'] is True
        assert result['expected'] == Decimal('10.00')
        assert player.credits == Decimal('10.00')


@pytest.mark.django_db
class TestAdjustCredits:

    def test_negative_adjustment_debits(self, player, admin_user):
        record = adjust_credits(user_id=player.id, amount=Decimal('-5.00'), adjusted_by=admin_user)

        player.refresh_from_db()
        assert record.type == TransactionType.DEBIT
        assert record.ref_type == TransactionRefType.ADJUSTMENT
        assert player.credits == Decimal('-5.00')

    def test_zero_adjustment_rejected(self, player, admin_user):
        with pytest.raises(InvalidAmountError):
            adjust_credits(user_id=player.id, amount=Decimal('0'), adjusted_by=admin_user)


@pytest.mark.django_db
class TestReconcileCommand:

    def test_dry_run_reports_without_changes(self, player):
        from io import StringIO
        from django.core.management import call_command

        player.credits = Decimal('12.00')
        player.save()

        out = StringIO()
        call_command('reconcile_credits', '--dry-run', stdout=out)

        player.refresh_from_db()
        assert 'drift R$ 12.00' in out.getvalue()
        assert player.credits == Decimal('12.00')

    def test_fixes_drift(self, player):
        from io import StringIO
        from django.core.management import call_command

        player.credits = Decimal('12.00')
        player.save()

        call_command('reconcile_credits', '--user', str(player.id), stdout=StringIO())

        player.refresh_from_db()
        assert player.credits == Decimal('0.00')
