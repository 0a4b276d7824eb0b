"""
Payments app services layer.

Ledger operations move ``User.credits`` and append a ``CreditTransaction``
in the same transaction. Receipt analysis and PIX generation don't touch
the balance.
"""

from .exceptions import (
    PaymentsServiceError,
    InvalidAmountError,
    MatchCancelledError,
    NotConfirmedError,
    ParticipantNotFoundError,
    PixNotConfiguredError,
    PaymentNotFoundError,
    PaymentAlreadyProcessedError,
    InsufficientPermissionsError,
    VisionNotConfiguredError,
    VisionServiceError,
)

from .ledger import (
    apply_balance_change,
    create_payment,
    validate_payment,
    reject_payment,
    create_manual_payment,
    refund_match_fee,
    toggle_payment_status,
    get_credit_transactions,
    ledger_balance,
    reconcile_balance,
    adjust_credits,
)

from .receipt_analysis import (
    analyze_receipt,
    parse_receipt_text,
)

from .pix import PixPaymentGenerator


__all__ = [
    # Exceptions
    'PaymentsServiceError',
    'InvalidAmountError',
    'MatchCancelledError',
    'NotConfirmedError',
    'ParticipantNotFoundError',
    'PixNotConfiguredError',
    'PaymentNotFoundError',
    'PaymentAlreadyProcessedError',
    'InsufficientPermissionsError',
    'VisionNotConfiguredError',
    'VisionServiceError',

    # Ledger
    'apply_balance_change',
    'create_payment',
    'validate_payment',
    'reject_payment',
    'create_manual_payment',
    'refund_match_fee',
    'toggle_payment_status',
    'get_credit_transactions',
    'ledger_balance',
    'reconcile_balance',
    'adjust_credits',

    # Receipt analysis
    'analyze_receipt',
    'parse_receipt_text',

    # PIX
    'PixPaymentGenerator',
]
