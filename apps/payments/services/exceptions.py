"""
Domain exceptions for payments app.

Errors that always map to the same HTTP response derive from DRF's
APIException so views can let them propagate; the rest derive from
PaymentsServiceError and are translated by the views.
"""
from rest_framework.exceptions import APIException


class PaymentsServiceError(Exception):
    """Base exception for payment and ledger service errors."""
    pass


class InvalidAmountError(PaymentsServiceError):
    """Raised when a monetary amount is zero or negative."""
    pass


class NotConfirmedError(PaymentsServiceError):
    """Raised when marking a fee paid for someone who isn't confirmed."""
    pass


class MatchCancelledError(PaymentsServiceError):
    """Raised when charging a fee for a cancelled match."""
    pass


class ParticipantNotFoundError(PaymentsServiceError):
    """Raised when the user has no entry on the match roster."""
    pass


class PixNotConfiguredError(PaymentsServiceError):
    """Raised when no PIX key is configured for top-ups."""
    pass


class PaymentNotFoundError(APIException):
    """Payment not found."""
    status_code = 404
    default_detail = 'Pagamento não encontrado.'
    default_code = 'payment_not_found'


class PaymentAlreadyProcessedError(APIException):
    """Payment was already validated or rejected."""
    status_code = 409
    default_detail = 'Este pagamento já foi processado.'
    default_code = 'payment_already_processed'


class InsufficientPermissionsError(APIException):
    """User doesn't have permission for operation."""
    status_code = 403
    default_detail = 'Você não tem permissão para realizar esta ação.'
    default_code = 'insufficient_permissions'


class VisionNotConfiguredError(APIException):
    """Receipt analysis is not configured."""
    status_code = 503
    default_detail = 'Análise de comprovante indisponível.'
    default_code = 'vision_not_configured'


class VisionServiceError(APIException):
    """The OCR provider failed or returned garbage."""
    status_code = 502
    default_detail = 'Não foi possível analisar o comprovante. Tente novamente.'
    default_code = 'vision_service_error'
