"""
Domain-specific exceptions for the settlement service.
"""

from apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)


class InvalidAmountError(ValidationFailedError):
    """Raised when an amount is not a positive number of currency units."""
    default_message = 'Amount must be a positive number.'
    code = 'invalid_amount'


class PaymentNotFoundError(NotFoundError):
    default_message = 'Payment not found.'
    code = 'payment_not_found'


class PaymentRentalNotFoundError(NotFoundError):
    """Raised when a payment references a rental that doesn't exist."""
    default_message = 'Rental not found.'
    code = 'rental_not_found'


class PaymentUserNotFoundError(NotFoundError):
    default_message = 'User not found.'
    code = 'user_not_found'


class RentalUserMismatchError(ValidationFailedError):
    """Raised when the rental belongs to someone other than the payer."""
    default_message = 'Rental does not belong to this user.'
    code = 'rental_user_mismatch'


class InvalidPaymentTransitionError(ConflictError):
    """Raised when a status change is not allowed from the current status."""
    code = 'invalid_payment_transition'


class PaymentNotCompletedError(ConflictError):
    """Raised when refunding a payment that isn't completed."""
    default_message = 'Can only refund completed payments.'
    code = 'payment_not_completed'


class RefundExceedsOriginalError(ConflictError):
    default_message = 'Refund amount cannot exceed original payment amount.'
    code = 'refund_exceeds_original'


class PaymentAccessDeniedError(ForbiddenError):
    default_message = 'Access denied.'
    code = 'payment_access_denied'


class DuplicatePaymentReferenceError(ConflictError):
    default_message = 'A payment with this reference already exists.'
    code = 'duplicate_payment_reference'


class InvalidPaymentReferenceError(ValidationFailedError):
    """Raised when a reference is too long or uses the reserved refund prefix."""
    default_message = 'Invalid payment reference.'
    code = 'invalid_payment_reference'
