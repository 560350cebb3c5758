"""
Payments app services layer.

Settlement: recording payments, status updates, refunds and bulk updates,
plus role-scoped payment lookups.
"""

from .exceptions import (
    InvalidAmountError,
    PaymentNotFoundError,
    PaymentRentalNotFoundError,
    PaymentUserNotFoundError,
    RentalUserMismatchError,
    InvalidPaymentTransitionError,
    PaymentNotCompletedError,
    RefundExceedsOriginalError,
    PaymentAccessDeniedError,
    DuplicatePaymentReferenceError,
    InvalidPaymentReferenceError,
)

from .settlement import (
    parse_amount,
    record_payment,
    update_payment_status,
    refund_payment,
    bulk_update_status,
    rental_payment_total,
)

from .queries import (
    get_payment,
    list_payments,
)


__all__ = [
    # Exceptions
    'InvalidAmountError',
    'PaymentNotFoundError',
    'PaymentRentalNotFoundError',
    'PaymentUserNotFoundError',
    'RentalUserMismatchError',
    'InvalidPaymentTransitionError',
    'PaymentNotCompletedError',
    'RefundExceedsOriginalError',
    'PaymentAccessDeniedError',
    'DuplicatePaymentReferenceError',
    'InvalidPaymentReferenceError',

    # Settlement
    'parse_amount',
    'record_payment',
    'update_payment_status',
    'refund_payment',
    'bulk_update_status',
    'rental_payment_total',

    # Queries
    'get_payment',
    'list_payments',
]
