"""
Settlement service.

Registers payments against rentals, moves them through their statuses and
issues refunds as negative counter-payments. Rental.payment_status follows
the payments recorded for the rental:

    unpaid  -> pending    a payment is recorded
    pending -> completed  a payment completes

Lock order is payment row, then rental row.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services import (
    Caller,
    ensure_admin,
    ensure_admin_or_manager,
    ensure_owner_or_staff,
)
from apps.core.exceptions import SwapServiceError, translate_storage_errors
from apps.notifications import events
from apps.payments.models import (
    Payment,
    PaymentStatus,
    PAYMENT_TRANSITIONS,
    PROCESSED_STATUSES,
)
from apps.rentals.models import Rental, RentalPaymentStatus, RENTAL_PAYMENT_TRANSITIONS

from .exceptions import (
    InvalidAmountError,
    PaymentNotFoundError,
    PaymentRentalNotFoundError,
    PaymentUserNotFoundError,
    RentalUserMismatchError,
    InvalidPaymentTransitionError,
    PaymentNotCompletedError,
    RefundExceedsOriginalError,
    DuplicatePaymentReferenceError,
    InvalidPaymentReferenceError,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')

# Refund references are derived from the original payment id
REFUND_REFERENCE_PREFIX = 'REFUND-'
REFERENCE_MAX_LENGTH = Payment._meta.get_field('payment_reference').max_length


def parse_amount(value) -> Decimal:
    """
    Coerce ``value`` to a positive Decimal with at most two decimal places.

    Raises:
        InvalidAmountError: If the value is not a positive amount
    """
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError()

    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()

    if amount != amount.quantize(CENT):
        raise InvalidAmountError('Amount cannot have more than 2 decimal places.')

    return amount


def check_payment_reference(reference: Optional[str]) -> None:
    """
    Reject references the store can't hold or the refund flow owns.

    Raises:
        InvalidPaymentReferenceError: If the reference is too long or starts
            with the refund prefix
    """
    if not reference:
        return

    if len(reference) > REFERENCE_MAX_LENGTH:
        raise InvalidPaymentReferenceError(
            f"Payment reference cannot exceed {REFERENCE_MAX_LENGTH} characters."
        )

    if reference.upper().startswith(REFUND_REFERENCE_PREFIX):
        raise InvalidPaymentReferenceError(
            f"References starting with '{REFUND_REFERENCE_PREFIX}' are reserved for refunds."
        )


@translate_storage_errors
@transaction.atomic
def record_payment(
    *,
    caller: Caller,
    user_id: UUID,
    amount,
    payment_method: str,
    rental_id: Optional[UUID] = None,
    currency: Optional[str] = None,
    payment_reference: Optional[str] = None,
    mpesa_receipt_number: str = '',
    description: str = '',
    metadata: Optional[dict] = None
) -> Payment:
    """
    Register a pending payment.

    Nothing is charged here; the payment waits for a status update from
    whoever confirms it (gateway callback, cashier, admin).

    Args:
        caller: Who is recording the payment
        user_id: Payer
        amount: Positive amount
        payment_method: One of PaymentMethod
        rental_id: Rental being paid for, if any
        currency: Defaults to settings.PAYMENT_DEFAULT_CURRENCY

    Returns:
        The new pending Payment

    Raises:
        InvalidAmountError: If amount is not positive
        NotOwnerError: If a customer pays on someone else's behalf
        PaymentUserNotFoundError: If the payer doesn't exist
        PaymentRentalNotFoundError: If the rental doesn't exist
        RentalUserMismatchError: If the rental belongs to someone else
        InvalidPaymentReferenceError: If the reference is too long or reserved
        DuplicatePaymentReferenceError: If the reference is already used
    """
    amount = parse_amount(amount)
    check_payment_reference(payment_reference)
    ensure_owner_or_staff(caller, user_id, "You can only record payments for yourself")

    try:
        payer = User.objects.only('id').get(id=user_id)
    except (User.DoesNotExist, ValidationError, ValueError):
        raise PaymentUserNotFoundError(f"User {user_id} not found")

    if payment_reference and Payment.objects.filter(payment_reference=payment_reference).exists():
        raise DuplicatePaymentReferenceError()

    rental = None
    if rental_id:
        try:
            rental = Rental.objects.select_for_update().get(id=rental_id)
        except (Rental.DoesNotExist, ValidationError, ValueError):
            raise PaymentRentalNotFoundError(f"Rental {rental_id} not found")

        if rental.user_id != payer.id:
            raise RentalUserMismatchError()

    payment = Payment(
        user_id=payer.id,
        rental=rental,
        amount=amount,
        payment_method=payment_method,
        status=PaymentStatus.PENDING,
        payment_reference=payment_reference or None,
        mpesa_receipt_number=mpesa_receipt_number or '',
        description=description or '',
        metadata=metadata or {},
    )
    if currency:
        payment.currency = currency
    payment.save()

    if rental is not None:
        _advance_rental_payment_status(rental, RentalPaymentStatus.PENDING)

    logger.info(
        "Payment %s recorded: user=%s rental=%s amount=%s %s",
        payment.id, payer.id, rental_id, amount, payment.currency,
    )

    events.emit(events.PAYMENT_CREATED, _payment_payload(payment))

    return payment


@translate_storage_errors
@transaction.atomic
def update_payment_status(
    *,
    payment_id: UUID,
    status: str,
    caller: Caller,
    notes: Optional[str] = None
) -> Payment:
    """
    Move a payment from pending to completed, failed or cancelled.

    Completing a rental payment marks the rental paid. Refunds go through
    ``refund_payment``, never through here.

    Raises:
        RoleRequiredError: If the caller is not an admin or station manager
        PaymentNotFoundError: If the payment doesn't exist
        InvalidPaymentTransitionError: If the move is not allowed
    """
    ensure_admin_or_manager(caller)

    payment = _apply_status(payment_id, status, caller, notes)

    events.emit(events.PAYMENT_STATUS_UPDATED, {
        'id': str(payment.id),
        'status': payment.status,
    })

    return payment


@translate_storage_errors
@transaction.atomic
def refund_payment(
    *,
    payment_id: UUID,
    reason: str,
    caller: Caller,
    refund_amount=None,
    refund_method: Optional[str] = None
) -> dict:
    """
    Refund a completed payment, fully or partially.

    Writes a completed counter-payment of ``-refund_amount`` against the same
    rental and marks the original ``refunded``. The original is kept for the
    audit trail and cannot be refunded again.

    Args:
        payment_id: Payment being refunded
        reason: Why; stored on both payments
        caller: Admin or station manager
        refund_amount: Defaults to the full original amount
        refund_method: Defaults to the original payment method

    Returns:
        dict with ``refund`` (Payment), ``refund_id`` and ``refund_amount``

    Raises:
        PaymentNotFoundError: If the payment doesn't exist
        PaymentNotCompletedError: If the payment isn't completed
        RefundExceedsOriginalError: If refund_amount > original amount
    """
    ensure_admin_or_manager(caller)

    if refund_amount is not None:
        refund_amount = parse_amount(refund_amount)

    original = _lock_payment(payment_id)

    refundable = PAYMENT_TRANSITIONS.allowed(original.status, PaymentStatus.REFUNDED)
    if not refundable or original.is_refund:
        logger.info("Refund refused: payment=%s status=%s", original.id, original.status)
        raise PaymentNotCompletedError()

    if refund_amount is None:
        refund_amount = original.amount
    elif refund_amount > original.amount:
        raise RefundExceedsOriginalError()

    now = timezone.now()
    refund = Payment.objects.create(
        user_id=original.user_id,
        rental_id=original.rental_id,
        amount=-refund_amount,
        currency=original.currency,
        payment_method=refund_method or original.payment_method,
        status=PaymentStatus.COMPLETED,
        payment_reference=f"{REFUND_REFERENCE_PREFIX}{original.id}",
        description=f"Refund for payment {original.id}: {reason}",
        processed_at=now,
        processed_by_id=caller.user_id,
        metadata={
            'original_payment_id': str(original.id),
            'refund_reason': reason,
            'processed_by': str(caller.user_id),
        },
    )

    original.status = PaymentStatus.REFUNDED
    original.description = f"{original.description} | REFUNDED: {reason}"
    original.save(update_fields=['status', 'description', 'updated_at'])

    logger.info(
        "Payment %s refunded: refund=%s amount=%s by=%s",
        original.id, refund.id, refund_amount, caller.user_id,
    )

    events.emit(events.PAYMENT_REFUNDED, {
        'id': str(original.id),
        'refund_id': str(refund.id),
        'amount': str(refund_amount),
    })

    return {
        'refund': refund,
        'refund_id': refund.id,
        'refund_amount': refund_amount,
    }


def bulk_update_status(
    *,
    payment_ids: Iterable[UUID],
    status: str,
    caller: Caller
) -> dict:
    """
    Apply a status change to many payments.

    Each payment is updated in its own transaction with the same rules as
    ``update_payment_status``; payments that are missing or can't make the
    move are skipped. Partial success is normal.

    Returns:
        dict with ``updated_count`` and ``skipped_ids``
    """
    ensure_admin(caller)

    updated_ids = []
    skipped_ids = []

    for payment_id in dict.fromkeys(payment_ids):
        try:
            _apply_status_atomically(payment_id, status, caller)
        except SwapServiceError as e:
            logger.info("Bulk update skipped payment %s: %s", payment_id, e.message)
            skipped_ids.append(payment_id)
        else:
            updated_ids.append(payment_id)

    logger.info(
        "Bulk payment update to %s: %d updated, %d skipped",
        status, len(updated_ids), len(skipped_ids),
    )

    if updated_ids:
        events.emit(events.PAYMENTS_BULK_UPDATED, {
            'payment_ids': [str(pk) for pk in updated_ids],
            'status': status,
        })

    return {
        'updated_count': len(updated_ids),
        'skipped_ids': skipped_ids,
    }


def rental_payment_total(rental_id: UUID) -> Decimal:
    """
    Net amount settled for a rental.

    Sums completed payments, refunded originals and their (negative) refund
    payments, so a refund of ``r`` on ``a`` nets to ``a - r``.
    """
    total = (
        Payment.objects
        .filter(
            rental_id=rental_id,
            status__in=[PaymentStatus.COMPLETED, PaymentStatus.REFUNDED],
        )
        .aggregate(total=Sum('amount'))['total']
    )
    return total if total is not None else Decimal('0.00')


@translate_storage_errors
@transaction.atomic
def _apply_status_atomically(payment_id, status, caller):
    return _apply_status(payment_id, status, caller)


def _apply_status(payment_id, status, caller, notes=None) -> Payment:
    status = str(status)
    if status == PaymentStatus.REFUNDED:
        raise InvalidPaymentTransitionError("Refunds must be issued through the refund operation.")

    payment = _lock_payment(payment_id)

    PAYMENT_TRANSITIONS.check(payment.status, status, InvalidPaymentTransitionError)

    payment.status = status
    update_fields = ['status', 'updated_at']

    if status in PROCESSED_STATUSES:
        payment.processed_at = timezone.now()
        payment.processed_by_id = caller.user_id
        update_fields += ['processed_at', 'processed_by']

    if notes:
        payment.description = notes
        update_fields.append('description')

    payment.save(update_fields=update_fields)

    if status == PaymentStatus.COMPLETED and payment.rental_id:
        rental = Rental.objects.select_for_update().get(id=payment.rental_id)
        _advance_rental_payment_status(rental, RentalPaymentStatus.COMPLETED)

    logger.info("Payment %s -> %s by %s", payment.id, status, caller.user_id)
    return payment


def _lock_payment(payment_id) -> Payment:
    try:
        return Payment.objects.select_for_update().get(id=payment_id)
    except (Payment.DoesNotExist, ValidationError, ValueError):
        raise PaymentNotFoundError(f"Payment {payment_id} not found")


def _advance_rental_payment_status(rental: Rental, target: str) -> None:
    # Already further along (e.g. a second payment on a paid rental)
    if not RENTAL_PAYMENT_TRANSITIONS.allowed(rental.payment_status, target):
        return

    rental.payment_status = target
    rental.save(update_fields=['payment_status', 'updated_at'])


def _payment_payload(payment: Payment) -> dict:
    return {
        'id': str(payment.id),
        'user_id': str(payment.user_id),
        'rental_id': str(payment.rental_id) if payment.rental_id else None,
        'amount': str(payment.amount),
        'currency': payment.currency,
        'payment_method': payment.payment_method,
        'status': payment.status,
    }
