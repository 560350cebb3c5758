"""
Read-side payment lookups, scoped by the caller's role.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from apps.accounts.services import Caller, can_view_owned
from apps.payments.models import Payment

from .exceptions import PaymentNotFoundError, PaymentAccessDeniedError


def get_payment(*, payment_id: UUID, caller: Caller) -> Payment:
    """
    Fetch a payment the caller is allowed to see.

    Raises:
        PaymentNotFoundError: If the payment doesn't exist
        PaymentAccessDeniedError: If a customer asks for someone else's payment
    """
    try:
        payment = (
            Payment.objects
            .select_related('user', 'rental', 'processed_by')
            .get(id=payment_id)
        )
    except (Payment.DoesNotExist, ValidationError, ValueError):
        raise PaymentNotFoundError(f"Payment {payment_id} not found")

    if not can_view_owned(caller, payment.user_id):
        raise PaymentAccessDeniedError()

    return payment


def list_payments(
    *,
    caller: Caller,
    status: Optional[str] = None,
    payment_method: Optional[str] = None,
    rental_id: Optional[UUID] = None,
    user_id: Optional[UUID] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None
) -> QuerySet[Payment]:
    """
    Payments visible to the caller, newest first.

    Customers always get their own payments; ``user_id`` only narrows the
    list for managers and admins.
    """
    queryset = Payment.objects.select_related('user', 'rental', 'processed_by')

    if not caller.is_admin_or_manager:
        queryset = queryset.filter(user_id=caller.user_id)
    elif user_id:
        queryset = queryset.filter(user_id=user_id)

    if status:
        queryset = queryset.filter(status=status)
    if payment_method:
        queryset = queryset.filter(payment_method=payment_method)
    if rental_id:
        queryset = queryset.filter(rental_id=rental_id)
    if min_amount is not None:
        queryset = queryset.filter(amount__gte=min_amount)
    if max_amount is not None:
        queryset = queryset.filter(amount__lte=max_amount)

    return queryset.order_by('-created_at')
