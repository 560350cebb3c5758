from django.conf import settings
from django.db import models
from django.db.models import Q
import uuid

from apps.core.transitions import TransitionTable


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'
    REFUNDED = 'refunded', 'Refunded'


class PaymentMethod(models.TextChoices):
    MPESA = 'mpesa', 'M-Pesa'
    CARD = 'card', 'Card'
    CASH = 'cash', 'Cash'
    POINTS = 'points', 'Points'
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'


# completed -> refunded only happens through a refund counter-payment
PAYMENT_TRANSITIONS = TransitionTable({
    PaymentStatus.PENDING: {
        PaymentStatus.COMPLETED,
        PaymentStatus.FAILED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
})

# Statuses that stamp processed_at
PROCESSED_STATUSES = frozenset({PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value})


def default_currency():
    return settings.PAYMENT_DEFAULT_CURRENCY


class Payment(models.Model):
    """
    Money movement registered against a user and, optionally, a rental.

    Refunds are separate Payment rows with a negative amount; the refunded
    original stays in place with status ``refunded``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='payments'
    )
    rental = models.ForeignKey(
        'rentals.Rental',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='payments'
    )

    # Signed: negative for refunds
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default=default_currency)
    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )

    payment_reference = models.CharField(max_length=100, unique=True, null=True, blank=True)
    mpesa_receipt_number = models.CharField(max_length=50, blank=True)
    description = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    processed_at = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='processed_payments'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['user'], name='payments_user_idx'),
            models.Index(fields=['rental'], name='payments_rental_idx'),
            models.Index(fields=['status'], name='payments_status_idx'),
            models.Index(fields=['payment_method'], name='payments_method_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(amount=0),
                name='payment_amount_not_zero',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.amount} {self.currency} ({self.status})"

    @property
    def is_refund(self):
        return self.amount < 0

    @property
    def is_terminal(self):
        return PAYMENT_TRANSITIONS.is_terminal(self.status)
