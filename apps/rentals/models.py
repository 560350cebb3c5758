from django.db import models
from django.db.models import Q, F
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from apps.core.transitions import TransitionTable


class RentalStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class RentalPaymentStatus(models.TextChoices):
    UNPAID = 'unpaid', 'Unpaid'
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'


# completed and cancelled are terminal
RENTAL_TRANSITIONS = TransitionTable({
    RentalStatus.ACTIVE: {RentalStatus.COMPLETED, RentalStatus.CANCELLED},
})

RENTAL_PAYMENT_TRANSITIONS = TransitionTable({
    RentalPaymentStatus.UNPAID: {RentalPaymentStatus.PENDING, RentalPaymentStatus.COMPLETED},
    RentalPaymentStatus.PENDING: {RentalPaymentStatus.COMPLETED},
})


class Rental(models.Model):
    """
    One battery held by one user between pickup and return/cancellation.

    Aggregate root tying a battery to its payments. Status and the paired
    battery status only change through apps.rentals.services.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='rentals'
    )
    battery = models.ForeignKey(
        'stations.Battery',
        on_delete=models.PROTECT,
        related_name='rentals'
    )
    pickup_station = models.ForeignKey(
        'stations.Station',
        on_delete=models.PROTECT,
        related_name='pickups'
    )
    return_station = models.ForeignKey(
        'stations.Station',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='returns'
    )

    status = models.CharField(
        max_length=20,
        choices=RentalStatus.choices,
        default=RentalStatus.ACTIVE
    )
    payment_status = models.CharField(
        max_length=20,
        choices=RentalPaymentStatus.choices,
        default=RentalPaymentStatus.UNPAID
    )

    rental_date = models.DateTimeField()
    return_date = models.DateTimeField(null=True, blank=True)

    # Tariff snapshot taken at pickup
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    total_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'battery_rentals'
        indexes = [
            models.Index(fields=['user', 'status'], name='rentals_user_status_idx'),
            models.Index(fields=['battery', 'status'], name='rentals_battery_status_idx'),
            models.Index(fields=['status', 'created_at'], name='rentals_status_created_idx'),
            models.Index(fields=['payment_status'], name='rentals_payment_status_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['battery'],
                condition=Q(status='active'),
                name='one_active_rental_per_battery',
            ),
            models.UniqueConstraint(
                fields=['user'],
                condition=Q(status='active'),
                name='one_active_rental_per_user',
            ),
            models.CheckConstraint(
                condition=Q(return_date__isnull=True) | Q(return_date__gte=F('rental_date')),
                name='return_not_before_rental',
            ),
            models.CheckConstraint(
                condition=~Q(status='active') | Q(total_cost__isnull=True),
                name='no_cost_while_active',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Rental {self.id} - {self.battery_id} ({self.status})"

    @property
    def is_active(self):
        return self.status == RentalStatus.ACTIVE

    @property
    def is_terminal(self):
        return RENTAL_TRANSITIONS.is_terminal(self.status)
