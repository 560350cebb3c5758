from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import uuid

from apps.core.transitions import TransitionTable


class Station(models.Model):
    """Swap station where batteries are picked up and returned."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    location = models.CharField(max_length=255, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    manager = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='managed_stations'
    )

    capacity = models.PositiveIntegerField(default=20)
    accepts_plastic = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'stations'
        ordering = ['name']

    def __str__(self):
        return self.name


class BatteryStatus(models.TextChoices):
    AVAILABLE = 'available', 'Available'
    RENTED = 'rented', 'Rented'
    CHARGING = 'charging', 'Charging'
    MAINTENANCE = 'maintenance', 'Maintenance'


# Rentals drive available <-> rented; maintenance tooling drives the rest
BATTERY_TRANSITIONS = TransitionTable({
    BatteryStatus.AVAILABLE: {BatteryStatus.RENTED, BatteryStatus.CHARGING, BatteryStatus.MAINTENANCE},
    BatteryStatus.RENTED: {BatteryStatus.AVAILABLE},
    BatteryStatus.CHARGING: {BatteryStatus.AVAILABLE, BatteryStatus.MAINTENANCE},
    BatteryStatus.MAINTENANCE: {BatteryStatus.AVAILABLE, BatteryStatus.CHARGING},
})


class Battery(models.Model):
    """
    Swappable battery pack.

    ``status`` moves between available and rented only through the rental
    services. The rental currently holding a battery is looked up, not
    stored (see ``current_rental``).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    serial_number = models.CharField(max_length=64, unique=True)
    model = models.CharField(max_length=100, blank=True)
    battery_type = models.CharField(max_length=50, blank=True)
    capacity_kwh = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    current_charge_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('100.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )

    status = models.CharField(
        max_length=20,
        choices=BatteryStatus.choices,
        default=BatteryStatus.AVAILABLE
    )
    current_station = models.ForeignKey(
        Station,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='batteries'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'batteries'
        verbose_name_plural = 'batteries'
        indexes = [
            models.Index(fields=['status'], name='batteries_status_idx'),
            models.Index(fields=['current_station', 'status'], name='batteries_station_status_idx'),
        ]
        ordering = ['serial_number']

    def __str__(self):
        return f"{self.serial_number} ({self.status})"

    @property
    def current_rental(self):
        """The active rental holding this battery, or None."""
        from apps.rentals.services.queries import find_active_rental_for_battery
        return find_active_rental_for_battery(self.id)

    @property
    def current_rental_id(self):
        rental = self.current_rental
        return rental.id if rental else None
