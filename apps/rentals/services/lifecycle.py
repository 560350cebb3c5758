"""
Rental state machine.

Every operation here moves a Rental and its Battery together inside one
database transaction:

    swap    : none   -> active     battery available -> rented
    return  : active -> completed  battery rented    -> available (at return station)
    cancel  : active -> cancelled  battery rented    -> available (stays put)

Preconditions are re-checked under row locks (``select_for_update``) in the
same transaction that performs the writes, so of two concurrent requests
racing for the same battery or rental exactly one wins and the other sees
the changed state. The partial unique constraints on Rental back this up at
the storage level.

Notifications are queued with ``transaction.on_commit`` and never take part
in the outcome.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.accounts.services import Caller, can_view_owned
from apps.core.exceptions import IntegrityViolationError, translate_storage_errors
from apps.notifications import events
from apps.rentals.models import Rental, RentalStatus, RENTAL_TRANSITIONS
from apps.stations.models import BatteryStatus, BATTERY_TRANSITIONS
from apps.stations.services import get_active_station, lock_battery

from .exceptions import (
    RentalNotFoundError,
    BatteryUnavailableError,
    UserHasActiveRentalError,
    RentalNotActiveError,
    RentalAccessDeniedError,
    RenterNotFoundError,
)
from .pricing import billable_hours

logger = logging.getLogger(__name__)


@translate_storage_errors
@transaction.atomic
def create_rental(
    *,
    user_id: UUID,
    battery_id: UUID,
    pickup_station_id: UUID,
    hourly_rate: Optional[Decimal] = None
) -> Rental:
    """
    Rent (swap) a battery.

    Locks the battery row, then the renter's row, so that two swaps for the
    same battery or by the same user serialize.

    Args:
        user_id: Renter
        battery_id: Battery being picked up
        pickup_station_id: Station the battery is picked up from
        hourly_rate: Tariff override; defaults to settings.RENTAL_HOURLY_RATE

    Returns:
        The new active Rental

    Raises:
        StationNotFoundError: If the pickup station doesn't exist
        BatteryNotFoundError: If the battery doesn't exist
        BatteryUnavailableError: If the battery is not available
        RenterNotFoundError: If the user doesn't exist
        UserHasActiveRentalError: If the user already holds an active rental
    """
    pickup_station = get_active_station(pickup_station_id)
    battery = lock_battery(battery_id)

    if not BATTERY_TRANSITIONS.allowed(battery.status, BatteryStatus.RENTED):
        logger.info(
            "Swap refused: battery=%s status=%s user=%s",
            battery.id, battery.status, user_id,
        )
        raise BatteryUnavailableError()

    try:
        renter = User.objects.select_for_update().only('id').get(id=user_id)
    except (User.DoesNotExist, ValidationError, ValueError):
        raise RenterNotFoundError(f"User {user_id} not found")

    if Rental.objects.filter(user_id=renter.id, status=RentalStatus.ACTIVE).exists():
        logger.info("Swap refused: user=%s already renting", renter.id)
        raise UserHasActiveRentalError()

    rental = Rental.objects.create(
        user_id=renter.id,
        battery=battery,
        pickup_station=pickup_station,
        status=RentalStatus.ACTIVE,
        rental_date=timezone.now(),
        hourly_rate=hourly_rate if hourly_rate is not None else settings.RENTAL_HOURLY_RATE,
    )

    battery.status = BatteryStatus.RENTED
    battery.save(update_fields=['status', 'updated_at'])

    logger.info("Rental %s started: user=%s battery=%s", rental.id, renter.id, battery.id)

    events.emit(events.RENTAL_CREATED, _rental_payload(rental))
    events.emit(
        events.BATTERY_RENTED,
        {'battery_id': str(battery.id)},
        rooms=[events.station_room(pickup_station.id)],
    )

    return rental


@translate_storage_errors
@transaction.atomic
def return_rental(*, rental_id: UUID, return_station_id: UUID, caller: Caller) -> dict:
    """
    Return a rented battery and close the rental.

    Cost is computed from wall-clock time elapsed at the instant of return
    (see pricing.billable_hours). Recording the payment is left to the
    settlement service.

    Returns:
        dict with ``rental``, ``rental_hours`` and ``total_cost``

    Raises:
        StationNotFoundError: If the return station doesn't exist
        RentalNotFoundError: If the rental doesn't exist
        RentalAccessDeniedError: If a customer returns someone else's rental
        RentalNotActiveError: If the rental already ended
    """
    rental = _lock_rental_for(rental_id, caller)

    RENTAL_TRANSITIONS.check(rental.status, RentalStatus.COMPLETED, RentalNotActiveError)

    return_station = get_active_station(return_station_id)

    return_date = timezone.now()
    hours = billable_hours(rental.rental_date, return_date)
    total_cost = hours * rental.hourly_rate

    rental.status = RentalStatus.COMPLETED
    rental.return_station = return_station
    rental.return_date = return_date
    rental.total_cost = total_cost
    rental.save(update_fields=[
        'status', 'return_station', 'return_date', 'total_cost', 'updated_at'
    ])

    battery = _release_battery(rental)
    battery.current_station = return_station
    battery.save(update_fields=['status', 'current_station', 'updated_at'])

    logger.info(
        "Rental %s completed: hours=%s cost=%s station=%s",
        rental.id, hours, total_cost, return_station.id,
    )

    events.emit(events.RENTAL_COMPLETED, {
        'id': str(rental.id),
        'total_cost': str(total_cost),
    })
    events.emit(
        events.BATTERY_RETURNED,
        {'battery_id': str(battery.id)},
        rooms=[events.station_room(return_station.id)],
    )

    return {
        'rental': rental,
        'rental_hours': hours,
        'total_cost': total_cost,
    }


@translate_storage_errors
@transaction.atomic
def cancel_rental(*, rental_id: UUID, caller: Caller) -> Rental:
    """
    Cancel an active rental.

    No cost is computed and no payment is created. The battery becomes
    available again where it was picked up.

    Raises:
        RentalNotFoundError: If the rental doesn't exist
        RentalAccessDeniedError: If a customer cancels someone else's rental
        RentalNotActiveError: If the rental already ended
    """
    rental = _lock_rental_for(rental_id, caller)

    RENTAL_TRANSITIONS.check(rental.status, RentalStatus.CANCELLED, RentalNotActiveError)

    rental.status = RentalStatus.CANCELLED
    rental.save(update_fields=['status', 'updated_at'])

    battery = _release_battery(rental)
    battery.save(update_fields=['status', 'updated_at'])

    logger.info("Rental %s cancelled by %s", rental.id, caller.user_id)

    events.emit(events.RENTAL_CANCELLED, {'id': str(rental.id)})

    return rental


def _lock_rental_for(rental_id: UUID, caller: Caller) -> Rental:
    try:
        rental = Rental.objects.select_for_update().get(id=rental_id)
    except (Rental.DoesNotExist, ValidationError, ValueError):
        raise RentalNotFoundError(f"Rental {rental_id} not found")

    if not can_view_owned(caller, rental.user_id):
        logger.warning("User %s denied access to rental %s", caller.user_id, rental.id)
        raise RentalAccessDeniedError()

    return rental


def _release_battery(rental: Rental):
    """Lock the rental's battery and flip it back to available (unsaved)."""
    battery = lock_battery(rental.battery_id)

    if battery.status != BatteryStatus.RENTED:
        logger.error(
            "Battery %s is %s while rental %s was active",
            battery.id, battery.status, rental.id,
        )
        raise IntegrityViolationError()

    BATTERY_TRANSITIONS.check(battery.status, BatteryStatus.AVAILABLE)
    battery.status = BatteryStatus.AVAILABLE
    return battery


def _rental_payload(rental: Rental) -> dict:
    return {
        'id': str(rental.id),
        'user_id': str(rental.user_id),
        'battery_id': str(rental.battery_id),
        'pickup_station_id': str(rental.pickup_station_id),
        'rental_date': rental.rental_date.isoformat(),
        'hourly_rate': str(rental.hourly_rate),
        'status': rental.status,
    }
