"""
Read-only station and battery lookups used by the rental engine.

Provisioning, search and maintenance tooling live outside the engine; the
rental services only need to know that a referenced station exists and can
take a battery.
"""

from uuid import UUID

from django.core.exceptions import ValidationError

from apps.core.exceptions import NotFoundError, ValidationFailedError

from .models import Station, Battery


class StationNotFoundError(NotFoundError):
    """Raised when a referenced station does not exist."""
    default_message = 'Station not found.'
    code = 'station_not_found'


class StationInactiveError(ValidationFailedError):
    """Raised when a referenced station is closed."""
    default_message = 'Station is not active.'
    code = 'station_inactive'


class BatteryNotFoundError(NotFoundError):
    """Raised when a referenced battery does not exist."""
    default_message = 'Battery not found.'
    code = 'battery_not_found'


def get_active_station(station_id: UUID) -> Station:
    """
    Return the station if it exists and is open.

    Raises:
        StationNotFoundError: If no station has this id
        StationInactiveError: If the station is closed
    """
    try:
        station = Station.objects.get(id=station_id)
    except (Station.DoesNotExist, ValidationError, ValueError):
        raise StationNotFoundError(f"Station {station_id} not found")

    if not station.is_active:
        raise StationInactiveError(f"Station {station.name} is not active")

    return station


def lock_battery(battery_id: UUID) -> Battery:
    """
    Fetch a battery with a row lock held until the surrounding transaction ends.

    Must be called inside ``transaction.atomic``.
    """
    try:
        return Battery.objects.select_for_update().get(id=battery_id)
    except (Battery.DoesNotExist, ValidationError, ValueError):
        raise BatteryNotFoundError(f"Battery {battery_id} not found")
