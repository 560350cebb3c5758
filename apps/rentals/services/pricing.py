"""
Rate policy.

Pure functions: no I/O, no clock reads unless a caller asks for an estimate
"as of now". Settlement and client-side previews call the same code so they
always agree on the figure.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Tuple

from django.utils import timezone

from .exceptions import InvalidRentalPeriodError

ONE_HOUR = timedelta(hours=1)


def billable_hours(rental_date: datetime, return_date: datetime) -> int:
    """
    Whole hours to charge for a rental period.

    Elapsed time is rounded up to the next hour and never less than one:
    a 10-minute rental bills 1 hour, 90 minutes bills 2, exactly 2 hours
    bills 2.

    Raises:
        InvalidRentalPeriodError: If return_date precedes rental_date
    """
    elapsed = return_date - rental_date
    if elapsed < timedelta(0):
        raise InvalidRentalPeriodError("Return date cannot be before rental date")

    hours, remainder = divmod(elapsed, ONE_HOUR)
    if remainder:
        hours += 1
    return max(1, hours)


def compute_cost(rental_date: datetime, return_date: datetime, hourly_rate) -> Decimal:
    """Cost of a rental period: billable hours times the hourly rate."""
    return billable_hours(rental_date, return_date) * Decimal(hourly_rate)


def estimate_cost(rental, at: Optional[datetime] = None) -> Tuple[int, Decimal]:
    """
    Return ``(hours, cost)`` for a rental.

    Active rentals are priced as if returned at ``at`` (default: now).
    Finished rentals report what was billed; cancelled ones cost nothing.
    """
    if rental.return_date is not None and rental.total_cost is not None:
        return billable_hours(rental.rental_date, rental.return_date), rental.total_cost

    if not rental.is_active:
        return 0, Decimal('0.00')

    at = at or timezone.now()
    hours = billable_hours(rental.rental_date, at)
    return hours, hours * rental.hourly_rate
