"""
Read-side rental lookups, scoped by the caller's role.
"""

from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from apps.accounts.services import Caller, can_view_owned
from apps.rentals.models import Rental, RentalStatus

from .exceptions import RentalNotFoundError, RentalAccessDeniedError


def find_active_rental_for_battery(battery_id: UUID) -> Optional[Rental]:
    """Return the active rental holding ``battery_id``, or None."""
    return (
        Rental.objects
        .filter(battery_id=battery_id, status=RentalStatus.ACTIVE)
        .first()
    )


def find_active_rental_for_user(user_id: UUID) -> Optional[Rental]:
    return (
        Rental.objects
        .filter(user_id=user_id, status=RentalStatus.ACTIVE)
        .first()
    )


def get_rental(*, rental_id: UUID, caller: Caller) -> Rental:
    """
    Fetch a rental the caller is allowed to see.

    Raises:
        RentalNotFoundError: If the rental doesn't exist
        RentalAccessDeniedError: If a customer asks for someone else's rental
    """
    try:
        rental = (
            Rental.objects
            .select_related('user', 'battery', 'pickup_station', 'return_station')
            .get(id=rental_id)
        )
    except (Rental.DoesNotExist, ValidationError, ValueError):
        raise RentalNotFoundError(f"Rental {rental_id} not found")

    if not can_view_owned(caller, rental.user_id):
        raise RentalAccessDeniedError()

    return rental


def list_rentals(
    *,
    caller: Caller,
    status: Optional[str] = None,
    user_id: Optional[UUID] = None
) -> QuerySet[Rental]:
    """
    Rentals visible to the caller, newest first.

    Customers always get their own rentals; ``user_id`` only narrows the
    list for managers and admins.
    """
    queryset = Rental.objects.select_related(
        'user', 'battery', 'pickup_station', 'return_station'
    )

    if not caller.is_admin_or_manager:
        queryset = queryset.filter(user_id=caller.user_id)
    elif user_id:
        queryset = queryset.filter(user_id=user_id)

    if status:
        queryset = queryset.filter(status=status)

    return queryset.order_by('-created_at')
