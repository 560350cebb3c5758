"""
Rentals app services layer.

The rate policy, the rental state machine and role-scoped rental queries.
All state-changing operations run in one transaction under row locks.
"""

from .exceptions import (
    RentalNotFoundError,
    BatteryUnavailableError,
    UserHasActiveRentalError,
    RentalNotActiveError,
    RentalAccessDeniedError,
    InvalidRentalPeriodError,
    RenterNotFoundError,
)

from .pricing import (
    billable_hours,
    compute_cost,
    estimate_cost,
)

from .lifecycle import (
    create_rental,
    return_rental,
    cancel_rental,
)

from .queries import (
    find_active_rental_for_battery,
    find_active_rental_for_user,
    get_rental,
    list_rentals,
)


__all__ = [
    # Exceptions
    'RentalNotFoundError',
    'BatteryUnavailableError',
    'UserHasActiveRentalError',
    'RentalNotActiveError',
    'RentalAccessDeniedError',
    'InvalidRentalPeriodError',
    'RenterNotFoundError',

    # Rate policy
    'billable_hours',
    'compute_cost',
    'estimate_cost',

    # State machine
    'create_rental',
    'return_rental',
    'cancel_rental',

    # Queries
    'find_active_rental_for_battery',
    'find_active_rental_for_user',
    'get_rental',
    'list_rentals',
]
