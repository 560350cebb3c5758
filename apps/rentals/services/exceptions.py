"""
Domain-specific exceptions for the rentals app.

These represent business rule violations and are caught in views and
converted to HTTP responses through their category in apps.core.exceptions.
"""

from apps.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)


class RentalNotFoundError(NotFoundError):
    """Raised when a rental does not exist."""
    default_message = 'Rental not found.'
    code = 'rental_not_found'


class BatteryUnavailableError(ConflictError):
    """Raised when the requested battery is not available for rent."""
    default_message = 'Battery not available.'
    code = 'battery_unavailable'


class UserHasActiveRentalError(ConflictError):
    """Raised when the renter already holds an active rental."""
    default_message = 'You already have an active rental.'
    code = 'user_has_active_rental'


class RentalNotActiveError(ConflictError):
    """Raised when returning or cancelling a rental that already ended."""
    default_message = 'Rental is not active.'
    code = 'rental_not_active'


class RentalAccessDeniedError(ForbiddenError):
    """Raised when a customer touches another user's rental."""
    default_message = 'Access denied.'
    code = 'rental_access_denied'


class InvalidRentalPeriodError(ValidationFailedError):
    """Raised when a return timestamp precedes the pickup."""
    code = 'invalid_rental_period'


class RenterNotFoundError(NotFoundError):
    """Raised when the renter's account does not exist."""
    default_message = 'User not found.'
    code = 'user_not_found'
