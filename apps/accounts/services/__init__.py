"""
Accounts app services layer.

Holds the authorization guard used by the rental and settlement services.
"""

from .exceptions import (
    InvalidCallerError,
    RoleRequiredError,
    NotOwnerError,
)

from .authorization import (
    Caller,
    resolve_caller,
    can_view_owned,
    ensure_owner_or_staff,
    ensure_admin_or_manager,
    ensure_admin,
)


__all__ = [
    # Exceptions
    'InvalidCallerError',
    'RoleRequiredError',
    'NotOwnerError',

    # Authorization guard
    'Caller',
    'resolve_caller',
    'can_view_owned',
    'ensure_owner_or_staff',
    'ensure_admin_or_manager',
    'ensure_admin',
]
