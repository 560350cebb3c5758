"""
Authorization guard.

Resolves who is calling and decides which rentals and payments they may see
or change. Customers are limited to their own records; station managers and
admins operate on everyone's.
"""

from dataclasses import dataclass
from uuid import UUID

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken
from rest_framework_simplejwt.settings import api_settings

from apps.accounts.models import User, UserRole

from .exceptions import InvalidCallerError, RoleRequiredError, NotOwnerError


@dataclass(frozen=True)
class Caller:
    """Identity and role of whoever invoked an engine operation."""

    user_id: UUID
    role: str

    @classmethod
    def from_user(cls, user: User) -> 'Caller':
        return cls(user_id=user.id, role=user.role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_admin_or_manager(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.STATION_MANAGER)

    def owns(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)


def resolve_caller(token: str) -> Caller:
    """
    Decode a JWT access token into a Caller.

    Raises:
        InvalidCallerError: Token is malformed or expired, or the user is
            unknown or deactivated.
    """
    try:
        access = AccessToken(token)
    except TokenError:
        raise InvalidCallerError("Invalid or expired token")

    user_id = access.get(api_settings.USER_ID_CLAIM)
    try:
        user = User.objects.only('id', 'role', 'is_active').get(id=user_id)
    except (User.DoesNotExist, ValueError):
        raise InvalidCallerError("User not found")

    if not user.is_active:
        raise InvalidCallerError("Account has been deactivated")

    return Caller.from_user(user)


def can_view_owned(caller: Caller, owner_id) -> bool:
    """Customers see their own records; managers and admins see all."""
    return caller.is_admin_or_manager or caller.owns(owner_id)


def ensure_owner_or_staff(caller: Caller, owner_id, message="You can only access your own resources") -> None:
    if not can_view_owned(caller, owner_id):
        raise NotOwnerError(message)


def ensure_admin_or_manager(caller: Caller) -> None:
    if not caller.is_admin_or_manager:
        raise RoleRequiredError("Admin or station manager privileges required")


def ensure_admin(caller: Caller) -> None:
    if not caller.is_admin:
        raise RoleRequiredError("Admin privileges required")
