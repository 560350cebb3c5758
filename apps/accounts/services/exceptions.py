"""Domain exceptions for the authorization guard."""

from apps.core.exceptions import ForbiddenError


class InvalidCallerError(ForbiddenError):
    """Raised when a token cannot be resolved to an active user."""
    code = 'invalid_caller'


class RoleRequiredError(ForbiddenError):
    """Raised when the caller's role is too weak for the operation."""
    code = 'role_required'


class NotOwnerError(ForbiddenError):
    """Raised when a customer touches another user's record."""
    code = 'not_owner'
