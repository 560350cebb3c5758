"""
Role-based permission classes shared by the rental and payment APIs.

These mirror the checks in apps.accounts.services.authorization so the HTTP
layer can reject a request before a service call is made.
"""
from rest_framework.permissions import BasePermission


class IsAdminOrManager(BasePermission):
    """Allow admins and station managers only."""

    message = 'Admin or station manager privileges required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin_or_manager)


class IsAdminRole(BasePermission):
    """Allow admins only."""

    message = 'Admin privileges required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_admin)

