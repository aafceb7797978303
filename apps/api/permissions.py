"""DRF permission classes aligned with the portal's admin role model."""

from __future__ import annotations

from typing import Any, Callable

from rest_framework.permissions import BasePermission

from apps.users import roles


class _CapabilityPermission(BasePermission):
    """Base class delegating permission checks to a role-resolver predicate."""

    message = "Unauthorized: Admin access required"
    predicate: Callable[[Any], bool]

    def has_permission(self, request, view):  # type: ignore[override]
        user = request.user
        if not getattr(user, "is_authenticated", False):
            return False
        return type(self).predicate(user)


class IsPortalAdmin(_CapabilityPermission):
    """Allow any of the four administrator roles."""

    predicate = staticmethod(roles.is_admin)
