"""Helpers for working with user roles and acting administrators."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Union

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

from .constants import UserRole


RoleLike = Union[UserRole, str]


class AdminLookupError(Exception):
    """Raised when the acting administrator cannot be resolved or authorised."""

    def __init__(self, message: str, *, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _normalise_role(role: RoleLike) -> UserRole:
    if isinstance(role, UserRole):
        return role

    if isinstance(role, str):
        try:
            return UserRole(role)
        except ValueError:
            try:
                return UserRole(role.lower())
            except ValueError as exc:  # pragma: no cover - defensive branch
                raise KeyError(f"Unknown role: {role}") from exc

    raise TypeError(f"Role must be a UserRole or string, got {type(role)!r}")


def user_has_role(user, role: RoleLike) -> bool:
    """Return ``True`` if the stored role of ``user`` equals ``role``."""

    if user is None or not getattr(user, "is_authenticated", True):
        return False

    return getattr(user, "role", None) == _normalise_role(role).value


def user_has_any_role(user, roles: Iterable[RoleLike]) -> bool:
    """Return ``True`` if the user matches any of the provided roles."""

    return any(user_has_role(user, role) for role in roles)


def get_user_by_id(user_id: Any):
    """Return the user identified by ``user_id`` or ``None``."""

    if user_id in (None, ""):
        return None

    UserModel = get_user_model()
    try:
        return UserModel._default_manager.filter(pk=user_id).first()
    except (TypeError, ValueError, ValidationError):
        return None


def resolve_admin(
    admin_id: Any,
    *,
    request=None,
    check: Callable[[Any], bool],
    denied_message: str = "Unauthorized: Admin access required",
):
    """Return the acting administrator for a request.

    ``admin_id`` names the acting account explicitly; when it is omitted the
    authenticated request user acts. ``check`` decides whether the account is
    allowed to perform the operation.
    """

    if admin_id not in (None, ""):
        admin_user: Optional[Any] = get_user_by_id(admin_id)
        if admin_user is None:
            raise AdminLookupError("Admin user not found", status_code=404)
    else:
        admin_user = getattr(request, "user", None)
        if admin_user is None or not getattr(admin_user, "is_authenticated", False):
            raise AdminLookupError("Admin ID is required", status_code=400)

    if not check(admin_user):
        raise AdminLookupError(denied_message, status_code=403)

    return admin_user


__all__ = [
    "AdminLookupError",
    "get_user_by_id",
    "resolve_admin",
    "user_has_any_role",
    "user_has_role",
]
