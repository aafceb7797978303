"""Database models for portal users."""

from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models

from .constants import ROLE_CHOICES, UserRole


class User(AbstractUser):
    """Citizen or administrator account on the portal.

    ``role`` is the raw stored value. The administrator capability tier is
    derived from it by :func:`apps.users.roles.get_admin_level` and is never
    persisted.
    """

    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(
        max_length=32,
        choices=ROLE_CHOICES,
        default=UserRole.USER.value,
        db_index=True,
    )
    national_id = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    photo_url = models.CharField(max_length=500, blank=True, null=True)

    class Meta(AbstractUser.Meta):
        swappable = "AUTH_USER_MODEL"
        db_table = "users"

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return self.name or self.get_full_name() or self.get_username()

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.get_username()
