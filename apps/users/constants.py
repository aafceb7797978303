"""Constants and role mappings for portal users and administrators."""

from enum import Enum
from typing import Dict, FrozenSet


class UserRole(str, Enum):
    """Raw role values stored on the portal user record."""

    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    APPROVING_ADMIN = "approving_admin"
    VETTING_ADMIN = "vetting_admin"


class AdminLevel(str, Enum):
    """Capability tiers derived for administrators."""

    SUPER_ADMIN = "super_admin"
    APPROVING_ADMIN = "approving_admin"
    VETTING_ADMIN = "vetting_admin"
    ADMIN = "admin"


ADMIN_ROLES: FrozenSet[str] = frozenset(
    {
        UserRole.ADMIN.value,
        UserRole.SUPER_ADMIN.value,
        UserRole.APPROVING_ADMIN.value,
        UserRole.VETTING_ADMIN.value,
    }
)

# Roles allowed to run destructive bulk operations.
BULK_DELETE_ROLES: FrozenSet[str] = frozenset(
    {UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value}
)

ROLE_CHOICES = [
    (UserRole.USER.value, "Citizen"),
    (UserRole.ADMIN.value, "Administrator"),
    (UserRole.SUPER_ADMIN.value, "Super Administrator"),
    (UserRole.APPROVING_ADMIN.value, "Approving Administrator"),
    (UserRole.VETTING_ADMIN.value, "Vetting Administrator"),
]

# Legacy accounts created before the role column accepted admin tiers carry a
# marker inside ``national_id`` (substring) or ``photo_url`` (exact value).
# Checked in order; the first match wins.
LEGACY_LEVEL_MARKERS = (
    (AdminLevel.SUPER_ADMIN, "SUPER-ADMIN", "super_admin"),
    (AdminLevel.APPROVING_ADMIN, "APPROVE-ADMIN", "approving_admin"),
    (AdminLevel.VETTING_ADMIN, "VET-ADMIN", "vetting_admin"),
)

ADMIN_LEVEL_NAMES: Dict[AdminLevel, str] = {
    AdminLevel.SUPER_ADMIN: "Super Administrator",
    AdminLevel.APPROVING_ADMIN: "Approving Administrator",
    AdminLevel.VETTING_ADMIN: "Vetting Administrator",
    AdminLevel.ADMIN: "Administrator",
}

ADMIN_LEVEL_DESCRIPTIONS: Dict[AdminLevel, str] = {
    AdminLevel.SUPER_ADMIN: "Full access to all admin functions including user management",
    AdminLevel.APPROVING_ADMIN: "Can approve or reject applications after document verification",
    AdminLevel.VETTING_ADMIN: "Can verify documents and prepare applications for approval",
    AdminLevel.ADMIN: "Basic administrative access",
}
