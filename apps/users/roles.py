"""Admin level resolution and capability checks.

Every helper accepts either a :class:`~apps.users.models.User` instance or a
plain mapping (for example a decoded JSON payload), so the same rules apply to
ORM rows and API input alike. Admin levels are recomputed on every call.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .constants import (
    ADMIN_LEVEL_DESCRIPTIONS,
    ADMIN_LEVEL_NAMES,
    ADMIN_ROLES,
    LEGACY_LEVEL_MARKERS,
    AdminLevel,
)

WORKFLOW_ACTIONS = ("vet", "approve", "reject")

DOCUMENT_VERIFICATION_FIELDS = (
    ("nationalIdDoc", "national_id_verified", "National ID Document"),
    ("addressProof", "address_proof_verified", "Proof of Address"),
    ("categorySpecificDoc", "category_doc_verified", "Category-Specific Documents"),
)


def _field(subject: Any, *names: str) -> Any:
    """Return the first non-``None`` attribute or key among ``names``."""

    if subject is None:
        return None
    for name in names:
        if isinstance(subject, Mapping):
            value = subject.get(name)
        else:
            value = getattr(subject, name, None)
        if value is not None:
            return value
    return None


def _application_data(application: Any) -> Optional[Mapping[str, Any]]:
    data = _field(application, "application_data")
    return data if isinstance(data, Mapping) else None


def get_admin_level(user: Any) -> AdminLevel:
    """Return the admin level for ``user``.

    An explicit admin ``role`` always wins. Otherwise the legacy markers are
    consulted: a substring of ``national_id`` or an exact ``photo_url``.
    Anything else resolves to the base ``admin`` level.
    """

    if not user:
        return AdminLevel.ADMIN

    role = _field(user, "role")
    if role in ADMIN_ROLES:
        return AdminLevel(role)

    national_id = _field(user, "national_id", "nationalId")
    photo_url = _field(user, "photo_url", "photoUrl")

    for level, id_marker, photo_marker in LEGACY_LEVEL_MARKERS:
        if isinstance(national_id, str) and id_marker in national_id:
            return level
        if photo_url == photo_marker:
            return level

    return AdminLevel.ADMIN


def enhance_admin_user(user: Any) -> dict[str, Any]:
    """Return a dictionary view of ``user`` annotated with ``admin_level``."""

    if isinstance(user, Mapping):
        payload = dict(user)
    else:
        payload = {
            "id": getattr(user, "pk", None),
            "name": getattr(user, "display_name", None) or getattr(user, "name", ""),
            "email": getattr(user, "email", ""),
            "role": getattr(user, "role", ""),
            "national_id": getattr(user, "national_id", ""),
            "phone": getattr(user, "phone", ""),
            "photo_url": getattr(user, "photo_url", None),
        }
    payload["admin_level"] = get_admin_level(user).value
    return payload


def is_admin(user: Any) -> bool:
    """Return ``True`` when the stored role is one of the four admin roles."""

    if not user:
        return False
    return _field(user, "role") in ADMIN_ROLES


def is_super_admin(user: Any) -> bool:
    return is_admin(user) and get_admin_level(user) is AdminLevel.SUPER_ADMIN


def can_approve(user: Any, application: Any = None) -> bool:
    # Every admin tier may approve for now; levels are informational only.
    return is_admin(user)


def can_vet(user: Any) -> bool:
    # Every admin tier may vet for now; levels are informational only.
    return is_admin(user)


def can_perform_action(user: Any, application: Any, action: str) -> bool:
    """Gate a workflow ``action`` on the application's current status."""

    if not is_admin(user) or not application:
        return False

    status = _field(application, "status")

    if action == "vet":
        return status == "pending"
    if action in {"approve", "reject"}:
        return status in {"in_progress", "pending"}
    return False


def get_admin_level_name(level: AdminLevel | str) -> str:
    try:
        return ADMIN_LEVEL_NAMES[AdminLevel(level)]
    except ValueError:
        return ADMIN_LEVEL_NAMES[AdminLevel.ADMIN]


def get_admin_level_description(level: AdminLevel | str) -> str:
    try:
        return ADMIN_LEVEL_DESCRIPTIONS[AdminLevel(level)]
    except ValueError:
        return ADMIN_LEVEL_DESCRIPTIONS[AdminLevel.ADMIN]


def has_been_vetted(application: Any) -> bool:
    """Return ``True`` when vetting is marked complete and documents verified.

    This is independent of ``vettingInfo.recommendedAction`` which is what the
    approval step actually checks; the two signals may disagree.
    """

    data = _application_data(application)
    if not data:
        return False

    vetting = data.get("vetting") or {}
    if not vetting.get("completed") or not vetting.get("vetted_by"):
        return False

    documents = data.get("documents") or {}
    verifications = data.get("documentVerifications") or {}
    for document_key, verification_key, _label in DOCUMENT_VERIFICATION_FIELDS:
        if documents.get(document_key) and verifications.get(verification_key) is not True:
            return False
    return True


def get_unverified_documents(application: Any) -> list[str]:
    """Return human readable labels of declared but unverified documents."""

    data = _application_data(application)
    if not data:
        return []

    documents = data.get("documents") or {}
    verifications = data.get("documentVerifications") or {}
    return [
        label
        for document_key, verification_key, label in DOCUMENT_VERIFICATION_FIELDS
        if documents.get(document_key) and verifications.get(verification_key) is not True
    ]


def is_ready_for_vetting_completion(application: Any) -> bool:
    # Vetting admins verify documents as part of their review, so they may
    # always submit it.
    return True


def get_workflow_status_message(application: Any, level: AdminLevel | str) -> str:
    """Return the dashboard message describing the next workflow step."""

    level = AdminLevel(level) if level in {item.value for item in AdminLevel} else AdminLevel.ADMIN
    status = _field(application, "status")

    if status == "pending":
        if level in {AdminLevel.VETTING_ADMIN, AdminLevel.SUPER_ADMIN}:
            return "Ready for vetting"
        return "Awaiting vetting by vetting administrator"
    if status == "in_progress":
        if has_been_vetted(application):
            if level in {AdminLevel.APPROVING_ADMIN, AdminLevel.SUPER_ADMIN}:
                return "Vetted - Ready for approval decision"
            return "Vetted - Awaiting approval by approving administrator"
        return "Currently being vetted"
    if status == "completed":
        return "Application approved"
    if status == "rejected":
        return "Application rejected"
    return "Unknown status"


def allowed_actions(user: Any, application: Any) -> list[str]:
    """Return the workflow actions ``user`` may currently take."""

    return [
        action for action in WORKFLOW_ACTIONS if can_perform_action(user, application, action)
    ]


__all__ = [
    "allowed_actions",
    "can_approve",
    "can_perform_action",
    "can_vet",
    "enhance_admin_user",
    "get_admin_level",
    "get_admin_level_description",
    "get_admin_level_name",
    "get_unverified_documents",
    "get_workflow_status_message",
    "has_been_vetted",
    "is_admin",
    "is_ready_for_vetting_completion",
    "is_super_admin",
]
