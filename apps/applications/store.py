"""Persistence primitives for service applications.

All callers go through these functions rather than the ORM so that database
failures surface uniformly as :class:`StoreError`.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from .exceptions import ApplicationConflict, ApplicationNotFound, StoreError
from .models import Application

UPDATABLE_FIELDS = ("status", "reference_number", "application_data")


def _base_queryset():
    return Application.objects.select_related("user")


def get_all_applications() -> list[Application]:
    """Return every application, newest submission first."""

    try:
        return list(_base_queryset().order_by("-submitted_at"))
    except DatabaseError as exc:
        raise StoreError(f"Database error: {exc}") from exc


def get_user_applications(user_id: Any) -> list[Application]:
    """Return the applications owned by ``user_id``, newest first."""

    try:
        return list(_base_queryset().filter(user_id=user_id).order_by("-submitted_at"))
    except (DatabaseError, ValueError, ValidationError) as exc:
        raise StoreError(f"Database error: {exc}") from exc


def get_application_by_id(application_id: Any) -> Application:
    try:
        return _base_queryset().get(pk=application_id)
    except (Application.DoesNotExist, ValueError, ValidationError) as exc:
        raise ApplicationNotFound(application_id) from exc
    except DatabaseError as exc:
        raise StoreError(f"Database error: {exc}") from exc


def create_application(
    *,
    user_id: Any,
    service_name: str,
    application_data: Optional[dict] = None,
    reference_number: Optional[str] = None,
) -> Application:
    try:
        return Application.objects.create(
            user_id=user_id,
            service_name=service_name,
            application_data=application_data or {},
            reference_number=reference_number,
        )
    except DatabaseError as exc:
        raise StoreError(f"Database error: {exc}") from exc


def update_application(
    application_id: Any,
    *,
    expected_status: Optional[Iterable[str]] = None,
    **patch: Any,
) -> Application:
    """Apply a partial row update and return the refreshed application.

    Only ``status``, ``reference_number`` and ``application_data`` may be
    patched; ``updated_at`` is always stamped. ``application_data`` replaces
    the stored document wholesale. When ``expected_status`` is given the row
    is only written if its current status is one of those values, otherwise
    :class:`ApplicationConflict` is raised.
    """

    unknown = set(patch) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported application fields: {', '.join(sorted(unknown))}")

    values = dict(patch)
    values["updated_at"] = timezone.now()

    try:
        rows = Application.objects.filter(pk=application_id)
        if expected_status is not None:
            expected_status = tuple(expected_status)
            updated = rows.filter(status__in=expected_status).update(**values)
        else:
            updated = rows.update(**values)
        exists = bool(updated) or rows.exists()
    except (DatabaseError, ValidationError) as exc:
        raise StoreError(f"Database error: {exc}") from exc
    if not exists:
        raise ApplicationNotFound(application_id)
    if not updated:
        raise ApplicationConflict(application_id, expected_status)
    return get_application_by_id(application_id)


def delete_application(application_id: Any, user_id: Any) -> int:
    """Delete ``application_id`` when it belongs to ``user_id``."""

    try:
        deleted, _ = Application.objects.filter(pk=application_id, user_id=user_id).delete()
    except DatabaseError as exc:
        raise StoreError(f"Database error: {exc}") from exc
    if not deleted:
        raise ApplicationNotFound(application_id)
    return deleted


def filter_applications(
    applications: Iterable[Application],
    *,
    user_id: Any = None,
    service_name: Optional[str] = None,
) -> list[Application]:
    """Filter an in-memory application list, preserving store order."""

    matches = []
    for application in applications:
        if user_id is not None and str(application.user_id) != str(user_id):
            continue
        if service_name is not None and application.service_name != service_name:
            continue
        matches.append(application)
    return matches
