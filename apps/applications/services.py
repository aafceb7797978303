"""Service layer helpers for citizen submissions and bulk clean-up."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from django.utils import timezone

from . import store
from .constants import DELETE_SCOPES, WORKFLOW_DATA_KEYS
from .exceptions import StoreError
from .limits import LimitResult, check_service_specific_limits, summarise_counts
from .models import Application

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    application: Optional[Application] = None
    limit: Optional[LimitResult] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.application is not None


def submit_application(
    user_id: Any,
    service_name: str,
    application_data: Optional[Mapping[str, Any]] = None,
) -> SubmissionResult:
    """Check eligibility and persist a new pending application.

    Sections of ``application_data`` owned by the admin workflow are dropped.
    """

    limit = check_service_specific_limits(user_id, service_name, application_data)
    if not limit.can_apply:
        return SubmissionResult(limit=limit)

    payload = {
        key: value
        for key, value in (application_data or {}).items()
        if key not in WORKFLOW_DATA_KEYS
    }
    payload["processingStatus"] = {
        "stage": "submitted",
        "submittedAt": timezone.now().isoformat(),
    }

    try:
        application = store.create_application(
            user_id=user_id,
            service_name=service_name,
            application_data=payload,
        )
    except StoreError as exc:
        logger.exception(
            "Failed to create %s application for user %s",
            service_name,
            user_id,
            extra={"context": {"action": "application.create_failed", "service_name": service_name}},
        )
        return SubmissionResult(limit=limit, error=str(exc))

    logger.info(
        "Application %s submitted for %s",
        application.pk,
        service_name,
        extra={
            "user_id": application.user_id,
            "context": {
                "action": "application.submitted",
                "application_id": str(application.pk),
                "service_name": service_name,
            },
        },
    )
    return SubmissionResult(application=application, limit=limit)


def select_for_scope(
    scope: str,
    *,
    user_id: Any = None,
    service_name: Optional[str] = None,
) -> list[Application]:
    """Return the applications a bulk operation over ``scope`` targets."""

    if scope not in DELETE_SCOPES:
        raise ValueError('Invalid deleteScope. Must be "user", "all", or "service"')

    if scope == "user":
        if not user_id:
            return []
        return store.get_user_applications(user_id)
    if scope == "service":
        if not service_name:
            return []
        return store.filter_applications(store.get_all_applications(), service_name=service_name)
    return store.get_all_applications()


def _describe(application: Application, *, include_user: bool) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "id": str(application.pk),
        "reference_number": application.reference_number or "N/A",
        "service_name": application.service_name,
    }
    if include_user:
        entry["user_id"] = application.user_id
    return entry


def preview_bulk_delete(
    scope: str,
    *,
    user_id: Any = None,
    service_name: Optional[str] = None,
) -> Dict[str, Any]:
    applications = select_for_scope(scope, user_id=user_id, service_name=service_name)
    summaries = [
        {
            "id": str(app.pk),
            "reference_number": app.reference_number,
            "service_name": app.service_name,
            "status": app.status,
            "user_id": app.user_id,
            "created_at": app.created_at.isoformat() if app.created_at else None,
        }
        for app in applications
    ]
    return {
        "deleteScope": scope,
        "applicationsToDelete": len(summaries),
        "summary": summarise_counts(summaries),
        "applications": summaries,
    }


@dataclass
class BulkDeleteSummary:
    scope: str
    deleted_count: int = 0
    error_count: int = 0
    details: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total_attempted(self) -> int:
        return self.deleted_count + self.error_count

    @property
    def all_failed(self) -> bool:
        return self.error_count > 0 and self.deleted_count == 0

    @property
    def message(self) -> str:
        if not self.deleted_count:
            return "No applications found to delete"
        message = f"Successfully deleted {self.deleted_count} application(s)"
        if self.error_count:
            message += f" ({self.error_count} failed)"
        return message

    def as_dict(self) -> Dict[str, Any]:
        return {
            "deleteScope": self.scope,
            "totalAttempted": self.total_attempted,
            "deletedCount": self.deleted_count,
            "errorCount": self.error_count,
            "details": self.details,
        }


def bulk_delete(
    scope: str,
    *,
    user_id: Any = None,
    service_name: Optional[str] = None,
    actor=None,
) -> BulkDeleteSummary:
    """Delete every application in ``scope`` one row at a time.

    Each row is deleted independently; failures are counted and reported in
    ``details`` without stopping the run.
    """

    applications = select_for_scope(scope, user_id=user_id, service_name=service_name)
    summary = BulkDeleteSummary(scope=scope)
    include_user = scope != "user"

    for application in applications:
        entry = _describe(application, include_user=include_user)
        try:
            store.delete_application(application.pk, application.user_id)
        except StoreError as exc:
            summary.error_count += 1
            entry.update(success=False, error=str(exc))
            logger.warning(
                "Failed to delete application %s",
                application.pk,
                extra={"context": {"action": "bulk_delete.failed", "application_id": str(application.pk)}},
            )
        else:
            summary.deleted_count += 1
            entry["success"] = True
        summary.details.append(entry)

    logger.info(
        "Bulk delete over scope %s removed %s application(s)",
        scope,
        summary.deleted_count,
        extra={
            "user": actor,
            "context": {
                "action": "bulk_delete.completed",
                "scope": scope,
                "target_user_id": user_id,
                "service_name": service_name,
                "deleted": summary.deleted_count,
                "errors": summary.error_count,
            },
        },
    )
    return summary
