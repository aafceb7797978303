"""Admin workflow over service applications.

Every operation returns a :class:`WorkflowResult` instead of raising. Guards
run first; the row update and its :class:`ApplicationAction` history entry are
written in one transaction; the decision notification is queued afterwards and
a failure to queue it never undoes the status change.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.applications import store
from apps.applications.constants import ApplicationStatus
from apps.applications.exceptions import ApplicationConflict, ApplicationNotFound, StoreError
from apps.applications.models import Application
from apps.applications.reference import generate_reference_number
from apps.users import roles

from .models import ApplicationAction
from .serializers import VettingDataSerializer
from .tasks import send_decision_email_task

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_DAYS = 730


@dataclass
class WorkflowResult:
    success: bool
    data: Optional[Application] = None
    error: Optional[str] = None
    reference_number: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "WorkflowResult":
        return cls(success=False, error=error)


class WorkflowDenied(Exception):
    """A guard refused the action; the message is shown to the caller."""


def _actor_id(actor) -> str:
    return str(getattr(actor, "pk", None) or actor)


def _actor_display_name(actor) -> Optional[str]:
    full_name = getattr(actor, "display_name", None)
    return full_name or getattr(actor, "username", None)


def _load(application_id: Any, service_name: Optional[str]) -> Application:
    try:
        application = store.get_application_by_id(application_id)
    except ApplicationNotFound as exc:
        raise WorkflowDenied("Application not found") from exc

    if service_name and application.service_name != service_name:
        raise WorkflowDenied(f"Not a {service_name} application")
    return application


def _commit(
    application: Application,
    actor,
    action: str,
    *,
    notes: str = "",
    **patch: Any,
) -> Application:
    try:
        with transaction.atomic():
            updated = store.update_application(
                application.pk, expected_status=(application.status,), **patch
            )
            ApplicationAction.objects.create(
                application=updated,
                actor=actor if getattr(actor, "pk", None) else None,
                action=action,
                notes=notes,
            )
    except ApplicationConflict as exc:
        raise WorkflowDenied(
            "Application status changed while this request was being processed"
        ) from exc
    return updated


def _notify(application: Application, action: str) -> None:
    try:
        send_decision_email_task.delay(str(application.pk), action)
    except Exception:
        logger.exception(
            "Failed to queue %s notification for application %s",
            action,
            application.pk,
            extra={"context": {"action": "decision.notify_failed", "application_id": str(application.pk)}},
        )


def _log_action(application: Application, actor, action: str, **context: Any) -> None:
    logger.info(
        "Application %s %s by %s",
        application.pk,
        action,
        _actor_display_name(actor),
        extra={
            "user": actor if getattr(actor, "pk", None) else None,
            "context": {
                "action": f"decision.{action}",
                "application_id": str(application.pk),
                "service_name": application.service_name,
                **context,
            },
        },
    )


def _run(
    operation: Callable[[], WorkflowResult],
    *,
    store_error: str,
    unexpected_error: str,
    application_id: Any,
) -> WorkflowResult:
    try:
        return operation()
    except WorkflowDenied as exc:
        return WorkflowResult.failure(str(exc))
    except StoreError:
        logger.exception(
            "%s for application %s",
            store_error,
            application_id,
            extra={"context": {"action": "decision.store_error", "application_id": str(application_id)}},
        )
        return WorkflowResult.failure(store_error)
    except Exception:
        logger.exception(
            "Unexpected workflow failure for application %s",
            application_id,
            extra={"context": {"action": "decision.unexpected_error", "application_id": str(application_id)}},
        )
        return WorkflowResult.failure(unexpected_error)


def vet_application(
    application_id: Any,
    vetting_data: Mapping[str, Any],
    admin,
    *,
    service_name: Optional[str] = None,
) -> WorkflowResult:
    """Record the vetting review and move a pending application in progress."""

    def operation() -> WorkflowResult:
        application = _load(application_id, service_name)

        if not roles.can_vet(admin):
            raise WorkflowDenied("Unauthorized: Vetting permissions required")
        if not roles.can_perform_action(admin, application, "vet"):
            raise WorkflowDenied(
                f"Application cannot be vetted while its status is {application.status}"
            )

        serializer = VettingDataSerializer(data=dict(vetting_data or {}))
        if not serializer.is_valid():
            field, messages = next(iter(serializer.errors.items()))
            raise WorkflowDenied(f"Invalid vetting data: {field}: {messages[0]}")

        vetted_at = timezone.now().isoformat()
        vetting_info = {
            **serializer.validated_data,
            "vettedBy": _actor_id(admin),
            "vettedAt": vetted_at,
            "adminName": _actor_display_name(admin),
            "adminRole": getattr(admin, "role", None),
        }
        data = dict(application.application_data or {})
        data["vettingInfo"] = vetting_info
        data["processingStatus"] = {
            "stage": "vetted",
            "vettedAt": vetted_at,
            "vettedBy": vetting_info["vettedBy"],
            "nextAction": vetting_info["recommendedAction"],
        }

        updated = _commit(
            application,
            admin,
            ApplicationAction.VETTED,
            notes=vetting_info.get("vettingNotes", ""),
            status=ApplicationStatus.IN_PROGRESS,
            application_data=data,
        )
        _log_action(updated, admin, "vetted", recommended=vetting_info["recommendedAction"])
        return WorkflowResult(success=True, data=updated)

    return _run(
        operation,
        store_error="Failed to update vetting information",
        unexpected_error="An unexpected error occurred during vetting",
        application_id=application_id,
    )


def approve_application(
    application_id: Any,
    admin,
    admin_note: str = "",
    *,
    service_name: Optional[str] = None,
) -> WorkflowResult:
    """Approve a vetted application and issue its reference number."""

    def operation() -> WorkflowResult:
        application = _load(application_id, service_name)

        if not roles.can_approve(admin, application):
            raise WorkflowDenied("Unauthorized: Approval permissions required")
        if not roles.can_perform_action(admin, application, "approve"):
            raise WorkflowDenied(
                f"Application cannot be approved while its status is {application.status}"
            )
        if application.status != ApplicationStatus.IN_PROGRESS:
            raise WorkflowDenied("Application must be vetted and recommended for approval first")

        data = dict(application.application_data or {})
        vetting_info = data.get("vettingInfo") or {}
        if vetting_info.get("recommendedAction") != "approve":
            raise WorkflowDenied("Application must be vetted and recommended for approval first")

        now = timezone.now()
        validity = getattr(settings, "SEVIS_REFERENCE_VALIDITY_DAYS", DEFAULT_VALIDITY_DAYS)
        reference_number = generate_reference_number(application.service_name, now=now)
        approved_by = _actor_id(admin)

        data["approvalInfo"] = {
            "approvedAt": now.isoformat(),
            "approvedBy": approved_by,
            "referenceNumber": reference_number,
            "adminNote": admin_note or "",
            "passStatus": "approved",
            "validFrom": now.isoformat(),
            "validUntil": (now + timedelta(days=validity)).isoformat(),
        }
        data["processingStatus"] = {
            **(data.get("processingStatus") or {}),
            "stage": "approved",
            "approvedAt": now.isoformat(),
            "approvedBy": approved_by,
        }

        updated = _commit(
            application,
            admin,
            ApplicationAction.APPROVED,
            notes=admin_note or "",
            status=ApplicationStatus.COMPLETED,
            reference_number=reference_number,
            application_data=data,
        )
        _log_action(updated, admin, "approved", reference_number=reference_number)
        _notify(updated, ApplicationAction.APPROVED)
        return WorkflowResult(success=True, data=updated, reference_number=reference_number)

    return _run(
        operation,
        store_error="Failed to approve application",
        unexpected_error="An unexpected error occurred during approval",
        application_id=application_id,
    )


def reject_application(
    application_id: Any,
    admin,
    reason: str,
    *,
    service_name: Optional[str] = None,
) -> WorkflowResult:
    """Reject an open application; the citizen may submit a new one."""

    def operation() -> WorkflowResult:
        application = _load(application_id, service_name)

        if not roles.can_approve(admin, application):
            raise WorkflowDenied("Unauthorized: Approval permissions required")
        if not roles.can_perform_action(admin, application, "reject"):
            raise WorkflowDenied(
                f"Application cannot be rejected while its status is {application.status}"
            )
        if not (reason or "").strip():
            raise WorkflowDenied("A rejection reason is required")

        now = timezone.now().isoformat()
        rejected_by = _actor_id(admin)
        data = dict(application.application_data or {})
        data["rejectionInfo"] = {
            "rejectedAt": now,
            "rejectedBy": rejected_by,
            "reason": reason,
            "canReapply": True,
        }
        data["processingStatus"] = {
            **(data.get("processingStatus") or {}),
            "stage": "rejected",
            "rejectedAt": now,
            "rejectedBy": rejected_by,
        }

        updated = _commit(
            application,
            admin,
            ApplicationAction.REJECTED,
            notes=reason,
            status=ApplicationStatus.REJECTED,
            application_data=data,
        )
        _log_action(updated, admin, "rejected")
        _notify(updated, ApplicationAction.REJECTED)
        return WorkflowResult(success=True, data=updated)

    return _run(
        operation,
        store_error="Failed to reject application",
        unexpected_error="An unexpected error occurred during rejection",
        application_id=application_id,
    )


def request_more_info(
    application_id: Any,
    admin,
    details: str,
    *,
    service_name: Optional[str] = None,
) -> WorkflowResult:
    """Ask the citizen for more information on an in-progress application."""

    def operation() -> WorkflowResult:
        application = _load(application_id, service_name)

        if not (roles.can_vet(admin) or roles.can_approve(admin, application)):
            raise WorkflowDenied("Unauthorized: Admin access required")
        if application.status != ApplicationStatus.IN_PROGRESS:
            raise WorkflowDenied(
                "More information can only be requested for applications in progress"
            )
        if not (details or "").strip():
            raise WorkflowDenied("Request details are required")

        now = timezone.now().isoformat()
        requested_by = _actor_id(admin)
        data = dict(application.application_data or {})
        data["infoRequestInfo"] = {
            "requestedAt": now,
            "requestedBy": requested_by,
            "details": details,
            "status": "pending_response",
        }
        data["processingStatus"] = {
            **(data.get("processingStatus") or {}),
            "stage": "awaiting_info",
            "infoRequestedAt": now,
            "infoRequestedBy": requested_by,
        }

        updated = _commit(
            application,
            admin,
            ApplicationAction.INFO_REQUESTED,
            notes=details,
            status=ApplicationStatus.IN_PROGRESS,
            application_data=data,
        )
        _log_action(updated, admin, "info_requested")
        _notify(updated, ApplicationAction.INFO_REQUESTED)
        return WorkflowResult(success=True, data=updated)

    return _run(
        operation,
        store_error="Failed to request more information",
        unexpected_error="An unexpected error occurred",
        application_id=application_id,
    )


VERIFICATION_KEYS = tuple(
    verification_key for _doc, verification_key, _label in roles.DOCUMENT_VERIFICATION_FIELDS
)


def verify_documents(
    application_id: Any,
    admin,
    verifications: Mapping[str, Any],
    *,
    complete: bool = False,
) -> WorkflowResult:
    """Merge document verification flags and optionally mark vetting complete.

    The application status is left untouched.
    """

    def operation() -> WorkflowResult:
        application = _load(application_id, None)

        if not roles.can_vet(admin):
            raise WorkflowDenied("Insufficient permissions: Admin access required")

        data = dict(application.application_data or {})
        merged = dict(data.get("documentVerifications") or {})
        for key in VERIFICATION_KEYS:
            if key in verifications:
                merged[key] = bool(verifications[key])
        now = timezone.now().isoformat()
        merged["verified_by"] = _actor_id(admin)
        merged["verified_at"] = now
        data["documentVerifications"] = merged

        if complete:
            data["vetting"] = {
                **(data.get("vetting") or {}),
                "completed": True,
                "vetted_by": _actor_id(admin),
                "completed_at": now,
            }

        updated = _commit(
            application,
            admin,
            ApplicationAction.DOCUMENTS_VERIFIED,
            notes="Vetting completed" if complete else "",
            application_data=data,
        )
        _log_action(updated, admin, "documents_verified", complete=complete)
        return WorkflowResult(success=True, data=updated)

    return _run(
        operation,
        store_error="Failed to update document verification",
        unexpected_error="An unexpected error occurred",
        application_id=application_id,
    )


def describe_workflow(application: Application, admin) -> dict[str, Any]:
    """Return the workflow summary shown on the admin dashboard."""

    level = roles.get_admin_level(admin)
    return {
        "applicationId": str(application.pk),
        "status": application.status,
        "stage": application.processing_stage,
        "adminLevel": level.value,
        "adminLevelName": roles.get_admin_level_name(level),
        "hasBeenVetted": roles.has_been_vetted(application),
        "unverifiedDocuments": roles.get_unverified_documents(application),
        "readyForVettingCompletion": roles.is_ready_for_vetting_completion(application),
        "statusMessage": roles.get_workflow_status_message(application, level),
        "allowedActions": roles.allowed_actions(admin, application),
        "history": [
            {
                "action": entry.action,
                "actor": entry.actor_id,
                "notes": entry.notes,
                "createdAt": entry.created_at.isoformat(),
            }
            for entry in application.actions.all()
        ],
    }
