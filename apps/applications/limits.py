"""Eligibility rules deciding whether a citizen may submit an application.

A user may hold at most one open (pending or in progress) or completed
application per service. Rejected applications never block a new submission.
The check reads and decides without locking, so two concurrent submissions can
both pass it.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from . import store
from .constants import (
    CITY_PASS,
    PUBLIC_SERVANT_PASS,
    SEVIS_PASS,
    ApplicationStatus,
)
from .exceptions import StoreError
from .models import Application

logger = logging.getLogger(__name__)

SUGGEST_CHECK_STATUS = "Check your application status in the portal"

COMPLETED_ACTIONS = [
    SUGGEST_CHECK_STATUS,
    "Contact support if you need assistance with your existing application",
]
OPEN_ACTIONS = [
    "Wait for your current application to be processed",
    SUGGEST_CHECK_STATUS,
    "Contact support if you need updates on your application",
]
DUPLICATE_PUBLIC_SERVANT_ACTIONS = [
    "Verify your Public Servant ID is correct",
    "Contact HR if you believe this is an error",
    "Contact support for assistance",
]


def summarise_application(application: Application) -> Dict[str, Any]:
    """Return the summary dictionary exposed for existing applications."""

    return {
        "id": str(application.pk),
        "service_name": application.service_name,
        "status": application.status,
        "reference_number": application.reference_number,
        "created_at": application.created_at.isoformat() if application.created_at else None,
        "application_data": application.application_data,
    }


@dataclass
class LimitResult:
    can_apply: bool
    reason: Optional[str] = None
    existing_application: Optional[Application] = None
    suggested_actions: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"canApply": self.can_apply}
        if self.reason:
            payload["reason"] = self.reason
        if self.existing_application is not None:
            payload["existingApplication"] = summarise_application(self.existing_application)
        if self.suggested_actions:
            payload["suggestedActions"] = list(self.suggested_actions)
        return payload


def _applications_for(user_id: Any, service_name: str) -> list[Application]:
    return store.filter_applications(
        store.get_all_applications(), user_id=user_id, service_name=service_name
    )


def _evaluate(applications: list[Application], service_name: str) -> LimitResult:
    if not applications:
        return LimitResult(can_apply=True)

    by_status: Dict[str, list[Application]] = {status: [] for status in ApplicationStatus.ALL}
    for application in applications:
        by_status.setdefault(application.status, []).append(application)

    completed = by_status[ApplicationStatus.COMPLETED]
    if completed:
        return LimitResult(
            can_apply=False,
            reason=f"You already have a completed {service_name} application.",
            existing_application=completed[0],
            suggested_actions=list(COMPLETED_ACTIONS),
        )

    # Pending before in progress; within a status the store order decides.
    open_applications = (
        by_status[ApplicationStatus.PENDING] + by_status[ApplicationStatus.IN_PROGRESS]
    )
    if open_applications:
        existing = open_applications[0]
        return LimitResult(
            can_apply=False,
            reason=f"You already have a {existing.status} {service_name} application.",
            existing_application=existing,
            suggested_actions=list(OPEN_ACTIONS),
        )

    rejected = by_status[ApplicationStatus.REJECTED]
    if rejected:
        return LimitResult(
            can_apply=True,
            reason="You can reapply after your previous application was rejected.",
            existing_application=rejected[0],
        )

    return LimitResult(can_apply=True)


def can_apply_for_service(user_id: Any, service_name: str) -> LimitResult:
    """Decide whether ``user_id`` may submit a new ``service_name`` application."""

    try:
        applications = _applications_for(user_id, service_name)
    except StoreError as exc:
        logger.exception(
            "Error checking application limits for user %s",
            user_id,
            extra={"context": {"action": "limits.store_error", "service_name": service_name}},
        )
        return LimitResult(can_apply=False, reason=str(exc))

    result = _evaluate(applications, service_name)
    if not result.can_apply:
        logger.info(
            "Application limit reached for user %s on %s",
            user_id,
            service_name,
            extra={
                "context": {
                    "action": "limits.denied",
                    "service_name": service_name,
                    "existing_application_id": str(result.existing_application.pk)
                    if result.existing_application is not None
                    else None,
                }
            },
        )
    return result


ServiceCheck = Callable[[Any, Optional[Mapping[str, Any]]], LimitResult]

SERVICE_CHECKS: Dict[str, ServiceCheck] = {}


def register_service_check(service_name: str) -> Callable[[ServiceCheck], ServiceCheck]:
    """Register an additional eligibility rule for ``service_name``."""

    def decorator(func: ServiceCheck) -> ServiceCheck:
        SERVICE_CHECKS[service_name] = func
        return func

    return decorator


def _public_servant_id(application_data: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not isinstance(application_data, Mapping):
        return None
    employment = application_data.get("employmentInfo")
    if not isinstance(employment, Mapping):
        return None
    return employment.get("publicServantId") or None


@register_service_check(PUBLIC_SERVANT_PASS)
def check_public_servant_pass_limits(
    user_id: Any, application_data: Optional[Mapping[str, Any]] = None
) -> LimitResult:
    """Reject a Public Servant ID already registered by a different user."""

    public_servant_id = _public_servant_id(application_data)
    if not public_servant_id:
        return LimitResult(can_apply=True)

    for application in store.get_all_applications():
        if application.service_name != PUBLIC_SERVANT_PASS:
            continue
        if str(application.user_id) == str(user_id):
            continue
        if _public_servant_id(application.application_data) == public_servant_id:
            return LimitResult(
                can_apply=False,
                reason="This Public Servant ID is already registered by another user.",
                suggested_actions=list(DUPLICATE_PUBLIC_SERVANT_ACTIONS),
            )

    return LimitResult(can_apply=True)


@register_service_check(CITY_PASS)
def check_city_pass_limits(
    user_id: Any, application_data: Optional[Mapping[str, Any]] = None
) -> LimitResult:
    return LimitResult(can_apply=True)


@register_service_check(SEVIS_PASS)
def check_sevis_pass_limits(
    user_id: Any, application_data: Optional[Mapping[str, Any]] = None
) -> LimitResult:
    return LimitResult(can_apply=True)


def check_service_specific_limits(
    user_id: Any,
    service_name: str,
    application_data: Optional[Mapping[str, Any]] = None,
) -> LimitResult:
    """Run the general rule, then any rule registered for ``service_name``."""

    general = can_apply_for_service(user_id, service_name)
    if not general.can_apply:
        return general

    check = SERVICE_CHECKS.get(service_name)
    if check is None:
        return general

    try:
        return check(user_id, application_data)
    except StoreError as exc:
        logger.exception(
            "Error running %s limits for user %s",
            service_name,
            user_id,
            extra={"context": {"action": "limits.store_error", "service_name": service_name}},
        )
        return LimitResult(can_apply=False, reason=str(exc))


def get_user_applications_for_service(user_id: Any, service_name: str) -> list[Dict[str, Any]]:
    return [summarise_application(app) for app in _applications_for(user_id, service_name)]


def get_all_user_applications(user_id: Any) -> list[Dict[str, Any]]:
    return [
        summarise_application(app)
        for app in store.filter_applications(store.get_all_applications(), user_id=user_id)
    ]


def summarise_counts(applications: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return ``{total, byService, byStatus}`` counts for summary dictionaries."""

    applications = list(applications)
    return {
        "total": len(applications),
        "byService": dict(Counter(app["service_name"] for app in applications)),
        "byStatus": dict(Counter(app["status"] for app in applications)),
    }
