"""Helper functions for sending decision outcome emails."""

from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.mail import EmailMessage

from apps.applications.models import Application


def _default_from_email() -> str:
    return getattr(settings, "DEFAULT_FROM_EMAIL", None) or "no-reply@example.com"


def _portal_url() -> str:
    return getattr(settings, "SEVIS_PORTAL_URL", "") or ""


def send_decision_email(application: Application, action: str) -> Optional[int]:
    """
    Notify the applicant of an admin decision on ``application``.

    Parameters
    ----------
    application:
        The application whose decision is being communicated.
    action:
        The decision that was taken. Only "approved", "rejected" and
        "info_requested" trigger emails.

    Returns
    -------
    Optional[int]
        The number of successfully delivered messages, as returned by
        ``EmailMessage.send``. ``None`` is returned when the action does not
        trigger an email or the applicant has no email address.
    """

    action = action.lower()
    if action not in {"approved", "rejected", "info_requested"}:
        return None

    user = application.user
    if not user.email:
        return None

    data = application.application_data or {}
    service = application.service_name
    greeting = f"Hello {user.display_name},"

    if action == "approved":
        approval = data.get("approvalInfo") or {}
        subject = f"Your {service} application has been approved"
        body_lines = [
            greeting,
            "",
            f"We are pleased to inform you that your {service} application has been approved.",
            f"Your reference number is {application.reference_number}.",
        ]
        if approval.get("validUntil"):
            body_lines.append(f"It is valid until {approval['validUntil'][:10]}.")
    elif action == "rejected":
        rejection = data.get("rejectionInfo") or {}
        subject = f"Update on your {service} application"
        body_lines = [
            greeting,
            "",
            f"After careful review, your {service} application has been declined.",
            f"Reason: {rejection.get('reason', '')}",
            "You are welcome to submit a new application.",
        ]
    else:  # action == "info_requested"
        request = data.get("infoRequestInfo") or {}
        subject = f"More information needed for your {service} application"
        body_lines = [
            greeting,
            "",
            f"We need more information to continue processing your {service} application:",
            request.get("details", ""),
        ]

    portal_url = _portal_url()
    if portal_url:
        body_lines.extend(["", f"Check your application status at {portal_url}"])

    body_lines.extend(
        [
            "",
            "If you have any questions, please reply to this email.",
            "",
            "Regards,",
            "SEVIS Portal Team",
        ]
    )

    email = EmailMessage(
        subject=subject,
        body="\n".join(body_lines),
        from_email=_default_from_email(),
        to=[user.email],
    )
    return email.send(fail_silently=False)
