"""Background tasks for decision side effects."""
from __future__ import annotations

import logging

from celery import shared_task

from apps.applications.models import Application

from .emails import send_decision_email

logger = logging.getLogger(__name__)


@shared_task(name="decisions.send_decision_email")
def send_decision_email_task(application_id: str, action: str):
    try:
        application = Application.objects.select_related("user").get(pk=application_id)
    except Application.DoesNotExist:
        logger.warning(
            "Skipping %s notification for missing application %s",
            action,
            application_id,
            extra={"context": {"action": "decision.notify_skipped", "application_id": application_id}},
        )
        return None
    return send_decision_email(application, action)
