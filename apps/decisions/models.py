from django.conf import settings
from django.db import models

from apps.applications.models import Application


class ApplicationAction(models.Model):
    """One entry in the decision history of an application."""

    VETTED = "vetted"
    APPROVED = "approved"
    REJECTED = "rejected"
    INFO_REQUESTED = "info_requested"
    DOCUMENTS_VERIFIED = "documents_verified"

    ACTION_CHOICES = [
        (VETTED, "Vetted"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
        (INFO_REQUESTED, "More information requested"),
        (DOCUMENTS_VERIFIED, "Documents verified"),
    ]

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="actions")
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="application_actions",
    )
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.application_id} {self.action} by {self.actor} @ {self.created_at:%Y-%m-%d %H:%M}"
