import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

from .constants import ApplicationStatus, SERVICE_CHOICES


class Application(models.Model):
    """A citizen's request for a government service."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="applications",
    )
    service_name = models.CharField(max_length=100, choices=SERVICE_CHOICES, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.CHOICES,
        default=ApplicationStatus.PENDING,
        db_index=True,
    )
    # Assigned once by the approval step; uniqueness of the generated value is
    # probabilistic and this constraint is the only backstop.
    reference_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        null=True,
    )
    application_data = models.JSONField(default=dict, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "applications"
        ordering = ("-submitted_at",)
        indexes = [
            models.Index(fields=("user", "service_name"), name="applications_user_service"),
        ]

    def __str__(self):  # pragma: no cover - human readable representation
        return f"{self.service_name} for {self.user_id} ({self.status})"

    @property
    def processing_stage(self):
        return (self.application_data or {}).get("processingStatus", {}).get("stage")


class LogEntry(models.Model):
    """Persisted application log record for admin observability."""

    LEVEL_CHOICES = [
        ("DEBUG", "Debug"),
        ("INFO", "Info"),
        ("WARNING", "Warning"),
        ("ERROR", "Error"),
        ("CRITICAL", "Critical"),
    ]

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    logger_name = models.CharField(max_length=255, db_index=True)
    level = models.CharField(max_length=16, choices=LEVEL_CHOICES)
    action = models.CharField(max_length=64, blank=True, db_index=True)
    message = models.TextField()
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="portal_logs",
    )
    context = models.JSONField(blank=True, null=True)

    class Meta:
        ordering = ("-timestamp", "-id")

    def __str__(self) -> str:  # pragma: no cover - human readable representation
        return f"[{self.level}] {self.logger_name}: {self.message[:75]}"
