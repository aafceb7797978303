"""Service catalogue and application status values."""

from __future__ import annotations

from typing import Dict


class ApplicationStatus:
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"

    CHOICES = [
        (PENDING, "Pending"),
        (IN_PROGRESS, "In progress"),
        (COMPLETED, "Completed"),
        (REJECTED, "Rejected"),
    ]

    ALL = (PENDING, IN_PROGRESS, COMPLETED, REJECTED)


CITY_PASS = "City Pass"
SEVIS_PASS = "SEVIS Pass"
PUBLIC_SERVANT_PASS = "Public Servant Pass"
LEARNERS_PERMIT = "Learner's Permit Application"
DRIVERS_LICENSE = "Driver's License Application"

SERVICE_CATALOGUE = (
    CITY_PASS,
    SEVIS_PASS,
    PUBLIC_SERVANT_PASS,
    LEARNERS_PERMIT,
    DRIVERS_LICENSE,
)

SERVICE_CHOICES = [(name, name) for name in SERVICE_CATALOGUE]

REFERENCE_PREFIXES: Dict[str, str] = {
    PUBLIC_SERVANT_PASS: "PSP",
    LEARNERS_PERMIT: "LP",
    DRIVERS_LICENSE: "DL",
}
DEFAULT_REFERENCE_PREFIX = "APP"

DELETE_SCOPES = ("user", "all", "service")

# Sections of application_data written only by the admin workflow.
WORKFLOW_DATA_KEYS = frozenset(
    {
        "processingStatus",
        "vettingInfo",
        "approvalInfo",
        "rejectionInfo",
        "infoRequestInfo",
        "vetting",
        "documentVerifications",
    }
)
