from datetime import timedelta

import pytest
from django.utils import timezone

from apps.applications import limits
from apps.applications.exceptions import StoreError

pytestmark = pytest.mark.django_db


def test_user_without_applications_can_apply(citizen):
    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert result.can_apply
    assert result.reason is None
    assert result.as_dict() == {"canApply": True}


@pytest.mark.parametrize("status", ["pending", "in_progress", "completed"])
def test_open_or_completed_application_blocks_same_service(citizen, application_factory, status):
    existing = application_factory(citizen, "City Pass", status)

    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert not result.can_apply
    assert result.existing_application == existing
    assert status in result.reason


def test_completed_application_dominates_open_ones(citizen, application_factory):
    application_factory(citizen, "SEVIS Pass", "pending")
    completed = application_factory(
        citizen,
        "SEVIS Pass",
        "completed",
        reference_number="APP-202401-000001-AA",
        submitted_at=timezone.now() - timedelta(days=30),
    )

    result = limits.can_apply_for_service(citizen.pk, "SEVIS Pass")

    assert not result.can_apply
    assert result.reason == "You already have a completed SEVIS Pass application."
    assert result.existing_application == completed
    assert result.suggested_actions == limits.COMPLETED_ACTIONS
    payload = result.as_dict()
    assert payload["existingApplication"]["reference_number"] == "APP-202401-000001-AA"
    assert payload["existingApplication"]["status"] == "completed"


def test_pending_application_is_reported_before_in_progress(citizen, application_factory):
    application_factory(citizen, "City Pass", "in_progress")
    pending = application_factory(
        citizen, "City Pass", "pending", submitted_at=timezone.now() - timedelta(days=2)
    )

    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert result.existing_application == pending
    assert result.reason == "You already have a pending City Pass application."
    assert result.suggested_actions == limits.OPEN_ACTIONS


def test_rejected_application_allows_reapplying(citizen, application_factory):
    rejected = application_factory(citizen, "City Pass", "rejected")

    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert result.can_apply
    assert result.reason == "You can reapply after your previous application was rejected."
    assert result.existing_application == rejected


def test_limits_are_per_service(citizen, application_factory):
    application_factory(citizen, "City Pass", "completed")

    assert limits.can_apply_for_service(citizen.pk, "SEVIS Pass").can_apply


def test_limits_are_per_user(citizen, user_factory, application_factory):
    application_factory(user_factory(), "City Pass", "pending")

    assert limits.can_apply_for_service(citizen.pk, "City Pass").can_apply


def test_store_failure_is_reported_as_denial(citizen, mocker):
    mocker.patch(
        "apps.applications.limits.store.get_all_applications",
        side_effect=StoreError("Database error: connection refused"),
    )

    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert not result.can_apply
    assert result.reason == "Database error: connection refused"


def _psp_data(public_servant_id):
    return {"employmentInfo": {"publicServantId": public_servant_id, "department": "Finance"}}


def test_public_servant_id_registered_by_another_user_is_rejected(
    citizen, user_factory, application_factory
):
    application_factory(user_factory(), "Public Servant Pass", "rejected", application_data=_psp_data("PS-42"))

    result = limits.check_service_specific_limits(citizen.pk, "Public Servant Pass", _psp_data("PS-42"))

    assert not result.can_apply
    assert result.reason == "This Public Servant ID is already registered by another user."
    assert result.suggested_actions == limits.DUPLICATE_PUBLIC_SERVANT_ACTIONS


def test_public_servant_id_reused_by_same_user_after_rejection(citizen, application_factory):
    application_factory(citizen, "Public Servant Pass", "rejected", application_data=_psp_data("PS-42"))

    result = limits.check_service_specific_limits(citizen.pk, "Public Servant Pass", _psp_data("PS-42"))

    assert result.can_apply


def test_general_rule_runs_before_public_servant_rule(citizen, user_factory, application_factory):
    pending = application_factory(citizen, "Public Servant Pass", "pending")
    application_factory(user_factory(), "Public Servant Pass", "pending", application_data=_psp_data("PS-1"))

    result = limits.check_service_specific_limits(citizen.pk, "Public Servant Pass", _psp_data("PS-1"))

    assert result.existing_application == pending
    assert result.reason == "You already have a pending Public Servant Pass application."


def test_missing_public_servant_id_is_not_checked(citizen, user_factory, application_factory):
    application_factory(user_factory(), "Public Servant Pass", "pending", application_data=_psp_data("PS-1"))

    assert limits.check_service_specific_limits(citizen.pk, "Public Servant Pass", {}).can_apply
    assert limits.check_service_specific_limits(citizen.pk, "Public Servant Pass", None).can_apply


def test_unregistered_service_uses_general_rule_only(citizen):
    result = limits.check_service_specific_limits(citizen.pk, "Driver's License Application", {})

    assert result.can_apply


def test_summaries_and_counts(citizen, application_factory):
    application_factory(citizen, "City Pass", "rejected")
    application_factory(citizen, "City Pass", "pending")
    application_factory(citizen, "SEVIS Pass", "completed")

    summaries = limits.get_all_user_applications(citizen.pk)
    counts = limits.summarise_counts(summaries)

    assert counts == {
        "total": 3,
        "byService": {"City Pass": 2, "SEVIS Pass": 1},
        "byStatus": {"rejected": 1, "pending": 1, "completed": 1},
    }
    assert len(limits.get_user_applications_for_service(citizen.pk, "City Pass")) == 2


def test_denial_for_completed_application_is_stable(citizen, application_factory):
    completed = application_factory(citizen, "City Pass", "completed")

    results = [limits.can_apply_for_service(citizen.pk, "City Pass") for _ in range(3)]

    assert all(not result.can_apply for result in results)
    assert {result.existing_application.pk for result in results} == {completed.pk}


def test_only_rejected_applications_always_allow(citizen, application_factory):
    for _ in range(3):
        application_factory(citizen, "City Pass", "rejected")

    assert limits.can_apply_for_service(citizen.pk, "City Pass").can_apply


def test_pending_wins_over_rejected(citizen, application_factory):
    application_factory(citizen, "City Pass", "rejected")
    pending = application_factory(citizen, "City Pass", "pending")

    result = limits.can_apply_for_service(citizen.pk, "City Pass")

    assert not result.can_apply
    assert result.existing_application == pending


def test_newer_completed_application_is_cited_over_older_rejection(citizen, application_factory):
    application_factory(
        citizen, "SEVIS Pass", "rejected", submitted_at=timezone.now() - timedelta(days=90)
    )
    completed = application_factory(citizen, "SEVIS Pass", "completed")

    result = limits.can_apply_for_service(citizen.pk, "SEVIS Pass")

    assert not result.can_apply
    assert result.existing_application == completed
    assert "completed" in result.reason
