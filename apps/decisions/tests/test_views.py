import pytest
from django.urls import reverse

from apps.decisions.models import ApplicationAction

pytestmark = pytest.mark.django_db

VETTING_DATA = {
    "employmentVerified": True,
    "emailVerified": True,
    "backgroundCheckRequired": False,
    "recommendedAction": "approve",
}


@pytest.fixture
def psp_application(citizen, application_factory):
    return application_factory(citizen, "Public Servant Pass")


def _post(api_client, name, payload):
    return api_client.post(reverse(f"decisions:{name}"), payload, format="json")


def test_public_servant_pass_vet_and_approve(api_client, psp_application, admin_user, mailoutbox):
    vet = _post(
        api_client,
        "psp-vet",
        {"applicationId": str(psp_application.pk), "adminId": str(admin_user.pk), "vettingData": VETTING_DATA},
    )
    approve = _post(
        api_client,
        "psp-approve",
        {"applicationId": str(psp_application.pk), "adminId": str(admin_user.pk), "adminNote": "ok"},
    )

    assert vet.status_code == 200
    assert vet.json()["message"] == "Public Servant Pass application vetted successfully"
    assert vet.json()["vettingData"]["vettedBy"] == str(admin_user.pk)
    assert approve.status_code == 200
    body = approve.json()
    assert body["success"] is True
    assert body["referenceNumber"].startswith("PSP-")
    assert body["data"]["status"] == "completed"
    assert body["data"]["reference_number"] == body["referenceNumber"]
    assert len(mailoutbox) == 1
    assert body["referenceNumber"] in mailoutbox[0].body


def test_missing_fields_are_rejected(api_client, admin_user):
    response = _post(api_client, "psp-vet", {"adminId": str(admin_user.pk)})

    assert response.status_code == 400
    assert response.json() == {
        "error": "Missing required fields: applicationId, adminId, and vettingData"
    }


def test_unknown_admin_is_not_found(api_client, psp_application):
    response = _post(
        api_client,
        "psp-reject",
        {"applicationId": str(psp_application.pk), "adminId": "424242", "reason": "No"},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Admin user not found"}


def test_citizen_cannot_approve(api_client, psp_application, citizen):
    response = _post(
        api_client,
        "psp-approve",
        {"applicationId": str(psp_application.pk), "adminId": str(citizen.pk)},
    )

    assert response.status_code == 403
    assert response.json() == {"error": "Unauthorized: Approval permissions required"}


def test_workflow_failure_returns_bad_request(api_client, psp_application, admin_user):
    response = _post(
        api_client,
        "psp-approve",
        {"applicationId": str(psp_application.pk), "adminId": str(admin_user.pk)},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Application must be vetted and recommended for approval first"
    }


def test_public_servant_endpoints_refuse_other_services(api_client, citizen, application_factory, admin_user):
    city = application_factory(citizen, "City Pass")

    response = _post(
        api_client,
        "psp-reject",
        {"applicationId": str(city.pk), "adminId": str(admin_user.pk), "reason": "No"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Not a Public Servant Pass application"}


def test_generic_action_uses_session_admin(api_client, citizen, application_factory, user_factory):
    vetter = user_factory(role="vetting_admin")
    application = application_factory(citizen, "Driver's License Application")
    api_client.force_authenticate(vetter)

    vet = api_client.post(
        reverse("decisions:application-action", args=[application.pk, "vet"]),
        {"vettingData": VETTING_DATA},
        format="json",
    )
    approve = api_client.post(
        reverse("decisions:application-action", args=[application.pk, "approve"]),
        {},
        format="json",
    )

    assert vet.status_code == 200
    assert approve.status_code == 200
    assert approve.json()["referenceNumber"].startswith("DL-")
    assert approve.json()["message"] == "Driver's License Application approved successfully"
    assert list(
        ApplicationAction.objects.filter(application=application).values_list("actor", flat=True)
    ) == [vetter.pk, vetter.pk]


def test_generic_action_without_admin_is_bad_request(api_client, citizen, application_factory):
    application = application_factory(citizen)

    response = api_client.post(
        reverse("decisions:application-action", args=[application.pk, "reject"]),
        {"reason": "Incomplete"},
        format="json",
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Admin ID is required"}


def test_unknown_generic_action(api_client, citizen, application_factory, admin_user):
    application = application_factory(citizen)

    response = api_client.post(
        reverse("decisions:application-action", args=[application.pk, "archive"]),
        {"adminId": str(admin_user.pk)},
        format="json",
    )

    assert response.status_code == 404


def test_request_info_endpoint(api_client, psp_application, admin_user, mailoutbox):
    payload = {"applicationId": str(psp_application.pk), "adminId": str(admin_user.pk)}
    _post(api_client, "psp-vet", {**payload, "vettingData": {**VETTING_DATA, "recommendedAction": "request_more_info"}})

    response = _post(api_client, "psp-request-info", {**payload, "details": "Send payslip"})

    assert response.status_code == 200
    assert response.json()["data"]["application_data"]["processingStatus"]["stage"] == "awaiting_info"
    assert "Send payslip" in mailoutbox[0].body


def test_verify_documents(api_client, citizen, application_factory, admin_user):
    application = application_factory(
        citizen,
        "Public Servant Pass",
        "in_progress",
        application_data={"documents": {"nationalIdDoc": "id.pdf"}},
    )

    response = api_client.patch(
        reverse("decisions:verify-documents", args=[application.pk]),
        {"verified_by": str(admin_user.pk), "national_id_verified": True, "complete": True},
        format="json",
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Document verification updated successfully"
    assert body["data"]["verifiedBy"] == "Portal Admin"

    workflow = api_client.get(
        reverse("decisions:workflow-status", args=[application.pk]),
        {"adminId": str(admin_user.pk)},
    )
    assert workflow.json()["hasBeenVetted"] is True
    assert workflow.json()["unverifiedDocuments"] == []


def test_verify_documents_requires_verifier(api_client, citizen, application_factory):
    application = application_factory(citizen)

    response = api_client.patch(
        reverse("decisions:verify-documents", args=[application.pk]),
        {"national_id_verified": True},
        format="json",
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Verified by admin ID is required"}


def test_admin_profile_requires_admin(api_client, citizen, user_factory):
    approver = user_factory(role="approving_admin")

    api_client.force_authenticate(citizen)
    denied = api_client.get(reverse("decisions:admin-profile"))
    api_client.force_authenticate(approver)
    allowed = api_client.get(reverse("decisions:admin-profile"))

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["admin_level"] == "approving_admin"
    assert allowed.json()["admin_level_name"] == "Approving Administrator"
