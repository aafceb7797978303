import pytest

from apps.users import roles
from apps.users.constants import AdminLevel


@pytest.mark.parametrize(
    "role, expected",
    [
        ("super_admin", AdminLevel.SUPER_ADMIN),
        ("approving_admin", AdminLevel.APPROVING_ADMIN),
        ("vetting_admin", AdminLevel.VETTING_ADMIN),
        ("admin", AdminLevel.ADMIN),
    ],
)
def test_explicit_role_determines_admin_level(role, expected):
    user = {"role": role, "national_id": "SUPER-ADMIN-001"}

    assert roles.get_admin_level(user) is expected


def test_explicit_admin_role_ignores_legacy_markers():
    user = {"role": "admin", "national_id": "X-VET-ADMIN", "photo_url": "super_admin"}

    assert roles.get_admin_level(user) is AdminLevel.ADMIN


@pytest.mark.parametrize(
    "user, expected",
    [
        ({"role": "user", "national_id": "PNG-SUPER-ADMIN-1"}, AdminLevel.SUPER_ADMIN),
        ({"role": "user", "nationalId": "APPROVE-ADMIN"}, AdminLevel.APPROVING_ADMIN),
        ({"role": "user", "photo_url": "vetting_admin"}, AdminLevel.VETTING_ADMIN),
        ({"role": "user", "photoUrl": "approving_admin"}, AdminLevel.APPROVING_ADMIN),
        ({"role": "user", "national_id": "12345"}, AdminLevel.ADMIN),
        ({"role": "user", "photo_url": "https://cdn.example/vetting_admin.png"}, AdminLevel.ADMIN),
    ],
)
def test_legacy_markers_resolve_levels(user, expected):
    assert roles.get_admin_level(user) is expected


def test_missing_user_defaults_to_admin_level():
    assert roles.get_admin_level(None) is AdminLevel.ADMIN
    assert roles.is_admin(None) is False


def test_first_matching_marker_wins():
    user = {"role": "user", "national_id": "VET-ADMIN", "photo_url": "super_admin"}

    assert roles.get_admin_level(user) is AdminLevel.SUPER_ADMIN


@pytest.mark.django_db
def test_model_instances_are_resolved(user_factory):
    vetter = user_factory(role="vetting_admin")
    citizen = user_factory(national_id="SUPER-ADMIN")

    assert roles.get_admin_level(vetter) is AdminLevel.VETTING_ADMIN
    assert roles.is_admin(vetter)
    # A marker grants a level label but never admin capability.
    assert roles.get_admin_level(citizen) is AdminLevel.SUPER_ADMIN
    assert not roles.is_admin(citizen)
    assert not roles.is_super_admin(citizen)


@pytest.mark.django_db
def test_enhance_admin_user_adds_level(user_factory):
    user = user_factory(username="boss", role="super_admin", name="The Boss")

    payload = roles.enhance_admin_user(user)

    assert payload["admin_level"] == "super_admin"
    assert payload["name"] == "The Boss"
    assert payload["id"] == user.pk


def test_enhance_admin_user_copies_mapping():
    source = {"id": "1", "role": "vetting_admin"}

    payload = roles.enhance_admin_user(source)

    assert payload == {"id": "1", "role": "vetting_admin", "admin_level": "vetting_admin"}
    assert "admin_level" not in source


@pytest.mark.parametrize("role", ["admin", "super_admin", "approving_admin", "vetting_admin"])
def test_every_admin_tier_may_vet_and_approve(role):
    user = {"role": role}

    assert roles.can_vet(user)
    assert roles.can_approve(user)


def test_citizens_cannot_vet_or_approve():
    user = {"role": "user", "national_id": "SUPER-ADMIN"}

    assert not roles.can_vet(user)
    assert not roles.can_approve(user)


@pytest.mark.parametrize(
    "status, action, allowed",
    [
        ("pending", "vet", True),
        ("in_progress", "vet", False),
        ("completed", "vet", False),
        ("rejected", "vet", False),
        ("pending", "approve", True),
        ("in_progress", "approve", True),
        ("completed", "approve", False),
        ("rejected", "approve", False),
        ("pending", "reject", True),
        ("in_progress", "reject", True),
        ("completed", "reject", False),
        ("rejected", "reject", False),
        ("pending", "archive", False),
    ],
)
def test_can_perform_action_gates_on_status(status, action, allowed):
    admin = {"role": "admin"}

    assert roles.can_perform_action(admin, {"status": status}, action) is allowed


def test_can_perform_action_requires_admin_and_application():
    assert not roles.can_perform_action({"role": "user"}, {"status": "pending"}, "vet")
    assert not roles.can_perform_action({"role": "admin"}, None, "vet")


def test_allowed_actions_lists_status_permitted_actions():
    admin = {"role": "approving_admin"}

    assert roles.allowed_actions(admin, {"status": "pending"}) == ["vet", "approve", "reject"]
    assert roles.allowed_actions(admin, {"status": "in_progress"}) == ["approve", "reject"]
    assert roles.allowed_actions(admin, {"status": "completed"}) == []


def _application(status="in_progress", **data):
    return {"status": status, "application_data": data}


def test_has_been_vetted_requires_completion_marker_and_verified_documents():
    application = _application(
        vetting={"completed": True, "vetted_by": "7"},
        documents={"nationalIdDoc": "id.pdf", "addressProof": "bill.pdf"},
        documentVerifications={"national_id_verified": True, "address_proof_verified": True},
    )

    assert roles.has_been_vetted(application)


def test_has_been_vetted_fails_on_unverified_document():
    application = _application(
        vetting={"completed": True, "vetted_by": "7"},
        documents={"nationalIdDoc": "id.pdf", "categorySpecificDoc": "letter.pdf"},
        documentVerifications={"national_id_verified": True, "category_doc_verified": "yes"},
    )

    assert not roles.has_been_vetted(application)
    assert roles.get_unverified_documents(application) == ["Category-Specific Documents"]


def test_has_been_vetted_ignores_recommended_action():
    application = _application(vettingInfo={"recommendedAction": "approve"})

    assert not roles.has_been_vetted(application)


@pytest.mark.parametrize(
    "status, level, expected",
    [
        ("pending", "vetting_admin", "Ready for vetting"),
        ("pending", "approving_admin", "Awaiting vetting by vetting administrator"),
        ("in_progress", "admin", "Currently being vetted"),
        ("completed", "admin", "Application approved"),
        ("rejected", "super_admin", "Application rejected"),
        ("archived", "admin", "Unknown status"),
    ],
)
def test_workflow_status_message(status, level, expected):
    assert roles.get_workflow_status_message({"status": status}, level) == expected


def test_workflow_status_message_for_vetted_application():
    application = _application(vetting={"completed": True, "vetted_by": "3"})

    assert (
        roles.get_workflow_status_message(application, "approving_admin")
        == "Vetted - Ready for approval decision"
    )
    assert (
        roles.get_workflow_status_message(application, "vetting_admin")
        == "Vetted - Awaiting approval by approving administrator"
    )


def test_level_names_and_descriptions_fall_back_to_admin():
    assert roles.get_admin_level_name("super_admin") == "Super Administrator"
    assert roles.get_admin_level_name("nonsense") == "Administrator"
    assert roles.get_admin_level_description("nonsense") == "Basic administrative access"
