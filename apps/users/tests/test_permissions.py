import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from apps.users import roles
from apps.users.permissions import (
    AdminLookupError,
    resolve_admin,
    user_has_any_role,
    user_has_role,
)


@pytest.mark.django_db
def test_user_has_role_compares_stored_role(user_factory):
    admin = user_factory(role="admin")

    assert user_has_role(admin, "admin")
    assert user_has_role(admin, "ADMIN")
    assert not user_has_role(admin, "super_admin")
    assert user_has_any_role(admin, {"super_admin", "admin"})


def test_user_has_role_rejects_anonymous_users():
    assert not user_has_role(AnonymousUser(), "admin")
    assert not user_has_role(None, "admin")


@pytest.mark.django_db
def test_resolve_admin_by_id(user_factory):
    admin = user_factory(role="vetting_admin")

    assert resolve_admin(str(admin.pk), check=roles.can_vet) == admin


@pytest.mark.django_db
def test_resolve_admin_unknown_id_is_not_found():
    with pytest.raises(AdminLookupError) as excinfo:
        resolve_admin("999999", check=roles.is_admin)

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Admin user not found"


@pytest.mark.django_db
def test_resolve_admin_non_admin_is_forbidden(user_factory):
    citizen = user_factory()

    with pytest.raises(AdminLookupError) as excinfo:
        resolve_admin(citizen.pk, check=roles.can_approve, denied_message="Nope")

    assert excinfo.value.status_code == 403
    assert str(excinfo.value) == "Nope"


@pytest.mark.django_db
def test_resolve_admin_falls_back_to_request_user(user_factory):
    admin = user_factory(role="admin")
    request = APIRequestFactory().post("/")
    request.user = admin

    assert resolve_admin(None, request=request, check=roles.is_admin) == admin


def test_resolve_admin_without_id_or_session_is_bad_request():
    request = APIRequestFactory().post("/")
    request.user = AnonymousUser()

    with pytest.raises(AdminLookupError) as excinfo:
        resolve_admin("", request=request, check=roles.is_admin)

    assert excinfo.value.status_code == 400
