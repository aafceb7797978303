import pytest
from django.contrib.auth.models import AnonymousUser
from rest_framework.test import APIRequestFactory

from apps.api.throttling import AdminLevelRateThrottle


@pytest.fixture
def throttle_rates(settings):
    settings.REST_FRAMEWORK = {
        **settings.REST_FRAMEWORK,
        "ADMIN_LEVEL_THROTTLE_RATES": {
            "user": "2/min",
            "admin": "3/min",
            "vetting_admin": "1/min",
            "super_admin": "1/min",
        },
    }


def _request(user, **extra):
    request = APIRequestFactory().get("/api/admin/me/", **extra)
    request.user = user
    return request


def _allowed(request, attempts):
    return [AdminLevelRateThrottle().allow_request(request, None) for _ in range(attempts)]


@pytest.mark.django_db
def test_admin_levels_have_their_own_rates(throttle_rates, user_factory):
    vetter = user_factory(role="vetting_admin")
    admin = user_factory(role="admin")

    assert _allowed(_request(vetter), 2) == [True, False]
    assert _allowed(_request(admin), 4) == [True, True, True, False]


@pytest.mark.django_db
def test_super_admins_are_not_throttled(throttle_rates, user_factory):
    boss = user_factory(role="super_admin")

    assert all(_allowed(_request(boss), 5))


@pytest.mark.django_db
def test_counters_are_per_user(throttle_rates, user_factory):
    first = user_factory(role="vetting_admin")
    second = user_factory(role="vetting_admin")

    assert _allowed(_request(first), 1) == [True]
    assert _allowed(_request(second), 1) == [True]


def test_anonymous_callers_use_the_citizen_bucket(throttle_rates):
    request = _request(AnonymousUser(), REMOTE_ADDR="10.0.0.9")

    assert _allowed(request, 3) == [True, True, False]


def test_throttled_request_reports_wait(throttle_rates):
    request = _request(AnonymousUser(), REMOTE_ADDR="10.0.0.10")
    throttle = AdminLevelRateThrottle()
    throttle.allow_request(request, None)
    throttle.allow_request(request, None)

    assert throttle.allow_request(request, None) is False
    assert 0 < throttle.wait() <= 60
