import os

import pytest


os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

import django  # noqa: E402

django.setup()


from django.contrib.auth import get_user_model  # noqa: E402
from django.core.cache import cache  # noqa: E402
from rest_framework.test import APIClient  # noqa: E402

from apps.applications.models import Application  # noqa: E402
from apps.users.constants import UserRole as Roles  # noqa: E402


User = get_user_model()


@pytest.fixture(autouse=True)
def _portal_settings(settings):
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.SEVIS_PORTAL_URL = "https://portal.example.test"
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user_factory(db):
    counter = {"value": 0}

    def create_user(username=None, role=Roles.USER, **extra):
        counter["value"] += 1
        username = username or f"user{counter['value']}"
        extra.setdefault("email", f"{username}@example.com")
        return User.objects.create_user(
            username=username,
            password="password123",
            role=getattr(role, "value", role),
            **extra,
        )

    return create_user


@pytest.fixture
def citizen(user_factory):
    return user_factory(username="citizen", name="Citizen Kane")


@pytest.fixture
def admin_user(user_factory):
    return user_factory(username="admin", role=Roles.ADMIN, name="Portal Admin")


@pytest.fixture
def application_factory(db):
    def create_application(user, service_name="City Pass", status="pending", **extra):
        extra.setdefault("application_data", {})
        return Application.objects.create(
            user=user, service_name=service_name, status=status, **extra
        )

    return create_application


@pytest.fixture
def api_client():
    return APIClient()
