import json

from django.urls import reverse

from backend.health import health_view


def test_health_endpoint_reports_components(client):
    response = client.get(reverse("health"))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["cache"] == "ok"
    assert payload["database"] in {"ok", "unverified"}


def test_unreachable_cache_marks_service_degraded(rf, mocker):
    mocker.patch("backend.health.cache.get", return_value=None)

    response = health_view(rf.get("/health/"))

    assert response.status_code == 503
    assert json.loads(response.content)["status"] == "degraded"
