"""Health endpoint for load balancers and uptime checks."""
from __future__ import annotations

from django.conf import settings
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from django.http import JsonResponse

CACHE_PROBE_KEY = "sevis:health"


def _database_status() -> str:
    connection = connections["default"]
    try:
        if connection.connection is None:
            # Never open a connection just to answer a probe.
            return "unverified"
        return "ok" if connection.is_usable() else "unavailable"
    except OperationalError:
        return "unavailable"


def _cache_status() -> str:
    # Throttle counters live in the cache, so report it alongside the database.
    cache.set(CACHE_PROBE_KEY, "1", timeout=5)
    return "ok" if cache.get(CACHE_PROBE_KEY) == "1" else "unavailable"


def health_view(request):
    components = {"database": _database_status(), "cache": _cache_status()}
    degraded = "unavailable" in components.values()
    payload = {
        "status": "degraded" if degraded else "ok",
        "celery_eager": bool(getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False)),
        **components,
    }
    return JsonResponse(payload, status=503 if degraded else 200)
