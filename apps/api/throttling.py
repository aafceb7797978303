"""Throttling policy keyed on the caller's admin level."""

from __future__ import annotations

import hashlib
from typing import Mapping, MutableMapping, Optional

from django.conf import settings
from rest_framework.throttling import SimpleRateThrottle

from apps.users import roles
from apps.users.constants import AdminLevel

#: Rate bucket used for citizens and anonymous callers.
CITIZEN_BUCKET = "user"


class AdminLevelRateThrottle(SimpleRateThrottle):
    """Throttle requests using a per admin level rate.

    Counters live in the Django cache so that limits survive process restarts
    and are shared across workers when a shared cache backend is configured.
    """

    scope = "admin_level"

    #: Levels that are exempt from throttling entirely.
    unlimited_levels = {AdminLevel.SUPER_ADMIN.value}

    def __init__(self) -> None:
        self.level_rates = self._load_level_rates()
        self._bucket: Optional[str] = None
        super().__init__()

    @staticmethod
    def _load_level_rates() -> Mapping[str, str]:
        """Return the rate configuration declared in Django settings."""

        config: Mapping[str, str] = (
            getattr(settings, "REST_FRAMEWORK", {}) or {}
        ).get("ADMIN_LEVEL_THROTTLE_RATES", {})

        rates: MutableMapping[str, str] = {}
        valid = {level.value for level in AdminLevel} | {CITIZEN_BUCKET}
        for key, rate in config.items():
            bucket = str(getattr(key, "value", key)).lower()
            if bucket in valid:
                rates[bucket] = rate
        return rates

    def get_rate(self):  # type: ignore[override]
        # Resolved per request in ``allow_request``.
        return None

    def allow_request(self, request, view):  # type: ignore[override]
        bucket = self._resolve_bucket(request)
        rate = self.level_rates.get(bucket) if bucket else None
        if bucket in self.unlimited_levels:
            rate = None
        if rate is None and bucket == CITIZEN_BUCKET:
            rate = self.THROTTLE_RATES.get(self.scope)

        if rate is None:
            self._bucket = None
            return True

        self._bucket = bucket
        self.rate = rate
        self.num_requests, self.duration = self.parse_rate(rate)
        return super().allow_request(request, view)

    def get_cache_key(self, request, view):  # type: ignore[override]
        if not self._bucket:
            return None

        ident = self._identify_request(request)
        if ident is None:
            return None
        return self.cache_format % {"scope": self.scope, "ident": f"{self._bucket}:{ident}"}

    def _resolve_bucket(self, request) -> Optional[str]:
        user = getattr(request, "user", None)
        if getattr(user, "is_authenticated", False) and roles.is_admin(user):
            return roles.get_admin_level(user).value
        return CITIZEN_BUCKET

    def _identify_request(self, request) -> Optional[str]:
        user = getattr(request, "user", None)
        if getattr(user, "is_authenticated", False) and getattr(user, "pk", None) is not None:
            return f"user:{user.pk}"

        auth_header = request.META.get("HTTP_AUTHORIZATION")
        if auth_header:
            digest = hashlib.sha256(auth_header.encode("utf-8")).hexdigest()
            return f"token:{digest}"

        ident = self.get_ident(request)
        return f"ip:{ident}" if ident else None
