"""Human readable reference numbers issued on approval."""

from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Optional

from django.utils import timezone

from .constants import DEFAULT_REFERENCE_PREFIX, REFERENCE_PREFIXES

_BASE36 = string.digits + string.ascii_uppercase


def reference_prefix(service_name: str) -> str:
    return REFERENCE_PREFIXES.get(service_name, DEFAULT_REFERENCE_PREFIX)


def generate_reference_number(service_name: str, *, now: Optional[datetime] = None) -> str:
    """Return ``{PREFIX}-{YYYYMM}-{6 digits}-{2 chars}`` for ``service_name``.

    The six digits are the tail of the epoch timestamp in milliseconds and the
    suffix is two random base36 characters. Collisions are not checked.
    """

    now = now or timezone.now()
    millis = str(int(now.timestamp() * 1000))[-6:].zfill(6)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(2))
    return f"{reference_prefix(service_name)}-{now:%Y%m}-{millis}-{suffix}"
