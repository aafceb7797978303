"""Shared helpers for shaping JSON error responses."""

from __future__ import annotations

from typing import Any, Mapping

from rest_framework.response import Response


def first_error(errors: Any) -> str:
    """Return the first human readable message from DRF ``errors``."""

    if isinstance(errors, Mapping):
        for value in errors.values():
            return first_error(value)
        return "Invalid request parameters"
    if isinstance(errors, (list, tuple)):
        for value in errors:
            return first_error(value)
        return "Invalid request parameters"
    return str(errors)


def error_response(message: str, status: int, **extra: Any) -> Response:
    payload = {"error": message}
    payload.update(extra)
    return Response(payload, status=status)
