"""Logging handler persisting portal workflow records."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model

# Attributes every LogRecord carries; anything else arrived through ``extra``.
RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName", "context", "user"}

ACTION_MAX_LENGTH = 64


def to_json(value: Any) -> Any:
    """Coerce ``value`` into something the JSON ``context`` column accepts."""

    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(item) for item in value]
    if hasattr(value, "pk"):
        return str(value.pk)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


class DatabaseLogHandler(logging.Handler):
    """Persist workflow log records to the ``LogEntry`` table.

    Services log with ``extra={"context": {"action": ..., ...}}``. The
    ``action`` key is lifted into its own indexed column so the admin log can
    be filtered by workflow event; the rest of the context, plus any other
    ``extra`` values, lands in the JSON ``context`` column. A ``user`` model
    instance or a ``user_id`` extra links the entry to an account.
    """

    def emit(self, record: logging.LogRecord) -> None:
        from .models import LogEntry

        try:
            context = self.context_for(record)
            action = str(context.pop("action", "") or "")[:ACTION_MAX_LENGTH]
            LogEntry.objects.create(
                logger_name=record.name,
                level=record.levelname.upper(),
                action=action,
                message=record.getMessage(),
                user=self.user_for(record),
                context=context or None,
            )
        except Exception:  # pragma: no cover - never let logging break a request
            self.handleError(record)

    def context_for(self, record: logging.LogRecord) -> Dict[str, Any]:
        provided = getattr(record, "context", None)
        context = to_json(provided) if isinstance(provided, dict) else {}
        for key, value in vars(record).items():
            if key in RESERVED_ATTRS or key.startswith("_"):
                continue
            context[key] = to_json(value)
        return context

    def user_for(self, record: logging.LogRecord) -> Optional[Any]:
        user = getattr(record, "user", None)
        if getattr(user, "pk", None):
            return user

        user_id = getattr(record, "user_id", None)
        if not user_id:
            return None
        return get_user_model()._default_manager.filter(pk=user_id).first()


__all__ = ["DatabaseLogHandler", "to_json"]
