from __future__ import annotations

"""
Development settings for the SEVIS portal backend.
Targets local machines and CI; falls back to SQLite when no database URL is
configured so the test-suite can run without PostgreSQL.
"""

import os
import logging
import environ

from .base import *  # noqa: F401,F403

# Explicit re-export of helpers used below.
from .base import (  # noqa: F401,F403
    BASE_DIR,
    build_allowed_hosts,
    build_database_config,
    get_csrf_trusted_origins,
    get_env_bool,
    get_secret_key,
)

# ---------------------------------------------------------------------------
# Environment Setup
# ---------------------------------------------------------------------------

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

# Load environment variables from .env at project root
env = environ.Env()
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))

# ---------------------------------------------------------------------------
# Core Django Settings
# ---------------------------------------------------------------------------

DEBUG = get_env_bool("DJANGO_DEBUG", default=True)
SECRET_KEY = get_secret_key(DEBUG)

ALLOWED_HOSTS = build_allowed_hosts(
    "DEV_ALLOWED_HOSTS",
    "ALLOWED_HOSTS",
    default=("localhost", "127.0.0.1", "testserver"),
)

CSRF_TRUSTED_ORIGINS = get_csrf_trusted_origins(
    "DEV_CSRF_TRUSTED_ORIGINS",
    default=("http://localhost", "http://127.0.0.1"),
)

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

DATABASES = {}
DATABASES["default"] = build_database_config(
    "DEV_DATABASE_URL",
    fallback_env_vars=("DATABASE_URL",),
    default_url=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
    test_env_vars=("DEV_TEST_DATABASE_URL", "TEST_DATABASE_URL"),
)

_active_db = DATABASES["default"]
logging.getLogger(__name__).info(
    "Using database engine: %s | Name: %s",
    _active_db.get("ENGINE"),
    _active_db.get("NAME"),
)

# ---------------------------------------------------------------------------
# Security / SSL Flags
# ---------------------------------------------------------------------------

SECURE_SSL_REDIRECT = get_env_bool("DJANGO_SECURE_SSL_REDIRECT", default=False)
SESSION_COOKIE_SECURE = get_env_bool("DJANGO_SESSION_COOKIE_SECURE", default=False)
CSRF_COOKIE_SECURE = get_env_bool("DJANGO_CSRF_COOKIE_SECURE", default=False)

# ---------------------------------------------------------------------------
# Email / background work
# ---------------------------------------------------------------------------

EMAIL_BACKEND = os.getenv(
    "EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend"
)
CELERY_TASK_ALWAYS_EAGER = get_env_bool("CELERY_TASK_ALWAYS_EAGER", True)
CELERY_TASK_EAGER_PROPAGATES = get_env_bool("CELERY_TASK_EAGER_PROPAGATES", True)
