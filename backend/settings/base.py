"""Shared Django settings for the SEVIS portal backend."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

from django.core.exceptions import ImproperlyConfigured

import dj_database_url
import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration


BASE_DIR = Path(__file__).resolve().parent.parent.parent


def _get_env(name: str) -> str | None:
    """Return the raw value for ``name`` if it exists."""

    return os.getenv(name)


def get_env_bool(name: str, default: bool = False) -> bool:
    """Return a boolean for an environment variable."""

    value = _get_env(name)
    if value is None:
        return default
    return value.lower() in {"true", "1", "yes"}


def get_env_int(name: str, default: int) -> int:
    """Return an integer for ``name`` or ``default`` if unset."""

    value = _get_env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:  # pragma: no cover - defensive path
        raise ImproperlyConfigured(
            f"Environment variable {name} must be an integer."
        ) from exc


def get_secret_key(debug: bool) -> str:
    """Fetch the Django secret key from the environment."""

    secret_key = os.getenv("DJANGO_SECRET_KEY") or os.getenv("SECRET_KEY")
    if secret_key:
        return secret_key
    if debug:
        # Predictable key for local development only.
        return "django-insecure-development-key"
    raise ImproperlyConfigured(
        "DJANGO_SECRET_KEY must be set in production environments."
    )


DEFAULT_ALLOWED_HOSTS = (
    "localhost",
    "127.0.0.1",
)


_SETTINGS_MODULE = os.getenv("DJANGO_SETTINGS_MODULE", "")
_IS_LOCAL_SETTINGS = _SETTINGS_MODULE.endswith(".dev")
_DEFAULT_DEBUG_STATE = get_env_bool(
    "DJANGO_DEBUG", default=_IS_LOCAL_SETTINGS
)


def _normalise_list(values: Iterable[str]) -> list[str]:
    """Return a list of unique, stripped values preserving order."""

    normalised: list[str] = []
    for value in values:
        candidate = value.strip()
        if not candidate or candidate in normalised:
            continue
        normalised.append(candidate)
    return normalised


def build_allowed_hosts(
    *env_vars: str,
    default: Iterable[str] | None = None,
) -> list[str]:
    """Aggregate allowed hosts from one or more comma separated env vars."""

    hosts: list[str] = []
    for env_var in env_vars:
        raw_value = os.getenv(env_var)
        if raw_value:
            hosts.extend(raw_value.split(","))

    if not hosts:
        hosts.extend(default if default is not None else DEFAULT_ALLOWED_HOSTS)

    return _normalise_list(hosts)


def get_csrf_trusted_origins(
    env_var: str,
    default: Iterable[str] | None = None,
) -> list[str]:
    """Fetch trusted origins allowing override per environment."""

    raw_value = os.getenv(env_var)
    if raw_value:
        return _normalise_list(raw_value.split(","))
    if default is None:
        return []
    return list(default)


ALLOWED_HOSTS = build_allowed_hosts("ALLOWED_HOSTS")
CSRF_TRUSTED_ORIGINS = get_csrf_trusted_origins(
    "CSRF_TRUSTED_ORIGINS",
    default=("https://localhost", "https://127.0.0.1"),
)
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

SECURE_SSL_REDIRECT = get_env_bool(
    "DJANGO_SECURE_SSL_REDIRECT", default=not _DEFAULT_DEBUG_STATE
)
SESSION_COOKIE_SECURE = get_env_bool(
    "DJANGO_SESSION_COOKIE_SECURE", default=not _DEFAULT_DEBUG_STATE
)
CSRF_COOKIE_SECURE = get_env_bool(
    "DJANGO_CSRF_COOKIE_SECURE", default=not _DEFAULT_DEBUG_STATE
)
SECURE_CONTENT_TYPE_NOSNIFF = get_env_bool(
    "DJANGO_SECURE_CONTENT_TYPE_NOSNIFF", default=True
)
SECURE_REFERRER_POLICY = os.getenv("DJANGO_SECURE_REFERRER_POLICY", "same-origin")
SECURE_HSTS_SECONDS = get_env_int("DJANGO_SECURE_HSTS_SECONDS", default=0)
X_FRAME_OPTIONS = os.getenv("DJANGO_X_FRAME_OPTIONS", "DENY")


def _get_sample_rate(name: str, default: float) -> float:
    """Fetch a float configuration value from the environment."""

    value = os.getenv(name)
    if value is None:
        return default

    try:
        return float(value)
    except ValueError:
        return default


def init_sentry() -> None:
    """Configure Sentry monitoring when a DSN is available."""

    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return None

    environment = (
        os.getenv("SENTRY_ENVIRONMENT")
        or os.getenv("DJANGO_ENV")
        or ("development" if get_env_bool("DJANGO_DEBUG", True) else "production")
    )

    sentry_sdk.init(
        dsn=dsn,
        integrations=[DjangoIntegration()],
        environment=environment,
        send_default_pii=False,
        traces_sample_rate=_get_sample_rate("SENTRY_TRACES_SAMPLE_RATE", 0.2),
    )
    sentry_sdk.set_tag("environment", environment)
    return None


INSTALLED_APPS = [
    'rest_framework',
    'apps.users.apps.UsersConfig',
    'apps.applications.apps.ApplicationsConfig',
    'apps.decisions.apps.DecisionsConfig',
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

AUTH_USER_MODEL = 'users.User'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
        'rest_framework.authentication.BasicAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_THROTTLE_CLASSES': [
        'apps.api.throttling.AdminLevelRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'admin_level': '120/min',
    },
    'ADMIN_LEVEL_THROTTLE_RATES': {
        'user': os.getenv('SEVIS_CITIZEN_THROTTLE_RATE', '120/min'),
        'admin': os.getenv('SEVIS_ADMIN_THROTTLE_RATE', '60/min'),
        'vetting_admin': os.getenv('SEVIS_ADMIN_THROTTLE_RATE', '60/min'),
        'approving_admin': os.getenv('SEVIS_ADMIN_THROTTLE_RATE', '60/min'),
    },
}

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'backend.urls'
TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

ASGI_APPLICATION = 'backend.asgi.application'
WSGI_APPLICATION = 'backend.wsgi.application'


def _build_test_settings(parsed: dict[str, object]) -> dict[str, object]:
    """Translate a parsed database URL into a Django TEST settings block."""

    keys = ("NAME", "USER", "PASSWORD", "HOST", "PORT", "ENGINE", "OPTIONS")
    return {key: parsed[key] for key in keys if key in parsed}


def build_database_config(
    primary_env_var: str,
    *,
    fallback_env_vars: Sequence[str] | None = None,
    default_url: str | None = None,
    test_env_vars: Sequence[str] | None = None,
    conn_max_age: int = 600,
) -> dict[str, object]:
    """Build a Django database configuration driven by environment variables."""

    fallback_env_vars = fallback_env_vars or ()
    test_env_vars = test_env_vars or ()

    database_url = os.getenv(primary_env_var)
    if not database_url:
        for candidate_var in fallback_env_vars:
            database_url = os.getenv(candidate_var)
            if database_url:
                break
    if not database_url:
        database_url = default_url
    if not database_url:
        raise ImproperlyConfigured(
            "A database connection string is required."
        )

    test_url: str | None = None
    for candidate in test_env_vars:
        test_url = os.getenv(candidate)
        if test_url:
            break

    use_test_database = bool(
        os.getenv("PYTEST_CURRENT_TEST") or os.getenv("DJANGO_USE_TEST_DATABASE")
    )
    if use_test_database and test_url:
        return dj_database_url.parse(test_url, conn_max_age=0)

    parsed = dj_database_url.parse(database_url, conn_max_age=conn_max_age)
    if test_url:
        parsed["TEST"] = _build_test_settings(
            dj_database_url.parse(test_url, conn_max_age=0)
        )
    return parsed


DATABASES = {
    'default': build_database_config(
        'DATABASE_URL',
        default_url=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        test_env_vars=(
            'TEST_DATABASE_URL',
        ),
    )
}

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'sevis-portal',
    }
}
if os.getenv("REDIS_URL"):
    CACHES['default'] = {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': os.getenv("REDIS_URL"),
    }


# Structured logging persisting key workflow actions.
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
        'database': {
            'level': 'INFO',
            'class': 'apps.applications.logging.DatabaseLogHandler',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
        },
        'apps.applications': {
            'handlers': ['console', 'database'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps.decisions': {
            'handlers': ['console', 'database'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps.users': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}


# Email configuration sourced from environment variables.
EMAIL_BACKEND = os.getenv(
    "EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend"
)
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = get_env_int("EMAIL_PORT", 587)
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = get_env_bool("EMAIL_USE_TLS", True)
DEFAULT_FROM_EMAIL = os.getenv(
    "DEFAULT_FROM_EMAIL", "SEVIS Portal <no-reply@sevisportal.gov.pg>"
)


# Celery configuration shared with the worker process.
CELERY_BROKER_URL = os.getenv(
    "CELERY_BROKER_URL",
    os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", CELERY_BROKER_URL)
CELERY_TASK_DEFAULT_QUEUE = os.getenv("CELERY_TASK_DEFAULT_QUEUE", "sevis_portal")
CELERY_TASK_ALWAYS_EAGER = get_env_bool("CELERY_TASK_ALWAYS_EAGER", False)
CELERY_TASK_EAGER_PROPAGATES = get_env_bool(
    "CELERY_TASK_EAGER_PROPAGATES", CELERY_TASK_ALWAYS_EAGER
)
CELERY_TASK_SOFT_TIME_LIMIT = get_env_int("CELERY_TASK_SOFT_TIME_LIMIT", 60)
CELERY_TASK_TIME_LIMIT = get_env_int("CELERY_TASK_TIME_LIMIT", 300)


# Portal business settings.
SEVIS_REFERENCE_VALIDITY_DAYS = get_env_int("SEVIS_REFERENCE_VALIDITY_DAYS", 730)
SEVIS_PORTAL_URL = os.getenv("SEVIS_PORTAL_URL", "https://sevisportal.gov.pg")


# Configure monitoring once settings are imported.
init_sentry()
