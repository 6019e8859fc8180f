"""Django settings for the weatherhub HTTP service."""
from __future__ import annotations

from pathlib import Path
import os

from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def env_int(name: str, default: int) -> int:
    raw = env(name, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} must be an integer, got {raw!r}") from exc


def env_float(name: str) -> float | None:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} must be a number, got {raw!r}") from exc


def parse_weights(raw: str) -> dict[str, float]:
    """Parse ``"nws:2,openweather:1"`` into a weight mapping."""
    weights: dict[str, float] = {}
    for item in filter(None, (part.strip() for part in raw.split(","))):
        name, sep, value = item.partition(":")
        try:
            weights[name.strip()] = float(value) if sep else 1.0
        except ValueError as exc:
            raise ImproperlyConfigured(f"Invalid provider weight {item!r}") from exc
    return weights


SECRET_KEY = env("DJANGO_SECRET_KEY")
DEBUG = os.environ.get("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "weatherhub_server.api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "weatherhub_server.urls"

WSGI_APPLICATION = "weatherhub_server.wsgi.application"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
    }
}

REDIS_URL = os.environ.get("REDIS_URL")
if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": REDIS_URL,
            "OPTIONS": {
                "CLIENT_CLASS": "django_redis.client.DefaultClient",
            },
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "weatherhub-local",
        }
    }

WEATHER_CACHE_ALIAS = os.environ.get("WEATHER_CACHE_ALIAS", "default")
WEATHER_CACHE_TIMEOUT = env_int("WEATHER_CACHE_TIMEOUT", 300)
WEATHER_GEOHASH_PRECISION = env_int("WEATHER_GEOHASH_PRECISION", 5)
WEATHER_PROVIDER_TIMEOUT = float(env("WEATHER_PROVIDER_TIMEOUT", "10"))
WEATHER_NWS_USER_AGENT = env("WEATHER_NWS_USER_AGENT", "(weatherhub, ops@example.com)")

WEATHER_PROVIDERS = [
    name.strip() for name in env("WEATHER_PROVIDERS", "nws,openweather").split(",") if name.strip()
]
WEATHER_API_KEYS = {
    provider: os.environ[variable]
    for provider, variable in (
        ("openweather", "OPENWEATHER_API_KEY"),
        ("tomorrow", "TOMORROW_API_KEY"),
        ("weatherbit", "WEATHERBIT_API_KEY"),
    )
    if os.environ.get(variable)
}

WEATHER_FALLBACK_POLICY = {
    "provider_policy": env("WEATHER_PROVIDER_POLICY", "priority-then-health"),
    "provider_weights": parse_weights(os.environ.get("WEATHER_PROVIDER_WEIGHTS", "")),
    "health_thresholds": {
        "min_success_rate": env_float("WEATHER_MIN_SUCCESS_RATE"),
        "max_p95_ms": env_float("WEATHER_MAX_P95_MS"),
    },
}

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.environ.get("WEATHER_LOG_LEVEL", "INFO"),
    },
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True
