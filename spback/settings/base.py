"""
Base Django settings for spback project.
Common settings shared across all environments.
"""

import os
from pathlib import Path
from typing import Any

import environ

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent

# Initialize environment variables
env: environ.Env = environ.Env(
    # Set casting and defaults for environment variables
    DEBUG=(bool, False),
    SECRET_KEY=(str, ""),
    ALLOWED_HOSTS=(list, []),
    DATABASE_URL=(str, ""),
    SEATPULSE_CACHE_TTL=(int, 3600),  # 1 hour
    SEATPULSE_ASSIGNMENT_MAX_RETRIES=(int, 3),
    SEATPULSE_DEFAULT_TIMEOUT=(float, None),
)

# Read environment variables from .env file
environ.Env.read_env(BASE_DIR / ".env")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG: bool = env("DEBUG")

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY: str = env("SECRET_KEY")

if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set!")

if SECRET_KEY.startswith("django-insecure-") and not DEBUG:
    raise ValueError(
        "Insecure SECRET_KEY detected in production! "
        "Generate a secure one using: "
        "python -c 'from django.core.management.utils import "
        "get_random_secret_key; print(get_random_secret_key())'"
    )

ALLOWED_HOSTS: list[str] = env("ALLOWED_HOSTS")

# Application definition
DJANGO_APPS: list[str] = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
]

THIRD_PARTY_APPS: list[str] = []

LOCAL_APPS: list[str] = [
    "seatpulse",
]

INSTALLED_APPS: list[str] = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE: list[str] = []

# Database
# https://docs.djangoproject.com/en/5.2/ref/settings/#databases
# Use DATABASE_URL if available, otherwise fallback to SQLite
DATABASES = {
    "default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")
}

# Internationalization
# https://docs.djangoproject.com/en/5.2/topics/i18n/
LANGUAGE_CODE: str = "en-us"
TIME_ZONE: str = "Asia/Manila"
USE_I18N: bool = True
USE_TZ: bool = True

# Default primary key field type
# https://docs.djangoproject.com/en/5.2/ref/settings/#default-auto-field
DEFAULT_AUTO_FIELD: str = "django.db.models.BigAutoField"

# Custom User Model
AUTH_USER_MODEL = "seatpulse.User"

# Cache Configuration
# Position history views are cached here; see seatpulse.services.cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "seatpulse-cache",
        "TIMEOUT": 300,  # 5 minutes default timeout
        "OPTIONS": {
            "MAX_ENTRIES": 1000,
            "CULL_FREQUENCY": 3,
        },
    }
}

# Position history settings
SEATPULSE_CACHE_TTL: int = env("SEATPULSE_CACHE_TTL")
SEATPULSE_ASSIGNMENT_MAX_RETRIES: int = env("SEATPULSE_ASSIGNMENT_MAX_RETRIES")
# Seconds; None means mutations run without a deadline
SEATPULSE_DEFAULT_TIMEOUT: float | None = env("SEATPULSE_DEFAULT_TIMEOUT")

# Ensure logs directory exists
logs_dir = BASE_DIR / "logs"
os.makedirs(logs_dir, exist_ok=True)

# Logging Configuration
# Framework output only; seatpulse modules log through loguru
LOGGING: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": logs_dir / "django.log",
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 5,
            "formatter": "verbose",
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": logs_dir / "django_errors.log",
            "maxBytes": 1024 * 1024 * 5,  # 5 MB
            "backupCount": 5,
            "formatter": "verbose",
        },
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console", "file"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console", "file", "error_file"],
            "level": "INFO",
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["error_file"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
