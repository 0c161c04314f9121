"""
Testing settings for spback project.
Isolated test configuration that doesn't depend on external environment variables.
"""

import os

# Set required environment variables for testing if not already set
# This must be done BEFORE importing base settings
if not os.environ.get("SECRET_KEY"):
    # Generate a secure secret key for testing to avoid validation errors
    from django.core.management.utils import get_random_secret_key

    os.environ["SECRET_KEY"] = get_random_secret_key()

from .base import *  # noqa: F403,F401

# Override settings for testing
DEBUG: bool = False

# Use in-memory database for tests, unless DATABASE_URL is provided (e.g., for CI)
if "DATABASE_URL" in os.environ:
    # Use the database URL from environment (typically PostgreSQL in CI)
    import dj_database_url

    DATABASES = {"default": dj_database_url.parse(os.environ["DATABASE_URL"])}
else:
    # Use in-memory SQLite for local testing
    DATABASES = {  # noqa: F405
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

# Use local memory cache for tests
CACHES = {  # noqa: F405
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

# Use fastest password hashers for testing
PASSWORD_HASHERS: list[str] = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

SEATPULSE_CACHE_TTL = 3600  # noqa: F405
SEATPULSE_ASSIGNMENT_MAX_RETRIES = 3  # noqa: F405
SEATPULSE_DEFAULT_TIMEOUT = None  # noqa: F405

# Minimal logging for tests - reduce noise
LOGGING = {  # noqa: F405
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
        "console": {
            "level": "ERROR",
            "class": "logging.StreamHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "ERROR",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "ERROR",
            "propagate": False,
        },
    },
}

# Set ALLOWED_HOSTS for testing
ALLOWED_HOSTS = ["testserver", "localhost", "127.0.0.1"]  # noqa: F405
