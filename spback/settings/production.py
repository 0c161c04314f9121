"""
Production settings for spback project.
"""

import warnings

import environ
import redis

from .base import *

env = environ.Env()

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG: bool = False

# Production allowed hosts - should be set via environment variable
ALLOWED_HOSTS: list[str] = env.list("ALLOWED_HOSTS", default=[])

# Production logging - more restrictive
LOGGING["handlers"]["file"]["level"] = "WARNING"
LOGGING["handlers"]["console"]["level"] = "ERROR"
LOGGING["root"]["level"] = "WARNING"

# Cache configuration for production
# Redis is shared by every worker so invalidations are seen everywhere.
# Falls back to database cache if Redis is unavailable
redis_url = env("REDIS_URL", default="redis://127.0.0.1:6379/1")
try:
    redis.from_url(redis_url).ping()

    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": redis_url,
            "TIMEOUT": 300,  # 5 minutes default timeout
            "KEY_PREFIX": env("CACHE_KEY_PREFIX", default="seatpulse_prod"),
            "VERSION": 1,
        },
    }

except (redis.ConnectionError, redis.TimeoutError) as e:
    warnings.warn(
        f"Redis connection failed ({e}), falling back to database cache. "
        "Run 'manage.py createcachetable' before first use.",
        RuntimeWarning,
        stacklevel=2,
    )

    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.db.DatabaseCache",
            "LOCATION": "seatpulse_cache_table",
            "TIMEOUT": 300,
            "OPTIONS": {
                "MAX_ENTRIES": 10000,
                "CULL_FREQUENCY": 4,
            },
            "KEY_PREFIX": env("CACHE_KEY_PREFIX", default="seatpulse_prod"),
            "VERSION": 1,
        }
    }
