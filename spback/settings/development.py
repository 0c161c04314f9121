"""
Development settings for spback project.
"""

import environ

from .base import *

env = environ.Env()

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

# Development-specific allowed hosts
ALLOWED_HOSTS.extend(["localhost", "127.0.0.1", "0.0.0.0"])

# Database
# Uses DATABASE_URL from .env file (defaults to SQLite for development)
# To use PostgreSQL, update DATABASE_URL in .env file

# Short cache TTL so manual edits show up quickly
SEATPULSE_CACHE_TTL = env("SEATPULSE_CACHE_TTL", default=60, cast=int)

# Development-specific logging
LOGGING["handlers"]["console"]["level"] = "DEBUG"
