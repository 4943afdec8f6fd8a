"""
Test settings: SQLite, no external services.
"""

from __future__ import annotations

from .settings_base import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = "test-secret-key"
ALLOWED_HOSTS = ["testserver", "127.0.0.1", "localhost"]
FRONTEND_SERVE_MODE = "static"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
DB_LIVENESS_MAX_RETRIES = 2
DB_LIVENESS_RETRY_DELAY = 0.0
