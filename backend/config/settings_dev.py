"""
Development settings.
"""

from __future__ import annotations

from .env import parse_database_url, pool_options_from_env, require_env
from .settings_base import *  # noqa: F401,F403

DEBUG = True
FRONTEND_SERVE_MODE = "vite"
DEFAULT_ADMIN_PASSWORD = DEFAULT_ADMIN_PASSWORD or "admin123"  # noqa: F405

DATABASES = {
    "default": parse_database_url(
        require_env("DATABASE_URL", "Please check your .env configuration."),
        default_sqlite_path=BASE_DIR / "db.sqlite3",  # noqa: F405
        pool=pool_options_from_env(),
    )
}
