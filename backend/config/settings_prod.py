"""
Production settings.

Serves the built SPA from disk and talks to PostgreSQL through the connection
pool over TLS. Startup refuses to continue with development defaults.
"""

from __future__ import annotations

from .env import env_bool, env_int, env_list, parse_database_url, pool_options_from_env, require_env
from .settings_base import *  # noqa: F401,F403

DEBUG = False
FRONTEND_SERVE_MODE = "static"
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", default=[])
CSRF_TRUSTED_ORIGINS = env_list("DJANGO_CSRF_TRUSTED_ORIGINS", default=[])

DATABASES = {
    "default": parse_database_url(
        require_env("DATABASE_URL", "Please check your .env configuration."),
        default_sqlite_path=BASE_DIR / "db.sqlite3",  # noqa: F405
        pool=pool_options_from_env(),
    )
}

if SECRET_KEY == "django-insecure-change-this-in-production":  # noqa: F405
    raise RuntimeError("DJANGO_SECRET_KEY must be set in production.")

if not ALLOWED_HOSTS:
    raise RuntimeError("DJANGO_ALLOWED_HOSTS must be set in production.")

if DATABASES["default"]["ENGINE"] != "django.db.backends.postgresql":
    raise RuntimeError("Production requires PostgreSQL. Set DATABASE_URL accordingly.")

# Hosted Postgres only accepts TLS. An explicit ?sslmode= in DATABASE_URL wins.
DATABASES["default"].setdefault("OPTIONS", {}).setdefault("sslmode", "require")

# Behind the platform's TLS-terminating proxy.
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
SECURE_SSL_REDIRECT = env_bool("DJANGO_SECURE_SSL_REDIRECT", default=True)

# The SPA reads csrftoken from JavaScript, so it must stay readable.
SESSION_COOKIE_SECURE = env_bool("DJANGO_SESSION_COOKIE_SECURE", default=True)
CSRF_COOKIE_SECURE = env_bool("DJANGO_CSRF_COOKIE_SECURE", default=True)
CSRF_COOKIE_HTTPONLY = False

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_HSTS_SECONDS = env_int("DJANGO_SECURE_HSTS_SECONDS", 31536000)
SECURE_HSTS_INCLUDE_SUBDOMAINS = env_bool("DJANGO_SECURE_HSTS_INCLUDE_SUBDOMAINS", default=True)
SECURE_HSTS_PRELOAD = env_bool("DJANGO_SECURE_HSTS_PRELOAD", default=True)
X_FRAME_OPTIONS = "DENY"
