"""
Shared Django settings for all environments.
"""

from __future__ import annotations

import os
from pathlib import Path

from .env import env_float, env_int, env_list, load_dotenv, parse_database_url

BASE_DIR = Path(__file__).resolve().parent.parent
REPO_DIR = BASE_DIR.parent
load_dotenv(os.getenv("DJANGO_DOTENV_PATH", str(REPO_DIR / ".env")))

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-change-this-in-production")
DEBUG = False
ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", default=["127.0.0.1", "localhost"])
CSRF_TRUSTED_ORIGINS = env_list("DJANGO_CSRF_TRUSTED_ORIGINS", default=[])

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "accounts",
    "api",
    "core",
    "frontend",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "api.middleware.ApiRequestLogMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": parse_database_url(
        os.getenv("DATABASE_URL"),
        default_sqlite_path=BASE_DIR / "db.sqlite3",
    )
}

# Startup liveness check against the default database.
DB_LIVENESS_MAX_RETRIES = env_int("DB_LIVENESS_MAX_RETRIES", 5)
DB_LIVENESS_RETRY_DELAY = env_float("DB_LIVENESS_RETRY_DELAY", 5.0)

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("DJANGO_TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "accounts.User"

DEFAULT_ADMIN_USERNAME = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "")

# HTTP listener.
SERVER_HOST = os.getenv("HOST", "0.0.0.0")
SERVER_PORT = env_int("PORT", 5000)

API_URL_PREFIX = "/api"
DATA_UPLOAD_MAX_MEMORY_SIZE = env_int("APP_MAX_BODY_BYTES", 50 * 1024 * 1024)

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "api.parsers.BoundedJSONParser",
    ],
    "EXCEPTION_HANDLER": "api.exceptions.api_exception_handler",
}

# Front-end bundle. "vite" proxies module loading to the Vite dev server,
# "static" serves the built bundle.
FRONTEND_SERVE_MODE = "static"
FRONTEND_DEV_SERVER_URL = os.getenv("VITE_DEV_SERVER_URL", "http://localhost:3000").rstrip("/")
FRONTEND_ENTRY_SCRIPT = "/src/main.tsx"
FRONTEND_STATIC_DIRS = [
    REPO_DIR / "dist" / "public",
    REPO_DIR / "client" / "public",
    REPO_DIR / "client",
]
FRONTEND_INDEX_CANDIDATES = [
    REPO_DIR / "dist" / "public" / "index.html",
    REPO_DIR / "client" / "public" / "index.html",
    REPO_DIR / "client" / "index.html",
]
FRONTEND_DEV_INDEX_CANDIDATES = [
    REPO_DIR / "client" / "index.html",
    REPO_DIR / "client" / "public" / "index.html",
    REPO_DIR / "dist" / "public" / "index.html",
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {
            "format": "%(asctime)s [%(name)s] %(levelname)s %(message)s",
            "datefmt": "%H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO").upper(),
            "propagate": False,
        },
    },
}
