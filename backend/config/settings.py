"""
Settings entry point. DJANGO_ENV picks the module:

- development (default): Vite dev server, DATABASE_URL still required
- production / prod: built SPA, PostgreSQL over TLS
- test: in-memory SQLite, used by manage.py test and pytest
"""

from __future__ import annotations

import os

django_env = os.getenv("DJANGO_ENV", "development").strip().lower()

if django_env in {"production", "prod"}:
    from .settings_prod import *  # noqa: F401,F403
elif django_env == "test":
    from .settings_test import *  # noqa: F401,F403
else:
    from .settings_dev import *  # noqa: F401,F403
