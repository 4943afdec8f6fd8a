from __future__ import annotations

import logging

from django.conf import settings
from django.db import DatabaseError, connections

from .models import User

logger = logging.getLogger(__name__)


def ensure_default_admin(username: str | None = None, password: str | None = None) -> bool:
    """Create the default admin account when it does not exist yet.

    Returns True when a user was created. Skipped without a password.
    """
    username = username or settings.DEFAULT_ADMIN_USERNAME
    password = settings.DEFAULT_ADMIN_PASSWORD if password is None else password
    if not password:
        logger.info("No default admin password configured; skipping admin bootstrap.")
        return False

    user, created = User.objects.get_or_create(
        username=username,
        defaults={
            "first_name": "System",
            "last_name": "Admin",
            "role": User.Role.ADMIN,
            "is_staff": True,
            "is_superuser": True,
            "is_active": True,
        },
    )
    if created:
        user.set_password(password)
        user.save(update_fields=["password"])
        logger.info("Created default admin user '%s'.", username)
    return created


def bootstrap_default_admin() -> None:
    try:
        ensure_default_admin()
    except DatabaseError:
        logger.exception("Error initializing database with the default admin account.")
    finally:
        connections.close_all()
