"""Session-backed app mode: retail shopping vs. food ordering."""

from __future__ import annotations

from django.db import models

SESSION_KEY = "app_mode"


class AppMode(models.TextChoices):
    SHOPPING = "shopping", "Shopping"
    FOOD = "food", "Food"


DEFAULT_APP_MODE = AppMode.SHOPPING


def get_app_mode(request) -> str:
    session = getattr(request, "session", None)
    if session is None:
        return DEFAULT_APP_MODE.value
    stored = session.get(SESSION_KEY)
    if stored in AppMode.values:
        return stored
    return DEFAULT_APP_MODE.value


def set_app_mode(request, mode: str) -> str:
    if mode not in AppMode.values:
        allowed = ", ".join(AppMode.values)
        raise ValueError(f"Unknown app mode '{mode}'. Expected one of: {allowed}.")
    request.session[SESSION_KEY] = mode
    return mode
