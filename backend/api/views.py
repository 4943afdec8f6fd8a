from __future__ import annotations

from django.db import DatabaseError
from django.views.decorators.csrf import ensure_csrf_cookie
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from accounts.app_mode import get_app_mode, set_app_mode
from accounts.navigation import build_navigation_items, serialize_navigation
from core.liveness import ping_database

from .serializers import AppModeSerializer, CurrentUserSerializer

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@api_view(["GET"])
def health(request):
    """Liveness of the API process and its database connection."""
    try:
        ping_database()
    except DatabaseError:
        return Response(
            {"status": "degraded", "database": False},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"status": "ok", "database": True})


# The SPA fetches this before any write, so it also hands out the CSRF token.
@ensure_csrf_cookie
@api_view(["GET"])
def navigation(request):
    """Bottom-navigation entries for the session user, app mode and route."""
    user = request.user
    mode = get_app_mode(request)
    items = build_navigation_items(
        user=user,
        mode=mode,
        path=request.query_params.get("path", "/"),
    )
    return Response(
        {
            "mode": mode,
            "role": getattr(user, "role", None) if user.is_authenticated else None,
            "items": serialize_navigation(items),
        }
    )


@api_view(["GET", "POST"])
def app_mode(request):
    if request.method == "POST":
        serializer = AppModeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        set_app_mode(request, serializer.validated_data["mode"])
    return Response({"mode": get_app_mode(request)})


@api_view(["GET"])
def current_user(request):
    if not request.user.is_authenticated:
        return Response({"message": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)
    return Response(CurrentUserSerializer(request.user).data)


@api_view(ALL_METHODS)
def not_found(request):
    raise NotFound("Not Found")
