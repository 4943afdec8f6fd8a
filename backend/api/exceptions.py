from __future__ import annotations

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class ApiError(Exception):
    """Error carrying its own HTTP status, raised by API views."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "", status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


def _status_for(exc: Exception) -> int:
    for attribute in ("status", "status_code"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _body_from_drf(data) -> dict[str, object]:
    if isinstance(data, dict) and set(data) == {"detail"}:
        return {"message": str(data["detail"])}
    return {"message": "Invalid request.", "errors": data}


def api_exception_handler(exc, context):
    """Map every exception raised in an API view to a JSON error response.

    DRF exceptions keep their status. Anything else uses its ``status`` or
    ``status_code`` attribute, falling back to 500. Server errors are logged
    with the traceback since the exception does not propagate past here.
    """
    response = exception_handler(exc, context)
    if response is not None:
        response.data = _body_from_drf(response.data)
    else:
        status_code = _status_for(exc)
        message = str(exc)
        if not message or (status_code >= 500 and not settings.DEBUG):
            message = INTERNAL_ERROR_MESSAGE
        response = Response({"message": message}, status=status_code)

    if response.status_code >= 500:
        request = context.get("request")
        logger.error(
            "Unhandled API error on %s %s",
            getattr(request, "method", "-"),
            getattr(request, "path", "-"),
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    return response
