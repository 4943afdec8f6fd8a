from __future__ import annotations

import logging
import time

from django.conf import settings

logger = logging.getLogger(__name__)

MAX_LOG_LINE_LENGTH = 80


def is_api_path(path: str) -> bool:
    prefix = settings.API_URL_PREFIX
    return path == prefix or path.startswith(f"{prefix}/")


def truncate_log_line(line: str, limit: int = MAX_LOG_LINE_LENGTH) -> str:
    if len(line) > limit:
        return line[: limit - 1] + "…"
    return line


def _json_body(response) -> str:
    if getattr(response, "streaming", False):
        return ""
    if not response.get("Content-Type", "").startswith("application/json"):
        return ""
    return response.content.decode(response.charset or "utf-8", errors="replace")


class ApiRequestLogMiddleware:
    """Logs one line per API request: method, path, status, duration and body."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not is_api_path(request.path):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        duration_ms = int((time.monotonic() - started) * 1000)

        line = f"{request.method} {request.path} {response.status_code} in {duration_ms}ms"
        body = _json_body(response)
        if body:
            line = f"{line} :: {body}"
        logger.info(truncate_log_line(line))
        return response
