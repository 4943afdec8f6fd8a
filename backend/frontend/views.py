from __future__ import annotations

import logging

from django.conf import settings
from django.http import FileResponse, HttpResponse, HttpResponseNotFound, HttpResponseServerError
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods
from django.views.static import serve

from .assets import find_asset, first_existing, inject_vite_client

logger = logging.getLogger(__name__)

MISSING_INDEX_MESSAGE = "Not Found: Could not find index.html in any of the expected locations"


def _locations(candidates) -> str:
    return "\n".join(str(candidate) for candidate in candidates)


def _serve_dev_template(request) -> HttpResponse:
    candidates = settings.FRONTEND_DEV_INDEX_CANDIDATES
    template_path = first_existing(candidates)
    if template_path is None:
        message = f"Could not find index.html in any of the following locations:\n{_locations(candidates)}"
        logger.error(message)
        return HttpResponseServerError(message, content_type="text/plain; charset=utf-8")

    logger.debug("Serving template from: %s", template_path)
    page = inject_vite_client(
        template_path.read_text(encoding="utf-8"),
        dev_server_url=settings.FRONTEND_DEV_SERVER_URL,
        entry_script=settings.FRONTEND_ENTRY_SCRIPT,
    )
    return HttpResponse(page, content_type="text/html; charset=utf-8")


def _serve_built(request, path: str) -> HttpResponse:
    directory = find_asset(path, settings.FRONTEND_STATIC_DIRS)
    if directory is not None:
        return serve(request, path, document_root=str(directory))

    index_path = first_existing(settings.FRONTEND_INDEX_CANDIDATES)
    if index_path is None:
        logger.warning("%s:\n%s", MISSING_INDEX_MESSAGE, _locations(settings.FRONTEND_INDEX_CANDIDATES))
        return HttpResponseNotFound(MISSING_INDEX_MESSAGE, content_type="text/plain; charset=utf-8")

    logger.debug("Serving index.html from: %s", index_path)
    return FileResponse(index_path.open("rb"), content_type="text/html; charset=utf-8")


@ensure_csrf_cookie
@require_http_methods(["GET", "HEAD"])
def spa(request, path: str = ""):
    """Serve the single-page app for any route the API does not own."""
    if settings.FRONTEND_SERVE_MODE == "vite":
        return _serve_dev_template(request)
    return _serve_built(request, path)
