from __future__ import annotations

import os
import sys

import django
from django.core.exceptions import ImproperlyConfigured


def main() -> int:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    try:
        django.setup()
    except (ImproperlyConfigured, RuntimeError, ValueError) as exc:
        print(f"Startup failed: {exc}", file=sys.stderr)
        return 1

    from django.conf import settings
    from django.core.wsgi import get_wsgi_application

    from accounts.bootstrap import bootstrap_default_admin
    from core.liveness import LivenessCheck
    from core.server import create_server, serve

    application = get_wsgi_application()
    bootstrap_default_admin()
    LivenessCheck(
        max_retries=settings.DB_LIVENESS_MAX_RETRIES,
        retry_delay=settings.DB_LIVENESS_RETRY_DELAY,
    ).start()

    httpd = create_server(settings.SERVER_HOST, settings.SERVER_PORT, application)
    mode = "development" if settings.DEBUG else "production"
    return serve(httpd, mode=mode)


if __name__ == "__main__":
    sys.exit(main())
