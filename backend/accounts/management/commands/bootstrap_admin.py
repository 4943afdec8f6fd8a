from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand

from accounts.bootstrap import ensure_default_admin


class Command(BaseCommand):
    help = "Create the default admin user if not present."

    def add_arguments(self, parser):
        parser.add_argument("--username", default=settings.DEFAULT_ADMIN_USERNAME)
        parser.add_argument("--password", default=None)

    def handle(self, *args, **options):
        username = options["username"]
        password = options["password"]
        if password is None:
            password = settings.DEFAULT_ADMIN_PASSWORD
        if not password:
            self.stdout.write(self.style.WARNING("No admin password given. Set DEFAULT_ADMIN_PASSWORD or pass --password."))
            return

        if ensure_default_admin(username=username, password=password):
            self.stdout.write(self.style.SUCCESS(f"Created default admin user: {username}"))
            return

        self.stdout.write(self.style.WARNING("Admin user already exists. Skipped."))
