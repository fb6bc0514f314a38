import getpass

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = "Print an ADMIN_CREDENTIALS entry (username:hash) for a dashboard admin."

    def add_arguments(self, parser):
        parser.add_argument("username")
        parser.add_argument("--password", help="Read from a prompt when omitted.")

    def handle(self, *args, **options):
        username = options["username"].strip()
        if not username or ":" in username or "," in username:
            raise CommandError("Username must be non-empty and cannot contain ':' or ','")

        password = options["password"] or getpass.getpass("Password: ")
        if len(password) < 6:
            raise CommandError("Password must be at least 6 characters")

        self.stdout.write(f"{username}:{make_password(password)}")
