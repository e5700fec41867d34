from __future__ import annotations

import getpass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser
from django.db import transaction

from travelxguide.users.services import generate_username
from travelxguide.users.services import mark_verified


class Command(BaseCommand):
    help = "Create a platform admin, or promote an existing account to admin"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("email", help="Email of the account to promote or create")
        parser.add_argument("--name", dest="name", default="", help="Full name")
        parser.add_argument(
            "--password",
            dest="password",
            help="Password for a new account (omit to be prompted securely)",
        )
        parser.add_argument(
            "--staff",
            action="store_true",
            help="Also grant Django admin site access",
        )

    @transaction.atomic
    def handle(self, *args, **options) -> None:
        user_model = get_user_model()
        email: str = options["email"].strip().lower()
        user = user_model.objects.filter(email__iexact=email).first()

        if user is None:
            pwd: str | None = options.get("password")
            if not pwd:
                pwd = getpass.getpass("Password: ")
                confirm = getpass.getpass("Confirm:  ")
                if pwd != confirm:
                    msg = "Passwords do not match."
                    raise CommandError(msg)
            user = user_model.objects.create_user(
                username=generate_username(email),
                email=email,
                password=pwd,
                name=options.get("name") or email.split("@", 1)[0],
            )
            created = True
        else:
            created = False

        user.role = user_model.Role.ADMIN
        user.is_blocked = False
        user.is_active = True
        if options.get("staff"):
            user.is_staff = True
        user.save()
        if not user.is_account_verified:
            mark_verified(user)

        verb = "Created" if created else "Promoted"
        self.stdout.write(self.style.SUCCESS(f"{verb} admin {user.email}"))
