# hn_core/common/management/commands/ensure_roles.py

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand, CommandError

from hn_core.common.permissions import ALL_ROLES


class Command(BaseCommand):
    help = "Create the contract workflow role groups (idempotent) and optionally grant roles to users."

    def add_arguments(self, parser):
        parser.add_argument(
            "--assign",
            action="append",
            default=[],
            metavar="USERNAME:ROLE",
            help="Add USERNAME to ROLE's group. Repeatable.",
        )

    def handle(self, *args, **options):
        groups = {}
        for name in ALL_ROLES:
            groups[name], created = Group.objects.get_or_create(name=name)
            if created:
                self.stdout.write(f"created role {name}")

        User = get_user_model()
        for pair in options["assign"]:
            username, sep, role = pair.partition(":")
            if not sep or role not in groups:
                raise CommandError(f"Expected USERNAME:ROLE with ROLE in {', '.join(ALL_ROLES)}; got {pair!r}.")
            try:
                user = User.objects.get(username=username)
            except User.DoesNotExist:
                raise CommandError(f"No user named {username!r}.")
            user.groups.add(groups[role])
            self.stdout.write(f"granted {role} to {username}")

        self.stdout.write(self.style.SUCCESS("Roles ensured."))
