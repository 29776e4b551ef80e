"""Management command to create the demo account."""

from typing import Any, Final

from django.core.management.base import BaseCommand

from server.apps.users.models import User

_DEMO_EMAIL: Final = 'user@example.com'
_DEMO_PASSWORD: Final = 'password123'  # noqa: S105
_DEMO_NAME: Final = 'Test User'


class Command(BaseCommand):
    """Create a demo user unless it already exists."""

    help = 'Create the demo user (user@example.com / password123)'

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the seed command.

        Args:
            args: Positional arguments (unused).
            options: Command options (unused).
        """
        if User.objects.filter(email=_DEMO_EMAIL).exists():
            self.stdout.write(f'User {_DEMO_EMAIL} already exists')
            return

        User.objects.create_user(
            email=_DEMO_EMAIL,
            password=_DEMO_PASSWORD,
            name=_DEMO_NAME,
        )
        self.stdout.write(
            self.style.SUCCESS(
                f'Created user {_DEMO_EMAIL} with password {_DEMO_PASSWORD}',
            ),
        )
