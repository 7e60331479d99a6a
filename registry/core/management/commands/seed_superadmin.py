import os

from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth import get_user_model

from registry.core.models import default_permissions

User = get_user_model()


class Command(BaseCommand):
    help = 'Create the first superadmin account (skipped when one already exists)'

    def add_arguments(self, parser):
        parser.add_argument('--username', default=os.getenv('SUPERADMIN_USERNAME', 'superadmin'))
        parser.add_argument('--email', default=os.getenv('SUPERADMIN_EMAIL', 'superadmin@example.com'))
        parser.add_argument('--password', default=os.getenv('SUPERADMIN_PASSWORD'))
        parser.add_argument('--contact-number', default=os.getenv('SUPERADMIN_CONTACT', '9800000000'))

    def handle(self, *args, **options):
        if User.objects.filter(role=User.ROLE_SUPERADMIN).exists():
            self.stdout.write(self.style.WARNING('A superadmin already exists, nothing to do'))
            return

        password = options['password']
        if not password:
            raise CommandError('A password is required (--password or SUPERADMIN_PASSWORD)')

        username = options['username'].strip().lower()
        if User.objects.filter(username=username).exists():
            raise CommandError(f'Username "{username}" is already taken')

        user = User(
            username=username,
            email=options['email'],
            contact_number=options['contact_number'],
            role=User.ROLE_SUPERADMIN,
            permissions={key: True for key in default_permissions()},
            is_staff=True,
            is_superuser=True,
        )
        user.set_password(password)
        user.save()
        self.stdout.write(self.style.SUCCESS(f'Created superadmin "{user.username}"'))
