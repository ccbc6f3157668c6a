from django.core.management.base import BaseCommand, CommandError
from django.contrib.auth.models import User

from access.models import ApiKey
from access.services import ApiKeyService


class Command(BaseCommand):
    help = 'Create an API key for a user'

    def add_arguments(self, parser):
        parser.add_argument('email', type=str, help='User email address')
        parser.add_argument(
            '--name', '-n',
            type=str,
            default='CLI Generated Key',
            help='Name/label for the API key'
        )
        parser.add_argument(
            '--scopes', '-s',
            nargs='+',
            choices=ApiKey.SCOPES,
            default=['read', 'write'],
            help='Scopes for the API key'
        )
        parser.add_argument(
            '--expires-in-days',
            type=int,
            default=None,
            help='Expire the key after this many days'
        )

    def handle(self, *args, **options):
        user = User.objects.filter(email=options['email']).first()
        if user is None:
            raise CommandError(f"User with email \"{options['email']}\" not found")

        api_key, raw_key = ApiKeyService.create_for_user(
            user,
            options['name'],
            scopes=options['scopes'],
            expires_in_days=options['expires_in_days'],
        )

        self.stdout.write(self.style.SUCCESS(f"API key created successfully for {user.email}"))
        self.stdout.write(f"Key ID: {api_key.id}")
        self.stdout.write(f"Name: {api_key.name}")
        self.stdout.write(f"Scopes: {', '.join(api_key.scopes)}")
        self.stdout.write(self.style.WARNING("\nSave this key - it won't be shown again:\n"))
        self.stdout.write(raw_key)
