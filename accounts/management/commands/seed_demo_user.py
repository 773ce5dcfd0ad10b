from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from practice.services import create_statistics_for


class Command(BaseCommand):
    help = "Create (or keep) a demo account with an empty statistics row."

    def add_arguments(self, parser):
        parser.add_argument("--username", default="testuser")
        parser.add_argument("--email", default="test@example.com")
        parser.add_argument("--password", default="testpassword123")

    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip().lower()
        with transaction.atomic():
            user = User.objects.filter(email__iexact=email).first()
            created = user is None
            if created:
                user = User.objects.create_user(
                    username=options["username"], email=email, password=options["password"]
                )
            create_statistics_for(user.pk)

        verb = "Created" if created else "Kept existing"
        self.stdout.write(self.style.SUCCESS(f"{verb} demo user {user.username} <{user.email}>"))
