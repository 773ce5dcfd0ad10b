import datetime as dt

from django.core.management.base import BaseCommand, CommandError

from practice.conf import practice_setting
from practice.services import abandon_stale_sessions


class Command(BaseCommand):
    help = "Mark in-progress practice sessions that were never ended as abandoned."

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than-minutes",
            type=int,
            default=None,
            help="Only sessions started at least this many minutes ago "
                 "(default: PRACTICE['STALE_SESSION_MINUTES']).",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            help="Abandon every in-progress session regardless of age.",
        )

    def handle(self, *args, **options):
        if options["all"]:
            older_than = None
        else:
            minutes = options["older_than_minutes"]
            if minutes is None:
                minutes = practice_setting("STALE_SESSION_MINUTES")
            if minutes < 0:
                raise CommandError("--older-than-minutes must be >= 0")
            older_than = dt.timedelta(minutes=minutes)

        count = abandon_stale_sessions(older_than)
        self.stdout.write(self.style.SUCCESS(f"Abandoned {count} session(s)."))
