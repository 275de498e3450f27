"""
Management command: activate_reporter_subscriptions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Turns on ``subscription_active`` for every reporter whose scheduled
``subscription_activation_date`` has passed.  Meant to run from cron.

A row that fails to update is logged and counted; the rest of the
batch still runs.  The command exits non-zero when any row failed.

Usage::

    python manage.py activate_reporter_subscriptions
    python manage.py activate_reporter_subscriptions --dry-run
"""

from django.core.management.base import BaseCommand, CommandError

from reporters.services import ReporterSubscriptionService


class Command(BaseCommand):
    help = "Activate reporter subscriptions whose scheduled activation date has passed."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report how many subscriptions are due.",
        )

    def handle(self, *args, **options):
        if options["dry_run"]:
            due = ReporterSubscriptionService.due_for_activation().count()
            self.stdout.write(f"{due} reporter subscription(s) due for activation.")
            return

        activated, failed = ReporterSubscriptionService.activate_due_subscriptions()
        self.stdout.write(self.style.SUCCESS(f"Activated {activated} reporter subscription(s)."))
        if failed:
            raise CommandError(f"{failed} reporter subscription(s) failed to activate.")
