"""Management command to mirror every ClickUp task into the local database.

Run via system cron, e.g. every 30 minutes:
    */30 * * * * cd /srv/workload-sync && venv/bin/python manage.py sync_clickup
"""

from django.core.management.base import BaseCommand, CommandError

from integrations.clickup import ClickUpClient
from workload.points import recompute_all_points
from workload.sync import run_full_sync


class Command(BaseCommand):
    help = "Run a full ClickUp sync and recompute developer workload points."

    def add_arguments(self, parser):
        parser.add_argument(
            "--skip-points",
            action="store_true",
            help="Do not recompute developer points after the sync.",
        )

    def handle(self, *args, **options):
        with ClickUpClient.from_settings() as client:
            result = run_full_sync(client)

        if not result["success"]:
            raise CommandError(f"Sync failed: {result['error']}")

        self.stdout.write(self.style.SUCCESS(f"Synced {result['task_count']} tasks."))

        if not options["skip_points"]:
            count = recompute_all_points()
            self.stdout.write(f"Recomputed points for {count} developer(s).")
