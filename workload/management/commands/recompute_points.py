"""Django management command to recompute every developer's workload points."""

from django.core.management.base import BaseCommand

from workload.points import recompute_all_points


class Command(BaseCommand):
    help = "Recompute workload points for all developers from their open tasks"

    def handle(self, *args, **options):
        count = recompute_all_points()
        self.stdout.write(self.style.SUCCESS(f"Recomputed points for {count} developer(s)."))
