"""Management command to register, list, and delete ClickUp webhooks."""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from integrations.clickup import DEFAULT_WEBHOOK_EVENTS, ClickUpAPIError, ClickUpClient


class Command(BaseCommand):
    help = "Manage the ClickUp webhooks that notify this service of task changes."

    def add_arguments(self, parser):
        subparsers = parser.add_subparsers(dest="action", required=True)

        register = subparsers.add_parser("register", help="Register a webhook for task events.")
        register.add_argument("--url", default=None, help="Callback URL (default: CLICKUP_WEBHOOK_URL).")
        register.add_argument(
            "--event",
            action="append",
            dest="events",
            help="Event name to subscribe to; repeatable (default: all task events).",
        )

        subparsers.add_parser("list", help="List webhooks registered on the workspace.")

        delete = subparsers.add_parser("delete", help="Delete a webhook by ID.")
        delete.add_argument("webhook_id")

    def handle(self, *args, **options):
        action = options["action"]
        try:
            with ClickUpClient.from_settings() as client:
                if action == "register":
                    url = options["url"] or settings.CLICKUP_WEBHOOK_URL
                    webhook = client.create_webhook(url, options["events"] or DEFAULT_WEBHOOK_EVENTS)
                    webhook_id = webhook.get("id") or webhook.get("webhook", {}).get("id", "?")
                    self.stdout.write(self.style.SUCCESS(f"Registered webhook {webhook_id} -> {url}"))
                elif action == "list":
                    webhooks = client.get_webhooks()
                    if not webhooks:
                        self.stdout.write("No webhooks registered.")
                    for webhook in webhooks:
                        events = ", ".join(webhook.get("events", []))
                        self.stdout.write(f"{webhook.get('id')}  {webhook.get('endpoint')}  [{events}]")
                else:
                    client.delete_webhook(options["webhook_id"])
                    self.stdout.write(self.style.SUCCESS(f"Deleted webhook {options['webhook_id']}"))
        except ClickUpAPIError as e:
            raise CommandError(str(e))
