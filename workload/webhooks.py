"""Processing of ClickUp webhook notifications."""

from __future__ import annotations

import hashlib
import hmac
import logging

from django.conf import settings

from integrations.clickup import ClickUpClient
from workload.points import recompute_all_points
from workload.sync import reconcile_task

logger = logging.getLogger("workload.webhooks")

# Events that can change who is assigned to an open task.
POINTS_EVENTS = frozenset({"taskCreated", "taskDeleted", "taskAssigneeUpdated"})


def verify_signature(body: bytes, signature: str) -> bool:
    """Check ClickUp's ``X-Signature`` header against the raw request body."""
    secret = settings.CLICKUP_WEBHOOK_SECRET
    if not secret:
        logger.warning("CLICKUP_WEBHOOK_SECRET is empty, skipping signature verification")
        return True
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature or "")


def handle_webhook_event(client: ClickUpClient, payload: dict) -> dict:
    """Refresh the notified task from ClickUp and reconcile it.

    The notification carries no list context, so newly seen tasks are
    attributed from the fetched task itself. Assignment and lifecycle
    events trigger a full points recompute afterwards.

    Raises:
        ClickUpAPIError: If the task fetch fails.
        django.db.DatabaseError: If reconciliation or the recompute fails.
    """
    event = payload.get("event", "")
    task_id = payload["task_id"]

    remote_task = client.get_task(task_id)
    reconcile_task(remote_task)

    recomputed = event in POINTS_EVENTS
    if recomputed:
        recompute_all_points()

    logger.info("Processed webhook event %s for task %s", event, task_id)
    return {"event": event, "task_id": task_id, "points_recomputed": recomputed}
