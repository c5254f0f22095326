"""Celery background tasks for ClickUp webhooks, full syncs, and points."""

import logging

from celery import shared_task

from integrations.clickup import ClickUpClient
from workload.points import recompute_all_points
from workload.sync import run_full_sync
from workload.webhooks import handle_webhook_event

logger = logging.getLogger("workload.tasks")


@shared_task
def process_webhook_event(payload: dict) -> dict:
    """Apply one ClickUp webhook notification.

    The sender was acknowledged before this task was queued, so failures
    are logged and the notification is dropped; nothing is retried.

    Args:
        payload: The notification body (``event``, ``task_id``,
            ``webhook_id``, ``history_items``).

    Returns:
        A dict describing what was processed.
    """
    try:
        with ClickUpClient.from_settings() as client:
            return {"processed": True, **handle_webhook_event(client, payload)}
    except Exception:
        logger.exception(
            "Failed to process webhook event %s for task %s",
            payload.get("event"),
            payload.get("task_id"),
        )
        return {"processed": False, "event": payload.get("event"), "task_id": payload.get("task_id")}


@shared_task
def run_full_sync_task() -> dict:
    """Run a full ClickUp sync, then refresh every developer's points."""
    with ClickUpClient.from_settings() as client:
        result = run_full_sync(client)
    if result["success"]:
        recompute_all_points()
    return result


@shared_task
def recompute_points_task() -> dict:
    """Recompute every developer's workload score."""
    return {"developers": recompute_all_points()}
