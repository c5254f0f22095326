"""Reconcile ClickUp task snapshots into local storage."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from django.conf import settings
from django.db import transaction

from integrations.clickup import ClickUpClient
from workload.models import CustomField, Developer, SyncLog, Tag, Task

logger = logging.getLogger("workload.sync")

POINTS_FIELD_NAMES = ("points", "story points")
UNKNOWN_LIST_ID = "unknown"
UNKNOWN_LIST_NAME = "Unknown List"


def _ms_to_datetime(value) -> datetime | None:
    """Convert a ClickUp millisecond-epoch string to an aware UTC datetime."""
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def _coerce_points(value) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value) if isinstance(value, int) else int(float(value))
    except (TypeError, ValueError, OverflowError):
        logger.warning("Ignoring non-numeric points value %r", value)
        return None


def extract_points(custom_fields: list[dict] | None) -> int | None:
    """Return the value of the first "points"/"story points" custom field.

    Names are matched case-insensitively and the first match wins, even
    when its value is empty.
    """
    for field in custom_fields or []:
        if (field.get("name") or "").strip().lower() in POINTS_FIELD_NAMES:
            return _coerce_points(field.get("value"))
    return None


def _upsert_developer(assignee: dict) -> Developer:
    developer, created = Developer.objects.update_or_create(
        clickup_id=assignee["id"],
        defaults={
            "username": assignee.get("username") or "",
            "email": assignee.get("email") or "",
            "initials": assignee.get("initials") or "",
            "color": assignee.get("color") or "",
            "profile_picture": assignee.get("profilePicture") or None,
        },
    )
    if created:
        logger.info("Created developer %s", developer)
    return developer


def _replace_children(task: Task, remote_task: dict) -> None:
    """Swap the task's tags and custom fields for the remote set.

    Runs under a row lock on the task so concurrent reconciliations of the
    same task cannot interleave their delete and insert phases.
    """
    with transaction.atomic():
        Task.objects.select_for_update().only("id").get(pk=task.pk)

        Tag.objects.filter(task=task).delete()
        CustomField.objects.filter(task=task).delete()

        Tag.objects.bulk_create(
            [
                Tag(
                    task=task,
                    name=tag.get("name") or "",
                    fg_color=tag.get("tag_fg") or "",
                    bg_color=tag.get("tag_bg") or "",
                )
                for tag in remote_task.get("tags") or []
            ]
        )
        CustomField.objects.bulk_create(
            [
                CustomField(
                    task=task,
                    field_id=str(field.get("id", "")),
                    name=field.get("name") or "",
                    type=field.get("type") or "",
                    value=json.dumps(field["value"]) if field.get("value") is not None else None,
                )
                for field in remote_task.get("custom_fields") or []
            ]
        )


def reconcile_task(
    remote_task: dict,
    list_id: str | None = None,
    list_name: str | None = None,
) -> Task:
    """Apply one ClickUp task snapshot to local storage.

    Upserts the assignees and the task, sets the task's assignee set to
    exactly the remote one, and rebuilds its tags and custom fields.
    Calling this twice with the same snapshot leaves storage unchanged.

    Args:
        remote_task: Task payload as returned by the ClickUp API.
        list_id: Owning list ID, used only when the task is first created.
        list_name: Owning list name, used only when the task is first created.

    Returns:
        The reconciled ``Task``.

    Raises:
        django.db.DatabaseError: If any write fails. Nothing is rolled back
            for this task beyond the tag/custom-field replacement.
    """
    developers = [_upsert_developer(assignee) for assignee in remote_task.get("assignees") or []]

    status = remote_task.get("status") or {}
    priority = remote_task.get("priority") or {}
    fields = {
        "name": remote_task.get("name") or "",
        "description": remote_task.get("description") or None,
        "status": status.get("status") or "",
        "status_color": status.get("color") or "",
        "priority": priority.get("priority") or None,
        "priority_color": priority.get("color") or None,
        "url": remote_task.get("url") or "",
        "time_estimate": remote_task.get("time_estimate"),
        "time_spent": remote_task.get("time_spent"),
        "points": extract_points(remote_task.get("custom_fields")),
        "due_date": _ms_to_datetime(remote_task.get("due_date")),
        "date_created": _ms_to_datetime(remote_task.get("date_created")),
        "date_updated": _ms_to_datetime(remote_task.get("date_updated")),
        "date_closed": _ms_to_datetime(remote_task.get("date_closed")),
    }

    creator = remote_task.get("creator") or {}
    remote_list = remote_task.get("list") or {}
    remote_space = remote_task.get("space") or {}
    create_only = {
        "creator_id": creator.get("id"),
        "creator_username": creator.get("username") or "",
        "creator_email": creator.get("email") or "",
        "list_id": list_id or remote_list.get("id") or UNKNOWN_LIST_ID,
        "list_name": list_name or remote_list.get("name") or UNKNOWN_LIST_NAME,
        "space_id": remote_space.get("id") or settings.CLICKUP_SPACE_ID,
    }

    task, created = Task.objects.update_or_create(
        id=str(remote_task["id"]),
        defaults=fields,
        create_defaults={**fields, **create_only},
    )
    logger.debug("%s task %s", "Created" if created else "Updated", task.id)

    task.developers.set(developers)
    _replace_children(task, remote_task)
    return task


def run_full_sync(client: ClickUpClient) -> dict:
    """Reconcile every task of every list in the space.

    Lists and their tasks are processed sequentially in the order ClickUp
    returns them. One ``SyncLog`` row records the outcome. Work done before
    a failure is kept; re-running is safe because reconciliation is
    idempotent.

    Returns:
        ``{"success": True, "task_count": n}`` or
        ``{"success": False, "task_count": 0, "error": message}``.
    """
    logger.info("Starting full sync from ClickUp")
    synced = 0

    try:
        for task_list, remote_tasks in client.iter_list_tasks():
            for remote_task in remote_tasks:
                reconcile_task(remote_task, list_id=task_list["id"], list_name=task_list.get("name"))
                synced += 1
                if synced % 10 == 0:
                    logger.info("Synced %d tasks so far", synced)
    except Exception as e:
        logger.exception("Full sync failed after %d tasks", synced)
        SyncLog.objects.create(
            type=SyncLog.FULL_SYNC,
            status=SyncLog.Status.ERROR,
            error_message=str(e),
        )
        return {"success": False, "task_count": 0, "error": str(e)}

    SyncLog.objects.create(
        type=SyncLog.FULL_SYNC,
        status=SyncLog.Status.SUCCESS,
        tasks_count=synced,
    )
    logger.info("Full sync completed: %d tasks synced", synced)
    return {"success": True, "task_count": synced}
