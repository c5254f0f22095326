"""View functions for sync control, ClickUp webhooks, developers, and reports."""

import json
import logging
import math
from datetime import date

from django.conf import settings
from django.db.models import Count, Q
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST
from rest_framework.decorators import api_view
from rest_framework.response import Response

from integrations.clickup import DEFAULT_WEBHOOK_EVENTS, ClickUpAPIError, ClickUpClient, ms_to_hours
from workload import app_settings
from workload.exceptions import NotFoundError
from workload.models import Developer, SyncLog, Task
from workload.points import developer_with_lowest_points, recompute_all_points
from workload.reports import add_time_entry, build_weekly_report
from workload.sync import run_full_sync
from workload.tasks import process_webhook_event
from workload.webhooks import verify_signature

logger = logging.getLogger("workload.views")

MAX_HOURS_PER_ENTRY = 24


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _developer_dict(dev: Developer) -> dict:
    return {
        "id": dev.pk,
        "clickup_id": dev.clickup_id,
        "username": dev.username,
        "email": dev.email,
        "initials": dev.initials,
        "color": dev.color,
        "profile_picture": dev.profile_picture,
        "total_points": dev.total_points,
    }


def _task_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "name": task.name,
        "status": task.status,
        "status_color": task.status_color,
        "priority": task.priority,
        "url": task.url,
        "points": task.points,
        "time_estimate_hours": ms_to_hours(task.time_estimate),
        "time_spent_hours": ms_to_hours(task.time_spent),
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "date_closed": task.date_closed.isoformat() if task.date_closed else None,
        "list_id": task.list_id,
        "list_name": task.list_name,
    }


def _remote_error_response(e: ClickUpAPIError) -> Response:
    logger.error("ClickUp API error: %s", e)
    return Response({"success": False, "error": f"ClickUp API error: {e.detail}"}, status=502)


# ---------------------------------------------------------------------------
# Core views
# ---------------------------------------------------------------------------

def health_check(request):
    """Return a simple health-check response."""
    return JsonResponse({"status": "ok"})


@csrf_exempt
@require_POST
def clickup_webhook(request):
    """Acknowledge a ClickUp webhook and queue it for background processing."""
    if not verify_signature(request.body, request.headers.get("X-Signature", "")):
        return JsonResponse({"received": False, "error": "invalid signature"}, status=403)

    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, ValueError):
        return JsonResponse({"received": False, "error": "invalid JSON"}, status=400)

    if not isinstance(payload, dict) or not payload.get("task_id") or not payload.get("event"):
        return JsonResponse({"received": False, "error": "event and task_id are required"}, status=400)

    logger.info("Received webhook event %s for task %s", payload["event"], payload["task_id"])
    process_webhook_event.delay(payload)
    return JsonResponse({"received": True})


# ---------------------------------------------------------------------------
# Tasks and sync
# ---------------------------------------------------------------------------

@api_view(["GET"])
def task_list(request):
    """Return synced tasks, optionally filtered by status or developer."""
    tasks = Task.objects.prefetch_related("developers", "tags")

    status = request.query_params.get("status")
    developer_id = request.query_params.get("developer")
    if status:
        tasks = tasks.filter(status=status)
    if developer_id:
        tasks = tasks.filter(developers__id=developer_id)

    data = [
        {
            **_task_dict(t),
            "developers": [_developer_dict(d) for d in t.developers.all()],
            "tags": [{"name": tag.name, "fg_color": tag.fg_color, "bg_color": tag.bg_color} for tag in t.tags.all()],
        }
        for t in tasks
    ]
    return Response({"success": True, "data": data, "count": len(data)})


@api_view(["GET"])
def task_detail(request, task_id):
    task = Task.objects.filter(pk=task_id).prefetch_related("developers", "tags", "custom_fields").first()
    if task is None:
        return Response({"success": False, "error": "Task not found"}, status=404)

    return Response({
        "success": True,
        "data": {
            **_task_dict(task),
            "description": task.description,
            "developers": [_developer_dict(d) for d in task.developers.all()],
            "tags": [{"name": tag.name, "fg_color": tag.fg_color, "bg_color": tag.bg_color} for tag in task.tags.all()],
            "custom_fields": [
                {"field_id": f.field_id, "name": f.name, "type": f.type, "value": f.value}
                for f in task.custom_fields.all()
            ],
        },
    })


@api_view(["GET"])
def task_stats(request):
    """Return open/closed counts and a per-status breakdown."""
    total = Task.objects.count()
    open_count = Task.objects.filter(date_closed__isnull=True).count()
    by_status = list(Task.objects.order_by().values("status").annotate(count=Count("id")).order_by("status"))
    return Response({
        "success": True,
        "data": {
            "total_tasks": total,
            "open_tasks": open_count,
            "closed_tasks": total - open_count,
            "tasks_by_status": by_status,
        },
    })


@api_view(["POST"])
def sync_tasks(request):
    """Run a full sync now and refresh developer points when it succeeds."""
    with ClickUpClient.from_settings() as client:
        result = run_full_sync(client)

    if not result["success"]:
        return Response({"success": False, "error": result["error"]}, status=500)

    recompute_all_points()
    return Response({
        "success": True,
        "message": f"Successfully synced {result['task_count']} tasks",
        "task_count": result["task_count"],
    })


@api_view(["GET"])
def sync_logs(request):
    logs = SyncLog.objects.all()[:50]
    return Response({
        "success": True,
        "data": [
            {
                "id": log.pk,
                "type": log.type,
                "status": log.status,
                "tasks_count": log.tasks_count,
                "error_message": log.error_message,
                "created_at": log.created_at.isoformat(),
            }
            for log in logs
        ],
    })


# ---------------------------------------------------------------------------
# Developers and reports
# ---------------------------------------------------------------------------

@api_view(["GET"])
def developer_list(request):
    """Return developers, least loaded first, with their open task counts."""
    developers = Developer.objects.annotate(
        open_tasks=Count("tasks", filter=Q(tasks__date_closed__isnull=True)),
    ).order_by("total_points", "username")
    data = [{**_developer_dict(d), "open_tasks": d.open_tasks} for d in developers]
    return Response({"success": True, "data": data, "count": len(data)})


@api_view(["GET"])
def developer_detail(request, developer_id):
    developer = Developer.objects.filter(pk=developer_id).first()
    if developer is None:
        return Response({"success": False, "error": "Developer not found"}, status=404)

    entries = developer.time_entries.select_related("task").order_by("-date", "-id")
    return Response({
        "success": True,
        "data": {
            **_developer_dict(developer),
            "tasks": [_task_dict(t) for t in developer.tasks.all()],
            "time_entries": [
                {
                    "id": e.pk,
                    "task_id": e.task_id,
                    "task_name": e.task.name,
                    "hours": e.hours,
                    "date": e.date.isoformat(),
                    "week": e.week,
                    "year": e.year,
                    "description": e.description,
                }
                for e in entries
            ],
        },
    })


@api_view(["GET"])
def developer_lowest_points(request):
    developer = developer_with_lowest_points()
    if developer is None:
        return Response({"success": False, "error": "No developers found"}, status=404)
    return Response({"success": True, "data": _developer_dict(developer)})


@api_view(["POST"])
def recompute_points(request):
    count = recompute_all_points()
    return Response({"success": True, "developers": count})


@api_view(["GET"])
def weekly_report(request):
    """Return hours per developer for ``?week=&year=`` (default: this ISO week)."""
    try:
        week = int(request.query_params["week"]) if request.query_params.get("week") else None
        year = int(request.query_params["year"]) if request.query_params.get("year") else None
    except ValueError:
        return Response({"success": False, "error": "week and year must be integers"}, status=400)

    if week is not None and not 1 <= week <= 53:
        return Response({"success": False, "error": "week must be between 1 and 53"}, status=400)

    return Response({"success": True, "data": build_weekly_report(week, year)})


@api_view(["POST"])
def time_entry_create(request):
    """Log hours from JSON body (task_id, developer_id, hours required)."""
    data = request.data or {}
    task_id = data.get("task_id")
    developer_id = data.get("developer_id")
    if not task_id or not developer_id or data.get("hours") in (None, ""):
        return Response(
            {"success": False, "error": "task_id, developer_id, and hours are required"},
            status=400,
        )

    try:
        developer_id = int(developer_id)
        hours = float(data["hours"])
        entry_date = date.fromisoformat(data["date"]) if data.get("date") else None
    except (TypeError, ValueError):
        return Response(
            {"success": False, "error": "developer_id must be an integer, hours a number and date YYYY-MM-DD"},
            status=400,
        )

    if not math.isfinite(hours) or not 0 < hours <= MAX_HOURS_PER_ENTRY:
        return Response(
            {"success": False, "error": f"hours must be greater than 0 and at most {MAX_HOURS_PER_ENTRY}"},
            status=400,
        )

    try:
        entry = add_time_entry(task_id, developer_id, hours, entry_date, data.get("description") or "")
    except NotFoundError as e:
        return Response({"success": False, "error": str(e)}, status=404)

    return Response(
        {
            "success": True,
            "data": {
                "id": entry.pk,
                "task_id": entry.task_id,
                "developer_id": entry.developer_id,
                "hours": entry.hours,
                "date": entry.date.isoformat(),
                "week": entry.week,
                "year": entry.year,
                "description": entry.description,
            },
            "message": "Time entry added successfully",
        },
        status=201,
    )


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@api_view(["GET", "POST", "PUT"])
def settings_collection(request):
    """GET lists all settings; POST upserts one; PUT upserts many."""
    if request.method == "GET":
        return Response({"success": True, "data": app_settings.all_settings()})

    data = request.data or {}
    if request.method == "PUT":
        if not isinstance(data, dict) or not data:
            return Response({"success": False, "error": "a non-empty object is required"}, status=400)
        count = app_settings.update_settings(data)
        return Response({"success": True, "message": f"{count} settings updated successfully"})

    if not data.get("key") or data.get("value") is None:
        return Response({"success": False, "error": "key and value are required"}, status=400)

    setting = app_settings.upsert_setting(data["key"], data["value"], data.get("description"))
    return Response({
        "success": True,
        "data": {"key": setting.key, "value": setting.value, "description": setting.description},
    })


@api_view(["GET", "DELETE"])
def setting_detail(request, key):
    try:
        if request.method == "GET":
            setting = app_settings.get_setting(key)
            return Response({"success": True, "data": {"key": setting.key, "value": setting.value}})

        app_settings.delete_setting(key)
        return Response({"success": True, "message": "Setting deleted successfully"})
    except NotFoundError as e:
        return Response({"success": False, "error": str(e)}, status=404)


# ---------------------------------------------------------------------------
# Webhook management
# ---------------------------------------------------------------------------

@api_view(["GET"])
def webhook_list(request):
    try:
        with ClickUpClient.from_settings() as client:
            webhooks = client.get_webhooks()
    except ClickUpAPIError as e:
        return _remote_error_response(e)
    return Response({"success": True, "data": webhooks, "count": len(webhooks)})


@api_view(["POST"])
def webhook_register(request):
    """Register ``CLICKUP_WEBHOOK_URL`` for the default task events."""
    try:
        with ClickUpClient.from_settings() as client:
            webhook = client.create_webhook(settings.CLICKUP_WEBHOOK_URL, DEFAULT_WEBHOOK_EVENTS)
    except ClickUpAPIError as e:
        return _remote_error_response(e)
    return Response({"success": True, "data": webhook, "message": "Webhook registered successfully"})


@api_view(["DELETE"])
def webhook_delete(request, webhook_id):
    try:
        with ClickUpClient.from_settings() as client:
            client.delete_webhook(webhook_id)
    except ClickUpAPIError as e:
        return _remote_error_response(e)
    return Response({"success": True, "message": "Webhook deleted successfully"})
