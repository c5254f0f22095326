"""Time logging and weekly hour reports."""

from __future__ import annotations

from datetime import date

from django.utils import timezone

from workload.exceptions import NotFoundError
from workload.models import Developer, Task, TimeEntry


def iso_week(day: date) -> tuple[int, int]:
    """Return ``(week, year)`` in ISO-8601 numbering.

    Dates near New Year can belong to the neighbouring ISO year, e.g.
    2023-12-31 is week 52 of 2023 and 2024-12-30 is week 1 of 2025.
    """
    year, week, _ = day.isocalendar()
    return week, year


def add_time_entry(
    task_id: str,
    developer_id: int,
    hours: float,
    entry_date: date | None = None,
    description: str = "",
) -> TimeEntry:
    """Log hours for a developer on a task, stamping the ISO week and year.

    Raises:
        NotFoundError: If the task or developer does not exist.
    """
    try:
        task = Task.objects.get(pk=task_id)
    except Task.DoesNotExist:
        raise NotFoundError("Task", task_id)
    try:
        developer = Developer.objects.get(pk=developer_id)
    except Developer.DoesNotExist:
        raise NotFoundError("Developer", developer_id)

    entry_date = entry_date or timezone.localdate()
    week, year = iso_week(entry_date)
    return TimeEntry.objects.create(
        task=task,
        developer=developer,
        hours=float(hours),
        date=entry_date,
        week=week,
        year=year,
        description=description or "",
    )


def build_weekly_report(week: int | None = None, year: int | None = None) -> dict:
    """Group one ISO week's time entries by developer and total their hours.

    ``week`` and ``year`` default to the current ISO week.
    """
    current_week, current_year = iso_week(timezone.localdate())
    week = week or current_week
    year = year or current_year

    entries = (
        TimeEntry.objects.filter(week=week, year=year)
        .select_related("developer", "task")
        .order_by("date", "id")
    )

    by_developer: dict[int, dict] = {}
    for entry in entries:
        dev = entry.developer
        if dev.pk not in by_developer:
            by_developer[dev.pk] = {
                "developer": {
                    "id": dev.pk,
                    "clickup_id": dev.clickup_id,
                    "username": dev.username,
                    "email": dev.email,
                    "initials": dev.initials,
                    "color": dev.color,
                },
                "total_hours": 0.0,
                "tasks": [],
            }
        row = by_developer[dev.pk]
        row["total_hours"] += entry.hours
        row["tasks"].append(
            {
                "task_id": entry.task_id,
                "task_name": entry.task.name,
                "hours": entry.hours,
                "date": entry.date.isoformat(),
            }
        )

    return {"week": week, "year": year, "developers": list(by_developer.values())}
