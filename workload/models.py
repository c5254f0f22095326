"""Local mirror of ClickUp developers, tasks, and their time logs."""

from django.db import models


class Developer(models.Model):
    """A ClickUp assignee. ``total_points`` is only written by the points calculator."""

    clickup_id = models.BigIntegerField(unique=True)
    username = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    initials = models.CharField(max_length=10, blank=True, default="")
    color = models.CharField(max_length=20, blank=True, default="")
    profile_picture = models.URLField(max_length=500, blank=True, null=True)
    total_points = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["total_points", "username"]

    def __str__(self) -> str:
        return f"{self.username} ({self.clickup_id})"


class Task(models.Model):
    """A ClickUp task keyed by its ClickUp ID. ``date_closed`` is null while open."""

    id = models.CharField(max_length=64, primary_key=True)
    name = models.CharField(max_length=1024)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=100)
    status_color = models.CharField(max_length=20, blank=True, default="")
    priority = models.CharField(max_length=50, blank=True, null=True)
    priority_color = models.CharField(max_length=20, blank=True, null=True)
    url = models.URLField(max_length=500, blank=True, default="")
    time_estimate = models.BigIntegerField(blank=True, null=True)
    time_spent = models.BigIntegerField(blank=True, null=True)
    points = models.IntegerField(blank=True, null=True)
    due_date = models.DateTimeField(blank=True, null=True)
    date_created = models.DateTimeField(blank=True, null=True)
    date_updated = models.DateTimeField(blank=True, null=True)
    date_closed = models.DateTimeField(blank=True, null=True, db_index=True)
    creator_id = models.BigIntegerField(blank=True, null=True)
    creator_username = models.CharField(max_length=255, blank=True, default="")
    creator_email = models.EmailField(blank=True, default="")
    list_id = models.CharField(max_length=64)
    list_name = models.CharField(max_length=255)
    space_id = models.CharField(max_length=64, blank=True, default="")
    developers = models.ManyToManyField(Developer, related_name="tasks", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date_created"]

    def __str__(self) -> str:
        return f"{self.id}: {self.name}"

    @property
    def is_open(self) -> bool:
        return self.date_closed is None


class Tag(models.Model):
    """Task tag, rebuilt on every reconciliation of its task."""

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="tags")
    name = models.CharField(max_length=255)
    fg_color = models.CharField(max_length=20, blank=True, default="")
    bg_color = models.CharField(max_length=20, blank=True, default="")

    def __str__(self) -> str:
        return self.name


class CustomField(models.Model):
    """Task custom field with its JSON-serialized value, rebuilt like ``Tag``."""

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="custom_fields")
    field_id = models.CharField(max_length=64)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=50)
    value = models.TextField(blank=True, null=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class TimeEntry(models.Model):
    """Hours logged by a developer against a task.

    ``week`` and ``year`` are the ISO week and ISO week-year of ``date``,
    stamped when the entry is created.
    """

    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="time_entries")
    developer = models.ForeignKey(Developer, on_delete=models.CASCADE, related_name="time_entries")
    hours = models.FloatField()
    date = models.DateField()
    week = models.PositiveSmallIntegerField()
    year = models.PositiveSmallIntegerField()
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "id"]
        indexes = [models.Index(fields=["year", "week"], name="timeentry_year_week_idx")]

    def __str__(self) -> str:
        return f"{self.developer_id} {self.hours}h on {self.task_id} ({self.date})"


class SyncLog(models.Model):
    """Append-only record of one full sync run."""

    FULL_SYNC = "full_sync"

    class Status(models.TextChoices):
        SUCCESS = "success", "Success"
        ERROR = "error", "Error"

    type = models.CharField(max_length=50, default=FULL_SYNC)
    status = models.CharField(max_length=20, choices=Status.choices)
    tasks_count = models.IntegerField(blank=True, null=True)
    error_message = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.type} {self.status} at {self.created_at:%Y-%m-%d %H:%M}"


class AppSetting(models.Model):
    """Free-form key/value setting editable from the dashboard."""

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self) -> str:
        return f"{self.key}={self.value}"
