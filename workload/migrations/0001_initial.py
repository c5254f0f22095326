import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AppSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.TextField()),
                ("description", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="Developer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("clickup_id", models.BigIntegerField(unique=True)),
                ("username", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("initials", models.CharField(blank=True, default="", max_length=10)),
                ("color", models.CharField(blank=True, default="", max_length=20)),
                ("profile_picture", models.URLField(blank=True, max_length=500, null=True)),
                ("total_points", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["total_points", "username"],
            },
        ),
        migrations.CreateModel(
            name="SyncLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(default="full_sync", max_length=50)),
                ("status", models.CharField(choices=[("success", "Success"), ("error", "Error")], max_length=20)),
                ("tasks_count", models.IntegerField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Task",
            fields=[
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=1024)),
                ("description", models.TextField(blank=True, null=True)),
                ("status", models.CharField(max_length=100)),
                ("status_color", models.CharField(blank=True, default="", max_length=20)),
                ("priority", models.CharField(blank=True, max_length=50, null=True)),
                ("priority_color", models.CharField(blank=True, max_length=20, null=True)),
                ("url", models.URLField(blank=True, default="", max_length=500)),
                ("time_estimate", models.BigIntegerField(blank=True, null=True)),
                ("time_spent", models.BigIntegerField(blank=True, null=True)),
                ("points", models.IntegerField(blank=True, null=True)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("date_created", models.DateTimeField(blank=True, null=True)),
                ("date_updated", models.DateTimeField(blank=True, null=True)),
                ("date_closed", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("creator_id", models.BigIntegerField(blank=True, null=True)),
                ("creator_username", models.CharField(blank=True, default="", max_length=255)),
                ("creator_email", models.EmailField(blank=True, default="", max_length=254)),
                ("list_id", models.CharField(max_length=64)),
                ("list_name", models.CharField(max_length=255)),
                ("space_id", models.CharField(blank=True, default="", max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("developers", models.ManyToManyField(blank=True, related_name="tasks", to="workload.developer")),
            ],
            options={
                "ordering": ["-date_created"],
            },
        ),
        migrations.CreateModel(
            name="CustomField",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("field_id", models.CharField(max_length=64)),
                ("name", models.CharField(max_length=255)),
                ("type", models.CharField(max_length=50)),
                ("value", models.TextField(blank=True, null=True)),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="custom_fields",
                        to="workload.task",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Tag",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("fg_color", models.CharField(blank=True, default="", max_length=20)),
                ("bg_color", models.CharField(blank=True, default="", max_length=20)),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tags",
                        to="workload.task",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="TimeEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("hours", models.FloatField()),
                ("date", models.DateField()),
                ("week", models.PositiveSmallIntegerField()),
                ("year", models.PositiveSmallIntegerField()),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "developer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_entries",
                        to="workload.developer",
                    ),
                ),
                (
                    "task",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="time_entries",
                        to="workload.task",
                    ),
                ),
            ],
            options={
                "ordering": ["date", "id"],
                "indexes": [models.Index(fields=["year", "week"], name="timeentry_year_week_idx")],
            },
        ),
    ]
