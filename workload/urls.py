"""URL routes for the workload app."""

from django.urls import path

from . import views

app_name = "workload"

urlpatterns = [
    path("health/", views.health_check, name="health_check"),
    # Tasks and sync
    path("tasks/", views.task_list, name="task_list"),
    path("tasks/stats/", views.task_stats, name="task_stats"),
    path("tasks/sync/", views.sync_tasks, name="sync_tasks"),
    path("tasks/<str:task_id>/", views.task_detail, name="task_detail"),
    path("sync/logs/", views.sync_logs, name="sync_logs"),
    # Developers and reports
    path("developers/", views.developer_list, name="developer_list"),
    path("developers/lowest-points/", views.developer_lowest_points, name="developer_lowest_points"),
    path("developers/recompute-points/", views.recompute_points, name="recompute_points"),
    path("developers/weekly-report/", views.weekly_report, name="weekly_report"),
    path("developers/time-entry/", views.time_entry_create, name="time_entry_create"),
    path("developers/<int:developer_id>/", views.developer_detail, name="developer_detail"),
    # Settings
    path("settings/", views.settings_collection, name="settings_collection"),
    path("settings/<str:key>/", views.setting_detail, name="setting_detail"),
    # ClickUp webhooks
    path("webhooks/", views.webhook_list, name="webhook_list"),
    path("webhooks/clickup/", views.clickup_webhook, name="clickup_webhook"),
    path("webhooks/register/", views.webhook_register, name="webhook_register"),
    path("webhooks/<str:webhook_id>/", views.webhook_delete, name="webhook_delete"),
]
