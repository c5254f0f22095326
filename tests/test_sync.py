"""Tests for task reconciliation and the full sync."""

import json
from datetime import datetime, timezone

import pytest
from django.db import DatabaseError

from integrations.clickup import ClickUpAPIError
from workload.models import CustomField, Developer, SyncLog, Tag, Task
from workload.sync import (
    UNKNOWN_LIST_ID,
    UNKNOWN_LIST_NAME,
    extract_points,
    reconcile_task,
    run_full_sync,
)


class TestExtractPoints:
    """Test points extraction from custom fields."""

    def test_story_points_case_insensitive(self) -> None:
        fields = [{"name": "STORY POINTS", "value": 8}]
        assert extract_points(fields) == 8

    def test_points_string_value(self) -> None:
        assert extract_points([{"name": "Points", "value": "3"}]) == 3

    def test_fractional_value_truncated(self) -> None:
        assert extract_points([{"name": "points", "value": "2.5"}]) == 2

    def test_non_finite_value_ignored(self, caplog) -> None:
        assert extract_points([{"name": "points", "value": "inf"}]) is None
        assert extract_points([{"name": "points", "value": "1e400"}]) is None
        assert extract_points([{"name": "points", "value": float("nan")}]) is None
        assert "Ignoring non-numeric points value" in caplog.text

    def test_first_match_wins(self) -> None:
        fields = [
            {"name": "Points", "value": "1"},
            {"name": "Story Points", "value": "13"},
        ]
        assert extract_points(fields) == 1

    def test_first_match_wins_even_when_empty(self) -> None:
        fields = [
            {"name": "points", "value": None},
            {"name": "story points", "value": "5"},
        ]
        assert extract_points(fields) is None

    def test_no_match(self) -> None:
        assert extract_points([{"name": "Estimate", "value": 4}]) is None

    def test_no_fields(self) -> None:
        assert extract_points(None) is None
        assert extract_points([]) is None

    def test_non_numeric_value(self) -> None:
        assert extract_points([{"name": "points", "value": "lots"}]) is None


@pytest.mark.django_db
class TestReconcileTask:
    """Test reconciling a single ClickUp task snapshot."""

    def test_creates_task_developer_tags_and_fields(self, make_remote_task, alice) -> None:
        task = reconcile_task(make_remote_task("t1"), list_id="L1", list_name="Sprint 1")

        assert task.id == "t1"
        assert task.name == "Task t1"
        assert task.status == "in progress"
        assert task.priority == "high"
        assert task.points == 5
        assert task.time_estimate == 7_200_000
        assert task.date_closed is None
        assert task.date_created == datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
        assert task.list_id == "L1"
        assert task.list_name == "Sprint 1"
        assert task.space_id == "space_1"
        assert task.creator_id == 101

        developer = Developer.objects.get(clickup_id=alice["id"])
        assert developer.username == "Alice Smith"
        assert developer.initials == "AS"
        assert list(task.developers.all()) == [developer]

        assert sorted(task.tags.values_list("name", flat=True)) == ["api", "q1", "urgent"]
        points_field = task.custom_fields.get(field_id="cf-points")
        assert json.loads(points_field.value) == "5"

    def test_idempotent(self, make_remote_task) -> None:
        snapshot = make_remote_task("t1")

        for _ in range(3):
            reconcile_task(snapshot, list_id="L1", list_name="Sprint 1")

        assert Task.objects.count() == 1
        assert Developer.objects.count() == 1
        assert Tag.objects.count() == 3
        assert CustomField.objects.count() == 2
        assert Task.objects.get(pk="t1").developers.count() == 1

    def test_updates_fields_in_place(self, make_remote_task, closed_ms) -> None:
        reconcile_task(make_remote_task("t1"), list_id="L1", list_name="Sprint 1")
        reconcile_task(
            make_remote_task("t1", name="Renamed", status={"status": "complete", "color": "#6bc950"}, date_closed=closed_ms),
        )

        task = Task.objects.get(pk="t1")
        assert task.name == "Renamed"
        assert task.status == "complete"
        assert task.date_closed is not None
        assert not task.is_open

    def test_list_attribution_only_on_create(self, make_remote_task) -> None:
        reconcile_task(make_remote_task("t1"), list_id="L1", list_name="Sprint 1")
        reconcile_task(make_remote_task("t1"), list_id="L2", list_name="Sprint 2")

        task = Task.objects.get(pk="t1")
        assert (task.list_id, task.list_name) == ("L1", "Sprint 1")

    def test_missing_list_context_falls_back_to_unknown(self, make_remote_task) -> None:
        task = reconcile_task(make_remote_task("t1"))

        assert task.list_id == UNKNOWN_LIST_ID
        assert task.list_name == UNKNOWN_LIST_NAME

    def test_list_taken_from_remote_task_when_present(self, make_remote_task) -> None:
        task = reconcile_task(make_remote_task("t1", list={"id": "L9", "name": "Backlog"}))

        assert (task.list_id, task.list_name) == ("L9", "Backlog")

    def test_space_falls_back_to_configured_space(self, make_remote_task) -> None:
        remote = make_remote_task("t1")
        del remote["space"]

        assert reconcile_task(remote).space_id == "space_1"

    def test_assignee_removal_keeps_developer(self, make_remote_task, alice, bob) -> None:
        reconcile_task(make_remote_task("t1", assignees=[alice, bob]))
        reconcile_task(make_remote_task("t1", assignees=[alice]))

        task = Task.objects.get(pk="t1")
        assert list(task.developers.values_list("clickup_id", flat=True)) == [alice["id"]]
        assert Developer.objects.filter(clickup_id=bob["id"]).exists()

    def test_developer_profile_last_write_wins(self, make_remote_task, alice) -> None:
        reconcile_task(make_remote_task("t1"))
        renamed = {**alice, "username": "Alice Cooper", "email": "ac@example.com", "initials": "AC"}
        reconcile_task(make_remote_task("t2", assignees=[renamed]))

        developer = Developer.objects.get(clickup_id=alice["id"])
        assert developer.username == "Alice Cooper"
        assert developer.email == "ac@example.com"
        assert Developer.objects.count() == 1

    def test_tags_shrink_to_remote_set(self, make_remote_task) -> None:
        reconcile_task(make_remote_task("t1"))
        reconcile_task(make_remote_task("t1", tags=[{"name": "api", "tag_fg": "#fff", "tag_bg": "#000"}]))

        assert list(Tag.objects.filter(task_id="t1").values_list("name", flat=True)) == ["api"]

    def test_custom_fields_replaced(self, make_remote_task) -> None:
        reconcile_task(make_remote_task("t1"))
        reconcile_task(make_remote_task("t1", custom_fields=[]))

        assert not CustomField.objects.filter(task_id="t1").exists()
        assert Task.objects.get(pk="t1").points is None

    def test_replacement_does_not_touch_other_tasks(self, make_remote_task) -> None:
        reconcile_task(make_remote_task("t1"))
        reconcile_task(make_remote_task("t2"))
        reconcile_task(make_remote_task("t1", tags=[]))

        assert Tag.objects.filter(task_id="t1").count() == 0
        assert Tag.objects.filter(task_id="t2").count() == 3

    def test_unassigned_task(self, make_remote_task) -> None:
        task = reconcile_task(make_remote_task("t1", assignees=[]))

        assert task.developers.count() == 0
        assert Developer.objects.count() == 0


@pytest.mark.django_db
class TestRunFullSync:
    """Test the full sync orchestration."""

    def test_two_lists_five_tasks(self, fake_client, make_remote_task) -> None:
        fake_client.iter_list_tasks.return_value = iter([
            ({"id": "L1", "name": "Sprint 1"}, [make_remote_task("a1"), make_remote_task("a2"), make_remote_task("a3")]),
            ({"id": "L2", "name": "Sprint 2"}, [make_remote_task("b1"), make_remote_task("b2")]),
        ])

        result = run_full_sync(fake_client)

        assert result == {"success": True, "task_count": 5}
        assert Task.objects.count() == 5
        assert Task.objects.get(pk="b2").list_name == "Sprint 2"
        log = SyncLog.objects.get()
        assert log.status == SyncLog.Status.SUCCESS
        assert log.type == SyncLog.FULL_SYNC
        assert log.tasks_count == 5

    def test_unparseable_points_do_not_abort_sync(self, fake_client, make_remote_task) -> None:
        bad = make_remote_task("a1", custom_fields=[{"id": "cf-points", "name": "Points", "type": "number", "value": "inf"}])
        fake_client.iter_list_tasks.return_value = iter([
            ({"id": "L1", "name": "Sprint 1"}, [bad, make_remote_task("a2")]),
        ])

        result = run_full_sync(fake_client)

        assert result == {"success": True, "task_count": 2}
        assert Task.objects.get(pk="a1").points is None
        assert Task.objects.get(pk="a2").points == 5

    def test_empty_space(self, fake_client) -> None:
        fake_client.iter_list_tasks.return_value = iter([])

        assert run_full_sync(fake_client) == {"success": True, "task_count": 0}
        assert SyncLog.objects.get().tasks_count == 0

    def test_remote_failure_logs_error_and_keeps_progress(self, fake_client, make_remote_task) -> None:
        def lists():
            yield {"id": "L1", "name": "Sprint 1"}, [make_remote_task("a1")]
            raise ClickUpAPIError(500, "Internal Server Error")

        fake_client.iter_list_tasks.return_value = lists()

        result = run_full_sync(fake_client)

        assert result["success"] is False
        assert "500" in result["error"]
        assert Task.objects.filter(pk="a1").exists()
        log = SyncLog.objects.get()
        assert log.status == SyncLog.Status.ERROR
        assert "Internal Server Error" in log.error_message

    def test_storage_failure_is_recorded(self, fake_client, make_remote_task, monkeypatch) -> None:
        fake_client.iter_list_tasks.return_value = iter([
            ({"id": "L1", "name": "Sprint 1"}, [make_remote_task("a1")]),
        ])

        def broken(*args, **kwargs):
            raise DatabaseError("database is locked")

        monkeypatch.setattr("workload.sync.reconcile_task", broken)

        result = run_full_sync(fake_client)

        assert result == {"success": False, "task_count": 0, "error": "database is locked"}
        assert SyncLog.objects.get().status == SyncLog.Status.ERROR

    def test_rerun_after_failure_is_safe(self, fake_client, make_remote_task) -> None:
        snapshot = [make_remote_task("a1"), make_remote_task("a2")]
        fake_client.iter_list_tasks.return_value = iter([({"id": "L1", "name": "Sprint 1"}, snapshot)])
        run_full_sync(fake_client)
        fake_client.iter_list_tasks.return_value = iter([({"id": "L1", "name": "Sprint 1"}, snapshot)])
        run_full_sync(fake_client)

        assert Task.objects.count() == 2
        assert Tag.objects.count() == 6
        assert SyncLog.objects.count() == 2
