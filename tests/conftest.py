"""Pytest configuration and fixtures."""

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from unittest.mock import MagicMock

import httpx
import pytest

from integrations.clickup import ClickUpClient


def _ms(iso: str) -> str:
    dt = datetime.fromisoformat(iso).replace(tzinfo=timezone.utc)
    return str(int(dt.timestamp() * 1000))


@pytest.fixture
def alice() -> dict:
    """A ClickUp assignee payload."""
    return {
        "id": 101,
        "username": "Alice Smith",
        "email": "alice@example.com",
        "color": "#7b68ee",
        "initials": "AS",
        "profilePicture": "https://attachments.clickup.com/profilePictures/101.jpg",
    }


@pytest.fixture
def bob() -> dict:
    """A second ClickUp assignee payload."""
    return {
        "id": 202,
        "username": "Bob Jones",
        "email": "bob@example.com",
        "color": "#ff5722",
        "initials": "BJ",
        "profilePicture": None,
    }


@pytest.fixture
def make_remote_task(alice: dict) -> Callable[..., dict]:
    """Build ClickUp task payloads with sensible defaults."""

    def _make(task_id: str = "86abc1", **overrides) -> dict:
        task = {
            "id": task_id,
            "name": f"Task {task_id}",
            "description": "Implement the thing",
            "status": {"status": "in progress", "color": "#4194f6"},
            "assignees": [alice],
            "time_estimate": 7_200_000,
            "time_spent": 3_600_000,
            "custom_fields": [
                {"id": "cf-points", "name": "Story Points", "type": "number", "value": "5"},
                {"id": "cf-area", "name": "Area", "type": "short_text", "value": "backend"},
            ],
            "date_created": _ms("2025-03-01T09:00:00"),
            "date_updated": _ms("2025-03-02T10:00:00"),
            "date_closed": None,
            "creator": {"id": 101, "username": "Alice Smith", "email": "alice@example.com"},
            "tags": [
                {"name": "api", "tag_fg": "#ffffff", "tag_bg": "#000000"},
                {"name": "urgent", "tag_fg": "#ffffff", "tag_bg": "#ff0000"},
                {"name": "q1", "tag_fg": "#000000", "tag_bg": "#eeeeee"},
            ],
            "priority": {"id": "2", "priority": "high", "color": "#ffcc00"},
            "due_date": _ms("2025-03-10T00:00:00"),
            "url": f"https://app.clickup.com/t/{task_id}",
            "space": {"id": "space_1"},
        }
        task.update(overrides)
        return task

    return _make


@pytest.fixture
def closed_ms() -> str:
    return _ms("2025-03-05T12:00:00")


@pytest.fixture
def fake_client() -> MagicMock:
    """A stand-in for ClickUpClient used by orchestration tests."""
    return MagicMock(spec=ClickUpClient)


@pytest.fixture
def mock_clickup() -> Iterator[Callable[..., ClickUpClient]]:
    """Build a real ClickUpClient whose HTTP traffic goes to ``handler``."""
    clients: list[ClickUpClient] = []

    def _build(handler, **kwargs) -> ClickUpClient:
        client = ClickUpClient(
            api_token="pk_test_token",
            workspace_id="9000",
            space_id="space_1",
            base_url="https://api.clickup.test/api/v2",
            list_delay=0,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.close()
