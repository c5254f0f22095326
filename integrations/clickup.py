"""ClickUp API client for lists, tasks, and webhooks."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import Any

import httpx
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger("integrations.clickup")

DEFAULT_BASE_URL = "https://api.clickup.com/api/v2"

DEFAULT_WEBHOOK_EVENTS = [
    "taskCreated",
    "taskUpdated",
    "taskDeleted",
    "taskAssigneeUpdated",
    "taskStatusUpdated",
    "taskTimeEstimateUpdated",
    "taskPriorityUpdated",
]


class ClickUpAPIError(Exception):
    """Raised when the ClickUp API returns a non-2xx response."""

    def __init__(self, status_code: int, detail: str = "", payload: Any = None) -> None:
        self.status_code = status_code
        self.detail = detail
        self.payload = payload
        super().__init__(f"ClickUp API error {status_code}: {detail}")


class ClickUpRateLimitError(ClickUpAPIError):
    """Raised on HTTP 429. The client never retries; callers decide."""


def ms_to_hours(ms: int | str | None) -> float:
    """Convert a ClickUp millisecond duration to hours, rounded to 2 places."""
    if not ms:
        return 0.0
    return round(int(ms) / 3_600_000, 2)


class ClickUpClient:
    """Interact with the ClickUp v2 REST API for a single workspace/space."""

    def __init__(
        self,
        api_token: str,
        workspace_id: str,
        space_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        list_delay: float = 0.1,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_token:
            raise ImproperlyConfigured("CLICKUP_API_TOKEN is not set")

        self.workspace_id = workspace_id
        self.space_id = space_id
        self.list_delay = list_delay
        self.client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, **overrides: Any) -> "ClickUpClient":
        """Build a client from the ``CLICKUP_*`` Django settings."""
        options = {
            "api_token": settings.CLICKUP_API_TOKEN,
            "workspace_id": settings.CLICKUP_WORKSPACE_ID,
            "space_id": settings.CLICKUP_SPACE_ID,
            "base_url": settings.CLICKUP_API_URL,
            "timeout": settings.CLICKUP_TIMEOUT,
            "list_delay": settings.CLICKUP_LIST_DELAY,
        }
        options.update(overrides)
        return cls(**options)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self.client.request(method, path, **kwargs)

        if response.is_success:
            if not response.content:
                return {}
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code == 429:
            logger.warning(
                "ClickUp API rate limit exceeded on %s %s (reset=%s)",
                method,
                path,
                response.headers.get("X-RateLimit-Reset", "?"),
            )
            raise ClickUpRateLimitError(response.status_code, response.text, payload)

        logger.error("ClickUp API %s %s failed: %s %s", method, path, response.status_code, response.text)
        raise ClickUpAPIError(response.status_code, response.text, payload)

    # ------------------------------------------------------------------
    # Spaces and lists
    # ------------------------------------------------------------------

    def get_space(self) -> dict:
        """Fetch the configured space."""
        return self._request("GET", f"/space/{self.space_id}")

    def get_lists(self) -> list[dict]:
        """Return the non-archived folderless lists of the configured space."""
        data = self._request("GET", f"/space/{self.space_id}/list", params={"archived": "false"})
        return data.get("lists", [])

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_tasks(self, list_id: str) -> list[dict]:
        """Fetch every task in a list, closed tasks and subtasks included.

        Pages are requested until ClickUp reports ``last_page`` or returns
        an empty page. Tasks come back oldest first.

        Raises:
            ClickUpAPIError: If any page request fails.
        """
        tasks: list[dict] = []
        page = 0
        while True:
            data = self._request(
                "GET",
                f"/list/{list_id}/task",
                params={
                    "archived": "false",
                    "include_closed": "true",
                    "page": page,
                    "order_by": "created",
                    "reverse": "false",
                    "subtasks": "true",
                    "include_markdown_description": "false",
                },
            )
            batch = data.get("tasks", [])
            tasks.extend(batch)
            if not batch or data.get("last_page", True):
                break
            page += 1
        return tasks

    def get_task(self, task_id: str) -> dict:
        """Fetch the current state of a single task, subtasks included."""
        return self._request(
            "GET",
            f"/task/{task_id}",
            params={"include_subtasks": "true", "include_markdown_description": "false"},
        )

    def iter_list_tasks(self) -> Iterator[tuple[dict, list[dict]]]:
        """Yield ``(list, tasks)`` for every list in the space.

        Sleeps ``list_delay`` seconds between list fetches to keep the
        request rate under ClickUp's per-minute limit.
        """
        lists = self.get_lists()
        logger.info("Found %d lists in space %s", len(lists), self.space_id)

        for index, task_list in enumerate(lists):
            if index and self.list_delay:
                time.sleep(self.list_delay)
            tasks = self.get_tasks(task_list["id"])
            logger.info("Fetched %d tasks from list %s", len(tasks), task_list.get("name", task_list["id"]))
            yield task_list, tasks

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    def create_webhook(self, endpoint: str, events: list[str] | None = None) -> dict:
        """Register a webhook on the workspace, scoped to the configured space."""
        data = self._request(
            "POST",
            f"/team/{self.workspace_id}/webhook",
            json={
                "endpoint": endpoint,
                "events": events or DEFAULT_WEBHOOK_EVENTS,
                "space_id": self.space_id,
            },
        )
        logger.info("Registered ClickUp webhook for %s", endpoint)
        return data

    def get_webhooks(self) -> list[dict]:
        data = self._request("GET", f"/team/{self.workspace_id}/webhook")
        return data.get("webhooks", [])

    def delete_webhook(self, webhook_id: str) -> None:
        self._request("DELETE", f"/webhook/{webhook_id}")
        logger.info("Deleted ClickUp webhook %s", webhook_id)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "ClickUpClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
