"""Developer workload scores derived from open assigned tasks."""

from __future__ import annotations

import logging

from django.db.models import Sum
from django.db.models.functions import Coalesce

from workload.exceptions import NotFoundError
from workload.models import Developer

logger = logging.getLogger("workload.points")


def recompute_developer_points(developer_id: int) -> int:
    """Set a developer's ``total_points`` to the sum of their open tasks' points.

    Tasks without points count as zero.

    Raises:
        NotFoundError: If the developer does not exist.
    """
    try:
        developer = Developer.objects.get(pk=developer_id)
    except Developer.DoesNotExist:
        raise NotFoundError("Developer", developer_id)

    total = developer.tasks.filter(date_closed__isnull=True).aggregate(
        total=Coalesce(Sum("points"), 0),
    )["total"]

    developer.total_points = total
    developer.save(update_fields=["total_points", "updated_at"])
    logger.info("Updated points for %s: %d", developer.username, total)
    return total


def recompute_all_points() -> int:
    """Recompute every developer's score. The first failure aborts the batch.

    Returns:
        The number of developers updated.
    """
    developer_ids = list(Developer.objects.order_by("pk").values_list("pk", flat=True))
    for developer_id in developer_ids:
        recompute_developer_points(developer_id)
    logger.info("Recomputed points for %d developers", len(developer_ids))
    return len(developer_ids)


def developer_with_lowest_points() -> Developer | None:
    """Return the least-loaded developer, the default pick for a new assignment."""
    return Developer.objects.order_by("total_points", "username").first()
