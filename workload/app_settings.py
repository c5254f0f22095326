"""Key/value application settings stored in the database."""

from __future__ import annotations

import logging

from workload.exceptions import NotFoundError
from workload.models import AppSetting

logger = logging.getLogger("workload.app_settings")


def all_settings() -> dict[str, str]:
    return dict(AppSetting.objects.order_by("key").values_list("key", "value"))


def get_setting(key: str) -> AppSetting:
    try:
        return AppSetting.objects.get(key=key)
    except AppSetting.DoesNotExist:
        raise NotFoundError("Setting", key)


def upsert_setting(key: str, value, description: str | None = None) -> AppSetting:
    defaults = {"value": str(value)}
    if description is not None:
        defaults["description"] = description
    setting, _ = AppSetting.objects.update_or_create(key=key, defaults=defaults)
    logger.info("Updated setting: %s", key)
    return setting


def update_settings(values: dict) -> int:
    for key, value in values.items():
        upsert_setting(key, value)
    return len(values)


def delete_setting(key: str) -> None:
    deleted, _ = AppSetting.objects.filter(key=key).delete()
    if not deleted:
        raise NotFoundError("Setting", key)
    logger.info("Deleted setting: %s", key)
