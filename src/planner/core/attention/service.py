"""
Attention items and business tasks on top of the sync client.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from planner.core.attention.models import (
    AttentionItem,
    AttentionStatus,
    BusinessTask,
    Priority,
    TaskStatus,
)
from planner.core.remote.client import Subscription, SyncClient
from planner.core.remote.paths import ATTENTION_PATH, attention_path, business_tasks_path, join_path

logger = logging.getLogger(__name__)


class AttentionService:
    """
    Read and write shared attention items.

    Status changes go through :meth:`SyncClient.set_status`, so they merge
    into the record and never drop fields written by another device. No
    transition guard is enforced: a done item may still be dismissed.
    """

    def __init__(self, client: SyncClient) -> None:
        self.client = client

    def on_items(self, callback: Callable[[list[AttentionItem]], None]) -> Subscription:
        """Live list of all attention items."""
        return self.client.subscribe(
            ATTENTION_PATH, lambda snapshot: callback(AttentionItem.list_from_snapshot(snapshot))
        )

    def get_item(self, item_id: str, callback: Callable[[AttentionItem | None], None]) -> None:
        """One-time read of an item; ``callback(None)`` when it does not exist."""

        def deliver(value: Any) -> None:
            callback(AttentionItem.from_record(item_id, value) if value else None)

        self.client.get(attention_path(item_id), deliver)

    def add_item(
        self,
        title: str,
        detail: str = "",
        biz: str = "⚡",
        priority: Priority | str = Priority.MEDIUM,
        status: AttentionStatus | str = AttentionStatus.ACTIVE,
    ) -> str:
        """
        Create an attention item.

        Returns:
            The new item's key

        Raises:
            ValueError: If the title is empty
        """
        title = title.strip()
        if not title:
            raise ValueError("Attention item title cannot be empty")
        record = {
            "title": title,
            "detail": detail,
            "biz": biz or "⚡",
            "priority": Priority(priority).value,
            "status": AttentionStatus(status).value,
        }
        key = self.client.add(ATTENTION_PATH, record)
        logger.debug("Added attention item %s", key)
        return key

    def complete(self, item_id: str) -> None:
        self.client.set_status(ATTENTION_PATH, item_id, AttentionStatus.DONE.value)

    def dismiss(self, item_id: str) -> None:
        self.client.set_status(ATTENTION_PATH, item_id, AttentionStatus.DISMISSED.value)

    def remove_item(self, item_id: str) -> None:
        self.client.remove(attention_path(item_id))

    # ------------------------------------------------------------------
    # Business tasks
    # ------------------------------------------------------------------

    def on_business_tasks(
        self, biz_key: str, callback: Callable[[list[BusinessTask]], None]
    ) -> Subscription:
        return self.client.subscribe(
            business_tasks_path(biz_key),
            lambda snapshot: callback(BusinessTask.list_from_snapshot(snapshot)),
        )

    def add_business_task(self, biz_key: str, title: str, **fields: Any) -> str:
        """Create a task on a business board; status defaults to backlog."""
        record = {"title": title, **fields}
        if not record.get("status"):
            record["status"] = TaskStatus.BACKLOG.value
        return self.client.add(business_tasks_path(biz_key), record)

    def move_business_task(self, biz_key: str, task_id: str, status: TaskStatus | str) -> None:
        status = status.value if isinstance(status, TaskStatus) else status
        self.client.set_status(business_tasks_path(biz_key), task_id, status)

    def delete_business_task(self, biz_key: str, task_id: str) -> None:
        self.client.remove(join_path(business_tasks_path(biz_key), task_id))
