"""Task service — per-account task CRUD.

Learn: Every method takes the caller's owner_id and passes it down to the
Storage, which filters on it. There is no unscoped read or write, so a
guessed task id belonging to someone else is indistinguishable from a
missing one (NotFound).

Titles are trimmed; an empty title is rejected with "title_required"
before the store is touched.
"""

from typing import Optional

import structlog

from tasklist.errors import InvalidInput, NotFound, store_errors
from tasklist.storage.base import Storage, Task

logger = structlog.get_logger()


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise InvalidInput("Title is required", code="title_required")
    return title


class TaskService:
    """Business logic for an account's tasks."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(self, owner_id: str) -> list[Task]:
        """All of the owner's tasks, newest first."""
        with store_errors("list_tasks"):
            return await self.storage.list_tasks(owner_id)

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, owner_id: str, title: str) -> Task:
        """Create a new, not yet completed task."""
        title = _clean_title(title)
        with store_errors("create_task"):
            task = await self.storage.insert_task(owner_id, title)
        logger.info("task.created", task_id=task.id, owner_id=owner_id)
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self,
        owner_id: str,
        task_id: int,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Task:
        """Rename and/or (un)complete a task. Raises NotFound."""
        if title is not None:
            title = _clean_title(title)
        with store_errors("update_task"):
            task = await self.storage.update_task(
                owner_id, task_id, title=title, completed=completed
            )
        if task is None:
            raise NotFound("Task not found")
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, owner_id: str, task_id: int) -> None:
        """Delete a task. Raises NotFound."""
        with store_errors("delete_task"):
            deleted = await self.storage.delete_task(owner_id, task_id)
        if not deleted:
            raise NotFound("Task not found")
        logger.info("task.deleted", task_id=task_id, owner_id=owner_id)
