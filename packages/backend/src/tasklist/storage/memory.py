"""Process-local storage — nothing survives a restart.

Used for local runs without a database and for tests. The check for an
existing email and the insert happen without an await in between, so
they are atomic with respect to other requests on the event loop.
"""

import itertools
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from tasklist.errors import DuplicateEmail
from tasklist.storage.base import Account, Task


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStorage:
    """Dict-backed Storage implementation."""

    def __init__(self):
        self._accounts: dict[str, Account] = {}  # keyed by email
        self._tasks: dict[int, Task] = {}
        self._task_ids = itertools.count(1)

    async def find_account_by_email(self, email: str) -> Optional[Account]:
        return self._accounts.get(email)

    async def insert_account(
        self,
        id: str,
        email: str,
        password_hash: str,
        password_salt: str,
    ) -> Account:
        if email in self._accounts:
            raise DuplicateEmail("Email already registered")
        account = Account(
            id=id,
            email=email,
            password_hash=password_hash,
            password_salt=password_salt,
            created_at=_utcnow(),
        )
        self._accounts[email] = account
        return account

    async def list_tasks(self, owner_id: str) -> list[Task]:
        tasks = [t for t in self._tasks.values() if t.owner_id == owner_id]
        return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)

    async def insert_task(self, owner_id: str, title: str) -> Task:
        task = Task(
            id=next(self._task_ids),
            owner_id=owner_id,
            title=title,
            completed=False,
            created_at=_utcnow(),
        )
        self._tasks[task.id] = task
        return task

    async def update_task(
        self,
        owner_id: str,
        task_id: int,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        changes = {}
        if title is not None:
            changes["title"] = title
        if completed is not None:
            changes["completed"] = completed
        task = replace(task, **changes)
        self._tasks[task_id] = task
        return task

    async def delete_task(self, owner_id: str, task_id: int) -> bool:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return False
        del self._tasks[task_id]
        return True

    async def init_schema(self) -> None:
        pass

    async def ping(self) -> None:
        pass

    async def close(self) -> None:
        pass
