"""Storage capability shared by every backend.

Learn: The services never see SQLAlchemy. They talk to a Storage, which
is either the SQL store (PostgreSQL / SQLite) or the in-memory store,
chosen once at startup from settings. Both must:

- enforce email uniqueness themselves (insert_account raises
  DuplicateEmail; a check-then-insert in the service is not enough)
- scope every task operation by owner_id, so a guessed id from another
  account behaves exactly like a missing one
- raise StoreUnavailable for any other failure of the store
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class Account:
    id: str
    email: str
    password_hash: str
    password_salt: str
    created_at: datetime


@dataclass(frozen=True)
class Task:
    id: int
    owner_id: str
    title: str
    completed: bool
    created_at: datetime


class Storage(Protocol):
    async def find_account_by_email(self, email: str) -> Optional[Account]: ...

    async def insert_account(
        self,
        id: str,
        email: str,
        password_hash: str,
        password_salt: str,
    ) -> Account: ...

    async def list_tasks(self, owner_id: str) -> list[Task]:
        """All tasks of one owner, newest first."""
        ...

    async def insert_task(self, owner_id: str, title: str) -> Task: ...

    async def update_task(
        self,
        owner_id: str,
        task_id: int,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]:
        """Apply the non-None fields. None if the owner has no such task."""
        ...

    async def delete_task(self, owner_id: str, task_id: int) -> bool: ...

    async def init_schema(self) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...
