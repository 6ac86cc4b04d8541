"""SQL storage — PostgreSQL in production, SQLite for tests and local runs.

Learn: Every operation opens its own AsyncSession, runs under the store
timeout, and commits before returning plain Account / Task dataclasses.
Email uniqueness comes from the users.email UNIQUE constraint: the
loser of a concurrent registration gets an IntegrityError from the
database, which we translate into DuplicateEmail.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy import delete, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tasklist.db.models import Base, Todo, User
from tasklist.errors import DuplicateEmail, StoreUnavailable
from tasklist.storage.base import Account, Task

T = TypeVar("T")


def _account(row: User) -> Account:
    return Account(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        password_salt=row.password_salt,
        created_at=row.created_at,
    )


def _task(row: Todo) -> Task:
    return Task(
        id=row.id,
        owner_id=row.user_id,
        title=row.title,
        completed=row.completed,
        created_at=row.created_at,
    )


class SqlStorage:
    """Storage backed by the users / todos tables."""

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float = 5.0,
    ):
        self.engine = engine
        self.session_factory = session_factory
        self.timeout_seconds = timeout_seconds

    async def _run(
        self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]
    ) -> T:
        """Run fn in a fresh session; store failures become StoreUnavailable."""
        try:
            async with asyncio.timeout(self.timeout_seconds):
                async with self.session_factory() as session:
                    return await fn(session)
        except (SQLAlchemyError, OSError, TimeoutError) as e:
            raise StoreUnavailable(f"{operation} failed: {type(e).__name__}") from e

    # ─── Accounts ────────────────────────────────────────

    async def find_account_by_email(self, email: str) -> Optional[Account]:
        async def fn(session: AsyncSession) -> Optional[Account]:
            result = await session.execute(select(User).where(User.email == email))
            row = result.scalars().first()
            return _account(row) if row else None

        return await self._run("find_account_by_email", fn)

    async def insert_account(
        self,
        id: str,
        email: str,
        password_hash: str,
        password_salt: str,
    ) -> Account:
        async def fn(session: AsyncSession) -> Account:
            row = User(
                id=id,
                email=email,
                password_hash=password_hash,
                password_salt=password_salt,
            )
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise DuplicateEmail("Email already registered")
            return _account(row)

        return await self._run("insert_account", fn)

    # ─── Tasks ───────────────────────────────────────────

    async def list_tasks(self, owner_id: str) -> list[Task]:
        async def fn(session: AsyncSession) -> list[Task]:
            q = (
                select(Todo)
                .where(Todo.user_id == owner_id)
                .order_by(Todo.created_at.desc(), Todo.id.desc())
            )
            result = await session.execute(q)
            return [_task(row) for row in result.scalars().all()]

        return await self._run("list_tasks", fn)

    async def insert_task(self, owner_id: str, title: str) -> Task:
        async def fn(session: AsyncSession) -> Task:
            row = Todo(user_id=owner_id, title=title, completed=False)
            session.add(row)
            await session.commit()
            return _task(row)

        return await self._run("insert_task", fn)

    async def update_task(
        self,
        owner_id: str,
        task_id: int,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Optional[Task]:
        async def fn(session: AsyncSession) -> Optional[Task]:
            q = select(Todo).where(Todo.id == task_id, Todo.user_id == owner_id)
            result = await session.execute(q)
            row = result.scalars().first()
            if row is None:
                return None
            if title is not None:
                row.title = title
            if completed is not None:
                row.completed = completed
            await session.commit()
            return _task(row)

        return await self._run("update_task", fn)

    async def delete_task(self, owner_id: str, task_id: int) -> bool:
        async def fn(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(Todo).where(Todo.id == task_id, Todo.user_id == owner_id)
            )
            await session.commit()
            return result.rowcount > 0

        return await self._run("delete_task", fn)

    # ─── Lifecycle ───────────────────────────────────────

    async def init_schema(self) -> None:
        """Create missing tables (CREATE TABLE IF NOT EXISTS semantics)."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"init_schema failed: {type(e).__name__}") from e

    async def ping(self) -> None:
        async def fn(session: AsyncSession) -> None:
            await session.execute(text("SELECT 1"))

        await self._run("ping", fn)

    async def close(self) -> None:
        await self.engine.dispose()
