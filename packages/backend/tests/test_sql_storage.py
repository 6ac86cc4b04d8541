"""SQL storage tests on an in-memory SQLite database.

Learn: Uses the same engine/session factory the app builds, pointed at
sqlite+aiosqlite. Each test gets a fresh engine, so nothing leaks
between tests. The unique constraint on users.email must surface as
DuplicateEmail, and every task query must be scoped by owner. The
registration race uses a file database so each insert gets its own
connection.
"""

import asyncio
import uuid

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from tasklist.db.engine import create_engine, create_session_factory
from tasklist.errors import DuplicateEmail, StoreUnavailable
from tasklist.storage.sql import SqlStorage

from conftest import make_settings


def _new_storage() -> SqlStorage:
    engine = create_engine(make_settings("sql"))
    return SqlStorage(engine, create_session_factory(engine), timeout_seconds=5.0)


@pytest_asyncio.fixture()
async def storage():
    store = _new_storage()
    await store.init_schema()
    yield store
    await store.close()


async def _account(storage, email="user@test.com"):
    return await storage.insert_account(
        id=str(uuid.uuid4()),
        email=email,
        password_hash="ab" * 32,
        password_salt="cd" * 16,
    )


# ═══════════════════════════════════════════════════════════
# Accounts
# ═══════════════════════════════════════════════════════════


async def test_insert_and_find_account(storage):
    created = await _account(storage)
    found = await storage.find_account_by_email("user@test.com")
    assert found is not None
    assert found.id == created.id
    assert found.password_hash == "ab" * 32
    assert found.password_salt == "cd" * 16
    assert found.created_at is not None


async def test_find_unknown_account(storage):
    assert await storage.find_account_by_email("nobody@test.com") is None


async def test_duplicate_email_rejected_by_constraint(storage):
    await _account(storage)
    with pytest.raises(DuplicateEmail):
        await _account(storage)
    # The store stays usable after the rejected insert
    assert await storage.find_account_by_email("user@test.com") is not None


async def test_concurrent_duplicate_email_one_wins(tmp_path):
    """Two registrations race on separate connections; the constraint picks one."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    store = SqlStorage(engine, create_session_factory(engine), timeout_seconds=10.0)
    await store.init_schema()
    try:
        results = await asyncio.gather(
            _account(store, "race@test.com"),
            _account(store, "race@test.com"),
            return_exceptions=True,
        )
        winners = [r for r in results if not isinstance(r, BaseException)]
        losers = [r for r in results if isinstance(r, BaseException)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], DuplicateEmail)

        stored = await store.find_account_by_email("race@test.com")
        assert stored.id == winners[0].id
    finally:
        await store.close()


# ═══════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════


async def test_tasks_are_scoped_by_owner(storage):
    alice = await _account(storage, "alice@test.com")
    bob = await _account(storage, "bob@test.com")
    task = await storage.insert_task(alice.id, "alice's task")

    assert [t.id for t in await storage.list_tasks(alice.id)] == [task.id]
    assert await storage.list_tasks(bob.id) == []
    assert await storage.update_task(bob.id, task.id, completed=True) is None
    assert await storage.delete_task(bob.id, task.id) is False
    assert (await storage.list_tasks(alice.id))[0].completed is False


async def test_list_tasks_newest_first(storage):
    owner = await _account(storage)
    first = await storage.insert_task(owner.id, "first")
    second = await storage.insert_task(owner.id, "second")
    assert [t.id for t in await storage.list_tasks(owner.id)] == [second.id, first.id]


async def test_insert_task_defaults(storage):
    owner = await _account(storage)
    task = await storage.insert_task(owner.id, "write tests")
    assert task.id > 0
    assert task.owner_id == owner.id
    assert task.title == "write tests"
    assert task.completed is False


async def test_update_task(storage):
    owner = await _account(storage)
    task = await storage.insert_task(owner.id, "draft")
    updated = await storage.update_task(owner.id, task.id, title="final", completed=True)
    assert updated.title == "final"
    assert updated.completed is True
    untouched = await storage.update_task(owner.id, task.id, completed=False)
    assert untouched.title == "final"
    assert untouched.completed is False


async def test_delete_task(storage):
    owner = await _account(storage)
    task = await storage.insert_task(owner.id, "temporary")
    assert await storage.delete_task(owner.id, task.id) is True
    assert await storage.delete_task(owner.id, task.id) is False
    assert await storage.list_tasks(owner.id) == []


# ═══════════════════════════════════════════════════════════
# Failures
# ═══════════════════════════════════════════════════════════


async def test_ping(storage):
    await storage.ping()


async def test_missing_schema_is_store_unavailable():
    store = _new_storage()
    try:
        with pytest.raises(StoreUnavailable):
            await store.find_account_by_email("user@test.com")
    finally:
        await store.close()
