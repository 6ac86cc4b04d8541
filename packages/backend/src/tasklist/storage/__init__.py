"""Storage backends and the factory that picks one from settings."""

from tasklist.config import Settings
from tasklist.storage.base import Account, Storage, Task
from tasklist.storage.memory import MemoryStorage
from tasklist.storage.sql import SqlStorage

__all__ = ["Account", "MemoryStorage", "SqlStorage", "Storage", "Task", "build_storage"]


def build_storage(settings: Settings) -> Storage:
    """Construct the backend named by settings.storage_backend."""
    if settings.storage_backend == "memory":
        return MemoryStorage()

    from tasklist.db.engine import create_engine, create_session_factory

    engine = create_engine(settings)
    return SqlStorage(
        engine,
        create_session_factory(engine),
        timeout_seconds=settings.store_timeout_seconds,
    )
