from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import async_sessionmaker

from .database import create_engine, database_file
from .errors import EntryNotFoundError, StorageIOError
from .models import Base, JournalEntry

_logger = logging.getLogger(__name__)


def _entry_to_dict(entry: JournalEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "date": entry.date,
        "title": entry.title,
        "text": entry.text,
        "categories": entry.categories,
        "created_at": entry.created_at,
        "pinned": entry.pinned,
    }


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (DBAPIError, OSError) as exc:
        raise StorageIOError(f"Journal store {operation} failed: {exc}") from exc


class EntryStore:
    """Durable table of journal entries backed by a single SQLite file.

    Rows go in and come out as plain dicts keyed by column name. The
    ``categories`` value is the serialized text exactly as persisted and
    ``pinned`` is the stored 0/1 integer; decoding both is the caller's job.

    ``list_all`` returns creation order (newest first) only. Pinned-first
    display order is layered on top by callers.
    """

    def __init__(self, url: str | None = None):
        self._engine = create_engine(url)
        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)

    async def startup(self) -> None:
        path = database_file(self._engine.url)
        with _storage_errors("startup"):
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def shutdown(self) -> None:
        await self._engine.dispose()

    async def insert(self, entry: dict[str, Any]) -> None:
        """Write the row for ``entry["id"]``, replacing any existing one."""
        values = {
            "id": entry["id"],
            "date": entry.get("date"),
            "title": entry.get("title"),
            "text": entry.get("text"),
            "categories": entry.get("categories"),
            "created_at": entry["created_at"],
            "pinned": int(bool(entry.get("pinned", 0))),
        }
        stmt = sqlite_insert(JournalEntry).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[JournalEntry.id],
            set_={key: value for key, value in values.items() if key != "id"},
        )
        with _storage_errors("insert"):
            async with self._sessionmaker() as session, session.begin():
                await session.execute(stmt)

    async def get_by_id(self, entry_id: str) -> dict[str, Any] | None:
        with _storage_errors("lookup"):
            async with self._sessionmaker() as session:
                result = await session.execute(
                    select(JournalEntry).where(JournalEntry.id == entry_id)
                )
                entry = result.scalar_one_or_none()
        return _entry_to_dict(entry) if entry else None

    async def list_all(self) -> list[dict[str, Any]]:
        with _storage_errors("list"):
            async with self._sessionmaker() as session:
                result = await session.execute(
                    select(JournalEntry).order_by(
                        JournalEntry.created_at.desc(), JournalEntry.id.desc()
                    )
                )
                entries = result.scalars().all()
        return [_entry_to_dict(entry) for entry in entries]

    async def count(self) -> int:
        with _storage_errors("count"):
            async with self._sessionmaker() as session:
                result = await session.execute(select(func.count()).select_from(JournalEntry))
                return int(result.scalar_one())

    async def update(
        self,
        entry_id: str,
        *,
        date: str | None,
        title: str | None,
        text: str | None,
        categories: str | None,
        pinned: bool | None = None,
    ) -> None:
        """Overwrite the editable fields of an existing entry.

        ``created_at`` is never touched. When ``pinned`` is None the stored
        value is kept. Raises EntryNotFoundError if no row matches.
        """
        values: dict[str, Any] = {
            "date": date,
            "title": title,
            "text": text,
            "categories": categories,
        }
        if pinned is not None:
            values["pinned"] = int(bool(pinned))
        stmt = (
            update(JournalEntry)
            .where(JournalEntry.id == entry_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("update"):
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(stmt)
                if result.rowcount == 0:
                    raise EntryNotFoundError(entry_id)

    async def delete(self, entry_id: str) -> bool:
        stmt = (
            delete(JournalEntry)
            .where(JournalEntry.id == entry_id)
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("delete"):
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(stmt)
                deleted = result.rowcount > 0
        if not deleted:
            _logger.debug("Delete of unknown journal entry %s ignored", entry_id)
        return deleted

    async def toggle_pin(self, entry_id: str) -> bool:
        stmt = (
            update(JournalEntry)
            .where(JournalEntry.id == entry_id)
            .values(pinned=case((JournalEntry.pinned == 1, 0), else_=1))
            .execution_options(synchronize_session=False)
        )
        with _storage_errors("toggle"):
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(stmt)
                toggled = result.rowcount > 0
        if not toggled:
            _logger.debug("Pin toggle of unknown journal entry %s ignored", entry_id)
        return toggled
