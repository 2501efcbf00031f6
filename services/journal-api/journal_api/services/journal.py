from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

from ..errors import EntryNotFoundError
from ..store import EntryStore

_logger = logging.getLogger(__name__)


def encode_categories(categories: Iterable[str] | None) -> str:
    return json.dumps(list(categories or []))


def decode_categories(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        _logger.warning("Ignoring malformed categories value %r", raw)
        return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def row_to_entry(row: dict[str, Any]) -> dict[str, Any]:
    """Decode a stored row into the shape returned to callers."""
    return {
        "id": row["id"],
        "date": row["date"],
        "title": row["title"],
        "text": row["text"],
        "categories": decode_categories(row["categories"]),
        "created_at": row["created_at"],
        "pinned": bool(row["pinned"]),
    }


def sort_for_display(entries: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    """Pinned entries first, each group newest first."""
    return sorted(entries, key=lambda entry: (not entry["pinned"], -entry["created_at"]))


class EntryIdGenerator:
    """Hands out ``<epochMillis>.txt`` ids that strictly increase.

    Two creates inside the same millisecond would otherwise produce the same
    id and the second would replace the first, so a repeated or backwards
    clock reading is bumped one millisecond past the last id issued.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> tuple[str, int]:
        with self._lock:
            millis = max(int(self._clock() * 1000), self._last + 1)
            self._last = millis
        return f"{millis}.txt", millis


class JournalService:
    """Boundary between journal requests and the entry store."""

    def __init__(self, store: EntryStore, id_generator: EntryIdGenerator | None = None):
        self._store = store
        self._next_id = id_generator or EntryIdGenerator()

    async def list_entries(self, *, display_order: bool = False) -> list[dict[str, Any]]:
        entries = [row_to_entry(row) for row in await self._store.list_all()]
        if display_order:
            return sort_for_display(entries)
        return entries

    async def get_entry(self, entry_id: str) -> dict[str, Any]:
        row = await self._store.get_by_id(entry_id)
        if row is None:
            raise EntryNotFoundError(entry_id)
        return row_to_entry(row)

    async def list_categories(self) -> list[str]:
        """Sorted, distinct categories used across all entries."""
        seen: set[str] = set()
        for row in await self._store.list_all():
            seen.update(decode_categories(row["categories"]))
        return sorted(seen)

    async def create_entry(
        self,
        *,
        date: str,
        title: str,
        text: str,
        categories: list[str] | None = None,
    ) -> str:
        entry_id, created_at = self._next_id()
        await self._store.insert(
            {
                "id": entry_id,
                "date": date,
                "title": title,
                "text": text,
                "categories": encode_categories(categories),
                "created_at": created_at,
                "pinned": False,
            }
        )
        _logger.info("Created journal entry %s", entry_id)
        return entry_id

    async def update_entry(
        self,
        entry_id: str,
        *,
        date: str,
        title: str,
        text: str,
        categories: list[str] | None = None,
        pinned: bool | None = None,
    ) -> None:
        """Replace an entry's content, keeping its pinned state unless given.

        Raises EntryNotFoundError instead of creating a missing entry.
        """
        existing = await self._store.get_by_id(entry_id)
        if existing is None:
            raise EntryNotFoundError(entry_id)
        await self._store.update(
            entry_id,
            date=date,
            title=title,
            text=text,
            categories=encode_categories(categories),
            pinned=pinned,
        )

    async def delete_entry(self, entry_id: str) -> None:
        await self._store.delete(entry_id)

    async def toggle_pin(self, entry_id: str) -> None:
        await self._store.toggle_pin(entry_id)
