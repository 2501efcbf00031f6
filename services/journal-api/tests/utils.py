from contextlib import asynccontextmanager
from typing import Any

import httpx

from journal_api.main import create_app
from journal_api.store import EntryStore


def make_row(entry_id: str, created_at: int, **overrides: Any) -> dict[str, Any]:
    row = {
        "id": entry_id,
        "date": "2024-01-01",
        "title": "Title",
        "text": "Body",
        "categories": "[]",
        "created_at": created_at,
        "pinned": 0,
    }
    row.update(overrides)
    return row


@asynccontextmanager
async def app_client(store: EntryStore):
    app = create_app(store)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
