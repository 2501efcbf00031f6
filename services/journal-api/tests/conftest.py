import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

import pytest_asyncio  # noqa: E402

from journal_api.store import EntryStore  # noqa: E402


@pytest_asyncio.fixture
async def store(tmp_path):
    entry_store = EntryStore(f"sqlite:///{tmp_path / 'db' / 'journals.db'}")
    await entry_store.startup()
    yield entry_store
    await entry_store.shutdown()
