import asyncio

import pytest
from click.testing import CliRunner

from journal_api.legacy_import import import_directory, main, parse_legacy_journal
from journal_api.store import EntryStore


def test_parse_with_categories():
    content = "Date: 2023-05-01\nTitle: Spring\nCategories: garden, walk \n\nFirst line\nSecond line"

    assert parse_legacy_journal(content) == {
        "date": "2023-05-01",
        "title": "Spring",
        "text": "First line\nSecond line",
        "categories": ["garden", "walk"],
    }


def test_parse_without_categories():
    content = "Date: 2023-05-01\nTitle: Spring\n\nBody"

    parsed = parse_legacy_journal(content)

    assert parsed["categories"] == []
    assert parsed["text"] == "Body"


def test_parse_empty_categories_line():
    parsed = parse_legacy_journal("Date: d\nTitle: t\nCategories: \n\nBody")

    assert parsed["categories"] == []
    assert parsed["text"] == "Body"


@pytest.mark.asyncio
async def test_import_directory(store, tmp_path):
    journals = tmp_path / "journals"
    journals.mkdir()
    (journals / "1700000000000.txt").write_text("Date: 2023-11-14\nTitle: Old\nCategories: a,b\n\nhello")
    (journals / "notes.txt").write_text("Date: x\nTitle: y\n\nz")
    (journals / "ignored.md").write_text("not a journal")

    imported, skipped = await import_directory(store, journals)

    assert (imported, skipped) == (1, 1)
    assert await store.get_by_id("1700000000000.txt") == {
        "id": "1700000000000.txt",
        "date": "2023-11-14",
        "title": "Old",
        "text": "hello",
        "categories": '["a", "b"]',
        "created_at": 1700000000000,
        "pinned": 0,
    }


@pytest.mark.asyncio
async def test_import_missing_directory(store, tmp_path):
    assert await import_directory(store, tmp_path / "absent") == (0, 0)
    assert await store.count() == 0


def test_cli_imports_into_database(tmp_path):
    journals = tmp_path / "journals"
    journals.mkdir()
    (journals / "42.txt").write_text("Date: d\nTitle: t\n\nbody")
    url = f"sqlite:///{tmp_path / 'db' / 'journals.db'}"

    result = CliRunner().invoke(main, [str(journals), "--database-url", url])

    assert result.exit_code == 0, result.output
    assert "Imported 1 journal files, skipped 0." in result.output
    stored = asyncio.run(_read_entry(url, "42.txt"))
    assert stored["text"] == "body"
    assert stored["created_at"] == 42


async def _read_entry(url, entry_id):
    store = EntryStore(url)
    await store.startup()
    try:
        return await store.get_by_id(entry_id)
    finally:
        await store.shutdown()
