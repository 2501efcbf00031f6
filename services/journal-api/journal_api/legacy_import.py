"""One-time import of legacy flat-file journals into the entry store.

Legacy files are named ``<epochMillis>.txt`` and laid out as::

    Date: <date>
    Title: <title>
    Categories: a, b        (optional)
    <separator line>
    <body text...>
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import click

from .services.journal import encode_categories
from .store import EntryStore

_logger = logging.getLogger(__name__)

DATE_PREFIX = "Date: "
TITLE_PREFIX = "Title: "
CATEGORIES_PREFIX = "Categories: "


def _strip_prefix(line: str, prefix: str) -> str:
    return line.replace(prefix, "", 1)


def parse_legacy_journal(content: str) -> dict[str, Any]:
    lines = content.split("\n")
    date = _strip_prefix(lines[0], DATE_PREFIX)
    title = _strip_prefix(lines[1], TITLE_PREFIX) if len(lines) > 1 else ""

    categories: list[str] = []
    text_start = 3
    if len(lines) > 2 and lines[2].startswith(CATEGORIES_PREFIX):
        raw = _strip_prefix(lines[2], CATEGORIES_PREFIX)
        if raw:
            categories = [item.strip() for item in raw.split(",")]
        text_start = 4

    return {
        "date": date,
        "title": title,
        "text": "\n".join(lines[text_start:]),
        "categories": categories,
    }


def legacy_entry_from_file(path: Path) -> dict[str, Any]:
    """Build a store row from a legacy file; raises ValueError on a bad name."""
    created_at = int(path.stem)
    parsed = parse_legacy_journal(path.read_text(encoding="utf-8"))
    return {
        "id": path.name,
        "date": parsed["date"],
        "title": parsed["title"],
        "text": parsed["text"],
        "categories": encode_categories(parsed["categories"]),
        "created_at": created_at,
        "pinned": False,
    }


async def import_directory(store: EntryStore, directory: Path) -> tuple[int, int]:
    """Import every ``*.txt`` file in ``directory``. Returns (imported, skipped)."""
    if not directory.is_dir():
        _logger.info("No journals directory at %s, skipping import", directory)
        return 0, 0

    files = sorted(directory.glob("*.txt"))
    _logger.info("Found %s journal files to import", len(files))
    imported = 0
    skipped = 0
    for path in files:
        try:
            entry = legacy_entry_from_file(path)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            _logger.warning("Failed to parse %s, skipping: %s", path.name, exc)
            skipped += 1
            continue
        await store.insert(entry)
        _logger.info("Imported %s", path.name)
        imported += 1
    return imported, skipped


async def _run_import(directory: Path, database_url: str | None) -> tuple[int, int]:
    store = EntryStore(database_url)
    await store.startup()
    try:
        return await import_directory(store, directory)
    finally:
        await store.shutdown()


@click.command()
@click.argument(
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="JOURNALS_DIR",
    default="./journals",
)
@click.option("--database-url", envvar="DATABASE_URL", help="SQLAlchemy URL of the entry store.")
@click.option("-v", "--verbose", is_flag=True, help="Log each imported file.")
def main(directory: Path, database_url: str | None, verbose: bool) -> None:
    """Import legacy .txt journal files from DIRECTORY."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    imported, skipped = asyncio.run(_run_import(directory, database_url))
    click.echo(f"Imported {imported} journal files, skipped {skipped}.")


if __name__ == "__main__":
    main()
