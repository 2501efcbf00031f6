import os
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

DEFAULT_DB_PATH = os.path.join("db", "journals.db")
DB_BUSY_TIMEOUT_MS = int(os.getenv("DB_BUSY_TIMEOUT_MS", "5000"))


def build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    path = os.getenv("DB_PATH") or os.path.join(os.getcwd(), DEFAULT_DB_PATH)
    return f"sqlite:///{path}"


def to_async_url(url: str) -> str:
    if url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def database_file(url: str | URL) -> Path | None:
    """Return the file behind a SQLite URL, or None for in-memory databases."""
    database = make_url(url).database
    if not database or database == ":memory:":
        return None
    return Path(database)


def create_engine(url: str | None = None, *, busy_timeout_ms: int = DB_BUSY_TIMEOUT_MS) -> AsyncEngine:
    engine = create_async_engine(to_async_url(url or build_database_url()))

    @event.listens_for(engine.sync_engine, "connect")
    def _configure_sqlite(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.close()

    return engine
