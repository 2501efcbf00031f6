from pathlib import Path

from journal_api.database import build_database_url, database_file, to_async_url


def test_database_url_prefers_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:////data/j.db")
    monkeypatch.setenv("DB_PATH", "/ignored.db")

    assert build_database_url() == "sqlite:////data/j.db"


def test_database_url_from_db_path(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_PATH", "/data/journals.db")

    assert build_database_url() == "sqlite:////data/journals.db"


def test_database_url_default(monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("DB_PATH", raising=False)
    monkeypatch.chdir(tmp_path)

    assert build_database_url() == f"sqlite:///{tmp_path / 'db' / 'journals.db'}"


def test_to_async_url():
    assert to_async_url("sqlite:///a.db") == "sqlite+aiosqlite:///a.db"
    assert to_async_url("sqlite+aiosqlite:///a.db") == "sqlite+aiosqlite:///a.db"


def test_database_file():
    assert database_file("sqlite+aiosqlite:////data/j.db") == Path("/data/j.db")
    assert database_file("sqlite+aiosqlite://") is None
    assert database_file("sqlite+aiosqlite:///:memory:") is None
