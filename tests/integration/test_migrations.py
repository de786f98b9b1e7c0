import sqlite3

import pytest

from pumpwork.adapters.sqlite.migrator import SQLiteMigrator

TABLES = {
    "auth_users",
    "profiles",
    "categories",
    "job_posts",
    "service_posts",
    "job_applications",
    "service_requests",
    "contracts",
    "conversations",
    "messages",
    "reviews",
}


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def _tables(db_path):
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_migrator_creates_schema(temp_db_path):
    applied = SQLiteMigrator(temp_db_path).run_migrations()
    assert applied == ["0001_init.sql", "0002_seed_categories.sql"]
    assert TABLES | {"_migrations"} <= _tables(temp_db_path)


def test_categories_are_seeded(temp_db_path):
    SQLiteMigrator(temp_db_path).run_migrations()
    conn = sqlite3.connect(temp_db_path)
    slugs = {r[0] for r in conn.execute("SELECT slug FROM categories").fetchall()}
    conn.close()
    assert slugs == {"development", "design", "marketing", "writing", "auditing", "community"}


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path)
    migrator.run_migrations()
    assert migrator.run_migrations() == []

    conn = sqlite3.connect(temp_db_path)
    count = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
    conn.close()
    assert count == 6


def test_failed_migration_is_reported(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_broken.sql").write_text("CREATE TABLE oops (;\n")
    with pytest.raises(RuntimeError, match="0001_broken.sql"):
        SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()


def test_down_section_is_ignored(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_t.sql").write_text(
        "-- Up\nCREATE TABLE t (id TEXT);\n\n-- Down\nDROP TABLE t;\n"
    )
    SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()
    assert "t" in _tables(temp_db_path)
