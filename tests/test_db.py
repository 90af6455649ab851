import sqlite3

import pytest

from kanadeck import db
from kanadeck.db import SCHEMA_VERSION, check_schema_version
from kanadeck.exceptions import DatabaseError


@pytest.fixture
def db_conn():
    """Create an in-memory database connection for testing."""
    conn = db.connect(":memory:")
    db.init_db(conn)
    yield conn
    conn.close()


def test_tables_created(db_conn):
    tables = {
        row["name"]
        for row in db_conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    assert {"meta", "lessons", "words", "tags"} <= tables


def test_foreign_keys_enabled(db_conn):
    assert db_conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_init_is_idempotent(db_conn):
    db.init_db(db_conn)
    count = db_conn.execute(
        "SELECT COUNT(*) FROM meta WHERE key = 'schema_version'"
    ).fetchone()[0]
    assert count == 1


def test_run_binds_parameters(db_conn):
    cur = db.run(
        db_conn,
        "INSERT INTO lessons (main_name, sub_name) VALUES (?, ?)",
        ["Main", "Sub"],
    )
    assert cur.lastrowid == 1
    row = db.run(db_conn, "SELECT * FROM lessons WHERE id = ?", (1,)).fetchone()
    assert row["main_name"] == "Main"
    assert row["sub_name"] == "Sub"


def test_run_propagates_errors(db_conn):
    with pytest.raises(sqlite3.IntegrityError):
        db.run(db_conn, "INSERT INTO lessons (main_name, sub_name) VALUES (?, ?)", (None, "x"))


def test_cascade_from_lesson_to_tags(db_conn):
    db.run(db_conn, "INSERT INTO lessons (main_name, sub_name) VALUES ('m', 's')")
    db.run(db_conn, "INSERT INTO words (lesson_id, kana, translation) VALUES (1, 'k', 't')")
    db.run(db_conn, "INSERT INTO tags (word_id, tag) VALUES (1, 'tag')")
    db.run(db_conn, "DELETE FROM lessons WHERE id = 1")
    assert db_conn.execute("SELECT COUNT(*) FROM words").fetchone()[0] == 0
    assert db_conn.execute("SELECT COUNT(*) FROM tags").fetchone()[0] == 0


def test_file_database_parent_created(tmp_path):
    path = tmp_path / "nested" / "lessons.db"
    conn = db.connect(path)
    db.init_db(conn)
    conn.close()
    assert path.exists()


def test_incompatible_schema_version():
    """Test that check_schema_version raises DatabaseError for incompatible version."""
    conn = sqlite3.connect(":memory:")
    conn.execute("CREATE TABLE meta (key TEXT, value TEXT)")
    conn.execute("INSERT INTO meta (key, value) VALUES ('schema_version', '99.9')")

    with pytest.raises(DatabaseError, match=rf"Incompatible schema version: 99.9 \(expected {SCHEMA_VERSION}\)"):
        check_schema_version(conn)
    conn.close()


def test_uninitialized_database():
    """Test that check_schema_version returns for uninitialized database (no meta table)."""
    conn = sqlite3.connect(":memory:")
    check_schema_version(conn)
    conn.close()
