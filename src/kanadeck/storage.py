"""SQLite storage backend for lessons, words and tags."""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from collections.abc import Generator, Sequence
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import Any, Protocol

from kanadeck import db as _db
from kanadeck.exceptions import DatabaseError
from kanadeck.models import FAILED_ID, Lesson, Word


class LessonStore(Protocol):
    """Storage contract consumed by :class:`~kanadeck.manager.LessonManager`."""

    def add_lesson(self, main_name: str, sub_name: str) -> int: ...

    def add_word(self, lesson_id: int, word: Word) -> int: ...

    def add_tag(self, word_id: int, tag: str) -> None: ...

    def update_lesson(self, lesson_id: int, main_name: str, sub_name: str) -> None: ...

    def update_word(self, word_id: int, word: Word) -> None: ...

    def delete_lesson(self, lesson_id: int) -> None: ...

    def delete_word(self, word_id: int) -> None: ...

    def delete_tags(self, word_id: int) -> None: ...

    def get_all_lessons(self) -> list[Lesson]: ...

    def get_lesson_names(self) -> list[str]: ...

    def get_words_in_lesson(self, lesson_id: int) -> list[Word]: ...

    def transaction(self) -> AbstractContextManager[None]: ...


class LessonsDatabase:
    """Lesson store backed by a SQLite database file (or ``:memory:``).

    Failed statements never raise: they are logged, id-producing writes
    return :data:`~kanadeck.models.FAILED_ID`, other writes do nothing and
    reads return an empty list. Only a database that cannot be opened is
    reported with :class:`~kanadeck.exceptions.DatabaseError`.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._db_path = str(db_path)
        self._tx_depth = 0
        conn: sqlite3.Connection | None = None
        try:
            conn = self._conn = _db.connect(db_path)
            _db.check_schema_version(conn)
            _db.init_db(conn)
        except (sqlite3.Error, OSError) as e:
            self._logger.error(f"Database: Can't open database: {e}")
            if conn is not None:
                conn.close()
            raise DatabaseError(
                f"Cannot open database at {self._db_path!r}: {e}"
            ) from e
        except DatabaseError as e:
            self._logger.error(f"Database: Failed to initialize database: {e}")
            conn.close()
            raise
        self._logger.info(f"Database: Opened database successfully at {self._db_path}")

    @property
    def path(self) -> str:
        return self._db_path

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
        self._logger.info("Database: Closed database connection.")

    def __enter__(self) -> LessonsDatabase:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        """Group multiple writes into a single transaction.

        Nested calls open a savepoint, so a failure inside them undoes
        only their own writes and leaves the enclosing transaction open.
        """
        self._tx_depth += 1
        depth = self._tx_depth
        savepoint = f"kanadeck_sp_{depth}"
        if depth == 1:
            self._conn.execute("BEGIN")
        else:
            self._conn.execute(f"SAVEPOINT {savepoint}")
        try:
            yield
        except BaseException:
            if depth == 1:
                self._conn.rollback()
                self._logger.info("Database: Rolled back transaction.")
            else:
                self._conn.execute(f"ROLLBACK TO {savepoint}")
                self._conn.execute(f"RELEASE {savepoint}")
                self._logger.info(f"Database: Rolled back to savepoint {savepoint}.")
            self._tx_depth -= 1
            raise
        else:
            if depth == 1:
                self._conn.commit()
            else:
                self._conn.execute(f"RELEASE {savepoint}")
            self._tx_depth -= 1

    def _write(
        self, action: str, sql: str, params: Sequence[Any] = ()
    ) -> sqlite3.Cursor | None:
        try:
            if self._tx_depth:
                return _db.run(self._conn, sql, params)
            with self._conn:
                return _db.run(self._conn, sql, params)
        except sqlite3.Error as e:
            self._logger.error(f"Database: SQL error while {action}: {e}")
            return None

    def _read(
        self, action: str, sql: str, params: Sequence[Any] = ()
    ) -> list[sqlite3.Row]:
        try:
            return _db.run(self._conn, sql, params).fetchall()
        except sqlite3.Error as e:
            self._logger.error(f"Database: SQL error while {action}: {e}")
            return []

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_lesson(self, main_name: str, sub_name: str) -> int:
        cur = self._write(
            "adding lesson",
            "INSERT INTO lessons (main_name, sub_name) VALUES (?, ?)",
            (main_name, sub_name),
        )
        if cur is None:
            return FAILED_ID
        lesson_id = cur.lastrowid
        self._logger.info(
            f"Database: Added lesson with ID {lesson_id}, "
            f"mainName: {main_name}, subName: {sub_name}"
        )
        return lesson_id

    def add_word(self, lesson_id: int, word: Word) -> int:
        """Insert *word* under *lesson_id*. Tags are not written."""
        cur = self._write(
            "adding word",
            "INSERT INTO words "
            "(lesson_id, kana, translation, romaji, example_sentence) "
            "VALUES (?, ?, ?, ?, ?)",
            (lesson_id, word.kana, word.translation, word.romaji,
             word.example_sentence),
        )
        if cur is None:
            return FAILED_ID
        word_id = cur.lastrowid
        self._logger.info(
            f"Database: Added word with ID {word_id} to lesson ID {lesson_id}"
        )
        return word_id

    def add_tag(self, word_id: int, tag: str) -> None:
        cur = self._write(
            "adding tag",
            "INSERT INTO tags (word_id, tag) VALUES (?, ?)",
            (word_id, tag),
        )
        if cur is not None:
            self._logger.info(f"Database: Added tag '{tag}' to word ID {word_id}")

    def update_lesson(self, lesson_id: int, main_name: str, sub_name: str) -> None:
        cur = self._write(
            "updating lesson",
            "UPDATE lessons SET main_name = ?, sub_name = ? WHERE id = ?",
            (main_name, sub_name, lesson_id),
        )
        if cur is None:
            return
        if cur.rowcount == 0:
            self._logger.info(f"Database: No lesson with ID {lesson_id} to update")
            return
        self._logger.info(
            f"Database: Updated lesson ID {lesson_id} to "
            f"mainName: {main_name}, subName: {sub_name}"
        )

    def update_word(self, word_id: int, word: Word) -> None:
        """Replace the text fields of a word. Tags are left untouched."""
        cur = self._write(
            "updating word",
            "UPDATE words SET kana = ?, translation = ?, romaji = ?, "
            "example_sentence = ? WHERE id = ?",
            (word.kana, word.translation, word.romaji, word.example_sentence,
             word_id),
        )
        if cur is None:
            return
        if cur.rowcount == 0:
            self._logger.info(f"Database: No word with ID {word_id} to update")
            return
        self._logger.info(f"Database: Updated word ID {word_id}")

    def delete_lesson(self, lesson_id: int) -> None:
        """Delete a lesson; its words and their tags cascade."""
        cur = self._write(
            "deleting lesson", "DELETE FROM lessons WHERE id = ?", (lesson_id,)
        )
        if cur is not None:
            self._logger.info(f"Database: Deleted lesson ID {lesson_id}")

    def delete_word(self, word_id: int) -> None:
        """Delete a word; its tags cascade."""
        cur = self._write(
            "deleting word", "DELETE FROM words WHERE id = ?", (word_id,)
        )
        if cur is not None:
            self._logger.info(f"Database: Deleted word ID {word_id}")

    def delete_tags(self, word_id: int) -> None:
        cur = self._write(
            "deleting tags", "DELETE FROM tags WHERE word_id = ?", (word_id,)
        )
        if cur is not None:
            self._logger.info(f"Database: Deleted tags of word ID {word_id}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_lesson_names(self) -> list[str]:
        rows = self._read(
            "reading lesson names",
            "SELECT main_name, sub_name FROM lessons ORDER BY id",
        )
        return [f"{r['main_name']} - {r['sub_name']}" for r in rows]

    def get_words_in_lesson(self, lesson_id: int) -> list[Word]:
        rows = self._read(
            "reading words",
            "SELECT id, lesson_id, kana, translation, romaji, example_sentence "
            "FROM words WHERE lesson_id = ? ORDER BY id",
            (lesson_id,),
        )
        tag_rows = self._read(
            "reading tags",
            "SELECT t.word_id, t.tag FROM tags t "
            "JOIN words w ON w.id = t.word_id "
            "WHERE w.lesson_id = ? ORDER BY t.id",
            (lesson_id,),
        )
        return [w for _, w in self._assemble_words(rows, tag_rows)]

    def get_lesson(self, lesson_id: int) -> Lesson | None:
        rows = self._read(
            "reading lesson",
            "SELECT id, main_name, sub_name FROM lessons WHERE id = ?",
            (lesson_id,),
        )
        if not rows:
            return None
        return self._row_to_lesson(rows[0], self.get_words_in_lesson(lesson_id))

    def get_all_lessons(self) -> list[Lesson]:
        """Return every lesson with its words and tags fully populated."""
        lesson_rows = self._read(
            "reading lessons",
            "SELECT id, main_name, sub_name FROM lessons ORDER BY id",
        )
        word_rows = self._read(
            "reading words",
            "SELECT id, lesson_id, kana, translation, romaji, example_sentence "
            "FROM words ORDER BY id",
        )
        tag_rows = self._read(
            "reading tags", "SELECT word_id, tag FROM tags ORDER BY id"
        )

        words_by_lesson: dict[int, list[Word]] = defaultdict(list)
        for lesson_id, word in self._assemble_words(word_rows, tag_rows):
            words_by_lesson[lesson_id].append(word)

        return [
            self._row_to_lesson(r, words_by_lesson.get(r["id"], []))
            for r in lesson_rows
        ]

    def _assemble_words(
        self,
        word_rows: list[sqlite3.Row],
        tag_rows: list[sqlite3.Row],
    ) -> list[tuple[int, Word]]:
        tags: dict[int, list[str]] = defaultdict(list)
        for row in tag_rows:
            tags[row["word_id"]].append(row["tag"])
        return [
            (row["lesson_id"], self._row_to_word(row, tags.get(row["id"], [])))
            for row in word_rows
        ]

    def _row_to_word(self, row: sqlite3.Row, tags: list[str]) -> Word:
        return Word(
            id=row["id"],
            kana=row["kana"],
            translation=row["translation"],
            romaji=row["romaji"] or "",
            example_sentence=row["example_sentence"] or "",
            tags=tuple(tags),
        )

    def _row_to_lesson(self, row: sqlite3.Row, words: list[Word]) -> Lesson:
        return Lesson(
            id=row["id"],
            main_name=row["main_name"],
            sub_name=row["sub_name"],
            words=tuple(words),
        )
