"""LessonManager: composes multi-entity writes over a lesson store."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from kanadeck.models import FAILED_ID, Lesson, LessonChange, LessonChangeKind, Word
from kanadeck.storage import LessonStore


class _WriteFailed(Exception):
    """Internal signal that aborts the enclosing store transaction."""


class LessonManager:
    """Keeps lesson/word/tag writes consistent on top of a :class:`LessonStore`.

    Every lesson is written inside one store transaction: a lesson whose
    row or any of whose words cannot be written is rolled back as a whole
    and reported with :data:`~kanadeck.models.FAILED_ID`.
    """

    def __init__(
        self,
        store: LessonStore,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self._logger = logger or logging.getLogger(__name__)

    @property
    def store(self) -> LessonStore:
        return self._store

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_lesson(self, lesson: Lesson) -> int:
        """Write *lesson*, its words and their tags, in sequence order.

        Returns the id assigned by the store, or ``FAILED_ID``.
        """
        try:
            with self._store.transaction():
                lesson_id = self._write_lesson(lesson)
        except _WriteFailed as e:
            self._logger.error(
                f"LessonManager: Lesson '{lesson.display_name}' was not added: {e}"
            )
            return FAILED_ID
        return lesson_id

    def _write_lesson(self, lesson: Lesson) -> int:
        lesson_id = self._store.add_lesson(lesson.main_name, lesson.sub_name)
        if lesson_id == FAILED_ID:
            raise _WriteFailed("lesson row could not be written")
        for word in lesson.words:
            word_id = self._store.add_word(lesson_id, word)
            if word_id == FAILED_ID:
                raise _WriteFailed(f"word {word.kana!r} could not be written")
            for tag in word.tags:
                self._store.add_tag(word_id, tag)
        return lesson_id

    def add_lessons(self, lessons: Iterable[Lesson]) -> list[int]:
        """Add each lesson in order; a failed lesson does not stop the rest.

        Returns one id (or ``FAILED_ID``) per input lesson.
        """
        ids = [self.add_lesson(lesson) for lesson in lessons]
        failures = ids.count(FAILED_ID)
        if failures:
            self._logger.error(
                f"LessonManager: {failures} of {len(ids)} lessons could not be added"
            )
        else:
            self._logger.info(f"LessonManager: Added {len(ids)} lessons")
        return ids

    def rename_lessons(self, lessons: Iterable[Lesson]) -> None:
        """Store the names of already-persisted lessons. Words are ignored."""
        for lesson in lessons:
            if lesson.id <= 0:
                self._logger.error(
                    f"LessonManager: Cannot rename '{lesson.display_name}' "
                    f"without a stored id"
                )
                continue
            self._store.update_lesson(lesson.id, lesson.main_name, lesson.sub_name)

    def delete_lessons(self, lesson_ids: Iterable[int]) -> None:
        for lesson_id in lesson_ids:
            self._store.delete_lesson(lesson_id)

    def update_word(self, word: Word) -> None:
        """Replace the text fields of a stored word; tags are kept."""
        self._store.update_word(word.id, word)

    def set_word_tags(self, word_id: int, tags: Iterable[str]) -> None:
        """Replace the tags of a stored word."""
        with self._store.transaction():
            self._store.delete_tags(word_id)
            for tag in tags:
                self._store.add_tag(word_id, tag)

    def apply_change(self, change: LessonChange) -> list[int] | None:
        """Apply a lesson change coming from the presentation layer.

        Only ``CREATED`` changes produce ids.
        """
        if change.kind is LessonChangeKind.CREATED:
            return self.add_lessons(change.lessons)
        if change.kind is LessonChangeKind.MODIFIED:
            self.rename_lessons(change.lessons)
        else:
            self.delete_lessons(lesson.id for lesson in change.lessons)
        return None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all_lessons(self) -> list[Lesson]:
        return self._store.get_all_lessons()

    def get_lesson_names(self) -> list[str]:
        return self._store.get_lesson_names()
