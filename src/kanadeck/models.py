"""Domain model dataclasses and enums for kanadeck."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

# Returned by id-producing writes that failed
FAILED_ID = -1


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class WordType(str, Enum):
    """Which textual field of a word is shown or asked for."""

    BASE_WORD = "base_word"
    KANA = "kana"
    ROMAJI = "romaji"

    def resolve(self, word: Word) -> str:
        """Return the field of *word* selected by this type."""
        if self is WordType.KANA:
            return word.kana
        if self is WordType.ROMAJI:
            return word.romaji
        return word.translation


class LessonChangeKind(str, Enum):
    """Kind of lesson change sent from the presentation layer."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Word:
    """A vocabulary entry with its written forms and free-form tags."""

    id: int = 0
    kana: str = ""
    translation: str = ""
    romaji: str = ""
    example_sentence: str = ""
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))


@dataclass(frozen=True, slots=True)
class Lesson:
    """A named group of words, labelled by a main name and a sub name."""

    id: int = 0
    main_name: str = ""
    sub_name: str = ""
    words: tuple[Word, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.words, tuple):
            object.__setattr__(self, "words", tuple(self.words))

    @property
    def display_name(self) -> str:
        return f"{self.main_name} - {self.sub_name}"


@dataclass(frozen=True, slots=True)
class LessonChange:
    """A batch of lessons created, modified or deleted by the user."""

    kind: LessonChangeKind
    lessons: tuple[Lesson, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", LessonChangeKind(self.kind))
        if not isinstance(self.lessons, tuple):
            object.__setattr__(self, "lessons", tuple(self.lessons))

    @classmethod
    def created(cls, lessons: Iterable[Lesson]) -> LessonChange:
        return cls(LessonChangeKind.CREATED, tuple(lessons))

    @classmethod
    def modified(cls, lessons: Iterable[Lesson]) -> LessonChange:
        return cls(LessonChangeKind.MODIFIED, tuple(lessons))

    @classmethod
    def deleted(cls, lessons: Iterable[Lesson]) -> LessonChange:
        return cls(LessonChangeKind.DELETED, tuple(lessons))
