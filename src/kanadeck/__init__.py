"""kanadeck: vocabulary lessons in SQLite and multiple-choice quizzes."""

__version__ = "0.1.0"

from kanadeck.config import Settings, load_settings, save_settings
from kanadeck.driver import QuizDriver
from kanadeck.exceptions import (
    ConfigError,
    DatabaseError,
    KanadeckError,
    LessonFileError,
    QuizStateError,
)
from kanadeck.lessonfile import dump_lessons, load_lessons
from kanadeck.manager import LessonManager
from kanadeck.models import (
    FAILED_ID,
    Lesson,
    LessonChange,
    LessonChangeKind,
    Word,
    WordType,
)
from kanadeck.quiz import Flashcard, QuizGame, QuizState, option_index, option_label
from kanadeck.storage import LessonsDatabase, LessonStore

__all__ = [
    # Storage and manager
    "LessonsDatabase",
    "LessonStore",
    "LessonManager",
    # Models
    "FAILED_ID",
    "Lesson",
    "LessonChange",
    "LessonChangeKind",
    "Word",
    "WordType",
    # Quiz
    "Flashcard",
    "QuizDriver",
    "QuizGame",
    "QuizState",
    "option_index",
    "option_label",
    # Lesson files and settings
    "dump_lessons",
    "load_lessons",
    "Settings",
    "load_settings",
    "save_settings",
    # Exceptions
    "ConfigError",
    "DatabaseError",
    "KanadeckError",
    "LessonFileError",
    "QuizStateError",
]
