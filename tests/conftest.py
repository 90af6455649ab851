"""Shared test fixtures for kanadeck."""

from unittest.mock import MagicMock

import pytest

from kanadeck import Lesson, LessonManager, LessonsDatabase, Word


@pytest.fixture
def store():
    """Create an in-memory lesson database for testing."""
    with LessonsDatabase(":memory:") as db:
        yield db


@pytest.fixture
def manager(store):
    return LessonManager(store)


@pytest.fixture
def greetings():
    """A lesson with three tagged words."""
    return Lesson(
        main_name="Greetings",
        sub_name="Basics",
        words=(
            Word(kana="こんにちは", translation="hello", romaji="konnichiwa",
                 example_sentence="こんにちは、先生。", tags=("greeting", "daytime")),
            Word(kana="おはよう", translation="good morning", romaji="ohayou",
                 tags=("greeting",)),
            Word(kana="さようなら", translation="goodbye", romaji="sayounara"),
        ),
    )


@pytest.fixture
def animals():
    """A second lesson with two words."""
    return Lesson(
        main_name="Animals",
        sub_name="Pets",
        words=(
            Word(kana="いぬ", translation="dog", romaji="inu", tags=("noun",)),
            Word(kana="ねこ", translation="cat", romaji="neko", tags=("noun",)),
        ),
    )


@pytest.fixture
def populated(manager, greetings, animals):
    """Manager whose store already holds both sample lessons."""
    manager.add_lessons([greetings, animals])
    return manager


@pytest.fixture
def mock_store():
    """A store double recording every call made by the manager."""
    return MagicMock(spec=LessonsDatabase)


def store_calls(mock_store, *names):
    """Calls made on *mock_store* to the given method names, in order."""
    return [c for c in mock_store.mock_calls if c[0] in names]
