"""Quiz session engine: a multiple-choice question loop over lessons."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from kanadeck.exceptions import QuizStateError
from kanadeck.models import Lesson, Word, WordType


def option_label(index: int) -> str:
    """Return the label shown for the option at *index* (``0 -> "a"``)."""
    return chr(ord("a") + index)


def option_index(label: str) -> int:
    """Inverse of :func:`option_label`; ``-1`` for an empty label."""
    label = label.strip().lower()
    if not label:
        return -1
    return ord(label[0]) - ord("a")


class QuizState(str, Enum):
    """Lifecycle of a quiz session."""

    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(slots=True)
class Flashcard:
    """A word in a quiz session together with its attempt counters."""

    word: Word
    lesson_id: int
    bad_attempts: int = 0
    good_attempts: int = 0
    learned: bool = False
    question_type: WordType = WordType.KANA
    answer_type: WordType = WordType.BASE_WORD

    def question(self) -> str:
        return self.question_type.resolve(self.word)

    def answer(self) -> str:
        return self.answer_type.resolve(self.word)


class QuizGame:
    """Single-player quiz over a fixed deck built from *lessons*.

    The deck holds one flashcard per word and is shuffled with *rng* on
    every :meth:`start`; pass a seeded :class:`random.Random` for a
    reproducible order. Options for the current card are drawn when the
    card becomes current, so queries between two :meth:`advance` calls
    always return the same values.

    A card counts as learned once it has been answered correctly
    *learned_threshold* times.
    """

    def __init__(
        self,
        lessons: Iterable[Lesson],
        *,
        question_type: WordType = WordType.KANA,
        answer_type: WordType = WordType.BASE_WORD,
        option_count: int = 4,
        learned_threshold: int = 1,
        rng: random.Random | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        question_type = WordType(question_type)
        answer_type = WordType(answer_type)
        if question_type is answer_type:
            raise ValueError("question and answer word types must differ")
        if option_count < 2:
            raise ValueError(f"option_count must be at least 2, got {option_count}")
        if learned_threshold < 1:
            raise ValueError(
                f"learned_threshold must be at least 1, got {learned_threshold}"
            )
        self._lessons = tuple(lessons)
        self._question_type = question_type
        self._answer_type = answer_type
        self._option_count = option_count
        self._learned_threshold = learned_threshold
        self._rng = rng or random.Random()
        self._logger = logger or logging.getLogger(__name__)

        self._state = QuizState.IDLE
        self._flashcards: list[Flashcard] = []
        self._index = 0
        self._options: list[str] = []
        self._correct_index = -1

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Build and shuffle a fresh deck; restart if already played."""
        self._flashcards = [
            Flashcard(
                word=word,
                lesson_id=lesson.id,
                question_type=self._question_type,
                answer_type=self._answer_type,
            )
            for lesson in self._lessons
            for word in lesson.words
        ]
        self._rng.shuffle(self._flashcards)
        self._index = 0
        if self._flashcards:
            self._state = QuizState.IN_PROGRESS
            self._prepare_options()
        else:
            self._state = QuizState.FINISHED
            self._clear_options()
        self._logger.info(f"Quiz: Started with {len(self._flashcards)} flashcards")

    def advance(self, selected: str | int) -> bool:
        """Record the answer for the current card and move to the next one.

        *selected* is an option label (``"a"``, ``"b"``, ...) or an index
        into :meth:`get_current_options`. Returns whether it was correct.
        """
        if self._state is not QuizState.IN_PROGRESS:
            raise QuizStateError(f"Cannot advance a quiz that is {self._state.value}")

        index = selected if isinstance(selected, int) else option_index(selected)
        card = self._flashcards[self._index]
        correct = index == self._correct_index
        if correct:
            card.good_attempts += 1
            if card.good_attempts >= self._learned_threshold:
                card.learned = True
        else:
            card.bad_attempts += 1
        self._logger.debug(
            f"Quiz: Card {self._index + 1}/{len(self._flashcards)} "
            f"answered {'correctly' if correct else 'incorrectly'}"
        )

        self._index += 1
        if self._index >= len(self._flashcards):
            self._state = QuizState.FINISHED
            self._clear_options()
            self._logger.info(f"Quiz: Finished. {self.get_results()}")
        else:
            self._prepare_options()
        return correct

    def _prepare_options(self) -> None:
        card = self._flashcards[self._index]
        correct = card.answer()
        # dict keeps deck order so a seeded rng gives the same sample
        pool = list(dict.fromkeys(
            other.answer()
            for other in self._flashcards
            if other is not card and other.answer() and other.answer() != correct
        ))
        distractors = self._rng.sample(pool, min(len(pool), self._option_count - 1))
        options = [correct, *distractors]
        self._rng.shuffle(options)
        self._options = options
        self._correct_index = options.index(correct)

    def _clear_options(self) -> None:
        self._options = []
        self._correct_index = -1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> QuizState:
        return self._state

    @property
    def flashcards(self) -> tuple[Flashcard, ...]:
        return tuple(self._flashcards)

    @property
    def current_flashcard(self) -> Flashcard | None:
        if self._state is not QuizState.IN_PROGRESS:
            return None
        return self._flashcards[self._index]

    def is_finished(self) -> bool:
        return self._state is QuizState.FINISHED

    def get_current_question(self) -> str:
        card = self.current_flashcard
        return card.question() if card is not None else ""

    def get_current_options(self) -> list[str]:
        return list(self._options)

    def get_correct_answer_index(self) -> int:
        return self._correct_index

    def get_current_question_index(self) -> int:
        return self._index

    def get_total_questions(self) -> int:
        return len(self._flashcards)

    def get_results(self) -> str:
        learned = sum(1 for card in self._flashcards if card.learned)
        good = sum(card.good_attempts for card in self._flashcards)
        bad = sum(card.bad_attempts for card in self._flashcards)
        return (
            f"Learned {learned} of {len(self._flashcards)} words. "
            f"Correct answers: {good}, incorrect answers: {bad}."
        )
