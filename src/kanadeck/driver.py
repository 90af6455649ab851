"""Reveal-then-advance pacing for a polled quiz front end."""

from __future__ import annotations

import time
from collections.abc import Callable

from kanadeck.quiz import QuizGame, QuizState, option_index


class QuizDriver:
    """Drives a :class:`QuizGame` from a cooperative poll loop.

    After an option is selected the correct answer stays highlighted for
    *reveal_delay* seconds; the next :meth:`tick` past that point advances
    the game. Question and options are buffered while revealing so the
    front end keeps showing the answered card.
    """

    def __init__(
        self,
        game: QuizGame,
        *,
        reveal_delay: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if reveal_delay < 0:
            raise ValueError(f"reveal_delay must not be negative, got {reveal_delay}")
        self._game = game
        self._reveal_delay = reveal_delay
        self._clock = clock
        self._selected: str | None = None
        self._reveal_started = 0.0
        self._question = ""
        self._options: list[str] = []
        self._highlighted = -1
        if game.state is QuizState.IDLE:
            game.start()
        self._buffer()

    @property
    def game(self) -> QuizGame:
        return self._game

    @property
    def is_revealing(self) -> bool:
        return self._selected is not None

    @property
    def selected_index(self) -> int:
        return option_index(self._selected) if self._selected is not None else -1

    @property
    def highlighted_index(self) -> int:
        """Index of the correct option while revealing, else ``-1``."""
        return self._highlighted if self.is_revealing else -1

    @property
    def question(self) -> str:
        return self._question

    @property
    def options(self) -> list[str]:
        return list(self._options)

    @property
    def progress(self) -> str:
        total = self._game.get_total_questions()
        current = min(self._game.get_current_question_index() + 1, total)
        return f"{current}/{total}"

    def _buffer(self) -> None:
        self._question = self._game.get_current_question()
        self._options = self._game.get_current_options()
        self._highlighted = self._game.get_correct_answer_index()

    def select(self, label: str) -> int:
        """Select an option and start revealing; returns the correct index.

        Selections made while revealing or after the quiz finished are
        ignored and return ``-1``.
        """
        if self.is_revealing or self._game.is_finished():
            return -1
        self._selected = label
        self._reveal_started = self._clock()
        return self._highlighted

    def tick(self) -> bool:
        """Advance the game if the reveal delay has elapsed.

        Returns True when the game was advanced on this tick.
        """
        if self._selected is None:
            return False
        if self._clock() - self._reveal_started < self._reveal_delay:
            return False
        self._game.advance(self._selected)
        self._selected = None
        self._buffer()
        return True

    def restart(self) -> None:
        self._selected = None
        self._game.start()
        self._buffer()
