"""Tests for the quiz session engine."""

import random

import pytest

from kanadeck import (
    Lesson,
    QuizGame,
    QuizState,
    QuizStateError,
    Word,
    WordType,
    option_index,
    option_label,
)


def _wrong_label(game):
    options = game.get_current_options()
    return option_label((game.get_correct_answer_index() + 1) % len(options))


def _correct_label(game):
    return option_label(game.get_correct_answer_index())


@pytest.fixture
def lessons(greetings, animals):
    return [
        Lesson(id=1, main_name=greetings.main_name, sub_name=greetings.sub_name,
               words=greetings.words),
        Lesson(id=2, main_name=animals.main_name, sub_name=animals.sub_name,
               words=animals.words),
    ]


@pytest.fixture
def game(lessons):
    quiz = QuizGame(lessons, rng=random.Random(1234))
    quiz.start()
    return quiz


class TestLabels:

    def test_round_trip(self):
        assert option_label(0) == "a"
        assert option_label(3) == "d"
        assert option_index("c") == 2
        assert option_index(" B) ") == 1
        assert option_index("") == -1


class TestLifecycle:

    def test_idle_before_start(self, lessons):
        quiz = QuizGame(lessons)
        assert quiz.state is QuizState.IDLE
        assert not quiz.is_finished()
        assert quiz.get_current_question() == ""
        assert quiz.get_current_options() == []
        assert quiz.get_correct_answer_index() == -1
        with pytest.raises(QuizStateError):
            quiz.advance("a")

    def test_start_builds_one_card_per_word(self, game):
        assert game.state is QuizState.IN_PROGRESS
        assert game.get_total_questions() == 5
        assert game.get_current_question_index() == 0
        for card in game.flashcards:
            assert (card.bad_attempts, card.good_attempts, card.learned) == (0, 0, False)
        assert {card.lesson_id for card in game.flashcards} == {1, 2}

    def test_n_advances_finish(self, game):
        for i in range(5):
            assert not game.is_finished()
            assert game.get_current_question_index() == i
            game.advance("a")
        assert game.is_finished()
        assert game.state is QuizState.FINISHED
        with pytest.raises(QuizStateError):
            game.advance("a")

    def test_reads_after_finish_do_not_mutate(self, game):
        for _ in range(5):
            game.advance(_correct_label(game))
        for _ in range(3):
            assert game.get_current_question() == ""
            assert game.get_current_options() == []
            assert game.get_correct_answer_index() == -1
        assert game.get_current_question_index() == 5
        assert game.is_finished()

    def test_restart(self, game):
        for _ in range(5):
            game.advance(_correct_label(game))
        game.start()
        assert game.get_current_question_index() == 0
        assert not game.is_finished()
        assert all(card.good_attempts == 0 for card in game.flashcards)

    def test_empty_deck_finishes_immediately(self):
        quiz = QuizGame([Lesson(id=1, main_name="Empty", sub_name="Lesson")])
        quiz.start()
        assert quiz.is_finished()
        assert quiz.get_total_questions() == 0
        assert quiz.get_results() == (
            "Learned 0 of 0 words. Correct answers: 0, incorrect answers: 0."
        )


class TestQuestions:

    def test_question_uses_question_word_type(self, game):
        card = game.current_flashcard
        assert game.get_current_question() == card.word.kana

    def test_options_contain_correct_answer_at_reported_index(self, game):
        while not game.is_finished():
            card = game.current_flashcard
            options = game.get_current_options()
            assert options[game.get_correct_answer_index()] == card.word.translation
            assert len(options) == 4
            assert len(set(options)) == len(options)
            game.advance("a")

    def test_repeated_reads_are_stable(self, game):
        first = (game.get_current_question(), game.get_current_options(),
                 game.get_correct_answer_index())
        for _ in range(5):
            assert (game.get_current_question(), game.get_current_options(),
                    game.get_correct_answer_index()) == first

    def test_few_distractors_available(self):
        lessons = [Lesson(id=1, words=[
            Word(kana="あ", translation="same"),
            Word(kana="い", translation="same"),
            Word(kana="う", translation="other"),
        ])]
        quiz = QuizGame(lessons, option_count=6, rng=random.Random(0))
        quiz.start()
        while not quiz.is_finished():
            options = quiz.get_current_options()
            assert sorted(options) == ["other", "same"]
            quiz.advance("a")

    def test_single_card_deck(self):
        quiz = QuizGame([Lesson(id=1, words=[Word(kana="ねこ", translation="cat")])])
        quiz.start()
        assert quiz.get_current_options() == ["cat"]
        assert quiz.get_correct_answer_index() == 0

    def test_empty_answers_are_not_distractors(self):
        lessons = [Lesson(id=1, words=[
            Word(kana="あ", translation="a", romaji="a"),
            Word(kana="い", translation="i"),
            Word(kana="う", translation="u", romaji="u"),
        ])]
        quiz = QuizGame(lessons, answer_type=WordType.ROMAJI, rng=random.Random(3))
        quiz.start()
        while not quiz.is_finished():
            card = quiz.current_flashcard
            distractors = [o for i, o in enumerate(quiz.get_current_options())
                           if i != quiz.get_correct_answer_index()]
            assert "" not in distractors
            assert card.word.romaji not in distractors
            quiz.advance("a")

    def test_configured_word_types(self, lessons):
        quiz = QuizGame(lessons, question_type=WordType.BASE_WORD,
                        answer_type=WordType.ROMAJI, rng=random.Random(5))
        quiz.start()
        card = quiz.current_flashcard
        assert quiz.get_current_question() == card.word.translation
        assert quiz.get_current_options()[quiz.get_correct_answer_index()] == card.word.romaji

    def test_seeded_games_are_identical(self, lessons):
        def transcript(seed):
            quiz = QuizGame(lessons, rng=random.Random(seed))
            quiz.start()
            seen = []
            while not quiz.is_finished():
                seen.append((quiz.get_current_question(), quiz.get_current_options()))
                quiz.advance("b")
            return seen

        assert transcript(42) == transcript(42)


class TestAttempts:

    def test_correct_answer_counts_and_learns(self, game):
        card = game.current_flashcard
        assert game.advance(_correct_label(game)) is True
        assert card.good_attempts == 1
        assert card.bad_attempts == 0
        assert card.learned

    def test_wrong_answer_counts(self, game):
        card = game.current_flashcard
        assert game.advance(_wrong_label(game)) is False
        assert card.bad_attempts == 1
        assert card.good_attempts == 0
        assert not card.learned

    def test_advance_accepts_index(self, game):
        card = game.current_flashcard
        assert game.advance(game.get_correct_answer_index()) is True
        assert card.good_attempts == 1

    def test_learned_threshold(self, lessons):
        quiz = QuizGame(lessons, learned_threshold=2, rng=random.Random(9))
        quiz.start()
        card = quiz.current_flashcard
        quiz.advance(_correct_label(quiz))
        assert card.good_attempts == 1
        assert not card.learned

    def test_results(self, game):
        game.advance(_correct_label(game))
        game.advance(_correct_label(game))
        game.advance(_wrong_label(game))
        game.advance(_correct_label(game))
        game.advance(_wrong_label(game))
        assert game.get_results() == (
            "Learned 3 of 5 words. Correct answers: 3, incorrect answers: 2."
        )


class TestConfiguration:

    def test_same_word_types_rejected(self, lessons):
        with pytest.raises(ValueError):
            QuizGame(lessons, question_type=WordType.KANA, answer_type="kana")

    def test_option_count_too_small(self, lessons):
        with pytest.raises(ValueError):
            QuizGame(lessons, option_count=1)

    def test_learned_threshold_too_small(self, lessons):
        with pytest.raises(ValueError):
            QuizGame(lessons, learned_threshold=0)
