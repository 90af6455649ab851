"""
Command-line interface for managing lessons and running quizzes.
"""
from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path
from typing import Optional

from kanadeck import __version__
from kanadeck.config import Settings, load_settings, save_settings
from kanadeck.driver import QuizDriver
from kanadeck.exceptions import ConfigError, DatabaseError, LessonFileError
from kanadeck.lessonfile import dump_lessons, load_lessons
from kanadeck.manager import LessonManager
from kanadeck.models import FAILED_ID, Lesson, WordType
from kanadeck.quiz import QuizGame, option_index, option_label
from kanadeck.storage import LessonsDatabase

QUIT_COMMANDS = {"q", "quit", "exit"}
WORD_TYPES = [t.value for t in WordType]


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the kanadeck CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (ConfigError, DatabaseError) as e:
        print(f"\n  [ERROR] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="kanadeck",
        description="Vocabulary lessons and multiple-choice quizzes",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--db",
        type=Path,
        help="Lesson database (default: from settings)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Settings file (default: ~/.kanadeck/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log database activity",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    init_parser = subparsers.add_parser("init", help="Create an empty lesson database")
    init_parser.set_defaults(func=cmd_init)

    import_parser = subparsers.add_parser("import", help="Import lessons from a YAML file")
    import_parser.add_argument("file", type=Path, help="YAML lesson file")
    import_parser.set_defaults(func=cmd_import)

    export_parser = subparsers.add_parser("export", help="Export all lessons to a YAML file")
    export_parser.add_argument("file", type=Path, help="Destination YAML file")
    export_parser.set_defaults(func=cmd_export)

    list_parser = subparsers.add_parser("list", help="List lessons")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show the words of a lesson")
    show_parser.add_argument("lesson_id", type=int, help="Lesson ID")
    show_parser.set_defaults(func=cmd_show)

    rename_parser = subparsers.add_parser("rename", help="Rename a lesson")
    rename_parser.add_argument("lesson_id", type=int, help="Lesson ID")
    rename_parser.add_argument("main_name", help="New main name")
    rename_parser.add_argument("sub_name", help="New sub name")
    rename_parser.set_defaults(func=cmd_rename)

    delete_parser = subparsers.add_parser("delete", help="Delete a lesson and its words")
    delete_parser.add_argument("lesson_id", type=int, help="Lesson ID")
    delete_parser.set_defaults(func=cmd_delete)

    quiz_parser = subparsers.add_parser("quiz", help="Run a multiple-choice quiz")
    quiz_parser.add_argument(
        "--lesson",
        type=int,
        action="append",
        dest="lessons",
        help="Restrict to a lesson ID (repeatable; default: all lessons)",
    )
    quiz_parser.add_argument("--seed", type=int, help="Random seed for a repeatable deck")
    quiz_parser.add_argument("--question", choices=WORD_TYPES, help="Word field shown")
    quiz_parser.add_argument("--answer", choices=WORD_TYPES, help="Word field asked for")
    quiz_parser.add_argument(
        "--delay",
        type=float,
        help="Seconds the correct answer stays shown (default: from settings)",
    )
    quiz_parser.set_defaults(func=cmd_quiz)

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Change a setting (repeatable)",
    )
    settings_parser.set_defaults(func=cmd_settings)

    return parser


def _settings(args: argparse.Namespace) -> Settings:
    return load_settings(args.config)


def _open_manager(args: argparse.Namespace) -> LessonManager:
    db_path = args.db if args.db is not None else _settings(args).database_path
    return LessonManager(LessonsDatabase(db_path))


def _close(manager: LessonManager) -> None:
    manager.store.close()


def cmd_init(args: argparse.Namespace) -> int:
    """Handle init command."""
    manager = _open_manager(args)
    print(f"Database ready at {manager.store.path}")
    _close(manager)
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Handle import command."""
    print(f"\nLoading {args.file}...")
    try:
        lessons = load_lessons(args.file)
    except LessonFileError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"                Line: {e.line}")
        return 1
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    manager = _open_manager(args)
    try:
        ids = manager.add_lessons(lessons)
    finally:
        _close(manager)

    for lesson, lesson_id in zip(lessons, ids):
        if lesson_id == FAILED_ID:
            print(f"  [FAILED] {lesson.display_name}")
        else:
            print(f"  [{lesson_id}] {lesson.display_name} ({len(lesson.words)} words)")

    failed = ids.count(FAILED_ID)
    print(f"\nImported {len(ids) - failed} of {len(ids)} lessons")
    return 1 if failed else 0


def cmd_export(args: argparse.Namespace) -> int:
    """Handle export command."""
    manager = _open_manager(args)
    try:
        lessons = manager.get_all_lessons()
    finally:
        _close(manager)
    dump_lessons(lessons, args.file)
    print(f"Exported {len(lessons)} lessons to {args.file}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handle list command."""
    manager = _open_manager(args)
    try:
        lessons = manager.get_all_lessons()
    finally:
        _close(manager)

    if not lessons:
        print("No lessons.")
        return 0
    for lesson in lessons:
        print(f"  [{lesson.id}] {lesson.display_name} ({len(lesson.words)} words)")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    manager = _open_manager(args)
    try:
        lesson = manager.store.get_lesson(args.lesson_id)
    finally:
        _close(manager)

    if lesson is None:
        print(f"\n  [ERROR] Lesson not found: {args.lesson_id}")
        return 1

    print(f"{lesson.display_name}")
    for word in lesson.words:
        tags = f"  [{', '.join(word.tags)}]" if word.tags else ""
        print(f"  {word.kana} ({word.romaji}) - {word.translation}{tags}")
        if word.example_sentence:
            print(f"      {word.example_sentence}")
    return 0


def cmd_rename(args: argparse.Namespace) -> int:
    """Handle rename command."""
    manager = _open_manager(args)
    try:
        if manager.store.get_lesson(args.lesson_id) is None:
            print(f"\n  [ERROR] Lesson not found: {args.lesson_id}")
            return 1
        manager.rename_lessons(
            [Lesson(id=args.lesson_id, main_name=args.main_name, sub_name=args.sub_name)]
        )
    finally:
        _close(manager)
    print(f"Renamed lesson {args.lesson_id} to {args.main_name} - {args.sub_name}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Handle delete command."""
    manager = _open_manager(args)
    try:
        lesson = manager.store.get_lesson(args.lesson_id)
        if lesson is None:
            print(f"\n  [ERROR] Lesson not found: {args.lesson_id}")
            return 1
        manager.delete_lessons([args.lesson_id])
    finally:
        _close(manager)
    print(f"Deleted {lesson.display_name} ({len(lesson.words)} words)")
    return 0


def cmd_quiz(args: argparse.Namespace) -> int:
    """Handle quiz command."""
    settings = _settings(args)
    manager = _open_manager(args)
    try:
        lessons = manager.get_all_lessons()
    finally:
        _close(manager)

    if args.lessons:
        lessons = [lesson for lesson in lessons if lesson.id in args.lessons]
    if not any(lesson.words for lesson in lessons):
        print("\n  [ERROR] No words to quiz on")
        return 1

    try:
        game = QuizGame(
            lessons,
            question_type=WordType(args.question or settings.question_type),
            answer_type=WordType(args.answer or settings.answer_type),
            option_count=settings.option_count,
            learned_threshold=settings.learned_threshold,
            rng=random.Random(args.seed),
        )
        delay = settings.reveal_delay if args.delay is None else args.delay
        driver = QuizDriver(game, reveal_delay=delay)
    except ValueError as e:
        print(f"\n  [ERROR] {e}")
        return 1

    if settings.username:
        print(f"\nWelcome back, {settings.username}!")
    while not game.is_finished():
        print(f"\n[{driver.progress}] {driver.question}")
        options = driver.options
        for i, option in enumerate(options):
            print(f"  {option_label(i)}) {option}")

        try:
            answer = input("Your answer: ").strip().lower()
        except EOFError:
            answer = "q"
        if answer in QUIT_COMMANDS:
            print("\nQuiz aborted.")
            return 0
        if len(answer) != 1 or not 0 <= option_index(answer) < len(options):
            print(f"  Please answer with a letter from a to {option_label(len(options) - 1)}.")
            continue

        correct_index = driver.select(answer)
        if option_index(answer) == correct_index:
            print("  Correct!")
        else:
            print(f"  Wrong, the answer is {option_label(correct_index)}) {options[correct_index]}")
        while not driver.tick():
            time.sleep(0.05)

    print(f"\n{game.get_results()}")
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    """Handle settings command."""
    settings = _settings(args)
    if args.set:
        data = settings.to_dict()
        for item in args.set:
            key, sep, value = item.partition("=")
            if not sep:
                print(f"\n  [ERROR] Expected KEY=VALUE, got {item!r}")
                return 1
            data[key.strip()] = value.strip()
        settings = Settings.from_dict(data)
        path = save_settings(settings, args.config)
        print(f"Saved settings to {path}")

    for key, value in settings.to_dict().items():
        print(f"  {key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
