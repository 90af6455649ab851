"""
YAML import and export of lessons.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from kanadeck.exceptions import LessonFileError
from kanadeck.models import Lesson, Word

_WORD_FIELDS = ("kana", "translation", "romaji", "example_sentence")


def load_lessons(source: str | Path | dict[str, Any]) -> list[Lesson]:
    """Load lessons from a YAML file, a YAML string or a parsed mapping.

    Args:
        source: Path to YAML file, YAML string, or parsed dictionary

    Returns:
        Lessons in file order, without ids

    Raises:
        LessonFileError: If the content cannot be parsed or is invalid
        FileNotFoundError: If the file does not exist
    """
    if isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or _is_file_path(source):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = _load_yaml(f.read())
    else:
        data = _load_yaml(source)

    return _parse_lessons(data)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml"))


def _load_yaml(text: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise LessonFileError(
            f"Invalid YAML: {e}", line=mark.line + 1 if mark else None
        ) from e

    if data is None:
        raise LessonFileError("Empty lesson file")
    if not isinstance(data, dict):
        raise LessonFileError("YAML root must be a mapping (dictionary)")
    return data


def _parse_lessons(data: dict[str, Any]) -> list[Lesson]:
    lessons_data = data.get("lessons")
    if lessons_data is None:
        raise LessonFileError("Missing required field: 'lessons'")
    if not isinstance(lessons_data, list):
        raise LessonFileError("Field 'lessons' must be a list")

    return [_parse_lesson(item, i) for i, item in enumerate(lessons_data, 1)]


def _parse_lesson(data: Any, number: int) -> Lesson:
    where = f"lesson #{number}"
    if not isinstance(data, dict):
        raise LessonFileError(f"{where}: must be a mapping")

    main_name = _text(data, "main_name", where, required=True)
    sub_name = _text(data, "sub_name", where)
    words_data = data.get("words", [])
    if not isinstance(words_data, list):
        raise LessonFileError(f"{where}: 'words' must be a list")

    words = [
        _parse_word(item, f"{where}, word #{i}")
        for i, item in enumerate(words_data, 1)
    ]
    return Lesson(main_name=main_name, sub_name=sub_name, words=tuple(words))


def _parse_word(data: Any, where: str) -> Word:
    if not isinstance(data, dict):
        raise LessonFileError(f"{where}: must be a mapping")

    fields = {
        name: _text(data, name, where, required=name in ("kana", "translation"))
        for name in _WORD_FIELDS
    }
    tags = data.get("tags", [])
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        raise LessonFileError(f"{where}: 'tags' must be a list")
    return Word(tags=tuple(str(t) for t in tags), **fields)


def _text(data: dict[str, Any], key: str, where: str, required: bool = False) -> str:
    value = data.get(key)
    if value is None:
        if required:
            raise LessonFileError(f"{where}: missing required field '{key}'")
        return ""
    if isinstance(value, (dict, list)):
        raise LessonFileError(f"{where}: '{key}' must be text")
    return str(value)


def dump_lessons(lessons: list[Lesson], path: str | Path | None = None) -> str:
    """Serialize *lessons* to YAML; write it to *path* when given.

    Storage ids are not exported. Returns the YAML text.
    """
    data = {
        "lessons": [
            {
                "main_name": lesson.main_name,
                "sub_name": lesson.sub_name,
                "words": [
                    {
                        **{name: getattr(word, name) for name in _WORD_FIELDS},
                        "tags": list(word.tags),
                    }
                    for word in lesson.words
                ],
            }
            for lesson in lessons
        ]
    }
    text = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    if path is not None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    return text
