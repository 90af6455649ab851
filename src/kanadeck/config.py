"""User settings stored as a YAML file."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from kanadeck.exceptions import ConfigError
from kanadeck.models import WordType

DEFAULT_HOME = Path.home() / ".kanadeck"
DEFAULT_SETTINGS_PATH = DEFAULT_HOME / "settings.yaml"
DEFAULT_DATABASE_PATH = DEFAULT_HOME / "lessons.db"


@dataclass(frozen=True)
class Settings:
    """Application settings shared by the CLI and the quiz."""

    username: str = ""
    database_path: str = str(DEFAULT_DATABASE_PATH)
    question_type: WordType = WordType.KANA
    answer_type: WordType = WordType.BASE_WORD
    option_count: int = 4
    reveal_delay: float = 2.0
    learned_threshold: int = 1

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["question_type"] = self.question_type.value
        data["answer_type"] = self.answer_type.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(unknown)}")

        settings = cls()
        # Empty YAML values ("username:") load as None and mean "use the default".
        data = {key: value for key, value in data.items() if value is not None}
        try:
            values = {
                "username": str(data.get("username", settings.username)),
                "database_path": str(data.get("database_path", settings.database_path)),
                "question_type": WordType(data.get("question_type", settings.question_type)),
                "answer_type": WordType(data.get("answer_type", settings.answer_type)),
                "option_count": int(data.get("option_count", settings.option_count)),
                "reveal_delay": float(data.get("reveal_delay", settings.reveal_delay)),
                "learned_threshold": int(
                    data.get("learned_threshold", settings.learned_threshold)
                ),
            }
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid setting value: {e}") from e

        if values["option_count"] < 2:
            raise ConfigError("option_count must be at least 2")
        if values["learned_threshold"] < 1:
            raise ConfigError("learned_threshold must be at least 1")
        if values["reveal_delay"] < 0:
            raise ConfigError("reveal_delay must not be negative")
        return replace(settings, **values)


def load_settings(path: str | Path | None = None) -> Settings:
    """Read settings from *path*; a missing file yields the defaults."""
    path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    if not path.exists():
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid settings file {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a mapping")
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: str | Path | None = None) -> Path:
    """Write *settings* as YAML and return the path written."""
    path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, allow_unicode=True, sort_keys=False)
    return path
