"""Custom exception hierarchy for kanadeck."""


class KanadeckError(Exception):
    """Base exception for all kanadeck errors."""


class DatabaseError(KanadeckError):
    """Database cannot be opened, initialized, or has a schema mismatch."""


class QuizStateError(KanadeckError):
    """Quiz command issued in a state that does not allow it."""


class LessonFileError(KanadeckError):
    """Malformed lesson file (bad YAML or unexpected structure)."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)


class ConfigError(KanadeckError):
    """Invalid settings file."""
