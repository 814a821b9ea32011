from pathlib import Path
from typing import Optional


class RecipeBotError(Exception):
    pass


class DecodeError(RecipeBotError):
    pass


class RecordReadError(DecodeError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Cannot read recipe record {path}: {reason}")


class MalformedRecordError(DecodeError):
    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(f"Malformed recipe record, {message}")


class ScheduleIOError(RecipeBotError):
    def __init__(self, reason: str, path: Optional[Path] = None, day: Optional[str] = None, identifier: Optional[str] = None):
        self.day = day
        self.identifier = identifier
        self.path = path
        where = f" ({path})" if path is not None else ""
        if day is not None:
            message = f"Scheduling {identifier!r} on {day} failed{where}: {reason}"
        else:
            message = f"Publishing the schedule failed{where}: {reason}"
        super().__init__(message)


class EmptyPoolError(RecipeBotError):
    pass


class ConfigError(RecipeBotError):
    pass


class ExportError(RecipeBotError):
    pass


class RecipeNotFoundError(RecipeBotError, LookupError):
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Recipe not found: {identifier}")
