"""Task definitions for Batch Transfer."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Action(Enum):
    """What to do with a selected file."""
    COPY = "Copy"
    MOVE = "Move"

    @classmethod
    def parse(cls, value: str) -> "Action":
        """Return the action named by *value*, ignoring case."""
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unsupported action {value!r} (expected Copy or Move)")


@dataclass(frozen=True)
class Task:
    """One validated unit of work: a source filter, a destination, an action."""
    name: str
    index: int
    action: Action
    source_folder: Path
    recurse: bool
    name_regex: re.Pattern
    destination_folder: Path
    overwrite_existing: bool
    max_age_days: int

    @property
    def label(self) -> str:
        """Short identity used in log lines."""
        return f"#{self.index + 1} '{self.name}'"

    def describe(self) -> str:
        """One-line human-readable summary of the task."""
        age = f"last {self.max_age_days} day(s)" if self.max_age_days else "any age"
        return (
            f"{self.label}: {self.action.value} '{self.name_regex.pattern}' "
            f"({age}{', recursive' if self.recurse else ''}) "
            f"{self.source_folder} -> {self.destination_folder}"
            f"{' [overwrite]' if self.overwrite_existing else ''}"
        )
