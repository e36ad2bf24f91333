"""
Run results for Batch Transfer.

Every attempted file produces a ``TransferOutcome``; every task produces
a ``TaskResult``; a whole run produces a ``FailureReport``.  Failures are
carried as ``ErrorDetail`` values so the log and notification sinks can
render them without re-deriving any context.
"""

from __future__ import annotations

import errno
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from batch_transfer.errors import DestinationExistsError, ScanError, TransferError
from batch_transfer.scanner import Candidate
from batch_transfer.tasks import Action, Task


class ErrorKind(Enum):
    DESTINATION_EXISTS = "destination_exists"
    SOURCE_MISSING = "source_missing"
    PERMISSION_DENIED = "permission_denied"
    IO_ERROR = "io_error"
    SCAN_FAILED = "scan_failed"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ErrorDetail:
    """Enough context to reproduce a failure from the log alone."""
    kind: ErrorKind
    message: str
    source: Path | None = None
    destination: Path | None = None
    action: Action | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        source: Path | None = None,
        destination: Path | None = None,
        action: Action | None = None,
    ) -> ErrorDetail:
        """Classify *exc* and wrap it."""
        if isinstance(exc, DestinationExistsError):
            kind = ErrorKind.DESTINATION_EXISTS
        elif isinstance(exc, ScanError):
            kind = ErrorKind.SCAN_FAILED
        elif isinstance(exc, TransferError):
            kind = ErrorKind.IO_ERROR
        elif isinstance(exc, FileNotFoundError) and _same_path(
            getattr(exc, "filename", None), source
        ):
            kind = ErrorKind.SOURCE_MISSING
        elif isinstance(exc, PermissionError) or getattr(exc, "errno", None) in (
            errno.EACCES,
            errno.EPERM,
        ):
            kind = ErrorKind.PERMISSION_DENIED
        elif isinstance(exc, OSError):
            kind = ErrorKind.IO_ERROR
        else:
            kind = ErrorKind.UNEXPECTED
        return cls(kind, str(exc), source, destination, action)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "source": str(self.source) if self.source else None,
            "destination": str(self.destination) if self.destination else None,
            "action": self.action.value if self.action else None,
        }


def _same_path(filename: Any, source: Path | None) -> bool:
    if source is None or filename is None:
        return False
    return Path(filename) == source


@dataclass(frozen=True)
class TransferOutcome:
    """Result of one transfer attempt."""
    candidate: Candidate
    destination: Path
    succeeded: bool
    error: ErrorDetail | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": str(self.candidate.path),
            "destination": str(self.destination),
            "created": self.candidate.creation_time.isoformat(timespec="seconds"),
            "succeeded": self.succeeded,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass
class TaskResult:
    """Everything that happened while running one task."""
    task: Task
    files_found: int = 0
    files_selected: int = 0
    outcomes: list[TransferOutcome] = field(default_factory=list)
    task_level_error: ErrorDetail | None = None

    @property
    def failed_outcomes(self) -> list[TransferOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def succeeded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def has_failures(self) -> bool:
        return self.task_level_error is not None or any(
            not o.succeeded for o in self.outcomes
        )

    def summary(self) -> str:
        """Short human-readable result line."""
        if self.task_level_error:
            return f"{self.task.label} failed: {self.task_level_error.message}"
        return (
            f"{self.task.label}: {self.files_found} found, "
            f"{self.files_selected} selected, {self.succeeded_count} transferred, "
            f"{len(self.failed_outcomes)} failed"
        )

    def to_dict(self) -> dict[str, Any]:
        task = self.task
        return {
            "task": {
                "index": task.index,
                "name": task.name,
                "action": task.action.value,
                "source_folder": str(task.source_folder),
                "destination_folder": str(task.destination_folder),
                "name_regex": task.name_regex.pattern,
                "recurse": task.recurse,
                "overwrite_existing": task.overwrite_existing,
                "max_age_days": task.max_age_days,
            },
            "files_found": self.files_found,
            "files_selected": self.files_selected,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "task_level_error": (
                self.task_level_error.to_dict() if self.task_level_error else None
            ),
        }


@dataclass
class FailureReport:
    """Ordered task results for one batch run."""
    results: list[TaskResult] = field(default_factory=list)
    started: datetime | None = None
    finished: datetime | None = None

    def append(self, result: TaskResult) -> None:
        self.results.append(result)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[TaskResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> TaskResult:
        return self.results[index]

    @property
    def has_failures(self) -> bool:
        return any(r.has_failures for r in self.results)

    @property
    def failed_results(self) -> list[TaskResult]:
        return [r for r in self.results if r.has_failures]

    @property
    def total_transferred(self) -> int:
        return sum(r.succeeded_count for r in self.results)

    @property
    def total_failed_files(self) -> int:
        return sum(len(r.failed_outcomes) for r in self.results)

    @property
    def failed_task_count(self) -> int:
        return sum(1 for r in self.results if r.task_level_error is not None)

    def summary(self) -> str:
        return (
            f"{len(self.results)} task(s): {self.total_transferred} file(s) "
            f"transferred, {self.total_failed_files} file(s) failed, "
            f"{self.failed_task_count} task(s) failed"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "started": self.started.isoformat(timespec="seconds") if self.started else None,
            "finished": self.finished.isoformat(timespec="seconds") if self.finished else None,
            "has_failures": self.has_failures,
            "results": [r.to_dict() for r in self.results],
        }
