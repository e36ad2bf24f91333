"""Exception hierarchy for Batch Transfer.

``ConfigurationError`` stops a run before any task executes.
``ScanError`` and ``TransferError`` are raised inside the engine and
converted into report data where they occur; they never escape
``BatchOrchestrator.run_all``.
"""

from __future__ import annotations

from pathlib import Path


class BatchTransferError(Exception):
    """Base error for the project."""


class ConfigurationError(BatchTransferError):
    """The configuration file is missing, unreadable, or invalid.

    ``violations`` holds every problem found, not just the first one.
    """

    def __init__(self, violations: list[str] | str):
        if isinstance(violations, str):
            violations = [violations]
        self.violations = list(violations)
        count = len(self.violations)
        summary = f"{count} configuration error{'s' if count != 1 else ''}"
        super().__init__(summary + ":\n  " + "\n  ".join(self.violations))


class ScanError(BatchTransferError):
    """A task's source folder could not be enumerated."""

    def __init__(self, root: Path, message: str):
        self.root = root
        super().__init__(f"Cannot scan {root}: {message}")


class TransferError(BatchTransferError):
    """A single file could not be copied or moved."""

    def __init__(self, source: Path, destination: Path, message: str):
        self.source = source
        self.destination = destination
        super().__init__(message)


class DestinationExistsError(TransferError):
    def __init__(self, source: Path, destination: Path):
        super().__init__(
            source, destination, f"Destination file already exists: {destination}"
        )
