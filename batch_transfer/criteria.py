"""
File selection rules for Batch Transfer.

A file qualifies for a task when its name matches the task's regular
expression (substring search, not glob) and, if the task sets
``max_age_days``, its creation date falls inside the selection window.

Two window policies exist:

  calendar_days — ``cutoff = today - (N - 1)``.  N = 1 means "created
                  today", N = 7 means "created in the last seven calendar
                  days including today".  This is the default.
  elapsed_days  — ``cutoff = today - N``.  N = 1 means "created today or
                  yesterday".
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from batch_transfer.scanner import Candidate
from batch_transfer.tasks import Task


class AgeWindow(Enum):
    """How ``max_age_days`` is turned into a cutoff date."""
    CALENDAR_DAYS = "calendar_days"
    ELAPSED_DAYS = "elapsed_days"


@dataclass(frozen=True)
class SelectionWindow:
    """Inclusive creation-date cutoff; ``cutoff=None`` accepts everything."""
    cutoff: date | None = None

    @classmethod
    def from_max_age(
        cls,
        max_age_days: int,
        today: date,
        policy: AgeWindow = AgeWindow.CALENDAR_DAYS,
    ) -> SelectionWindow:
        if max_age_days < 0:
            raise ValueError(f"max_age_days must not be negative: {max_age_days}")
        if max_age_days == 0:
            return cls(None)
        days_back = max_age_days - 1 if policy is AgeWindow.CALENDAR_DAYS else max_age_days
        # Windows reaching past year 1 accept every date
        if days_back > (today - date.min).days:
            return cls(date.min)
        return cls(today - timedelta(days=days_back))

    def contains(self, moment: datetime) -> bool:
        if self.cutoff is None:
            return True
        return moment.date() >= self.cutoff


@dataclass(frozen=True)
class FilterCriteria:
    """Which files qualify for a task: name pattern plus age window."""
    pattern: re.Pattern
    window: SelectionWindow = SelectionWindow()

    @classmethod
    def for_task(
        cls,
        task: Task,
        today: date,
        policy: AgeWindow = AgeWindow.CALENDAR_DAYS,
    ) -> FilterCriteria:
        return cls(
            pattern=task.name_regex,
            window=SelectionWindow.from_max_age(task.max_age_days, today, policy),
        )

    def name_matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None

    def matches(self, candidate: Candidate) -> bool:
        return self.name_matches(candidate.path.name) and self.window.contains(
            candidate.creation_time
        )

    def select(self, candidates: Iterable[Candidate]) -> list[Candidate]:
        """Return the candidates that pass, preserving their order."""
        return [c for c in candidates if self.matches(c)]
