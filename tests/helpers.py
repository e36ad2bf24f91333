# Helpers shared by the Batch Transfer tests
import os
import re
from datetime import datetime, timedelta
from pathlib import Path

from batch_transfer.scanner import Candidate
from batch_transfer.tasks import Action, Task

# Fixed "now" used wherever a clock is injected
NOW = datetime(2025, 3, 26, 14, 30, 0)


def fixed_clock() -> datetime:
    return NOW


def write_file(
    folder: Path, name: str, content: str = "data", days_ago: int = 0
) -> Path:
    """Create *folder/name* with a modification time *days_ago* before NOW."""
    path = folder / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    ts = (NOW - timedelta(days=days_ago)).timestamp()
    os.utime(path, (ts, ts))
    return path


def make_task(
    source: Path,
    destination: Path,
    name_regex: str = ".*",
    action: Action = Action.COPY,
    recurse: bool = False,
    overwrite_existing: bool = False,
    max_age_days: int = 0,
    index: int = 0,
    name: str = "",
) -> Task:
    return Task(
        name=name or f"Task {index + 1}",
        index=index,
        action=action,
        source_folder=source,
        recurse=recurse,
        name_regex=re.compile(name_regex, re.IGNORECASE),
        destination_folder=destination,
        overwrite_existing=overwrite_existing,
        max_age_days=max_age_days,
    )


def candidate(path: Path, days_ago: int = 0) -> Candidate:
    return Candidate(path, NOW - timedelta(days=days_ago))
