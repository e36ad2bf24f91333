"""Configuration loading for Batch Transfer.

Reads run settings and the task list from a JSON file.  Settings fall
back to ``DEFAULT_SETTINGS``; tasks are validated field by field and
every problem is collected before a single ``ConfigurationError`` is
raised, so a bad file is reported in one pass.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from batch_transfer.criteria import AgeWindow
from batch_transfer.errors import ConfigurationError
from batch_transfer.platform_utils import get_config_dir, get_default_log_dir
from batch_transfer.tasks import Action, Task

logger = logging.getLogger(__name__)

# Notification policies
NOTIFY_ALWAYS = "always"
NOTIFY_ON_FAILURE = "on_failure"
NOTIFY_NEVER = "never"
NOTIFY_MODES = (NOTIFY_ALWAYS, NOTIFY_ON_FAILURE, NOTIFY_NEVER)

# Which file time the age window is measured against
TIMESTAMP_CREATION = "creation"
TIMESTAMP_MODIFIED = "modified"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_SETTINGS: dict[str, Any] = {
    "log_folder": "",  # blank = <config dir>/logs
    "log_level": "INFO",
    "log_all_tasks": False,  # False = failure log only lists failed tasks
    # ---- log rotation ----
    "max_log_size_mb": 10,  # rotate log when it exceeds this size
    "log_backup_count": 3,  # number of rotated log files to keep
    # ---- notifications ----
    "notify": NOTIFY_ON_FAILURE,  # always | on_failure | never
    "play_sound_on_error": True,
    # ---- execution ----
    "max_workers": 1,  # tasks run at once (1 = sequential)
    "age_window": AgeWindow.CALENDAR_DAYS.value,  # calendar_days | elapsed_days
    "timestamp": TIMESTAMP_CREATION,  # creation | modified
}

_REQUIRED_TASK_FIELDS = (
    "action",
    "source_folder",
    "recurse",
    "name_regex",
    "destination_folder",
    "overwrite_existing",
    "max_age_days",
)


def get_config_path() -> Path:
    """Return the path to the default task file."""
    return get_config_dir() / "tasks.json"


class BatchConfig:
    """Validated settings and tasks loaded from a JSON file."""

    def __init__(self, path: Path | None = None):
        """Load and validate *path*, falling back to the platform default.

        Raises ConfigurationError if anything is wrong.
        """
        self._path = Path(path) if path else get_config_path()
        self._data: dict[str, Any] = dict(DEFAULT_SETTINGS)
        self._tasks: tuple[Task, ...] = ()
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    # ---- loading ----

    def load(self) -> None:
        """Read the file and validate settings and tasks."""
        raw = self._read()
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"{self._path}: top level must be a JSON object"
            )

        violations: list[str] = []
        # Merge stored values over defaults so missing keys get defaults
        data = dict(DEFAULT_SETTINGS)
        for key, value in raw.items():
            if key == "tasks":
                continue
            if key not in DEFAULT_SETTINGS:
                logger.warning("Ignoring unknown setting %r in %s", key, self._path)
                continue
            data[key] = value
        violations.extend(_validate_settings(data))

        tasks: list[Task] = []
        raw_tasks = raw.get("tasks")
        if raw_tasks is None:
            violations.append("tasks: required field is missing")
        elif not isinstance(raw_tasks, list):
            violations.append("tasks: must be a list")
        elif not raw_tasks:
            violations.append("tasks: must contain at least one task")
        else:
            for index, entry in enumerate(raw_tasks):
                task, problems = parse_task(entry, index)
                violations.extend(problems)
                if task is not None:
                    tasks.append(task)

        if violations:
            for v in violations:
                logger.error("Configuration error: %s", v)
            raise ConfigurationError(violations)

        self._data = data
        self._tasks = tuple(tasks)
        logger.info(
            "Configuration loaded from %s (%d task(s))", self._path, len(self._tasks)
        )

    def _read(self) -> Any:
        try:
            # utf-8-sig tolerates files saved with a BOM by Windows editors
            with open(self._path, encoding="utf-8-sig") as fh:
                return json.load(fh)
        except FileNotFoundError:
            raise ConfigurationError(
                f"Configuration file not found: {self._path}"
            ) from None
        except json.JSONDecodeError as exc:
            raise ConfigurationError(
                f"{self._path}: invalid JSON at line {exc.lineno} "
                f"column {exc.colno}: {exc.msg}"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Could not read configuration {self._path}: {exc}"
            ) from exc

    # ---- accessors ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Return the validated tasks in file order."""
        return self._tasks

    @property
    def log_folder(self) -> Path:
        """Return the folder for the application and failure logs."""
        folder = self._data["log_folder"]
        return Path(folder).expanduser() if folder else get_default_log_dir()

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data["log_level"].upper()

    @property
    def log_all_tasks(self) -> bool:
        """Return whether the failure log lists successful tasks too."""
        return self._data["log_all_tasks"]

    # ---- log rotation ----

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return max(1, self._data["max_log_size_mb"])

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return max(0, self._data["log_backup_count"])

    # ---- notifications ----

    @property
    def notify(self) -> str:
        """Return the notification policy."""
        return self._data["notify"]

    @property
    def play_sound_on_error(self) -> bool:
        """Return whether an alert sound plays on failure."""
        return self._data["play_sound_on_error"]

    # ---- execution ----

    @property
    def max_workers(self) -> int:
        """Return how many tasks may run at once."""
        return self._data["max_workers"]

    @property
    def age_window(self) -> AgeWindow:
        """Return the policy turning max_age_days into a cutoff date."""
        return AgeWindow(self._data["age_window"])

    @property
    def use_modified_time(self) -> bool:
        """Return True when ages are measured from last-modified time."""
        return self._data["timestamp"] == TIMESTAMP_MODIFIED


# ---- validation ----


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_settings(data: dict[str, Any]) -> list[str]:
    problems: list[str] = []

    if not isinstance(data["log_folder"], str):
        problems.append("log_folder: must be a string")
    if not isinstance(data["log_level"], str) or data["log_level"].upper() not in LOG_LEVELS:
        problems.append(f"log_level: must be one of {', '.join(LOG_LEVELS)}")
    for key in ("log_all_tasks", "play_sound_on_error"):
        if not isinstance(data[key], bool):
            problems.append(f"{key}: must be true or false")
    for key in ("max_log_size_mb", "log_backup_count"):
        if not _is_int(data[key]) or data[key] < 0:
            problems.append(f"{key}: must be a non-negative integer")
    if data["notify"] not in NOTIFY_MODES:
        problems.append(f"notify: must be one of {', '.join(NOTIFY_MODES)}")
    if not _is_int(data["max_workers"]) or data["max_workers"] < 1:
        problems.append("max_workers: must be an integer of at least 1")
    windows = [w.value for w in AgeWindow]
    if data["age_window"] not in windows:
        problems.append(f"age_window: must be one of {', '.join(windows)}")
    if data["timestamp"] not in (TIMESTAMP_CREATION, TIMESTAMP_MODIFIED):
        problems.append(
            f"timestamp: must be {TIMESTAMP_CREATION} or {TIMESTAMP_MODIFIED}"
        )
    return problems


def parse_task(entry: Any, index: int) -> tuple[Task | None, list[str]]:
    """
    Validate one raw task entry.

    Returns ``(task, [])`` when valid, or ``(None, problems)`` listing
    every violation found in the entry.
    """
    prefix = f"tasks[{index}]"
    if not isinstance(entry, dict):
        return None, [f"{prefix}: must be an object"]

    problems: list[str] = []
    for key in _REQUIRED_TASK_FIELDS:
        if key not in entry or entry[key] is None:
            problems.append(f"{prefix}.{key}: required field is missing")

    def present(key: str) -> bool:
        return key in entry and entry[key] is not None

    # ---- name ----
    name = entry.get("name")
    if name is None or (isinstance(name, str) and not name.strip()):
        name = f"Task {index + 1}"
    elif not isinstance(name, str):
        problems.append(f"{prefix}.name: must be a string")

    # ---- action ----
    action = None
    if present("action"):
        if not isinstance(entry["action"], str):
            problems.append(f"{prefix}.action: must be a string (Copy or Move)")
        else:
            try:
                action = Action.parse(entry["action"])
            except ValueError as exc:
                problems.append(f"{prefix}.action: {exc}")

    # ---- booleans ----
    for key in ("recurse", "overwrite_existing"):
        if present(key) and not isinstance(entry[key], bool):
            problems.append(f"{prefix}.{key}: must be true or false")
    case_sensitive = entry.get("case_sensitive", False)
    if not isinstance(case_sensitive, bool):
        problems.append(f"{prefix}.case_sensitive: must be true or false")
        case_sensitive = False

    # ---- age ----
    if present("max_age_days"):
        value = entry["max_age_days"]
        if not _is_int(value) or value < 0:
            problems.append(f"{prefix}.max_age_days: must be a non-negative integer")

    # ---- pattern ----
    pattern = None
    if present("name_regex"):
        raw = entry["name_regex"]
        if not isinstance(raw, str) or not raw:
            problems.append(
                f"{prefix}.name_regex: must be a non-empty string "
                "(use '.*' to match every file)"
            )
        else:
            flags = 0 if case_sensitive else re.IGNORECASE
            try:
                pattern = re.compile(raw, flags)
            except re.error as exc:
                problems.append(f"{prefix}.name_regex: invalid regular expression: {exc}")

    # ---- folders ----
    folders: dict[str, Path] = {}
    for key in ("source_folder", "destination_folder"):
        if not present(key):
            continue
        raw = entry[key]
        if not isinstance(raw, str) or not raw.strip():
            problems.append(f"{prefix}.{key}: must be a non-empty path string")
            continue
        folder = Path(raw).expanduser()
        if not folder.exists():
            problems.append(f"{prefix}.{key}: folder does not exist: {folder}")
        elif not folder.is_dir():
            problems.append(f"{prefix}.{key}: not a directory: {folder}")
        else:
            folders[key] = folder

    if problems:
        return None, problems

    return (
        Task(
            name=name,
            index=index,
            action=action,
            source_folder=folders["source_folder"],
            recurse=entry["recurse"],
            name_regex=pattern,
            destination_folder=folders["destination_folder"],
            overwrite_existing=entry["overwrite_existing"],
            max_age_days=entry["max_age_days"],
        ),
        [],
    )
