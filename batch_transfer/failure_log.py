"""
Failure log output for Batch Transfer.

Writes a finished ``FailureReport`` to the log folder as a readable text
file plus a JSON file with the same content, both named after the run's
start time.  By default only failed tasks are written, and a run without
failures writes nothing.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

from batch_transfer.report import FailureReport, TaskResult

logger = logging.getLogger(__name__)

_FILE_PREFIX = "transfer_"
_STAMP_FORMAT = "%Y%m%d-%H%M%S"


class FailureLogWriter:
    """
    Persists run reports.

    Parameters
    ----------
    log_folder : Path
        Folder receiving the files; created if needed.
    log_all_tasks : bool
        If True, every task is written and a file is produced even for
        clean runs.
    """

    def __init__(self, log_folder: Path, log_all_tasks: bool = False):
        self.log_folder = Path(log_folder)
        self._log_all_tasks = log_all_tasks

    def write(self, report: FailureReport) -> Path | None:
        """Write *report*; return the text log path, or None if nothing was written."""
        if not report.has_failures and not self._log_all_tasks:
            logger.debug("No failures; skipping failure log.")
            return None

        stamp = (report.started or datetime.now()).strftime(_STAMP_FORMAT)
        text_path = self.log_folder / f"{_FILE_PREFIX}{stamp}.log"
        json_path = text_path.with_suffix(".json")

        try:
            self.log_folder.mkdir(parents=True, exist_ok=True)
            text_path.write_text(self.render(report), encoding="utf-8")
            json_path.write_text(
                json.dumps(self._payload(report), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.error("Failed to write failure log to %s: %s", self.log_folder, exc)
            return None

        logger.info("Failure log written to %s", text_path)
        return text_path

    def _selected(self, report: FailureReport) -> list[TaskResult]:
        if self._log_all_tasks:
            return list(report)
        return report.failed_results

    def _payload(self, report: FailureReport) -> dict:
        data = report.to_dict()
        if not self._log_all_tasks:
            data["results"] = [r.to_dict() for r in report.failed_results]
        return data

    def render(self, report: FailureReport) -> str:
        """Return the human-readable log text for *report*."""
        lines = []
        if report.started:
            lines.append(f"Run started:  {report.started:%Y-%m-%d %H:%M:%S}")
        if report.finished:
            lines.append(f"Run finished: {report.finished:%Y-%m-%d %H:%M:%S}")
        lines.append(f"Summary: {report.summary()}")
        lines.append("")

        for result in self._selected(report):
            task = result.task
            lines.append(f"Task {task.label} ({task.action.value})")
            lines.append(f"  Source:      {task.source_folder}")
            lines.append(f"  Destination: {task.destination_folder}")
            lines.append(f"  Pattern:     {task.name_regex.pattern}")
            if result.task_level_error:
                err = result.task_level_error
                lines.append(f"  TASK FAILED [{err.kind.value}]: {err.message}")
                lines.append("")
                continue
            lines.append(
                f"  Found {result.files_found}, selected {result.files_selected}, "
                f"transferred {result.succeeded_count}, "
                f"failed {len(result.failed_outcomes)}"
            )
            for outcome in result.outcomes:
                if outcome.succeeded:
                    if self._log_all_tasks:
                        lines.append(
                            f"  OK     {outcome.candidate.path} -> {outcome.destination}"
                        )
                    continue
                err = outcome.error
                lines.append(
                    f"  FAILED {outcome.candidate.path} -> {outcome.destination} "
                    f"[{err.kind.value}] {err.message}"
                )
            lines.append("")

        return "\n".join(lines)
