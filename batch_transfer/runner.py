"""
Task and batch execution for Batch Transfer.

``TaskRunner`` drives one task through scanning, selecting and
transferring.  ``BatchOrchestrator`` runs an ordered list of tasks and
collects one ``TaskResult`` per task into a ``FailureReport``.  Neither
raises: scan failures become task-level errors and transfer failures
become per-file outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from batch_transfer.copier import TransferExecutor
from batch_transfer.criteria import AgeWindow, FilterCriteria
from batch_transfer.errors import ScanError
from batch_transfer.report import ErrorDetail, ErrorKind, FailureReport, TaskResult
from batch_transfer.scanner import FileCatalogScanner
from batch_transfer.tasks import Task

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TaskRunner:
    """
    Runs a single task.

    Parameters
    ----------
    scanner : FileCatalogScanner, optional
        Enumerates the source folder.
    executor : TransferExecutor, optional
        Performs each copy or move.
    clock : callable, optional
        Returns the current datetime; the selection window is computed
        from it once per run.
    age_window : AgeWindow
        How ``max_age_days`` maps to a cutoff date.
    """

    def __init__(
        self,
        scanner: FileCatalogScanner | None = None,
        executor: TransferExecutor | None = None,
        clock: Clock = datetime.now,
        age_window: AgeWindow = AgeWindow.CALENDAR_DAYS,
    ):
        self._scanner = scanner or FileCatalogScanner()
        self._executor = executor or TransferExecutor()
        self._clock = clock
        self._age_window = age_window

    def run(self, task: Task) -> TaskResult:
        result = TaskResult(task)

        # ---- scanning ----
        logger.info("Starting task %s", task.describe())
        try:
            candidates = self._scanner.scan(task.source_folder, task.recurse)
        except ScanError as exc:
            result.task_level_error = ErrorDetail.from_exception(
                exc, source=task.source_folder, action=task.action
            )
            logger.error("Task %s failed: %s", task.label, exc)
            return result
        result.files_found = len(candidates)

        # ---- selecting ----
        criteria = FilterCriteria.for_task(
            task, self._clock().date(), self._age_window
        )
        selected = criteria.select(candidates)
        result.files_selected = len(selected)
        logger.info(
            "Task %s: %d file(s) found, %d selected (cutoff %s)",
            task.label,
            result.files_found,
            result.files_selected,
            criteria.window.cutoff or "none",
        )
        if not selected:
            return result

        # ---- transferring ----
        for candidate in selected:
            outcome = self._executor.transfer(
                candidate,
                task.destination_folder,
                task.action,
                task.overwrite_existing,
            )
            result.outcomes.append(outcome)

        logger.info("%s", result.summary())
        return result


class BatchOrchestrator:
    """
    Runs every task in order and gathers the results.

    Parameters
    ----------
    runner : TaskRunner, optional
        Runs each task.
    on_task_complete : callable, optional
        Invoked with each TaskResult as soon as its task finishes.
    max_workers : int
        Number of tasks run at once.  1 (the default) runs strictly in
        sequence; higher values use a thread pool, and the report is
        still ordered like the input.
    """

    def __init__(
        self,
        runner: TaskRunner | None = None,
        on_task_complete: Callable[[TaskResult], None] | None = None,
        max_workers: int = 1,
        clock: Clock = datetime.now,
    ):
        self._runner = runner or TaskRunner(clock=clock)
        self._on_task_complete = on_task_complete
        self._max_workers = max(1, int(max_workers))
        self._clock = clock

    def run_all(self, tasks: Sequence[Task]) -> FailureReport:
        """Run *tasks* and return the report.  Never raises."""
        report = FailureReport(started=self._clock())
        logger.info(
            "Batch started: %d task(s), %d worker(s)", len(tasks), self._max_workers
        )

        if self._max_workers == 1 or len(tasks) < 2:
            for task in tasks:
                report.append(self._run_one(task))
        else:
            with ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="Task"
            ) as pool:
                futures = [pool.submit(self._run_one, task) for task in tasks]
                # _run_one never raises, so result() only returns
                for future in futures:
                    report.append(future.result())

        report.finished = self._clock()
        logger.info("Batch finished: %s", report.summary())
        return report

    def _run_one(self, task: Task) -> TaskResult:
        try:
            result = self._runner.run(task)
        except Exception as exc:
            logger.exception("Unexpected error in task %s", task.label)
            result = TaskResult(
                task,
                task_level_error=ErrorDetail(
                    ErrorKind.UNEXPECTED,
                    str(exc) or type(exc).__name__,
                    source=task.source_folder,
                    action=task.action,
                ),
            )
        if self._on_task_complete:
            try:
                self._on_task_complete(result)
            except Exception:
                logger.exception("Error in on_task_complete callback")
        return result
