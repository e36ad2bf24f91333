"""
Main application controller for Batch Transfer.

Ties together configuration, logging, the transfer engine, the failure
log and operator notifications for one command-line run.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

from batch_transfer import __app_name__, __version__
from batch_transfer.config import BatchConfig
from batch_transfer.errors import ConfigurationError
from batch_transfer.failure_log import FailureLogWriter
from batch_transfer.notify import Notifier
from batch_transfer.runner import BatchOrchestrator, TaskRunner
from batch_transfer.scanner import FileCatalogScanner

logger = logging.getLogger(__name__)

LOG_FILE_NAME = "batch_transfer.log"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Process exit codes
EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG_ERROR = 2


class App:
    """
    Runs one batch from a configuration file.

    Parameters
    ----------
    config_path : Path, optional
        Task file; the platform default is used when omitted.
    log_level : str, optional
        Overrides the configured log level.
    max_workers : int, optional
        Overrides the configured number of concurrent tasks.
    check_only : bool
        Validate the configuration and list the tasks without running them.
    clock : callable
        Source of the current time (injectable for tests).
    """

    def __init__(
        self,
        config_path: Path | None = None,
        log_level: str | None = None,
        max_workers: int | None = None,
        check_only: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._config_path = config_path
        self._log_level = log_level
        self._max_workers = max_workers
        self._check_only = check_only
        self._clock = clock
        self._handlers: list[logging.Handler] = []
        self.config: BatchConfig | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def run(self) -> int:
        """Run the batch and return the process exit code."""
        self._setup_console_logging()
        try:
            return self._run()
        finally:
            self._teardown_logging()

    def _run(self) -> int:
        logger.info("%s %s starting.", __app_name__, __version__)
        try:
            self.config = cfg = BatchConfig(self._config_path)
        except ConfigurationError:
            # Config.load has already logged every violation
            logger.error("Configuration is invalid; no tasks were run.")
            return EXIT_CONFIG_ERROR

        self._apply_level(self._log_level or cfg.log_level)

        if self._check_only:
            print(f"Configuration OK: {cfg.path}")
            for task in cfg.tasks:
                print(f"  {task.describe()}")
            return EXIT_OK

        self._setup_file_logging(cfg)

        runner = TaskRunner(
            scanner=FileCatalogScanner(use_modified_time=cfg.use_modified_time),
            clock=self._clock,
            age_window=cfg.age_window,
        )
        orchestrator = BatchOrchestrator(
            runner=runner,
            max_workers=self._max_workers or cfg.max_workers,
            clock=self._clock,
        )
        report = orchestrator.run_all(cfg.tasks)

        log_path = FailureLogWriter(cfg.log_folder, cfg.log_all_tasks).write(report)
        Notifier(cfg.notify, cfg.play_sound_on_error).notify(report)

        print(report.summary())
        if log_path:
            print(f"Details: {log_path}")
        return EXIT_FAILURES if report.has_failures else EXIT_OK

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _setup_console_logging(self) -> None:
        """Install the stderr handler used before the config is known."""
        root_logger = logging.getLogger()
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(_LOG_FORMAT))
        root_logger.addHandler(sh)
        self._handlers.append(sh)
        self._apply_level(self._log_level or "INFO")

    def _setup_file_logging(self, cfg: BatchConfig) -> None:
        """Add the rotating file log inside the configured log folder."""
        log_path = cfg.log_folder / LOG_FILE_NAME
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                str(log_path),
                maxBytes=cfg.max_log_size_mb * 1024 * 1024,
                backupCount=cfg.log_backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            logger.warning("Cannot open log file %s (%s); logging to stderr only.", log_path, exc)
            return
        fh.setFormatter(logging.Formatter(_LOG_FORMAT))
        fh.setLevel(logging.getLogger().level)
        logging.getLogger().addHandler(fh)
        self._handlers.append(fh)
        logger.debug("Logging to %s", log_path)

    def _apply_level(self, level_name: str) -> None:
        level = getattr(logging, level_name.upper(), logging.INFO)
        logging.getLogger().setLevel(level)
        for handler in self._handlers:
            handler.setLevel(level)

    def _teardown_logging(self) -> None:
        root_logger = logging.getLogger()
        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()
