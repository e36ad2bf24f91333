import threading
from pathlib import Path

import pytest

from batch_transfer.errors import ScanError
from batch_transfer.report import ErrorKind
from batch_transfer.runner import BatchOrchestrator, TaskRunner
from batch_transfer.scanner import FileCatalogScanner
from batch_transfer.tasks import Action
from helpers import fixed_clock, make_task, write_file


@pytest.fixture
def runner():
    return TaskRunner(
        scanner=FileCatalogScanner(use_modified_time=True), clock=fixed_clock
    )


class TestTaskRunner:
    def test_analysis_export_scenario(self, runner, src, dst):
        write_file(src, "Analyse_26032025.xlsx", "sheet", days_ago=0)
        old = write_file(src, "Old_File.txt", "old", days_ago=10)
        task = make_task(src, dst, r"Analyse_.*\.xlsx", max_age_days=1)

        result = runner.run(task)

        assert result.task_level_error is None
        assert result.files_found == 2
        assert result.files_selected == 1
        assert [o.candidate.path.name for o in result.outcomes] == [
            "Analyse_26032025.xlsx"
        ]
        assert result.outcomes[0].succeeded
        assert (dst / "Analyse_26032025.xlsx").exists()
        assert (src / "Analyse_26032025.xlsx").exists()
        assert old.exists()
        assert not (dst / "Old_File.txt").exists()

    def test_scan_failure_is_task_level(self, runner, tmp_path, dst):
        task = make_task(tmp_path / "gone", dst)
        result = runner.run(task)

        assert result.task_level_error.kind is ErrorKind.SCAN_FAILED
        assert result.outcomes == []
        assert result.files_found == 0
        assert result.has_failures

    def test_nothing_selected_is_not_an_error(self, runner, src, dst):
        write_file(src, "a.txt", days_ago=5)
        result = runner.run(make_task(src, dst, max_age_days=2))

        assert result.task_level_error is None
        assert result.files_found == 1
        assert result.files_selected == 0
        assert result.outcomes == []
        assert not result.has_failures

    def test_very_large_max_age_selects_everything(self, runner, src, dst):
        write_file(src, "a.txt", days_ago=400)
        result = runner.run(make_task(src, dst, max_age_days=1_000_000))

        assert result.task_level_error is None
        assert result.files_selected == 1
        assert result.outcomes[0].succeeded

    def test_one_failure_does_not_stop_the_rest(self, runner, src, dst):
        for name in ("a.txt", "b.txt", "c.txt"):
            write_file(src, name, "new")
        write_file(dst, "b.txt", "old")

        result = runner.run(make_task(src, dst))

        assert len(result.outcomes) == result.files_selected == 3
        by_name = {o.candidate.path.name: o for o in result.outcomes}
        assert by_name["a.txt"].succeeded
        assert by_name["c.txt"].succeeded
        assert by_name["b.txt"].error.kind is ErrorKind.DESTINATION_EXISTS
        assert len(result.failed_outcomes) == 1

    def test_recursive_move_lands_flat(self, runner, src, dst):
        write_file(src / "2025" / "03", "deep.log")
        write_file(src, "top.log")

        result = runner.run(make_task(src, dst, r"\.log$", Action.MOVE, recurse=True))

        assert result.succeeded_count == 2
        assert sorted(p.name for p in dst.iterdir()) == ["deep.log", "top.log"]
        assert not (src / "top.log").exists()

    def test_window_computed_once_per_run(self, src, dst):
        write_file(src, "a.txt")
        write_file(src, "b.txt")
        calls = []

        def clock():
            calls.append(1)
            return fixed_clock()

        runner = TaskRunner(FileCatalogScanner(use_modified_time=True), clock=clock)
        runner.run(make_task(src, dst, max_age_days=1))
        assert len(calls) == 1


class _ExplodingRunner(TaskRunner):
    """Raises from run() for one chosen task."""

    def __init__(self, bad_index):
        super().__init__(FileCatalogScanner(use_modified_time=True), clock=fixed_clock)
        self._bad_index = bad_index

    def run(self, task):
        if task.index == self._bad_index:
            raise RuntimeError("runner crashed")
        return super().run(task)


class TestBatchOrchestrator:
    def _tasks(self, tmp_path: Path, dst: Path):
        good_a = tmp_path / "good_a"
        good_b = tmp_path / "good_b"
        write_file(good_a, "a1.txt")
        write_file(good_b, "b1.txt")
        write_file(good_b, "b2.txt")
        return [
            make_task(good_a, dst, index=0),
            make_task(tmp_path / "missing", dst, index=1),
            make_task(good_b, dst, index=2),
        ]

    def test_tasks_isolated_and_ordered(self, tmp_path, dst):
        tasks = self._tasks(tmp_path, dst)
        orchestrator = BatchOrchestrator(
            TaskRunner(FileCatalogScanner(use_modified_time=True), clock=fixed_clock),
            clock=fixed_clock,
        )

        report = orchestrator.run_all(tasks)

        assert len(report) == len(tasks)
        assert [r.task.index for r in report] == [0, 1, 2]
        assert report[1].task_level_error.kind is ErrorKind.SCAN_FAILED
        assert report[0].succeeded_count == 1
        assert report[2].succeeded_count == 2
        assert report.has_failures
        assert report.failed_results == [report[1]]
        assert report.started is not None and report.finished is not None

    def test_crashing_runner_becomes_task_error(self, tmp_path, dst):
        tasks = self._tasks(tmp_path, dst)
        report = BatchOrchestrator(_ExplodingRunner(bad_index=0)).run_all(tasks)

        assert len(report) == 3
        assert report[0].task_level_error.kind is ErrorKind.UNEXPECTED
        assert "runner crashed" in report[0].task_level_error.message
        assert report[2].succeeded_count == 2

    def test_callback_sees_every_result_and_errors_are_contained(self, tmp_path, dst):
        tasks = self._tasks(tmp_path, dst)
        seen = []

        def on_done(result):
            seen.append(result.task.index)
            raise ValueError("sink broke")

        report = BatchOrchestrator(
            TaskRunner(FileCatalogScanner(use_modified_time=True), clock=fixed_clock),
            on_task_complete=on_done,
        ).run_all(tasks)

        assert seen == [0, 1, 2]
        assert len(report) == 3

    def test_parallel_run_keeps_input_order(self, tmp_path):
        tasks = []
        for i in range(6):
            source = tmp_path / f"src{i}"
            dest = tmp_path / f"dst{i}"
            dest.mkdir()
            write_file(source, f"file{i}.txt")
            tasks.append(make_task(source, dest, index=i))
        threads = set()

        class _Recording(TaskRunner):
            def run(self, task):
                threads.add(threading.current_thread().name)
                return super().run(task)

        report = BatchOrchestrator(
            _Recording(FileCatalogScanner(use_modified_time=True), clock=fixed_clock),
            max_workers=3,
        ).run_all(tasks)

        assert [r.task.index for r in report] == list(range(6))
        assert all(r.succeeded_count == 1 for r in report)
        assert all(name.startswith("Task") for name in threads)

    def test_empty_batch(self):
        report = BatchOrchestrator().run_all([])
        assert len(report) == 0
        assert not report.has_failures


def test_scan_error_message_names_folder(tmp_path):
    err = ScanError(tmp_path / "x", "folder does not exist")
    assert str(tmp_path / "x") in str(err)
