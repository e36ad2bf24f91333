import json

import pytest

from batch_transfer import notify as notify_mod
from batch_transfer.__main__ import build_parser, main
from batch_transfer.app import EXIT_CONFIG_ERROR, EXIT_FAILURES, EXIT_OK, App
from helpers import fixed_clock, write_file


@pytest.fixture(autouse=True)
def _quiet_notifications(monkeypatch):
    monkeypatch.setattr(notify_mod, "play_error_sound", lambda: None)
    monkeypatch.setattr(notify_mod, "write_event_log", lambda *a, **k: False)


def _config(tmp_path, src, dst, **task):
    entry = {
        "action": "Copy",
        "source_folder": str(src),
        "recurse": False,
        "name_regex": r"Analyse_.*\.xlsx",
        "destination_folder": str(dst),
        "overwrite_existing": False,
        "max_age_days": 1,
    }
    entry.update(task)
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            {
                "log_folder": str(tmp_path / "logs"),
                "notify": "never",
                "timestamp": "modified",
                "tasks": [entry],
            }
        ),
        encoding="utf-8",
    )
    return path


def test_successful_run(tmp_path, src, dst, capsys):
    write_file(src, "Analyse_26032025.xlsx")
    write_file(src, "Old_File.txt", days_ago=10)
    cfg = _config(tmp_path, src, dst)

    code = App(config_path=cfg, clock=fixed_clock).run()

    assert code == EXIT_OK
    assert (dst / "Analyse_26032025.xlsx").exists()
    assert not (dst / "Old_File.txt").exists()
    assert (tmp_path / "logs" / "batch_transfer.log").exists()
    assert not list((tmp_path / "logs").glob("transfer_*.log"))
    assert "1 file(s) transferred" in capsys.readouterr().out


def test_failures_give_exit_code_one_and_a_failure_log(tmp_path, src, dst, capsys):
    write_file(src, "Analyse_1.xlsx", "new")
    write_file(dst, "Analyse_1.xlsx", "old")
    cfg = _config(tmp_path, src, dst)

    code = App(config_path=cfg, clock=fixed_clock).run()

    assert code == EXIT_FAILURES
    assert (dst / "Analyse_1.xlsx").read_text(encoding="utf-8") == "old"
    logs = list((tmp_path / "logs").glob("transfer_*.log"))
    assert len(logs) == 1
    assert "destination_exists" in logs[0].read_text(encoding="utf-8")
    assert "Details:" in capsys.readouterr().out


def test_invalid_configuration_runs_nothing(tmp_path, src, dst):
    write_file(src, "Analyse_1.xlsx")
    cfg = _config(tmp_path, src, dst, action="Shred")

    assert App(config_path=cfg, clock=fixed_clock).run() == EXIT_CONFIG_ERROR
    assert list(dst.iterdir()) == []


def test_check_only_lists_tasks(tmp_path, src, dst, capsys):
    write_file(src, "Analyse_1.xlsx")
    cfg = _config(tmp_path, src, dst)

    assert main(["--config", str(cfg), "--check"]) == EXIT_OK
    out = capsys.readouterr().out
    assert "Configuration OK" in out
    assert "Analyse_" in out
    assert list(dst.iterdir()) == []


def test_main_rejects_zero_workers(tmp_path, capsys):
    assert main(["--config", str(tmp_path / "x.json"), "--workers", "0"]) == 2


def test_main_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "absent.json")]) == EXIT_CONFIG_ERROR


def test_parser_normalises_log_level():
    args = build_parser().parse_args(["--log-level", "debug"])
    assert args.log_level == "DEBUG"


def test_app_removes_its_log_handlers(tmp_path, src, dst):
    import logging

    before = list(logging.getLogger().handlers)
    App(config_path=_config(tmp_path, src, dst), clock=fixed_clock).run()
    assert logging.getLogger().handlers == before
