import logging

import progress
from progress import (
    reset, set_best_score, set_coverage_pct, set_done, set_message, set_phase,
    set_progress_pct, set_status, snapshot, start_timer,
)


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True


def test_set_done_failure_keeps_message():
    reset()
    set_status("Solving")
    set_done(False, message="Bad grid: empty grid")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["ok"] is False
    assert snap["message"] == "Bad grid: empty grid"
    assert snap["done"] is True


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert isinstance(first, int)
    assert second == first + 1


def test_setters_clamp_and_snapshot_hides_start_time():
    reset()
    start_timer()
    set_phase("solve")
    set_progress_pct(140)
    set_coverage_pct(-5)
    set_best_score(3)
    set_message(None)
    snap = snapshot()
    assert snap["phase"] == "solve"
    assert snap["percent"] == 100.0
    assert snap["coverage_pct"] == 0.0
    assert snap["best_score"] == 3.0
    assert snap["message"] == ""
    assert "elapsed_start" not in snap
    assert snap["elapsed_str"].endswith("s")


def test_fmt_elapsed():
    assert progress._fmt_elapsed(5.7) == "5s"
    assert progress._fmt_elapsed(125) == "2m 5s"
    assert progress._fmt_elapsed(3 * 3600 + 60) == "3h 1m"


def test_attempt_log_writes_key_value_lines(tmp_path, monkeypatch):
    handler = logging.FileHandler(tmp_path / "attempts.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    monkeypatch.setattr(progress.ATTEMPT_LOGGER, "handlers", [handler])
    previous = progress.ATTEMPT_LOGGER.level
    progress.ATTEMPT_LOGGER.setLevel(logging.INFO)
    try:
        progress.log_attempt_detail("Island search", targets=3, timed_out=False, skipped=None)
    finally:
        progress.ATTEMPT_LOGGER.setLevel(previous)
        handler.close()

    text = (tmp_path / "attempts.log").read_text(encoding="utf-8")
    assert text.strip() == "Island search | targets=3 timed_out=False"
