"""Run state shared between the solve request and ``/progress`` polling,
plus the optional attempt log every solver writes one line to per run."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

PROGRESS_LOCK = threading.Lock()


def _log_path() -> Optional[Path]:
    configured = getattr(CFG, "ATTEMPT_LOG", "")
    if not configured:
        return None
    path = Path(configured)
    if not path.is_absolute():
        path = Path(__file__).resolve().parent / path
    return path


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("geode.attempt_log")
    path = _log_path()
    if logger.handlers or path is None:
        return logger
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Read-only checkout: keep solving without the file.
        return logger
    handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


ATTEMPT_LOGGER = _init_logger()


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Append one ``event | key=value ...`` line to the attempt log.

    Fields that are None or empty are left out.  Nothing is written when the
    log is disabled (``GEODE_ATTEMPT_LOG=""``).
    """
    if not ATTEMPT_LOGGER.handlers:
        return
    pairs = " ".join(f"{k}={v}" for k, v in fields.items() if v is not None and v != "")
    if pairs:
        ATTEMPT_LOGGER.info("%s | %s", event, pairs)
    else:
        ATTEMPT_LOGGER.info("%s", event)


_IDLE: Dict[str, Any] = {
    "status": "Idle",        # Idle | Solving | Solved | Error
    "phase": "",             # parse | solve | write
    "percent": 0.0,
    "best_score": None,      # score of the returned islands
    "coverage_pct": 0.0,     # covered crystals, percent
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
}

PROGRESS: Dict[str, Any] = dict(_IDLE, run_id=0)


def _clamp_pct(value: Any) -> float:
    return max(0.0, min(100.0, float(value)))


def _fmt_elapsed(seconds: float) -> str:
    total = int(max(0.0, float(seconds)))
    if total < 60:
        return f"{total}s"
    m, s = divmod(total, 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"


def _refresh_elapsed() -> None:
    # caller holds PROGRESS_LOCK
    started = PROGRESS["elapsed_start"]
    if started is not None:
        PROGRESS["elapsed"] = time.time() - started


def _update(**values: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS.update(values)
        _refresh_elapsed()


def reset() -> None:
    with PROGRESS_LOCK:
        run_id = int(PROGRESS.get("run_id", 0)) + 1
        PROGRESS.clear()
        PROGRESS.update(_IDLE, run_id=run_id)
    log_attempt_detail("Progress reset", run_id=run_id)


def start_timer() -> None:
    _update(elapsed_start=time.time(), elapsed=0.0)


def set_status(v: Any) -> None:
    _update(status=str(v))


def set_phase(v: Any) -> None:
    phase = "" if v is None else str(v)
    with PROGRESS_LOCK:
        changed = phase and phase != PROGRESS["phase"]
        PROGRESS["phase"] = phase
        _refresh_elapsed()
    if changed:
        log_attempt_detail("Phase started", phase=phase)


def set_progress_pct(pct: Any) -> None:
    _update(percent=_clamp_pct(pct))


def set_best_score(score: Any) -> None:
    _update(best_score=None if score is None else float(score))


def set_coverage_pct(pct: Any) -> None:
    _update(coverage_pct=_clamp_pct(pct))


def set_message(msg: Any) -> None:
    _update(message="" if msg is None else str(msg))


def set_done(ok: Any = None, *, message: Any = None) -> None:
    """Mark the run complete.

    ``ok`` decides the final status when given; otherwise a run that never
    left ``Idle``/``Solving`` is reported as ``Solved``.
    """
    with PROGRESS_LOCK:
        _refresh_elapsed()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS["status"] in ("", "Idle", "Solving"):
            PROGRESS["ok"] = True
            PROGRESS["status"] = "Solved"
        if message is not None:
            PROGRESS["message"] = str(message)
        PROGRESS["percent"] = 100.0
        PROGRESS["done"] = True
        final = dict(PROGRESS)
    log_attempt_detail(
        "Run finished",
        status=final["status"],
        ok=final["ok"],
        duration=f"{final['elapsed']:.2f}s",
        best_score=final["best_score"],
        coverage=f"{final['coverage_pct']:.2f}%",
        message=final["message"],
    )


def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _refresh_elapsed()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    snap["elapsed_str"] = _fmt_elapsed(snap["elapsed"])
    return snap
