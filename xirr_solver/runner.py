# xirr_solver/runner.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, List, Optional
import json
import logging

import pandas as pd

from .adapters import payment_schedule, run_xirr
from .config import SolverConfig
from .validate import load_payments_from_file

logger = logging.getLogger(__name__)

@dataclass
class RunResult:
    summary: Dict[str, Any]
    summary_path: Optional[Path] = None
    schedule_path: Optional[Path] = None

def _write_jsonl(path: Path, rows: List[Dict[str, Any]]) -> None:
    with path.open("w", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row) + "\n")

def _write_csv(path: Path, frame: pd.DataFrame) -> None:
    frame.to_csv(path, index=False)

def _json_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    # NaN is not valid JSON; emit null instead
    clean = frame.astype(object).where(frame.notna(), None)
    return clean.to_dict(orient="records")

def run_file(
    payments_path: str | Path,
    out_dir: str | Path | None = None,
    *,
    config: SolverConfig | None = None,
    fmt: str = "csv",
    save_schedule: bool = False,
) -> RunResult:
    """
    Compute the XIRR of one payment file.
    With out_dir, write summary.json and (optionally) <stem>_schedule.<fmt>.
    """
    if fmt not in ("csv", "jsonl"):
        raise ValueError(f"unknown fmt: {fmt}")

    src = Path(payments_path)
    payments = load_payments_from_file(src)
    summary = run_xirr(payments, config)
    summary["source"] = src.name
    logger.info("%s: %d payments, xirr=%s", src.name, summary["payments"], summary["xirr"])

    if out_dir is None:
        return RunResult(summary=summary)

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    summary_path = out / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")

    schedule_path: Optional[Path] = None
    if save_schedule:
        rate = summary["xirr"] if summary["xirr"] is not None else float("nan")
        frame = payment_schedule(payments, rate)
        schedule_path = out / f"{src.stem}_schedule.{fmt}"
        if fmt == "jsonl":
            _write_jsonl(schedule_path, _json_rows(frame))
        else:
            _write_csv(schedule_path, frame)

    return RunResult(summary=summary, summary_path=summary_path, schedule_path=schedule_path)
