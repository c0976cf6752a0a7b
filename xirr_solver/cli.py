# xirr_solver/cli.py
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import SolverConfig, load_solver_config
from .runner import run_file


def _positive_int(text: str) -> int:
    try:
        n = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def parse_args(argv: list[str] | None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="xirr_solver",
        description="XIRR of irregularly dated cash flows (Actual/365)",
    )
    p.add_argument(
        "payments",
        help="CSV file of YYYY-MM-DD,amount rows (negative = paid out, positive = received).",
    )
    p.add_argument(
        "--config",
        default=None,
        help="YAML file with solver settings (initial_guess, max_error, max_iterations, ...).",
    )
    p.add_argument(
        "--outputs-dir",
        default=None,
        help="Directory to write summary.json (and the schedule). Will be created if missing.",
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="text",
        choices=["text", "json", "csv", "jsonl"],
        help="text/json print to stdout; csv/jsonl select the schedule file format (default: text).",
    )
    p.add_argument(
        "--save-schedule",
        action="store_true",
        help="If set, write one row per payment with its discount factor at the computed rate.",
    )
    p.add_argument(
        "--zero-as-inflow",
        action="store_true",
        default=None,
        help="Count zero amounts as inflows when checking for an inflow/outflow mix.",
    )
    p.add_argument(
        "--max-iterations",
        type=_positive_int,
        default=None,
        help="Newton steps per guess before moving to the next guess.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log solver progress.")
    return p.parse_args(argv)


def _load_config(ns: argparse.Namespace) -> SolverConfig:
    cfg = load_solver_config(ns.config) if ns.config else SolverConfig()
    return cfg.with_overrides(
        zero_is_inflow=ns.zero_as_inflow,
        max_iterations=ns.max_iterations,
    )


def main(argv: list[str] | None = None) -> int:
    try:
        ns = parse_args(argv)
    except SystemExit as e:
        return int(e.code) if isinstance(e.code, int) else 2

    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    fmt = ns.fmt if ns.fmt in ("csv", "jsonl") else "csv"
    try:
        cfg = _load_config(ns)
        res = run_file(
            Path(ns.payments),
            ns.outputs_dir,
            config=cfg,
            fmt=fmt,
            save_schedule=ns.save_schedule,
        )
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    summary = res.summary
    if ns.fmt == "json":
        print(json.dumps(summary, indent=2))
    elif summary["converged"]:
        print(f"XIRR: {summary['xirr_pct']:.6f}%")
    else:
        print("XIRR: no convergent rate found")
    return 0


__all__ = ["main", "parse_args"]
