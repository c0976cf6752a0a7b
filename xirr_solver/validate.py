# xirr_solver/validate.py
from __future__ import annotations
import csv
import os, sys
from pathlib import Path
from typing import Iterable, List

from .adapters import payment_from_row
from .finance.xirr import Payment, validate_payments

def _mode_from_env_or_flag(flag: str | None) -> str:
    if flag in ("strict", "relaxed"):
        return flag
    env = (os.environ.get("VALIDATION_MODE") or "").lower()
    return env if env in ("strict", "relaxed") else "relaxed"

def load_payments_from_file(path: Path) -> List[Payment]:
    """
    Read a payment file: CSV without header, one `YYYY-MM-DD,amount` row per
    payment. Blank lines are skipped; any other malformed row fails fast.
    """
    p = Path(path)
    if p.is_dir():
        raise ValueError(f"{p} is a directory (expected a file)")
    payments: List[Payment] = []
    with p.open("r", encoding="utf-8", newline="") as f:
        for lineno, rec in enumerate(csv.reader(f), start=1):
            if not rec or all(not c.strip() for c in rec):
                continue
            if len(rec) != 2:
                raise ValueError(f"{p}:{lineno}: expected 2 columns (date,amount), got {len(rec)}")
            try:
                payments.append(payment_from_row(rec))
            except ValueError as e:
                raise ValueError(f"{p}:{lineno}: {e}") from None
    return payments

def validate_payment_file(
    path: Path, *, mode: str = "relaxed", zero_is_inflow: bool = False
) -> List[Payment]:
    """
    Minimal guardrails:
      - relaxed: every row parses
      - strict : rows parse and the set holds both an inflow and an outflow
                 (zero amounts count as inflows with zero_is_inflow)
    """
    payments = load_payments_from_file(path)
    if mode == "strict":
        validate_payments(payments, zero_is_inflow=zero_is_inflow)
    return payments

def _iter_input_files(p: Path) -> Iterable[Path]:
    if p.is_file():
        yield p
    elif p.is_dir():
        yield from sorted(p.rglob("*.csv"))

def _main(argv: List[str] | None = None) -> int:
    import argparse
    parser = argparse.ArgumentParser(prog="xirr_solver.validate", add_help=True)
    parser.add_argument("paths", nargs="+", help="payment CSV files or directories to validate")
    parser.add_argument("--mode", choices=["strict", "relaxed"], default=None, help="validation mode")
    parser.add_argument("--zero-as-inflow", action="store_true", help="count zero amounts as inflows in strict mode")
    args = parser.parse_args(argv)

    mode = _mode_from_env_or_flag(args.mode)
    had_error = False

    for raw in args.paths:
        target = Path(raw)
        any_seen = False
        for f in _iter_input_files(target):
            any_seen = True
            try:
                validate_payment_file(f, mode=mode, zero_is_inflow=args.zero_as_inflow)
                print(f"OK: {f}")
            except (OSError, ValueError) as e:
                print(f"{f}: {e}", file=sys.stderr)
                had_error = True
        if not any_seen:
            print(f"{target}: no payment files found", file=sys.stderr)
            had_error = True

    return 1 if had_error else 0

if __name__ == "__main__":
    raise SystemExit(_main())
