# xirr_solver/adapters.py
from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from xirr_solver.config import SolverConfig
from xirr_solver.finance.xirr import Payment, compute, guess_ladder, year_fraction


# ------------------------------
# Small helpers (no policy here)
# ------------------------------
def _as_date(v: Any) -> date:
    """Accept date, datetime, pandas.Timestamp or an ISO-8601 string."""
    if pd.api.types.is_scalar(v) and pd.isna(v):
        raise ValueError("missing date")
    if isinstance(v, pd.Timestamp):
        return v.date()
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        s = v.strip()
        # the whole string must parse; a time part is allowed and dropped
        if "T" in s or " " in s:
            return datetime.fromisoformat(s).date()
        return date.fromisoformat(s)
    raise ValueError(f"unsupported date value: {v!r}")


def _as_amount(v: Any) -> float:
    amount = float(v)
    if not math.isfinite(amount):
        raise ValueError(f"amount must be finite, got {v!r}")
    return amount


def payment_from_row(row: Any) -> Payment:
    """
    Coerce one row into a Payment:
      Payment            -> returned as-is
      (date, amount)     -> pair
      {'date', 'amount'} -> mapping
    """
    if isinstance(row, Payment):
        return row
    try:
        if isinstance(row, Mapping):
            d, a = row["date"], row["amount"]
        else:
            d, a = row
        return Payment(_as_date(d), _as_amount(a))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"invalid payment row {row!r}: {e}") from e


def payments_from_rows(rows: Iterable[Any]) -> List[Payment]:
    return [payment_from_row(r) for r in rows]


def payments_from_frame(
    frame: pd.DataFrame,
    date_col: str = "date",
    amount_col: str = "amount",
) -> List[Payment]:
    """Payments from a DataFrame with one row per cash flow."""
    missing = [c for c in (date_col, amount_col) if c not in frame.columns]
    if missing:
        raise ValueError(f"missing columns: {missing}")
    out: List[Payment] = []
    for idx, d, a in zip(frame.index, frame[date_col], frame[amount_col]):
        try:
            out.append(payment_from_row((d, a)))
        except ValueError as e:
            raise ValueError(f"row {idx!r}: {e}") from e
    return out


# ------------------------------
# Public adapter(s)
# ------------------------------
def solve(payments: Iterable[Payment], config: Optional[SolverConfig] = None) -> float:
    """compute() driven by a SolverConfig."""
    cfg = config or SolverConfig()
    return compute(
        payments,
        guess=cfg.initial_guess,
        max_error=cfg.max_error,
        max_iterations=cfg.max_iterations,
        zero_is_inflow=cfg.zero_is_inflow,
        guesses=guess_ladder(cfg.guess_start, cfg.guess_stop, cfg.guess_step),
    )


def payment_schedule(payments: Iterable[Payment], rate: float) -> pd.DataFrame:
    """
    One row per payment in date order:
      date, amount, years (Actual/365 from the first payment),
      discount_factor = (1+rate)^-years, present_value = amount * discount_factor
    Discount columns are NaN when rate is NaN.
    """
    ordered = sorted(payments, key=lambda p: pd.Timestamp(p.date))
    cols = ["date", "amount", "years", "discount_factor", "present_value"]
    if not ordered:
        return pd.DataFrame(columns=cols)
    d0 = ordered[0].date
    years = np.array([year_fraction(d0, p.date) for p in ordered], dtype=float)
    amounts = np.array([p.amount for p in ordered], dtype=float)
    if math.isnan(rate):
        # nan ** 0 is 1.0, keep the anchor row NaN as well
        factors = np.full(len(ordered), np.nan)
    else:
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            factors = np.power(1.0 + float(rate), -years)
    return pd.DataFrame(
        {
            "date": [_as_date(p.date).isoformat() for p in ordered],
            "amount": amounts,
            "years": years,
            "discount_factor": factors,
            "present_value": amounts * factors,
        },
        columns=cols,
    )


def run_xirr(payments: Iterable[Payment], config: Optional[SolverConfig] = None) -> Dict[str, Any]:
    """
    Summary mapping for one payment set:
      {
        'xirr': float | None,     # None when no convergent rate was found
        'xirr_pct': float | None,
        'converged': bool,
        'payments': int,
        'first_date': 'YYYY-MM-DD', 'last_date': 'YYYY-MM-DD',
        'total_paid': float, 'total_received': float, 'net': float,
      }
    InvalidPayments propagates to the caller.
    """
    items = list(payments)
    rate = solve(items, config)
    converged = math.isfinite(rate)

    dates = [_as_date(p.date) for p in items]
    paid = sum(-p.amount for p in items if p.amount < 0)
    received = sum(p.amount for p in items if p.amount > 0)
    return {
        "xirr": rate if converged else None,
        "xirr_pct": rate * 100.0 if converged else None,
        "converged": converged,
        "payments": len(items),
        "first_date": min(dates).isoformat(),
        "last_date": max(dates).isoformat(),
        "total_paid": float(paid),
        "total_received": float(received),
        "net": float(received - paid),
    }
