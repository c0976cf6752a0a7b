# xirr_solver/finance/xirr.py
"""
XIRR for irregularly dated cash flows, as found in spreadsheet applications.

Sign convention: amount > 0 is money received, amount < 0 is money paid out.
Time is Actual/365: whole calendar days since the earliest payment / 365.0.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MAX_ERROR = 1e-10
MAX_ITERATIONS = 1000
DAYS_PER_YEAR = 365.0

INITIAL_GUESS = 0.1
GUESS_START = -0.99
GUESS_STOP = 1.0
GUESS_STEP = 0.1


class InvalidPayments(ValueError):
    """Raised when a payment set lacks either an inflow or an outflow."""

    def __init__(self, message: str = "negative and positive payments are required") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Payment:
    """A payment made (amount < 0) or received (amount > 0) on a date."""

    date: date
    amount: float


# ---------- Validation ----------
def validate_payments(payments: Iterable[Payment], *, zero_is_inflow: bool = False) -> None:
    """
    Require at least one inflow and one outflow.
    With zero_is_inflow, a zero amount satisfies the inflow side.
    """
    positive, negative = False, False
    for p in payments:
        if p.amount > 0.0 or (zero_is_inflow and p.amount == 0.0):
            positive = True
        if p.amount < 0.0:
            negative = True

    if not positive or not negative:
        raise InvalidPayments()


# ---------- Day count ----------
def _moment(d: date) -> datetime:
    # dates and datetimes compare and subtract on one footing (midnight)
    if isinstance(d, datetime):
        return d
    return datetime(d.year, d.month, d.day)


def year_fraction(start: date, end: date) -> float:
    """Actual/365: 365 days apart is exactly 1.0, 366 days is ~1.0027."""
    return (_moment(end) - _moment(start)).days / DAYS_PER_YEAR


def _sorted(payments: Iterable[Payment]) -> List[Payment]:
    return sorted(payments, key=lambda p: _moment(p.date))


def _arrays(ordered: Sequence[Payment]) -> Tuple[np.ndarray, np.ndarray]:
    """(amounts, exponents) for a date-sorted set, anchored on ordered[0]."""
    d0 = ordered[0].date
    amounts = np.array([float(p.amount) for p in ordered], dtype=np.float64)
    exps = np.array([year_fraction(d0, p.date) for p in ordered], dtype=np.float64)
    return amounts, exps


# ---------- NPV ----------
def _npv(amounts: np.ndarray, exps: np.ndarray, rate: np.float64) -> np.float64:
    return np.sum(amounts / np.power(1.0 + rate, exps))


def _dnpv(amounts: np.ndarray, exps: np.ndarray, rate: np.float64) -> np.float64:
    return -np.sum(amounts * exps / np.power(1.0 + rate, exps + 1.0))


def npv(rate: float, payments: Iterable[Payment]) -> float:
    """
    Net present value at the earliest payment date:
        NPV(r) = sum_i amount_i / (1+r)^exp_i
    A base 1+r <= 0 with fractional exponents gives NaN rather than raising.
    """
    ordered = _sorted(payments)
    if not ordered:
        return 0.0
    amounts, exps = _arrays(ordered)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(_npv(amounts, exps, np.float64(rate)))


def npv_derivative(rate: float, payments: Iterable[Payment]) -> float:
    """
    d/dr NPV(r) = sum_i -amount_i * exp_i / (1+r)^(exp_i + 1)
    """
    ordered = _sorted(payments)
    if not ordered:
        return 0.0
    amounts, exps = _arrays(ordered)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(_dnpv(amounts, exps, np.float64(rate)))


# ---------- Newton-Raphson ----------
def _newton(
    amounts: np.ndarray,
    exps: np.ndarray,
    guess: float,
    max_error: float,
    max_iterations: int,
) -> float:
    rate = np.float64(guess)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        for _ in range(max_iterations):
            nxt = rate - _npv(amounts, exps, rate) / _dnpv(amounts, exps, rate)
            step = abs(nxt - rate)
            rate = nxt
            # NaN steps stop the loop as well; the NaN rate is returned
            if not step > max_error:
                return float(rate)
    return math.nan


def compute_with_guess(
    payments: Sequence[Payment],
    guess: float,
    *,
    max_error: float = MAX_ERROR,
    max_iterations: int = MAX_ITERATIONS,
) -> float:
    """
    Newton-Raphson from a single initial guess on a date-sorted payment set:
        r_{n+1} = r_n - NPV(r_n) / NPV'(r_n)
    until |r_{n+1} - r_n| <= max_error. Returns NaN when the iteration
    produces NaN or does not settle within max_iterations steps.
    """
    if not payments:
        return math.nan
    amounts, exps = _arrays(payments)
    return _newton(amounts, exps, guess, max_error, max_iterations)


def guess_ladder(
    start: float = GUESS_START,
    stop: float = GUESS_STOP,
    step: float = GUESS_STEP,
) -> Iterator[float]:
    """Fallback guesses start, start+step, ... (exclusive stop), accumulated."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    guess = start
    while guess < stop:
        yield guess
        guess += step


# ---------- XIRR ----------
def compute(
    payments: Iterable[Payment],
    *,
    guess: float = INITIAL_GUESS,
    max_error: float = MAX_ERROR,
    max_iterations: int = MAX_ITERATIONS,
    zero_is_inflow: bool = False,
    guesses: Optional[Iterable[float]] = None,
) -> float:
    """
    Internal rate of return of a series of irregular payments.

    Tries Newton's method from `guess` (0.1). If that gives NaN or inf, it
    retries from each of `guesses` (default -0.99, -0.89, ... 0.99) and stops
    at the first finite result. Returns NaN when no guess converges; that is
    a normal outcome, not an error.

    Raises InvalidPayments when inflows and outflows are not both present.
    """
    ordered = _sorted(payments)
    validate_payments(ordered, zero_is_inflow=zero_is_inflow)

    amounts, exps = _arrays(ordered)
    rate = _newton(amounts, exps, guess, max_error, max_iterations)
    if math.isfinite(rate):
        return rate

    ladder = guess_ladder() if guesses is None else guesses
    for g in ladder:
        logger.debug("xirr: guess %r gave %r, retrying from %r", guess, rate, g)
        guess = g
        rate = _newton(amounts, exps, g, max_error, max_iterations)
        if math.isfinite(rate):
            return rate

    logger.warning("xirr: no convergent rate found for %d payments", len(ordered))
    return rate


__all__ = [
    "DAYS_PER_YEAR",
    "GUESS_START",
    "GUESS_STEP",
    "GUESS_STOP",
    "INITIAL_GUESS",
    "MAX_ERROR",
    "MAX_ITERATIONS",
    "InvalidPayments",
    "Payment",
    "compute",
    "compute_with_guess",
    "guess_ladder",
    "npv",
    "npv_derivative",
    "validate_payments",
    "year_fraction",
]
