from __future__ import annotations
from typing import Dict, Any

# Solver settings schema: type, min/max ranges, and description.
SCHEMA: Dict[str, Dict[str, Any]] = {
    "initial_guess":  {"unit": "rate/yr",  "type": "float", "min": -0.9999, "max": 100.0, "desc": "First Newton starting point"},
    "max_error":      {"unit": "rate/yr",  "type": "float", "min": 1e-16,   "max": 1e-2,  "desc": "Absolute convergence threshold between steps"},
    "max_iterations": {"unit": "steps",    "type": "int",   "min": 1,       "max": 1e6,   "desc": "Newton steps per guess before giving up"},
    "guess_start":    {"unit": "rate/yr",  "type": "float", "min": -0.9999, "max": 100.0, "desc": "First fallback guess"},
    "guess_stop":     {"unit": "rate/yr",  "type": "float", "min": -0.9999, "max": 100.0, "desc": "Exclusive upper bound of fallback guesses"},
    "guess_step":     {"unit": "rate/yr",  "type": "float", "min": 1e-6,    "max": 10.0,  "desc": "Increment between fallback guesses"},
    "zero_is_inflow": {"unit": "flag",     "type": "bool",                                "desc": "Count zero amounts as inflows when validating"},
}

# Composite constraints evaluated after scalar checks.
COMPOSITE_CONSTRAINTS = [
    {
        "name": "guess_ladder_not_empty",
        "check": lambda p: float(p.get("guess_start", -0.99)) < float(p.get("guess_stop", 1.0)),
        "message": "guess_start must be below guess_stop.",
    },
    {
        "name": "initial_guess_above_minus_one",
        "check": lambda p: float(p.get("initial_guess", 0.1)) > -1.0,
        "message": "initial_guess must be greater than -1 (a -100% rate has no present value).",
    },
]


def _within(x: float, lo: float, hi: float) -> bool:
    return (x >= lo) and (x <= hi)


def validate_settings(d: Dict[str, Any], *, where: str = "<mem>") -> Dict[str, Any]:
    """Validate scalar bounds & composites; echo back coerced known keys."""
    validated: Dict[str, Any] = {}
    for k, bounds in SCHEMA.items():
        if k not in d:
            continue
        raw = d[k]
        if bounds["type"] == "bool":
            if not isinstance(raw, bool):
                raise ValueError(f"{where}: {k} must be true or false, got {raw!r}")
            validated[k] = raw
            continue
        try:
            v = float(raw)
        except (TypeError, ValueError):
            raise ValueError(f"{where}: {k} must be a number, got {raw!r}") from None
        lo = float(bounds.get("min", float("-inf")))
        hi = float(bounds.get("max", float("inf")))
        if not _within(v, lo, hi):
            raise ValueError(f"{where}: {k} outside allowed range [{lo}, {hi}]: {v}")
        validated[k] = int(v) if bounds["type"] == "int" else v

    for c in COMPOSITE_CONSTRAINTS:
        if not c["check"](validated):
            raise ValueError(f"{where}: {c['message']}")
    return validated
