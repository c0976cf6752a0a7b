from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict
import os
import io
import yaml

from .finance.xirr import (
    GUESS_START,
    GUESS_STEP,
    GUESS_STOP,
    INITIAL_GUESS,
    MAX_ERROR,
    MAX_ITERATIONS,
)
from .schema import validate_settings


@dataclass(frozen=True)
class SolverConfig:
    initial_guess: float = INITIAL_GUESS
    max_error: float = MAX_ERROR
    max_iterations: int = MAX_ITERATIONS
    guess_start: float = GUESS_START
    guess_stop: float = GUESS_STOP
    guess_step: float = GUESS_STEP
    zero_is_inflow: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> "SolverConfig":
        """Copy with the given non-None fields replaced and re-validated."""
        merged = self.as_dict()
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return replace(self, **validate_settings(merged, where="<overrides>"))


def _parse_yaml_fallback(text: str) -> Dict[str, Any]:
    """
    Super-tolerant parser for key: value lines (only for emergencies).
    Booleans and numbers are coerced when obvious.
    """
    data: Dict[str, Any] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        k = k.strip()
        v = v.strip().strip('"').strip("'")
        if not v:
            continue
        if v.lower() in ("true", "false"):
            data[k] = v.lower() == "true"
            continue
        try:
            data[k] = int(v)
        except ValueError:
            try:
                data[k] = float(v)
            except ValueError:
                data[k] = v
    return data


def _flatten_grouped(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten shallow groups like {'solver': {...}} into one level.
    Prefers top-level keys if collisions occur.
    """
    flat: Dict[str, Any] = dict(cfg)
    for k, v in list(cfg.items()):
        if isinstance(v, dict):
            for sk, sv in v.items():
                flat.setdefault(sk, sv)
    return flat


def load_solver_config(source: str | os.PathLike | io.StringIO) -> SolverConfig:
    """
    Load YAML from a path or text stream. If YAML fails, use a tolerant fallback.
    Unknown keys are ignored; known keys are range-checked against the schema.
    """
    text: str
    where: str
    if hasattr(source, "read"):
        text = str(source.read())
        where = "<stream>"
    else:
        p = os.fspath(source)
        with open(p, "r", encoding="utf-8") as f:
            text = f.read()
        where = str(p)

    try:
        cfg = yaml.safe_load(text) or {}
        if not isinstance(cfg, dict):
            cfg = {}
    except yaml.YAMLError:
        cfg = _parse_yaml_fallback(text)

    settings = validate_settings(_flatten_grouped(cfg), where=where)
    return SolverConfig(**settings)
