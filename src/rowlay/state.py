# -------------------------------------
# rowlay shared state
# -------------------------------------
"""
Shared state for row-wise application:
- DEFAULT_STRATEGY: materializer used when no strategy is given
- FUNCS: named row functions available to the function adapter
"""
from __future__ import annotations

import ast
import operator as op
from pathlib import Path
from typing import Any, Callable

import numpy as np
import yaml

from .errors import InvalidStrategyError

# ============================================================
# Strategies
# ============================================================

STRATEGIES: tuple[str, ...] = ("coerce", "zip")

DEFAULT_STRATEGY = "coerce"


def check_strategy(strategy: Any) -> str:
    """Return strategy unchanged if it is a recognized name."""
    if not isinstance(strategy, str) or strategy not in STRATEGIES:
        raise InvalidStrategyError(
            f"Unknown strategy {strategy!r}, expected one of {list(STRATEGIES)}"
        )
    return strategy


def set_default_strategy(strategy: str) -> None:
    """Set the strategy used when apply_rowwise gets strategy=None."""
    global DEFAULT_STRATEGY
    DEFAULT_STRATEGY = check_strategy(strategy)


def get_default_strategy() -> str:
    return DEFAULT_STRATEGY


# ============================================================
# Operators whitelist for simpleeval formulas
# ============================================================

# plain operator functions so numpy row vectors work elementwise
ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.Pow: op.pow,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.Eq: op.eq,
    ast.NotEq: op.ne,
    ast.Lt: op.lt,
    ast.LtE: op.le,
    ast.Gt: op.gt,
    ast.GtE: op.ge,
    ast.BitAnd: op.and_,
    ast.BitOr: op.or_,
    ast.BitXor: op.xor,
    ast.Invert: op.invert,
    ast.Not: op.not_,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}


# ============================================================
# Row function registry
# ============================================================

def _record(**fields: Any) -> dict[str, Any]:
    """Build a one-row record from keyword arguments."""
    return dict(fields)


_BUILTIN_FUNCS: dict[str, Callable[..., Any]] = {
    # reductions
    "any": np.any,
    "all": np.all,
    "sum": np.sum,
    "prod": np.prod,
    "mean": np.mean,
    "median": np.median,
    "min": np.min,
    "max": np.max,
    "std": np.std,
    "var": np.var,
    "nansum": np.nansum,
    "nanmean": np.nanmean,
    "nanmin": np.nanmin,
    "nanmax": np.nanmax,
    "count_nonzero": np.count_nonzero,
    "len": len,
    # elementwise
    "abs": np.abs,
    "sqrt": np.sqrt,
    "exp": np.exp,
    "log": np.log,
    "isnan": np.isnan,
    "round": round,
    "where": np.where,
    # conversions
    "int": int,
    "float": float,
    "str": str,
    "bool": bool,
    # records
    "record": _record,
}

FUNCS: dict[str, Callable[..., Any]] = dict(_BUILTIN_FUNCS)


def set_func(name: str, fn: Callable[..., Any]) -> None:
    """Register a named row function."""
    if not callable(fn):
        raise TypeError(f"Function {name!r} is not callable: {fn!r}")
    FUNCS[name] = fn


def get_func(name: str) -> Callable[..., Any] | None:
    """Get a named row function, or None."""
    return FUNCS.get(name)


def get_funcs() -> dict[str, Callable[..., Any]]:
    """Return the function registry."""
    return FUNCS


def reset_funcs() -> None:
    """Restore the registry to the built-in functions."""
    FUNCS.clear()
    FUNCS.update(_BUILTIN_FUNCS)


# ============================================================
# Config files
# ============================================================

def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML config file and apply it.

    Recognized keys:
        strategy: default strategy name ("coerce" or "zip")

    Returns:
        The parsed config dict
    """
    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(config).__name__}")
    if "strategy" in config:
        set_default_strategy(config["strategy"])
    return config
