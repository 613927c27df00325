# -------------------------------------
# Row function adapter
# -------------------------------------
"""
Normalize the accepted function syntaxes into one row callable.

    fn(row, **kwargs) -> scalar | one-row record

Accepted specifications:
    - any Python callable, returned unchanged
    - the name of a registered row function, e.g. "any", "mean"
    - a formula string "~ <expression>", evaluated with simpleeval:
          "~ sum(.x == 0)"
          "~ {'taken': sum(.x), 'not_taken': sum(.x == 0)}"
          "~ record(lo=min(x), hi=max(x))"
          "~ mean(.x) > threshold"          (threshold passed as a keyword)
      The row is bound to `.x` (also `x`); keyword arguments become names.
"""
from __future__ import annotations

import ast
import re
from typing import Any, Callable

from simpleeval import EvalWithCompoundTypes

from . import state
from .errors import FunctionSpecError

__all__ = ["as_function", "formula"]

RowFunction = Callable[..., Any]

# ".x" is not a valid Python name; rewrite it to "x" outside of identifiers.
# String literals are matched first and left as they are.
_DOT_X_RE = re.compile(
    r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")|(?<![\w.\]\)])\.x\b"""
)


def _rewrite_dot_x(expr: str) -> str:
    return _DOT_X_RE.sub(lambda m: m.group(1) or "x", expr)


def formula(text: str) -> RowFunction:
    """
    Compile a "~ <expression>" formula into a row function.

    Raises:
        FunctionSpecError: If the text is not a formula or does not parse
    """
    s = text.strip()
    if not s.startswith("~"):
        raise FunctionSpecError(f"Formula must start with '~': {text!r}")
    expr = _rewrite_dot_x(s[1:].strip())
    if not expr:
        raise FunctionSpecError(f"Empty formula: {text!r}")
    try:
        ast.parse(expr, mode="eval")
    except SyntaxError as e:
        raise FunctionSpecError(f"Invalid formula {text!r}: {e.msg}") from e

    def fn(x: Any, **kwargs: Any) -> Any:
        names = dict(kwargs)
        names["x"] = x
        se = EvalWithCompoundTypes(names=names, functions=state.get_funcs(), operators=state.ALLOWED_OPS)
        return se.eval(expr)

    fn.__name__ = "formula"
    fn.__qualname__ = f"formula({s!r})"
    return fn


def as_function(spec: Any) -> RowFunction:
    """
    Resolve a function specification into a row callable.

    Args:
        spec: Callable, registered function name, or "~ ..." formula

    Raises:
        FunctionSpecError: If a string is neither a known name nor a valid formula
        TypeError: If spec is not a callable or a string
    """
    if callable(spec):
        return spec
    if isinstance(spec, str):
        name = spec.strip()
        if name.startswith("~"):
            return formula(name)
        fn = state.get_func(name)
        if fn is None:
            raise FunctionSpecError(
                f"Unknown function {name!r}; use a registered name or a '~ ...' formula"
            )
        return fn
    raise TypeError(f"Expected a callable or a function string, got {type(spec).__name__}")
