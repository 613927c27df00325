# -------------------------------------
# Row-wise application
# -------------------------------------
"""
Apply a function to each row of a table.

    apply_rowwise(table, fn, extra_args=None, strategy=None)
    lay(table, fn, strategy=None, **kwargs)

Each row is handed to `fn` as a numpy vector. When every call returns a
scalar the result is a vector with one element per row; when every call
returns a one-row record the result is a table with one row per row.

Example:
    >>> t = {"columns": ["a", "b"], "rows": [[True, False], [False, False], [True, True]]}
    >>> lay(t, any)
    [True, False, True]
    >>> lay(t, lambda x: {"count": sum(x)})
    {'orientation': 'row', 'columns': ['count'], 'rows': [[1], [0], [2]]}
"""
from __future__ import annotations

import logging
from typing import Any, Mapping

from . import state
from .combine import combine_outputs
from .functions import as_function
from .materialize import MATERIALIZERS
from .outputs import classify_output

logger = logging.getLogger(__name__)

__all__ = ["apply_rowwise", "lay"]


def apply_rowwise(
    table: Any,
    fn: Any,
    extra_args: Mapping[str, Any] | None = None,
    strategy: str | None = None,
) -> Any:
    """
    Apply `fn` to every row of `table`, in row order.

    Args:
        table: Dict table, pyarrow Table, or (coerce only) 2-D numpy array
        fn: Callable, registered function name, or "~ ..." formula
        extra_args: Keyword arguments forwarded to every call of fn
        strategy: "coerce" or "zip"; None uses the configured default

    Returns:
        A vector (list, or pa.Array for arrow input) with one element per
        row, or a table with one row per row in the input's orientation.

    Raises:
        InvalidStrategyError: If strategy is not recognized (no row is touched)
        TypeCoercionError: If rows cannot be materialized under the strategy
        InconsistentOutputShapeError: If fn returns scalars for some rows and
            records for others, or records with different columns
        InvalidOutputShapeError: If fn returns a record without exactly one row
        Any exception raised by fn, unchanged
    """
    strategy = state.check_strategy(state.get_default_strategy() if strategy is None else strategy)
    row_fn = as_function(fn)
    kwargs = dict(extra_args or {})

    stream = MATERIALIZERS[strategy](table)
    logger.debug(
        "applying %s to %d rows x %d columns (strategy=%s)",
        getattr(row_fn, "__qualname__", repr(row_fn)), stream.n_rows, stream.n_cols, strategy,
    )

    outputs = []
    for i, row in enumerate(stream.rows):
        outputs.append(classify_output(row_fn(row, **kwargs), row=i))

    return combine_outputs(outputs, orientation=stream.orientation)


def lay(data: Any, fn: Any, strategy: str | None = None, **kwargs: Any) -> Any:
    """Keyword form of apply_rowwise: extra keyword arguments go to fn."""
    return apply_rowwise(data, fn, extra_args=kwargs, strategy=strategy)
