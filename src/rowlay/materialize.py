# -------------------------------------
# Row materializers
# -------------------------------------
"""
Turn a table into a sequence of row vectors.

Two strategies:

    coerce  Find one common type for the whole table up front, then yield
            every row as a vector of that type. Accepts 2-D numpy arrays
            as well as tables. Non-scalar columns fail before any row is
            produced.

    zip     Keep each column's own type. For each row, build an ordered
            record {column: value} and concatenate its values into one
            vector. Text does not mix with logical/integer/real values;
            such a row fails with the index of that row.

Rows are numpy vectors (see types.to_vector) and are produced lazily in
ascending row order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator

import numpy as np

from .errors import TypeCoercionError
from .table import (
    Orientation,
    from_arrow_table,
    table_columns,
    table_nrows,
    table_orientation,
    table_validate,
)
from .types import (
    ScalarType,
    coerce_scalar,
    column_type,
    common_type,
    declared_type,
    scalar_type,
    to_vector,
)

logger = logging.getLogger(__name__)

__all__ = ["RowStream", "as_table", "coerce_rows", "zip_rows", "MATERIALIZERS"]


@dataclass
class RowStream:
    """Lazily produced rows plus the shape of the source."""
    rows: Iterator[np.ndarray]
    n_rows: int
    n_cols: int
    orientation: Orientation


def as_table(data: Any) -> dict[str, Any]:
    """
    Accept a dict table or a pyarrow Table/RecordBatch.

    Raises:
        TypeError: For any other input
        ValueError: If a dict table is malformed
    """
    if isinstance(data, dict):
        table_validate(data)
        return data
    if hasattr(data, "num_rows") and hasattr(data, "column_names"):
        return from_arrow_table(data)
    raise TypeError(f"Expected a table, got {type(data).__name__}")


def _python_values(column: Any) -> list[Any]:
    if hasattr(column, "to_pylist"):
        return column.to_pylist()
    if isinstance(column, np.ndarray):
        return column.tolist()
    return list(column)


def _source_columns(data: Any) -> tuple[list[str], list[Any], int, Orientation]:
    """Names, raw columns, row count and result orientation of the input."""
    if isinstance(data, np.ndarray):
        if data.ndim != 2:
            raise TypeError(f"Matrix input must be 2-D, got {data.ndim}-D")
        n_rows, n_cols = data.shape
        names = [str(j) for j in range(n_cols)]
        return names, [data[:, j] for j in range(n_cols)], n_rows, "column"
    table = as_table(data)
    return list(table["columns"]), table_columns(table), table_nrows(table), table_orientation(table)


# -------------------------------------
# coerce: one type for the whole table
# -------------------------------------

def coerce_rows(data: Any) -> RowStream:
    """
    Coerce the table to one common scalar type and stream its rows.

    The common type is computed from every column before the first row is
    produced.

    Raises:
        TypeCoercionError: If a column is not a scalar column
    """
    names, columns, n_rows, orientation = _source_columns(data)

    col_values = []
    types: list[ScalarType | None] = []
    for name, column in zip(names, columns):
        values = _python_values(column)
        try:
            types.append(column_type(column, values))
        except TypeCoercionError as e:
            raise TypeCoercionError(f"column '{name}' cannot be coerced: {e}") from e
        col_values.append(values)

    stype = common_type(types) or ScalarType.LOGICAL
    coerced = [[coerce_scalar(v, stype) for v in values] for values in col_values]
    logger.debug("coerce: %d rows x %d columns as %s", n_rows, len(names), stype.name)

    def rows() -> Iterator[np.ndarray]:
        for i in range(n_rows):
            yield to_vector([col[i] for col in coerced], stype)

    return RowStream(rows(), n_rows, len(names), orientation)


# -------------------------------------
# zip: column-native values, per-row concatenation
# -------------------------------------

def _zip_row(record: dict[str, Any], declared: list[ScalarType | None], row: int) -> np.ndarray:
    types = [
        dtype if dtype is not None else scalar_type(value, row=row)
        for dtype, value in zip(declared, record.values())
    ]
    stype = common_type(types, strict=True, row=row)
    values = [coerce_scalar(v, stype) if stype is not None else v for v in record.values()]
    return to_vector(values, stype)


def zip_rows(data: Any) -> RowStream:
    """
    Stream rows built from column-native values.

    Columns with a declared type (arrow arrays, typed numpy arrays) keep it,
    even for missing values; plain list columns use each value's own type.

    Raises:
        TypeError: For matrix input, which has no named columns
        TypeCoercionError: From the offending row, if its values cannot be
            concatenated
    """
    if isinstance(data, np.ndarray):
        raise TypeError("The zip strategy needs a table with named columns, got a matrix")
    names, columns, n_rows, orientation = _source_columns(data)
    declared = [declared_type(column) for column in columns]
    col_values = [_python_values(column) for column in columns]
    logger.debug("zip: %d rows x %d columns", n_rows, len(names))

    def rows() -> Iterator[np.ndarray]:
        for i in range(n_rows):
            record = {name: values[i] for name, values in zip(names, col_values)}
            yield _zip_row(record, declared, i)

    return RowStream(rows(), n_rows, len(names), orientation)


MATERIALIZERS: dict[str, Callable[[Any], RowStream]] = {
    "coerce": coerce_rows,
    "zip": zip_rows,
}
