# -------------------------------------
# Per-row outputs
# -------------------------------------
"""
Tagged per-row outputs.

Each call of the row function yields one PerRowOutput:

    Scalar(value)            a single logical/integer/real/text value (or None)
    Record(columns, values)  a one-row record

classify_output() converts whatever the row function returned into one of
these, once, so the combiner only dispatches on the tag.

Accepted return values:
    - Python and numpy scalars, None
    - length-1 lists/tuples/1-D arrays (unwrapped to a scalar)
    - dicts mapping column name to a scalar or a length-1 sequence
    - dict tables ({"columns": ..., "rows": ...}) holding exactly one row
    - pyarrow Tables and RecordBatches holding exactly one row
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import numpy as np

from .errors import InvalidOutputShapeError
from .table import table_nrows, table_to_rows, table_validate
from .types import native, scalar_type

__all__ = ["Scalar", "Record", "PerRowOutput", "classify_output"]


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Record:
    columns: tuple[str, ...]
    values: tuple[Any, ...]

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(self.columns, self.values))


PerRowOutput = Union[Scalar, Record]


def _is_vector(value: Any) -> bool:
    if isinstance(value, (list, tuple)):
        return True
    if isinstance(value, np.ndarray):
        return value.ndim >= 1
    # pa.Array / pa.ChunkedArray
    return type(value).__module__.startswith("pyarrow") and hasattr(value, "to_pylist")


def _vector_values(value: Any) -> list[Any]:
    if isinstance(value, np.ndarray):
        return list(value.reshape(-1))
    if hasattr(value, "to_pylist"):
        return value.to_pylist()
    return list(value)


def _one_value(value: Any, row: int, what: str) -> Any:
    """Unwrap a length-1 vector; reject longer or empty ones."""
    if not _is_vector(value):
        return native(value)
    values = _vector_values(value)
    if len(values) != 1:
        raise InvalidOutputShapeError(
            f"{what} has {len(values)} values; each row must produce exactly one "
            f"(wrap several values in a one-row record)",
            row=row,
        )
    return native(values[0])


def _scalar(value: Any, row: int) -> Any:
    scalar_type(value, row=row)
    return value


def _record_from_mapping(mapping: dict[Any, Any], row: int) -> Record:
    if not mapping:
        raise InvalidOutputShapeError("record has no columns and therefore no row", row=row)
    values = []
    for name, value in mapping.items():
        if _is_vector(value):
            column = _vector_values(value)
            if len(column) != 1:
                raise InvalidOutputShapeError(
                    f"record has {len(column)} rows in column '{name}', expected exactly 1", row=row
                )
            value = column[0]
        values.append(_scalar(native(value), row))
    return Record(tuple(mapping), tuple(values))


def _is_dict_table(value: dict[str, Any]) -> bool:
    """A dict table has a list of column names and a list of rows (or columns)."""
    columns = value.get("columns")
    rows = value.get("rows")
    if not isinstance(columns, (list, tuple)) or not isinstance(rows, (list, tuple)):
        return False
    return all(_is_vector(r) for r in rows)


def _record_from_table(table: dict[str, Any], row: int) -> Record:
    table_validate(table)
    n_rows = table_nrows(table)
    if n_rows != 1:
        raise InvalidOutputShapeError(f"record has {n_rows} rows, expected exactly 1", row=row)
    values = table_to_rows(table)["rows"][0]
    return Record(
        tuple(table["columns"]),
        tuple(_scalar(native(v), row) for v in values),
    )


def _record_from_arrow(arrow_table: Any, row: int) -> Record:
    if arrow_table.num_rows != 1:
        raise InvalidOutputShapeError(
            f"record has {arrow_table.num_rows} rows, expected exactly 1", row=row
        )
    columns = tuple(arrow_table.column_names)
    values = tuple(_scalar(arrow_table.column(c)[0].as_py(), row) for c in columns)
    return Record(columns, values)


def classify_output(value: Any, row: int) -> PerRowOutput:
    """
    Tag the value returned by the row function for row `row`.

    Raises:
        InvalidOutputShapeError: If a record does not have exactly one row,
            or a vector does not have exactly one element
        TypeCoercionError: If a value is not a scalar
    """
    if isinstance(value, (Scalar, Record)):
        return value
    if isinstance(value, dict):
        if _is_dict_table(value):
            return _record_from_table(value, row)
        return _record_from_mapping(value, row)
    if hasattr(value, "num_rows") and hasattr(value, "column_names"):
        return _record_from_arrow(value, row)
    return Scalar(_scalar(_one_value(value, row, "output vector"), row))
