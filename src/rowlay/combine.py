# -------------------------------------
# Result combiner
# -------------------------------------
"""
Combine per-row outputs into a vector or a table.

The tag of the first output decides the result:
    Scalar -> a vector with one element per row
    Record -> a table with one row per row

Every other output must carry the same tag (and, for records, the same
column names). Values are concatenated type-stably: the vector (or each
output column) takes the least common type of its values under
LOGICAL < INTEGER < REAL < TEXT.
"""
from __future__ import annotations

import logging
from typing import Any, Sequence

from .errors import InconsistentOutputShapeError
from .outputs import PerRowOutput, Record, Scalar
from .table import Orientation, table_to_orientation
from .types import ScalarType, combine_values, to_arrow_array

logger = logging.getLogger(__name__)

__all__ = ["combine_outputs"]


def _describe(output: PerRowOutput) -> str:
    if isinstance(output, Record):
        return f"a record with columns {list(output.columns)}"
    return "a scalar"


def _check_same_tag(outputs: Sequence[PerRowOutput], tag: type) -> None:
    for i, out in enumerate(outputs):
        if not isinstance(out, tag):
            raise InconsistentOutputShapeError(
                f"output is {_describe(out)} but row 0 produced {_describe(outputs[0])}",
                row=i,
            )


def _combine_scalars(outputs: Sequence[Scalar]) -> tuple[list[Any], ScalarType | None]:
    return combine_values(out.value for out in outputs)


def _combine_records(outputs: Sequence[Record]) -> tuple[list[str], list[tuple[list[Any], ScalarType | None]]]:
    columns = list(outputs[0].columns)
    expected = set(columns)
    cols: list[list[Any]] = [[] for _ in columns]
    for i, out in enumerate(outputs):
        if len(out.columns) != len(columns) or set(out.columns) != expected:
            raise InconsistentOutputShapeError(
                f"record columns {list(out.columns)} differ from row 0 columns {columns}",
                row=i,
            )
        by_name = out.as_dict()
        for j, name in enumerate(columns):
            cols[j].append(by_name[name])
    return columns, [combine_values(col) for col in cols]


def combine_outputs(
    outputs: Sequence[PerRowOutput],
    orientation: Orientation = "column",
) -> list[Any] | dict[str, Any] | Any:
    """
    Combine tagged per-row outputs, preserving row order.

    Args:
        outputs: One PerRowOutput per input row
        orientation: Orientation of a table result; "arrow" also makes a
            vector result a pa.Array

    Returns:
        A vector (list or pa.Array) of length N for scalar outputs, or an
        N-row table for record outputs. N = 0 gives an empty vector.

    Raises:
        InconsistentOutputShapeError: If outputs mix scalars and records, or
            records disagree on their column names
    """
    if not outputs:
        logger.debug("no outputs, returning an empty vector")
        return to_arrow_array([], None) if orientation == "arrow" else []

    if isinstance(outputs[0], Scalar):
        _check_same_tag(outputs, Scalar)
        values, stype = _combine_scalars(outputs)
        logger.debug("combined %d scalars into a %s vector", len(values), stype.name if stype else "missing")
        if orientation == "arrow":
            return to_arrow_array(values, stype)
        return values

    _check_same_tag(outputs, Record)
    columns, combined = _combine_records(outputs)
    logger.debug(
        "combined %d records into a table with columns %s", len(outputs), columns
    )
    if orientation == "arrow":
        return {
            "orientation": "arrow",
            "columns": columns,
            "rows": [to_arrow_array(values, stype) for values, stype in combined],
        }
    table = {"orientation": "column", "columns": columns, "rows": [values for values, _ in combined]}
    return table_to_orientation(table, orientation)
