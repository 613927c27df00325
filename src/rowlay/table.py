# -------------------------------------
# Table utilities - dict-based tables
# -------------------------------------
"""
Dict-based tables consumed and produced by rowlay.

Tables are dicts with 'columns', 'rows', and 'orientation' keys:
    Row-oriented: {"orientation": "row", "columns": ["a", "b"], "rows": [[a0, b0], [a1, b1], ...]}
    Column-oriented: {"orientation": "column", "columns": ["a", "b"], "rows": [[a0, a1, ...], [b0, b1, ...]]}
    Arrow-oriented: {"orientation": "arrow", "columns": ["a", "b"], "rows": [pa.Array, pa.Array]}

A table without an 'orientation' key is row-oriented.

This module provides:
- Orientation handling: table_orientation, table_to_rows, table_to_columns, table_to_arrow
- Shape: table_nrows, table_ncols, table_validate
- Column operations: table_column, table_columns, table_select_columns,
  table_drop_columns, table_add_column, table_bind_cols
- Input/output: from_arrow_table, read_table, format_table, print_table
"""
from __future__ import annotations
from pathlib import Path
from typing import Any, Literal, TYPE_CHECKING
import csv

import yaml

# PyArrow is optional - only required for arrow-oriented tables
pa = None

def _import_pyarrow():
    """Import pyarrow lazily, raising a clear error if not installed."""
    global pa
    if pa is None:
        try:
            import pyarrow as _pa
        except ImportError:
            raise ImportError(
                "PyArrow is required for arrow-oriented tables. "
                "Install with: pip install rowlay[arrow]"
            )
        pa = _pa
    return pa

if TYPE_CHECKING:
    import pyarrow as pa


Orientation = Literal["row", "column", "arrow"]


# -------------------------------------
# Orientation helpers
# -------------------------------------

def _is_column_oriented(table: dict[str, Any]) -> bool:
    return table.get("orientation") == "column"


def _is_arrow(table: dict[str, Any]) -> bool:
    return table.get("orientation") == "arrow"


def _rows_to_cols(rows: list[list], n_cols: int) -> list[list]:
    """Transpose row lists into column lists in one pass."""
    cols = [[] for _ in range(n_cols)]
    for row in rows:
        for i, val in enumerate(row):
            cols[i].append(val)
    return cols


def _cols_to_rows(cols: list[list], n_rows: int) -> list[list]:
    """Transpose column lists into row lists.

    n_rows is explicit so a table with zero columns keeps its row count.
    """
    return [[col[i] for col in cols] for i in range(n_rows)]


def table_orientation(table: dict[str, Any]) -> Orientation:
    """Orientation of a table ("row" when the key is missing).

    Raises:
        ValueError: If the orientation is not row, column or arrow
    """
    orientation = table.get("orientation", "row")
    if orientation not in ("row", "column", "arrow"):
        raise ValueError(f"Unsupported orientation: {orientation}")
    return orientation


def table_nrows(table: dict[str, Any]) -> int:
    """Number of data rows, for any orientation."""
    if table_orientation(table) == "row":
        return len(table["rows"])
    if not table["rows"]:
        return 0
    return len(table["rows"][0])


def table_ncols(table: dict[str, Any]) -> int:
    return len(table["columns"])


def table_validate(table: dict[str, Any]) -> None:
    """
    Validate table structure.

    Checks:
    - Required keys: columns, rows
    - Orientation is one of row, column, arrow
    - Column names are unique
    - Row-oriented: every row has one value per column
    - Column/arrow: one data column per name, all of equal length

    Raises:
        ValueError: If the table structure is invalid
    """
    for key in ("columns", "rows"):
        if key not in table:
            raise ValueError(f"Table missing required key: '{key}'")

    orientation = table_orientation(table)
    columns = table["columns"]
    rows = table["rows"]

    if len(set(columns)) != len(columns):
        dupes = sorted({c for c in columns if columns.count(c) > 1})
        raise ValueError(f"Duplicate column names: {dupes}")

    if orientation == "row":
        n_cols = len(columns)
        for i, row in enumerate(rows):
            if len(row) != n_cols:
                raise ValueError(f"Row {i} has {len(row)} values, expected {n_cols} columns")
        return

    if len(rows) != len(columns):
        raise ValueError(
            f"Number of data columns ({len(rows)}) does not match "
            f"column names ({len(columns)})"
        )
    if rows:
        first_len = len(rows[0])
        for i, col in enumerate(rows[1:], start=1):
            if len(col) != first_len:
                raise ValueError(
                    f"Column {i} ({columns[i]}) has {len(col)} values, expected {first_len}"
                )


def table_to_columns(table: dict[str, Any]) -> dict[str, Any]:
    """Convert any table to column-oriented Python lists."""
    if _is_column_oriented(table):
        return table
    if _is_arrow(table):
        return {
            "orientation": "column",
            "columns": table["columns"][:],
            "rows": [col.to_pylist() for col in table["rows"]],
        }
    cols = _rows_to_cols(table["rows"], len(table["columns"]))
    return {"orientation": "column", "columns": table["columns"][:], "rows": cols}


def table_to_rows(table: dict[str, Any]) -> dict[str, Any]:
    """Convert any table to row-oriented Python lists."""
    orientation = table_orientation(table)
    if orientation == "row":
        return table
    n_rows = table_nrows(table)
    if orientation == "arrow":
        cols = [col.to_pylist() for col in table["rows"]]
    else:
        cols = table["rows"]
    return {"orientation": "row", "columns": table["columns"][:], "rows": _cols_to_rows(cols, n_rows)}


def table_to_arrow(table: dict[str, Any]) -> dict[str, Any]:
    """Convert any table to arrow-oriented (one pa.Array per column)."""
    if _is_arrow(table):
        return table
    _pa = _import_pyarrow()
    cols = table_to_columns(table)["rows"]
    return {
        "orientation": "arrow",
        "columns": table["columns"][:],
        "rows": [col if isinstance(col, (_pa.Array, _pa.ChunkedArray)) else _pa.array(col) for col in cols],
    }


def table_to_orientation(table: dict[str, Any], orientation: Orientation) -> dict[str, Any]:
    """Convert a table to the given orientation."""
    if orientation == "row":
        return table_to_rows(table)
    if orientation == "column":
        return table_to_columns(table)
    if orientation == "arrow":
        return table_to_arrow(table)
    raise ValueError(f"Unsupported orientation: {orientation}")


def from_arrow_table(arrow_table: "pa.Table") -> dict[str, Any]:
    """Wrap a pa.Table (or RecordBatch) as an arrow-oriented dict table."""
    columns = list(arrow_table.column_names)
    cols = []
    for name in columns:
        col = arrow_table.column(name)
        if hasattr(col, "combine_chunks"):
            col = col.combine_chunks()
        cols.append(col)
    return {"orientation": "arrow", "columns": columns, "rows": cols}


# -------------------------------------
# Column operations
# -------------------------------------

def _column_index(table: dict[str, Any], colname: str) -> int:
    try:
        return table["columns"].index(colname)
    except ValueError:
        raise ValueError(f"Column '{colname}' not found in table columns: {table['columns']}")


def table_column(table: dict[str, Any], colname: str) -> list[Any] | pa.Array:
    """Extract a single column.

    Returns:
        For arrow tables: the pa.Array itself
        For row/column tables: a Python list copy

    Raises:
        ValueError: If column name not found
    """
    idx = _column_index(table, colname)
    if _is_arrow(table):
        return table["rows"][idx]
    if _is_column_oriented(table):
        return table["rows"][idx][:]
    return [row[idx] for row in table["rows"]]


def table_columns(table: dict[str, Any]) -> list[list[Any] | pa.Array]:
    """All data columns in column order, keeping arrow arrays as they are."""
    if _is_arrow(table) or _is_column_oriented(table):
        return list(table["rows"])
    return _rows_to_cols(table["rows"], len(table["columns"]))


def table_select_columns(table: dict[str, Any], columns: list[str]) -> dict[str, Any]:
    """
    Select and reorder columns.

    Returns:
        New table with the given columns in the given order (same orientation)

    Raises:
        ValueError: If a column name is not found
    """
    indices = [_column_index(table, col) for col in columns]
    if _is_arrow(table):
        return {"orientation": "arrow", "columns": list(columns), "rows": [table["rows"][i] for i in indices]}
    if _is_column_oriented(table):
        return {"orientation": "column", "columns": list(columns), "rows": [table["rows"][i][:] for i in indices]}
    rows = [[row[i] for i in indices] for row in table["rows"]]
    return {"orientation": "row", "columns": list(columns), "rows": rows}


def table_drop_columns(table: dict[str, Any], columns: list[str]) -> dict[str, Any]:
    """Remove columns by name; unknown names are ignored."""
    drop = set(columns)
    keep = [c for c in table["columns"] if c not in drop]
    return table_select_columns(table, keep)


def table_add_column(
    table: dict[str, Any],
    colname: str,
    values: list[Any] | pa.Array,
    position: int | None = None,
) -> dict[str, Any]:
    """
    Attach a vector as a new column, e.g. the vector returned by lay().

    Args:
        table: Table to extend
        colname: Name of the new column
        values: One value per row (list, numpy array or pa.Array)
        position: Index to insert the column (default: append at end)

    Returns:
        New table with the added column (same orientation)

    Raises:
        ValueError: If the column exists or the length does not match
    """
    if colname in table["columns"]:
        raise ValueError(f"Column '{colname}' already exists in table columns: {table['columns']}")
    n_rows = table_nrows(table)
    if len(values) != n_rows:
        raise ValueError(f"Column '{colname}' has {len(values)} values, expected {n_rows}")

    columns = table["columns"][:]
    pos = len(columns) if position is None else position
    columns.insert(pos, colname)

    if _is_arrow(table):
        _pa = _import_pyarrow()
        new_col = values if isinstance(values, (_pa.Array, _pa.ChunkedArray)) else _pa.array(list(values))
        new_cols = list(table["rows"])
        new_cols.insert(pos, new_col)
        return {"orientation": "arrow", "columns": columns, "rows": new_cols}

    values = values.to_pylist() if hasattr(values, "to_pylist") else list(values)
    if _is_column_oriented(table):
        new_cols = [col[:] for col in table["rows"]]
        new_cols.insert(pos, values)
        return {"orientation": "column", "columns": columns, "rows": new_cols}
    rows = [row[:pos] + [v] + row[pos:] for row, v in zip(table["rows"], values)]
    return {"orientation": "row", "columns": columns, "rows": rows}


def table_bind_cols(*tables: dict[str, Any]) -> dict[str, Any]:
    """
    Place row-aligned tables side by side, e.g. a table and the table lay() built from it.

    Returns:
        If ANY table is arrow: arrow-oriented table
        Otherwise: same orientation as the first table

    Raises:
        ValueError: If row counts differ or column names collide
    """
    if not tables:
        return {"orientation": "row", "columns": [], "rows": []}

    n_rows = table_nrows(tables[0])
    columns: list[str] = []
    for i, t in enumerate(tables, start=1):
        t_rows = table_nrows(t)
        if t_rows != n_rows:
            raise ValueError(f"Table {i} has {t_rows} rows; expected {n_rows}")
        for c in t["columns"]:
            if c in columns:
                raise ValueError(f"Table {i} column '{c}' already present in bound columns")
            columns.append(c)

    if any(_is_arrow(t) for t in tables):
        out_cols = []
        for t in tables:
            out_cols.extend(table_to_arrow(t)["rows"])
        return {"orientation": "arrow", "columns": columns, "rows": out_cols}

    out_cols = []
    for t in tables:
        out_cols.extend(col[:] for col in table_to_columns(t)["rows"])
    if table_orientation(tables[0]) == "row":
        return {"orientation": "row", "columns": columns, "rows": _cols_to_rows(out_cols, n_rows)}
    return {"orientation": "column", "columns": columns, "rows": out_cols}


# -------------------------------------
# Reading tables
# -------------------------------------

def _parse_cell(text: str) -> Any:
    """Type a CSV cell: empty -> None, true/false -> bool, then int, float, str."""
    s = text.strip()
    if s == "" or s.upper() in ("NA", "NULL"):
        return None
    if s.lower() in ("true", "false"):
        return s.lower() == "true"
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        return text


def _read_csv(path: Path) -> dict[str, Any]:
    with open(path, "r", newline="") as f:
        reader = csv.reader(f)
        try:
            columns = next(reader)
        except StopIteration:
            return {"orientation": "row", "columns": [], "rows": []}
        rows = [[_parse_cell(cell) for cell in row] for row in reader if row]
    return {"orientation": "row", "columns": columns, "rows": rows}


def _read_yaml(path: Path) -> dict[str, Any]:
    """
    Read a table from YAML.

    Accepted layouts:
        {columns: [...], rows: [...], orientation: ...}  a table dict
        {a: [...], b: [...]}                             column name -> values
        [{a: 1, b: 2}, ...]                              list of records
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if isinstance(data, dict) and "columns" in data and "rows" in data:
        table = {"orientation": data.get("orientation", "row"), "columns": list(data["columns"]), "rows": data["rows"]}
        if table["orientation"] == "arrow":
            table["orientation"] = "column"
            return table_to_arrow(table)
        return table
    if isinstance(data, dict):
        return {"orientation": "column", "columns": list(data), "rows": [list(v) for v in data.values()]}
    if isinstance(data, list):
        columns: list[str] = []
        for rec in data:
            for k in rec:
                if k not in columns:
                    columns.append(k)
        rows = [[rec.get(c) for c in columns] for rec in data]
        return {"orientation": "row", "columns": columns, "rows": rows}
    raise ValueError(f"{path}: YAML content is not a table")


def read_table(path: str | Path) -> dict[str, Any]:
    """
    Read a table from a .csv, .yml/.yaml or .parquet file.

    CSV and YAML give row/column-oriented tables, Parquet gives an
    arrow-oriented table.

    Raises:
        ValueError: If the file type is not supported or the table is malformed
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        table = _read_csv(path)
    elif suffix in (".yml", ".yaml"):
        table = _read_yaml(path)
    elif suffix == ".parquet":
        _import_pyarrow()
        import pyarrow.parquet as pq
        table = from_arrow_table(pq.read_table(str(path)))
    else:
        raise ValueError(f"Unsupported table file type: {path.suffix or path.name}")
    table_validate(table)
    return table


# -------------------------------------
# Formatting
# -------------------------------------

def _format_value(v: Any) -> str:
    """Format a value for table output.

    Floats use 6 significant figures, missing values print as NA.
    """
    if v is None:
        return "NA"
    if isinstance(v, float):
        if v == 0:
            return "0"
        return f"{v:.6g}"
    return str(v)


MAX_FORMAT_ROWS = 100_000


def format_table(table: dict[str, Any]) -> str:
    """Format a table as a tab-separated string with header.

    Raises:
        ValueError: If table has more than MAX_FORMAT_ROWS rows
    """
    tbl = table_to_rows(table)
    n_rows = len(tbl["rows"])
    if n_rows > MAX_FORMAT_ROWS:
        raise ValueError(f"Table has {n_rows:,} rows, exceeds limit of {MAX_FORMAT_ROWS:,}")

    lines = ["\t".join(str(c) for c in tbl["columns"])]
    for row in tbl["rows"]:
        lines.append("\t".join(_format_value(v) for v in row))
    return "\n".join(lines)


def print_table(table: dict[str, Any]) -> None:
    """Print a table with header and rows to stdout."""
    print(format_table(table))
