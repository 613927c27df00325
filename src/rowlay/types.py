# -------------------------------------
# rowlay scalar types
# -------------------------------------
"""
Scalar type lattice used for row materialization and result combination.

The four scalar types form an explicit total order:

    LOGICAL < INTEGER < REAL < TEXT

The common type of a set of values is the greatest type among them. Missing
values (None) carry no type and are compatible with every type. Promotion
never loses information in the numeric range: logicals become 0/1, integers
become floats, and anything becomes text through str().

Strict combination (used by the zip strategy) refuses to pool text with
non-text values instead of converting numbers to strings.
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, Iterable

import numpy as np

from .errors import TypeCoercionError
from .table import _import_pyarrow

__all__ = [
    "ScalarType",
    "native",
    "scalar_type",
    "common_type",
    "coerce_scalar",
    "combine_values",
    "declared_type",
    "column_type",
    "to_vector",
    "to_arrow_array",
]


class ScalarType(IntEnum):
    LOGICAL = 0
    INTEGER = 1
    REAL = 2
    TEXT = 3


_NUMPY_KINDS = {
    "b": ScalarType.LOGICAL,
    "i": ScalarType.INTEGER,
    "u": ScalarType.INTEGER,
    "f": ScalarType.REAL,
    "U": ScalarType.TEXT,
    "S": ScalarType.TEXT,
}

_NUMPY_DTYPES = {
    ScalarType.LOGICAL: np.bool_,
    ScalarType.INTEGER: np.int64,
    ScalarType.REAL: np.float64,
    ScalarType.TEXT: object,
}


# -------------------------------------
# Scalars
# -------------------------------------

def native(value: Any) -> Any:
    """Unwrap numpy scalars, 0-d arrays and pyarrow scalars into plain Python values."""
    if isinstance(value, np.ndarray) and value.ndim == 0:
        return value.item()
    if isinstance(value, np.generic):
        return value.item()
    if hasattr(value, "as_py") and type(value).__module__.startswith("pyarrow"):
        return value.as_py()
    return value


def scalar_type(value: Any, row: int | None = None) -> ScalarType | None:
    """
    Classify a single value.

    Args:
        value: Value to classify
        row: Row index reported if the value is not a scalar

    Returns:
        The ScalarType of value, or None for a missing value

    Raises:
        TypeCoercionError: If value is not a logical, integer, real or text scalar
    """
    if value is None:
        return None
    # bool is a subclass of int, check it first
    if isinstance(value, (bool, np.bool_)):
        return ScalarType.LOGICAL
    if isinstance(value, (int, np.integer)):
        return ScalarType.INTEGER
    if isinstance(value, (float, np.floating)):
        return ScalarType.REAL
    if isinstance(value, (str, np.str_)):
        return ScalarType.TEXT
    raise TypeCoercionError(
        f"{type(value).__name__} value {value!r} is not a logical, integer, real or text scalar",
        row=row,
    )


def common_type(
    types: Iterable[ScalarType | None],
    strict: bool = False,
    row: int | None = None,
) -> ScalarType | None:
    """
    Least upper bound of a set of scalar types.

    Args:
        types: Scalar types (None entries are missing values and are ignored)
        strict: If True, text does not absorb logical/integer/real
        row: Row index reported on failure

    Returns:
        The common type, or None if every entry was missing

    Raises:
        TypeCoercionError: In strict mode, when text meets a non-text type
    """
    seen = {t for t in types if t is not None}
    if not seen:
        return None
    if strict and ScalarType.TEXT in seen and len(seen) > 1:
        others = sorted(t.name.lower() for t in seen if t is not ScalarType.TEXT)
        raise TypeCoercionError(
            f"cannot combine text with {', '.join(others)} values",
            row=row,
        )
    return max(seen)


def coerce_scalar(value: Any, stype: ScalarType) -> Any:
    """Convert a scalar to stype. Only upward conversions are expected."""
    value = native(value)
    if value is None:
        return None
    if stype is ScalarType.TEXT:
        return str(value)
    if stype is ScalarType.REAL:
        return float(value)
    if stype is ScalarType.INTEGER:
        return int(value)
    return bool(value)


def combine_values(
    values: Iterable[Any],
    strict: bool = False,
    row: int | None = None,
) -> tuple[list[Any], ScalarType | None]:
    """
    Concatenate scalars into one type-stable list.

    Args:
        values: Scalars to combine
        strict: Refuse to pool text with non-text values
        row: Row index reported on failure

    Returns:
        (coerced values, common type); the type is None if all values are missing
    """
    values = [native(v) for v in values]
    stype = common_type((scalar_type(v, row=row) for v in values), strict=strict, row=row)
    if stype is None:
        return values, None
    return [coerce_scalar(v, stype) for v in values], stype


# -------------------------------------
# Columns
# -------------------------------------

def _arrow_type(data_type: Any) -> ScalarType | None:
    """Map a pyarrow DataType onto the lattice (None for the null type)."""
    _pa = _import_pyarrow()
    t = _pa.types
    if t.is_dictionary(data_type):
        return _arrow_type(data_type.value_type)
    if t.is_null(data_type):
        return None
    if t.is_boolean(data_type):
        return ScalarType.LOGICAL
    if t.is_integer(data_type):
        return ScalarType.INTEGER
    if t.is_floating(data_type) or t.is_decimal(data_type):
        return ScalarType.REAL
    if t.is_string(data_type) or t.is_large_string(data_type):
        return ScalarType.TEXT
    raise TypeCoercionError(f"arrow column of type {data_type} is not a scalar column")


def declared_type(column: Any) -> ScalarType | None:
    """
    Type a column declares through its storage, without looking at values.

    Arrow arrays declare their DataType, numpy arrays their dtype (except
    object dtype). Python lists declare nothing.

    Returns:
        The declared ScalarType, or None if the column declares no type
    """
    if isinstance(column, np.ndarray):
        if column.dtype.kind == "O":
            return None
        try:
            return _NUMPY_KINDS[column.dtype.kind]
        except KeyError:
            raise TypeCoercionError(f"numpy column of dtype {column.dtype} is not a scalar column")
    data_type = getattr(column, "type", None)
    if data_type is not None and type(column).__module__.startswith("pyarrow"):
        return _arrow_type(data_type)
    return None


def column_type(column: Any, values: list[Any] | None = None) -> ScalarType | None:
    """
    Scalar type of a whole column.

    Uses the declared type when the column carries one, otherwise the common
    type of its values.

    Args:
        column: Python list, numpy array or pyarrow array
        values: Python values of the column, if already extracted

    Raises:
        TypeCoercionError: If the column holds non-scalar values
    """
    stype = declared_type(column)
    if stype is not None:
        return stype
    if values is None:
        values = column.to_pylist() if hasattr(column, "to_pylist") else list(column)
    return common_type(scalar_type(v, row=i) for i, v in enumerate(values))


# -------------------------------------
# Vectors
# -------------------------------------

def to_vector(values: list[Any], stype: ScalarType | None) -> np.ndarray:
    """
    Build a 1-D numpy vector from values already coerced to stype.

    Missing values become nan in real vectors. Logical and integer vectors
    holding missing values fall back to object dtype so None survives, and
    so do integers outside the int64 range.
    """
    if stype is None:
        stype = ScalarType.LOGICAL
    has_missing = any(v is None for v in values)
    if stype is ScalarType.REAL:
        return np.array([np.nan if v is None else v for v in values], dtype=np.float64)
    if not has_missing and stype is not ScalarType.TEXT:
        try:
            return np.array(values, dtype=_NUMPY_DTYPES[stype])
        except OverflowError:
            pass
    out = np.empty(len(values), dtype=object)
    out[:] = values
    return out


_ARROW_TYPES = {
    ScalarType.LOGICAL: "bool_",
    ScalarType.INTEGER: "int64",
    ScalarType.REAL: "float64",
    ScalarType.TEXT: "string",
}


def to_arrow_array(values: list[Any], stype: ScalarType | None):
    """Build a pyarrow Array from values already coerced to stype."""
    _pa = _import_pyarrow()
    if stype is None:
        return _pa.array(values, type=_pa.null()) if values else _pa.array([], type=_pa.bool_())
    return _pa.array(values, type=getattr(_pa, _ARROW_TYPES[stype])())
