"""Tests for rowlay.types scalar lattice."""

import math

import numpy as np
import pyarrow as pa
import pytest

from rowlay.errors import TypeCoercionError
from rowlay.types import (
    ScalarType,
    coerce_scalar,
    column_type,
    combine_values,
    common_type,
    declared_type,
    native,
    scalar_type,
    to_arrow_array,
    to_vector,
)

L, I, R, T = ScalarType.LOGICAL, ScalarType.INTEGER, ScalarType.REAL, ScalarType.TEXT


class TestScalarType:
    """Classification of single values."""

    @pytest.mark.parametrize("value, expected", [
        (True, L),
        (np.bool_(False), L),
        (3, I),
        (np.int32(3), I),
        (np.uint8(3), I),
        (2.5, R),
        (np.float32(2.5), R),
        (float("nan"), R),
        ("x", T),
        (np.str_("x"), T),
        (None, None),
    ])
    def test_classify(self, value, expected):
        assert scalar_type(value) == expected

    @pytest.mark.parametrize("value", [[1], (1,), {"a": 1}, b"x", 1 + 2j, object()])
    def test_non_scalars(self, value):
        with pytest.raises(TypeCoercionError):
            scalar_type(value)

    def test_row_in_message(self):
        with pytest.raises(TypeCoercionError, match="row 4") as excinfo:
            scalar_type([1], row=4)
        assert excinfo.value.row == 4

    def test_native_unwraps_numpy(self):
        assert type(native(np.int64(3))) is int
        assert type(native(np.float64(1.5))) is float
        assert type(native(np.bool_(True))) is bool
        assert type(native(np.array(2.0))) is float
        assert native("x") == "x"


class TestCommonType:
    """Least upper bound under LOGICAL < INTEGER < REAL < TEXT."""

    def test_order(self):
        assert L < I < R < T

    def test_lub(self):
        assert common_type([L, I]) == I
        assert common_type([I, R, L]) == R
        assert common_type([L, T]) == T
        assert common_type([R, T, I]) == T

    def test_missing_ignored(self):
        assert common_type([None, I, None]) == I

    def test_all_missing(self):
        assert common_type([None, None]) is None
        assert common_type([]) is None

    def test_strict_numbers_ok(self):
        assert common_type([L, I, R], strict=True) == R

    def test_strict_text_with_numbers(self):
        with pytest.raises(TypeCoercionError, match="text with integer") as excinfo:
            common_type([T, I], strict=True, row=2)
        assert excinfo.value.row == 2

    def test_strict_text_only(self):
        assert common_type([T, None, T], strict=True) == T


class TestCoercion:
    """Upward conversions of scalars."""

    def test_logical_to_integer(self):
        assert coerce_scalar(True, I) == 1
        assert type(coerce_scalar(True, I)) is int

    def test_logical_to_real(self):
        assert coerce_scalar(False, R) == 0.0
        assert type(coerce_scalar(False, R)) is float

    def test_integer_to_real_keeps_value(self):
        big = 2**40 + 1
        assert coerce_scalar(big, R) == float(big)

    def test_to_text(self):
        assert coerce_scalar(True, T) == "True"
        assert coerce_scalar(1.5, T) == "1.5"
        assert coerce_scalar(np.int64(7), T) == "7"

    def test_missing_stays_missing(self):
        for stype in ScalarType:
            assert coerce_scalar(None, stype) is None

    def test_combine_values(self):
        values, stype = combine_values([True, 2, None])
        assert stype == I
        assert values == [1, 2, None]

    def test_combine_values_all_missing(self):
        assert combine_values([None, None]) == ([None, None], None)


class TestColumns:
    """Column-level types."""

    def test_list_column(self):
        assert column_type([1, 2.5, None]) == R
        assert column_type([True, False]) == L
        assert column_type([None]) is None

    def test_list_column_nested(self):
        with pytest.raises(TypeCoercionError, match="row 1"):
            column_type([1, [2, 3]])

    def test_numpy_declared(self):
        assert declared_type(np.array([1, 2])) == I
        assert declared_type(np.array([1.0])) == R
        assert declared_type(np.array([True])) == L
        assert declared_type(np.array(["a"])) == T
        assert declared_type(np.array([1, "a"], dtype=object)) is None

    def test_numpy_unsupported_dtype(self):
        with pytest.raises(TypeCoercionError):
            declared_type(np.array(["2024-01-01"], dtype="datetime64[D]"))

    def test_arrow_declared(self):
        assert declared_type(pa.array([1, None])) == I
        assert declared_type(pa.array([1.5])) == R
        assert declared_type(pa.array([True])) == L
        assert declared_type(pa.array(["a", None])) == T
        assert declared_type(pa.array(["a", "b"]).dictionary_encode()) == T
        assert declared_type(pa.array([None, None])) is None

    def test_arrow_nested_rejected(self):
        with pytest.raises(TypeCoercionError, match="not a scalar column"):
            declared_type(pa.array([[1, 2], [3]]))

    def test_list_declares_nothing(self):
        assert declared_type([1, 2]) is None


class TestVectors:
    """numpy and arrow vectors built from coerced values."""

    def test_logical_vector(self):
        v = to_vector([True, False], L)
        assert v.dtype == np.bool_

    def test_integer_vector(self):
        assert to_vector([1, 2], I).dtype == np.int64

    def test_integer_vector_with_missing(self):
        v = to_vector([1, None], I)
        assert v.dtype == object
        assert v.tolist() == [1, None]

    def test_integer_vector_beyond_int64(self):
        v = to_vector([2**70, 1], I)
        assert v.dtype == object
        assert v.tolist() == [2**70, 1]

    def test_real_vector_with_missing(self):
        v = to_vector([1.0, None], R)
        assert v.dtype == np.float64
        assert math.isnan(v[1])

    def test_text_vector(self):
        v = to_vector(["a", "b"], T)
        assert v.dtype == object
        assert v.tolist() == ["a", "b"]

    def test_empty_vector(self):
        v = to_vector([], None)
        assert v.size == 0
        assert v.dtype == np.bool_

    def test_arrow_array(self):
        assert to_arrow_array([1.0, None], R).type == pa.float64()
        assert to_arrow_array(["a"], T).type == pa.string()
        assert to_arrow_array([], None).type == pa.bool_()
        assert to_arrow_array([None], None).type == pa.null()
