# -------------------------------------
# Table utility tests
# -------------------------------------
"""
Tests for rowlay.table (orientation, column operations, reading, formatting).
"""
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from rowlay import lay
from rowlay.table import (
    _import_pyarrow,
    format_table,
    from_arrow_table,
    read_table,
    table_add_column,
    table_bind_cols,
    table_column,
    table_columns,
    table_drop_columns,
    table_ncols,
    table_nrows,
    table_orientation,
    table_select_columns,
    table_to_arrow,
    table_to_columns,
    table_to_rows,
    table_validate,
)


class TestOrientation:
    """Orientation detection and conversion."""

    def test_default_orientation(self):
        assert table_orientation({"columns": [], "rows": []}) == "row"

    def test_bad_orientation(self):
        with pytest.raises(ValueError, match="Unsupported orientation"):
            table_orientation({"orientation": "diagonal", "columns": [], "rows": []})

    def test_nrows(self):
        assert table_nrows({"columns": ["a"], "rows": [[1], [2]]}) == 2
        assert table_nrows({"orientation": "column", "columns": ["a"], "rows": [[1, 2, 3]]}) == 3
        assert table_nrows({"orientation": "column", "columns": [], "rows": []}) == 0
        assert table_nrows({"orientation": "arrow", "columns": ["a"], "rows": [pa.array([1])]}) == 1

    def test_ncols(self):
        assert table_ncols({"columns": ["a", "b"], "rows": []}) == 2

    def test_rows_to_columns_and_back(self):
        table = {"orientation": "row", "columns": ["a", "b"], "rows": [[1, "x"], [2, "y"]]}
        cols = table_to_columns(table)
        assert cols == {"orientation": "column", "columns": ["a", "b"], "rows": [[1, 2], ["x", "y"]]}
        assert table_to_rows(cols) == table

    def test_zero_column_rows_kept(self):
        table = {"columns": [], "rows": [[], []]}
        assert table_nrows(table) == 2
        assert table_columns(table) == []

    def test_to_arrow(self):
        arrow = table_to_arrow({"columns": ["a"], "rows": [[1], [2]]})
        assert arrow["orientation"] == "arrow"
        assert arrow["rows"][0].to_pylist() == [1, 2]
        assert table_to_rows(arrow)["rows"] == [[1], [2]]

    def test_lazy_pyarrow_import(self):
        assert _import_pyarrow() is pa

    def test_from_arrow_table(self):
        table = from_arrow_table(pa.table({"a": [1, 2], "b": ["x", "y"]}))
        assert table["orientation"] == "arrow"
        assert table["columns"] == ["a", "b"]
        assert isinstance(table["rows"][0], pa.Array)


class TestValidate:
    """Structural validation."""

    def test_missing_key(self):
        with pytest.raises(ValueError, match="'rows'"):
            table_validate({"columns": ["a"]})

    def test_short_row(self):
        with pytest.raises(ValueError, match="Row 1 has 1 values"):
            table_validate({"columns": ["a", "b"], "rows": [[1, 2], [3]]})

    def test_ragged_columns(self):
        with pytest.raises(ValueError, match="Column 1"):
            table_validate({"orientation": "column", "columns": ["a", "b"], "rows": [[1, 2], [3]]})

    def test_column_count(self):
        with pytest.raises(ValueError, match="does not match"):
            table_validate({"orientation": "column", "columns": ["a", "b"], "rows": [[1]]})

    def test_duplicate_names(self):
        with pytest.raises(ValueError, match="Duplicate"):
            table_validate({"columns": ["a", "a"], "rows": []})

    def test_ragged_table_rejected_by_lay(self):
        with pytest.raises(ValueError):
            lay({"columns": ["a", "b"], "rows": [[1, 2], [3]]}, len)


class TestColumnOperations:
    """Select, drop, add and bind columns."""

    def test_table_column(self):
        table = {"columns": ["a", "b"], "rows": [[1, 2], [3, 4]]}
        assert table_column(table, "b") == [2, 4]

    def test_table_column_not_found(self):
        with pytest.raises(ValueError, match="Column 'x' not found"):
            table_column({"columns": ["a"], "rows": []}, "x")

    def test_select_columns(self):
        table = {"columns": ["a", "b", "c"], "rows": [[1, 2, 3], [4, 5, 6]]}
        result = table_select_columns(table, ["c", "a"])
        assert result["columns"] == ["c", "a"]
        assert result["rows"] == [[3, 1], [6, 4]]

    def test_select_columns_arrow(self):
        table = table_to_arrow({"columns": ["a", "b"], "rows": [[1, 2]]})
        result = table_select_columns(table, ["b"])
        assert result["orientation"] == "arrow"
        assert result["rows"][0].to_pylist() == [2]

    def test_drop_columns(self):
        table = {"orientation": "column", "columns": ["caseid", "x", "y"], "rows": [[1, 2], [True, False], [False, False]]}
        result = table_drop_columns(table, ["caseid", "nope"])
        assert result["columns"] == ["x", "y"]
        assert result["rows"] == [[True, False], [False, False]]

    def test_add_column_from_lay(self):
        table = {"columns": ["x", "y"], "rows": [[True, False], [False, False]]}
        result = table_add_column(table, "everused", lay(table, any))
        assert result["columns"] == ["x", "y", "everused"]
        assert result["rows"] == [[True, False, True], [False, False, False]]

    def test_add_column_position(self):
        table = {"orientation": "column", "columns": ["a"], "rows": [[1, 2]]}
        result = table_add_column(table, "b", [3, 4], position=0)
        assert result["columns"] == ["b", "a"]
        assert result["rows"] == [[3, 4], [1, 2]]

    def test_add_column_arrow(self):
        table = table_to_arrow({"columns": ["a"], "rows": [[1], [2]]})
        result = table_add_column(table, "b", pa.array([0.5, 1.5]))
        assert result["columns"] == ["a", "b"]
        assert result["rows"][1].to_pylist() == [0.5, 1.5]

    def test_add_column_length_mismatch(self):
        with pytest.raises(ValueError, match="expected 2"):
            table_add_column({"columns": ["a"], "rows": [[1], [2]]}, "b", [1])

    def test_add_column_exists(self):
        with pytest.raises(ValueError, match="already exists"):
            table_add_column({"columns": ["a"], "rows": [[1]]}, "a", [1])

    def test_bind_cols_with_lay_result(self):
        table = {"columns": ["x", "y"], "rows": [[1, 2], [3, 4]]}
        result = table_bind_cols(table, lay(table, lambda v: {"total": int(v.sum())}))
        assert result["orientation"] == "row"
        assert result["columns"] == ["x", "y", "total"]
        assert result["rows"] == [[1, 2, 3], [3, 4, 7]]

    def test_bind_cols_column_orientation(self):
        t1 = {"orientation": "column", "columns": ["a"], "rows": [[1, 2]]}
        t2 = {"columns": ["b"], "rows": [[3], [4]]}
        result = table_bind_cols(t1, t2)
        assert result == {"orientation": "column", "columns": ["a", "b"], "rows": [[1, 2], [3, 4]]}

    def test_bind_cols_arrow(self):
        t1 = {"columns": ["a"], "rows": [[1]]}
        t2 = table_to_arrow({"columns": ["b"], "rows": [["x"]]})
        result = table_bind_cols(t1, t2)
        assert result["orientation"] == "arrow"
        assert [c.to_pylist() for c in result["rows"]] == [[1], ["x"]]

    def test_bind_cols_row_mismatch(self):
        with pytest.raises(ValueError, match="rows; expected"):
            table_bind_cols({"columns": ["a"], "rows": [[1]]}, {"columns": ["b"], "rows": []})

    def test_bind_cols_name_clash(self):
        with pytest.raises(ValueError, match="already present"):
            table_bind_cols({"columns": ["a"], "rows": [[1]]}, {"columns": ["a"], "rows": [[2]]})

    def test_bind_cols_empty(self):
        assert table_bind_cols() == {"orientation": "row", "columns": [], "rows": []}


class TestReadTable:
    """Reading CSV, YAML and Parquet files."""

    def test_csv_typed_cells(self, tmp_path):
        path = tmp_path / "drugs.csv"
        path.write_text("caseid,cocaine,dose,name\n1,true,0.5,a\n2,FALSE,,b\n")
        table = read_table(path)
        assert table["columns"] == ["caseid", "cocaine", "dose", "name"]
        assert table["rows"] == [[1, True, 0.5, "a"], [2, False, None, "b"]]

    def test_csv_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        assert read_table(path) == {"orientation": "row", "columns": [], "rows": []}

    def test_yaml_table_dict(self, tmp_path):
        path = tmp_path / "t.yml"
        path.write_text("columns: [a, b]\nrows:\n  - [1, x]\n  - [2, y]\n")
        table = read_table(path)
        assert table["orientation"] == "row"
        assert table["rows"] == [[1, "x"], [2, "y"]]

    def test_yaml_columns_mapping(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text("a: [1, 2]\nb: [true, false]\n")
        table = read_table(path)
        assert table == {"orientation": "column", "columns": ["a", "b"], "rows": [[1, 2], [True, False]]}

    def test_yaml_records(self, tmp_path):
        path = tmp_path / "t.yml"
        path.write_text("- {a: 1, b: 2}\n- {a: 3}\n")
        table = read_table(path)
        assert table["columns"] == ["a", "b"]
        assert table["rows"] == [[1, 2], [3, None]]

    def test_yaml_ragged_rejected(self, tmp_path):
        path = tmp_path / "t.yml"
        path.write_text("a: [1, 2]\nb: [1]\n")
        with pytest.raises(ValueError):
            read_table(path)

    def test_parquet(self, tmp_path):
        path = tmp_path / "t.parquet"
        pq.write_table(pa.table({"a": [1, 2], "b": [0.5, 1.0]}), str(path))
        table = read_table(path)
        assert table["orientation"] == "arrow"
        assert lay(table, "sum").to_pylist() == [1.5, 3.0]

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "t.txt"
        path.write_text("x")
        with pytest.raises(ValueError, match="Unsupported table file type"):
            read_table(path)


class TestFormatTable:
    """Tab-separated formatting."""

    def test_format(self):
        table = {"columns": ["a", "b", "c"], "rows": [[1, 0.123456789, None], [True, 0.0, "x"]]}
        assert format_table(table) == "a\tb\tc\n1\t0.123457\tNA\nTrue\t0\tx"

    def test_format_column_oriented(self):
        table = {"orientation": "column", "columns": ["v"], "rows": [[1, 2]]}
        assert format_table(table) == "v\n1\n2"
