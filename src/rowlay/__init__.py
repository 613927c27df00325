# -------------------------------------
# rowlay - apply a function within each row
# -------------------------------------
"""
Row-wise application for dict-based tables.

This package provides:
- Row-wise application (apply): apply_rowwise, lay
- Function specifications (functions): as_function, formula
- Result combination (combine, outputs): combine_outputs, classify_output
- Table utilities (table): read_table, table_add_column, table_bind_cols, ...
- Configuration (state): set_default_strategy, set_func, load_config

Imports are lazy so `python -m rowlay` does not import submodules twice.
Use: from rowlay import lay, apply_rowwise, etc.
"""

__all__ = [
    # apply
    "apply_rowwise",
    "lay",
    # functions
    "as_function",
    "formula",
    # outputs / combine
    "Scalar",
    "Record",
    "classify_output",
    "combine_outputs",
    # materialize
    "coerce_rows",
    "zip_rows",
    # types
    "ScalarType",
    # errors
    "LayError",
    "InvalidStrategyError",
    "TypeCoercionError",
    "InconsistentOutputShapeError",
    "InvalidOutputShapeError",
    "FunctionSpecError",
    # state
    "set_default_strategy",
    "get_default_strategy",
    "set_func",
    "get_func",
    "reset_funcs",
    "load_config",
    # table utilities
    "read_table",
    "table_nrows",
    "table_ncols",
    "table_column",
    "table_select_columns",
    "table_drop_columns",
    "table_add_column",
    "table_bind_cols",
    "table_to_rows",
    "table_to_columns",
    "table_to_arrow",
    "format_table",
    "print_table",
]

# Lazy import mapping: attribute -> (module, name)
_LAZY_IMPORTS = {
    # apply
    "apply_rowwise": (".apply", "apply_rowwise"),
    "lay": (".apply", "lay"),
    # functions
    "as_function": (".functions", "as_function"),
    "formula": (".functions", "formula"),
    # outputs / combine
    "Scalar": (".outputs", "Scalar"),
    "Record": (".outputs", "Record"),
    "classify_output": (".outputs", "classify_output"),
    "combine_outputs": (".combine", "combine_outputs"),
    # materialize
    "coerce_rows": (".materialize", "coerce_rows"),
    "zip_rows": (".materialize", "zip_rows"),
    # types
    "ScalarType": (".types", "ScalarType"),
    # errors
    "LayError": (".errors", "LayError"),
    "InvalidStrategyError": (".errors", "InvalidStrategyError"),
    "TypeCoercionError": (".errors", "TypeCoercionError"),
    "InconsistentOutputShapeError": (".errors", "InconsistentOutputShapeError"),
    "InvalidOutputShapeError": (".errors", "InvalidOutputShapeError"),
    "FunctionSpecError": (".errors", "FunctionSpecError"),
    # state
    "set_default_strategy": (".state", "set_default_strategy"),
    "get_default_strategy": (".state", "get_default_strategy"),
    "set_func": (".state", "set_func"),
    "get_func": (".state", "get_func"),
    "reset_funcs": (".state", "reset_funcs"),
    "load_config": (".state", "load_config"),
    # table utilities
    "read_table": (".table", "read_table"),
    "table_nrows": (".table", "table_nrows"),
    "table_ncols": (".table", "table_ncols"),
    "table_column": (".table", "table_column"),
    "table_select_columns": (".table", "table_select_columns"),
    "table_drop_columns": (".table", "table_drop_columns"),
    "table_add_column": (".table", "table_add_column"),
    "table_bind_cols": (".table", "table_bind_cols"),
    "table_to_rows": (".table", "table_to_rows"),
    "table_to_columns": (".table", "table_to_columns"),
    "table_to_arrow": (".table", "table_to_arrow"),
    "format_table": (".table", "format_table"),
    "print_table": (".table", "print_table"),
}


def __getattr__(name: str):
    if name in _LAZY_IMPORTS:
        module_name, attr_name = _LAZY_IMPORTS[name]
        from importlib import import_module
        module = import_module(module_name, __package__)
        return getattr(module, attr_name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
