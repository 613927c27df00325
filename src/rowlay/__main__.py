# -------------------------------------
# rowlay CLI entry point
# -------------------------------------
"""
CLI entry point for rowlay.

Usage:
    python -m rowlay data/drugs.csv --drop caseid --fn "~ any(.x)"
    python -m rowlay data/drugs.csv --drop caseid --bind \\
        --fn "~ record(taken=sum(.x), not_taken=sum(.x == 0))"
"""
import argparse
import logging
import sys

import yaml

from .apply import apply_rowwise
from .errors import LayError
from .state import STRATEGIES, load_config
from .table import (
    print_table,
    read_table,
    table_add_column,
    table_bind_cols,
    table_drop_columns,
    table_select_columns,
)


def _parse_arg(text: str) -> tuple[str, object]:
    """Split NAME=VALUE, typing VALUE as a YAML scalar."""
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name.strip(), yaml.safe_load(value)


def _main() -> int:
    p = argparse.ArgumentParser(
        prog="rowlay",
        description="Apply a function within each row of a table.",
    )
    p.add_argument("path", help="Table file (.csv, .yml/.yaml, .parquet)")
    p.add_argument("--fn", "-f", required=True, help="Function name (e.g. any, mean) or '~ ...' formula")
    p.add_argument("--strategy", "-s", choices=STRATEGIES, default=None, help="Row materialization strategy")
    p.add_argument("--select", nargs="+", metavar="COL", help="Only use these columns")
    p.add_argument("--drop", nargs="+", metavar="COL", help="Do not use these columns")
    p.add_argument("--arg", "-a", action="append", type=_parse_arg, default=[], metavar="NAME=VALUE", help="Keyword argument for the function (repeatable)")
    p.add_argument("--bind", "-b", action="store_true", help="Print the input table with the result columns appended")
    p.add_argument("--as", dest="name", default="value", help="Column name for a vector result (default: value)")
    p.add_argument("--config", metavar="YAML_PATH", help="Config file (e.g. 'strategy: zip')")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging to stderr")
    args = p.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    try:
        if args.config:
            load_config(args.config)
        table = read_table(args.path)
        data = table
        if args.select:
            data = table_select_columns(data, args.select)
        if args.drop:
            data = table_drop_columns(data, args.drop)

        result = apply_rowwise(data, args.fn, extra_args=dict(args.arg), strategy=args.strategy)

        if isinstance(result, dict):
            out = table_bind_cols(table, result) if args.bind else result
        elif args.bind:
            out = table_add_column(table, args.name, result)
        elif hasattr(result, "to_pylist"):
            out = {"orientation": "arrow", "columns": [args.name], "rows": [result]}
        else:
            out = {"orientation": "column", "columns": [args.name], "rows": [result]}
        print_table(out)
    except (LayError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(_main())
