"""Command line interface to inspect files as columnar tables.

The file is loaded with pyarrow, converted to a :class:`tablepyground.Table`
and the schema of the table is printed followed by its first rows
in a tabular format using the :mod:`tablepyground.utils.tabulate` module.
"""

import argparse
import logging

import pyarrow as pa
import pyarrow.compute as pc
import pyarrow.csv
import pyarrow.parquet

from tablepyground.table import OutOfRange, SchemaMismatch, Table
from tablepyground.utils import tabulate

logger = logging.getLogger(__name__)


def read_file(filename: str, block_size: int | None = None) -> pa.Table:
    """Load a CSV or Parquet file, the format is detected from the extension."""
    if filename.endswith(".parquet"):
        return pa.parquet.read_table(filename)
    return pa.csv.read_csv(
        filename, read_options=pa.csv.ReadOptions(block_size=block_size)
    )


def encode_categorical(data: pa.Table, names: list[str]) -> pa.Table:
    """Dictionary encode the columns named ``names``."""
    for name in names:
        idx = data.schema.get_field_index(name)
        if idx < 0:
            raise OutOfRange(f"No column named {name!r}")
        data = data.set_column(idx, name, pc.dictionary_encode(data.column(idx)))
    return data


def describe(table: Table) -> str:
    """List the columns of the table with their kind."""
    return "\n".join(f"{name}: {kind}" for name, kind in table.schema)


def main() -> None:
    """Parse the command line arguments and print the table."""
    parser = argparse.ArgumentParser(description="Inspect a CSV or Parquet file as a columnar table.")
    parser.add_argument(
        "-c",
        "--categorical",
        action="append",
        default=[],
        help="Store a column as categorical. Can be provided multiple times.",
    )
    parser.add_argument(
        "-n", "--rows", type=int, default=20, help="How many rows to print."
    )
    parser.add_argument(
        "--block-size",
        type=int,
        default=None,
        help="Size in bytes of the blocks used to read CSV files.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug information."
    )
    parser.add_argument("filename", type=str, help="The file to inspect.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        data = encode_categorical(read_file(args.filename, args.block_size), args.categorical)
        table = Table.from_arrow(data)
    except (OutOfRange, SchemaMismatch) as e:
        print(f"Invalid table, {e}")
        return

    logger.debug("Loaded %r from %s", table, args.filename)
    print(describe(table))
    print()
    print(tabulate.tabulate(table, max_rows=args.rows))


if __name__ == "__main__":
    main()
