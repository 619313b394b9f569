"""The columnar Table.

A table is made of named columns, each column
storing homogeneous values of a single element type.

The table supports:

* Access to columns by position (fast) or by name.
* Building a table at once from already prepared data
  through :meth:`Table.from_columns`.
* Appending rows in place through :meth:`Table.append_rows`
  and :meth:`Table.append_row`, or copying two tables into
  a new one through :func:`concat_tables`.
* Raw, nullable and categorical columns,
  see :mod:`tablepyground.table.column`.

Failures are reported through :class:`OutOfRange` when
a column doesn't exist and :class:`SchemaMismatch` when
data doesn't fit the table, in which case the table
is left unmodified.
"""

from .column import (
    CategoricalColumn,
    Column,
    ColumnKind,
    NullableColumn,
    RawColumn,
    as_column,
)
from .errors import OutOfRange, SchemaMismatch, TableError
from .table import Table, concat_tables

__all__ = (
    "Table",
    "concat_tables",
    "Column",
    "ColumnKind",
    "RawColumn",
    "NullableColumn",
    "CategoricalColumn",
    "as_column",
    "TableError",
    "OutOfRange",
    "SchemaMismatch",
)
