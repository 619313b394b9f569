"""TablePyground

A minimal columnar table built for learning and teaching purposes.

TablePyground shows the performance model of columnar tables,
the same one found in dataframe libraries like ``pandas`` or ``polars``,
on an implementation small enough to be read in an afternoon.
Each component is self documented in literate programming style.

The primary components are:

* The Table, an ordered set of named columns,
  see :mod:`tablepyground.table`.
* The Kernels, functions that loop over the data of
  columns without going through the table,
  see :mod:`tablepyground.kernels`.

>>> from tablepyground import Table, kernels
>>> table = Table.from_columns({"animals": ["Flamingo", "Horse"], "n_legs": [2, 4]})
>>> table.append_row(["Centipede", 100])
>>> kernels.with_columns(table, kernels.sum_values, 1)
106
"""

from . import kernels
from .table import (
    CategoricalColumn,
    Column,
    NullableColumn,
    OutOfRange,
    RawColumn,
    SchemaMismatch,
    Table,
    TableError,
    concat_tables,
)

__all__ = (
    "kernels",
    "Table",
    "concat_tables",
    "Column",
    "RawColumn",
    "NullableColumn",
    "CategoricalColumn",
    "TableError",
    "OutOfRange",
    "SchemaMismatch",
)
