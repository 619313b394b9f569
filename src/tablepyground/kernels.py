"""Kernels looping over the data of columns.

When a loop reads the values of a column through the table,
every value goes through the table, then the column,
then the column encoding, and gets converted to a Python object::

    column = table.get_column("price")
    total = 0
    for idx in range(table.num_rows):
        total += column[idx]

It's much faster to extract the concrete arrays the column
stores its data into (see :meth:`tablepyground.Column.buffers`)
once, and pass them to a function that only knows about arrays.
The loop inside that function never touches the table or the
column, and can be performed by numpy on the whole array at once::

    (values,) = table.get_column("price").buffers()
    total = sum_values(values)

The functions in this module are kernels of that kind,
they only accept numpy arrays as their arguments.
:func:`with_columns` takes care of extracting the arrays
from a table and invoking a kernel with them.

>>> from tablepyground import Table
>>> table = Table.from_columns({"n_legs": [2, None, 100]})
>>> with_columns(table, sum_present, "n_legs")
102
>>> with_columns(table, count_present, "n_legs")
2
"""

from typing import Any, Callable

import numpy as np

from .table import Table

__all__ = (
    "with_columns",
    "sum_values",
    "sum_present",
    "count_present",
    "mean_present",
    "category_counts",
    "decode_categories",
)


def with_columns(table: Table, kernel: Callable[..., Any], *keys: int | str) -> Any:
    """Invoke ``kernel`` with the buffers of the requested columns.

    Columns are looked up only once and the buffers of all the
    columns are passed as positional arguments to the kernel,
    in the order of ``keys``. Nullable columns provide two
    arguments (values and validity), categorical columns
    provide two arguments (codes and dictionary).

    :param table: The table to take the columns from.
    :param kernel: The function to invoke.
    :param keys: Positions or names of the columns.
    """
    buffers: list[np.ndarray] = []
    for key in keys:
        buffers.extend(table.get_column(key).buffers())
    return kernel(*buffers)


def sum_values(values: np.ndarray) -> int | float:
    """Sum all the values of a raw column."""
    return values.sum().item()


def sum_present(values: np.ndarray, validity: np.ndarray) -> int | float:
    """Sum the values of a nullable column skipping absent values."""
    return values[validity].sum().item()


def count_present(values: np.ndarray, validity: np.ndarray) -> int:
    """How many values of a nullable column are not absent."""
    return int(np.count_nonzero(validity))


def mean_present(values: np.ndarray, validity: np.ndarray) -> float | None:
    """Average of the values of a nullable column skipping absent values.

    Returns ``None`` when all values are absent.
    """
    present = values[validity]
    if not len(present):
        return None
    return present.mean().item()


def category_counts(codes: np.ndarray, dictionary: np.ndarray) -> dict[Any, int]:
    """How many times each category appears in a categorical column.

    Absent values are not counted.

    >>> category_counts(np.array([0, 1, 0, -1]), np.array(["a", "b", "c"], dtype=object))
    {'a': 2, 'b': 1, 'c': 0}
    """
    counts = np.bincount(codes[codes >= 0], minlength=len(dictionary))
    return dict(zip(dictionary.tolist(), counts.tolist()))


def decode_categories(codes: np.ndarray, dictionary: np.ndarray) -> np.ndarray:
    """Materialize the values of a categorical column.

    Absent values become ``None`` in the returned object array.
    """
    decoded = np.empty(len(codes), dtype=object)
    present = codes >= 0
    decoded[present] = dictionary[codes[present]]
    decoded[~present] = None
    return decoded
