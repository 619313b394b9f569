"""Errors raised by the columnar table.

All errors are contract violations detected synchronously
by the operation that was invoked. They are never retried
and the table is always left untouched when they are raised.
"""


class TableError(Exception):
    """Base class for all the errors raised by tables and columns."""


class OutOfRange(TableError, LookupError):
    """A column was requested by a position or a name that doesn't exist."""


class SchemaMismatch(TableError, ValueError):
    """Data doesn't fit the shape or the kind of the target columns.

    Raised when the number of columns differ, when a column
    receives data of an element type or encoding it can't store,
    or when columns of different lengths are put in the same table.
    """
