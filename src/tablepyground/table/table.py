"""The columnar Table.

A table is an ordered sequence of named columns,
all with the same number of rows.

Columns can be accessed by position or by name.
Accessing a column by position is just an index into
the list of columns, while accessing it by name requires
looking up the position of the column first::

    table.get_column(0)       # list lookup
    table.get_column("name")  # dict lookup, then list lookup

So positional access should be preferred in hot paths.

Tables are better built all at once with :meth:`Table.from_columns`,
preparing the data for each column up front (delayed construction),
than by appending one row at the time. When rows have to be added
to an existing table, :meth:`Table.append_rows` and :meth:`Table.append_row`
extend the table in place and only pay for the added rows,
while :func:`concat_tables` always copies both tables
into a new one.

>>> table = Table.from_columns({"city": ["Rome", "Milan"], "shops": [10, 7]})
>>> table.append_row(["Turin", 5])
>>> table.append_rows(Table.from_columns({"city": ["Naples"], "shops": [3]}))
>>> table.num_rows
4
>>> table.get_column("shops").to_pylist()
[10, 7, 5, 3]
>>> print(table)
city   | shops
------ | -----
Rome   | 10
Milan  | 7
Turin  | 5
Naples | 3
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Self

import pyarrow as pa

from ..utils.tabulate import tabulate
from .column import Column, ColumnKind, as_column
from .errors import OutOfRange, SchemaMismatch

logger = logging.getLogger(__name__)

__all__ = ("Table", "concat_tables")


class Table:
    """Data organized in named columns of equal length.

    The table owns its columns, columns passed to the table
    are not copied and shouldn't be modified or shared with
    other tables afterwards.
    """

    def __init__(
        self, columns: Mapping[str, Column] | Iterable[tuple[str, Column]] | None = None
    ) -> None:
        """
        :param columns: The columns of the table, as a ``{name: Column}`` mapping
                        or a sequence of ``(name, Column)`` pairs.
                        When omitted the table is empty and has no columns.
        """
        if columns is None:
            columns = ()
        elif isinstance(columns, Mapping):
            columns = columns.items()

        self._names: list[str] = []
        self._columns: list[Column] = []
        for name, column in columns:
            if not isinstance(column, Column):
                raise TypeError(
                    f"Column {name!r} must be a Column, got {type(column).__name__}"
                )
            self._names.append(name)
            self._columns.append(column)

        # Built once, column names never change.
        self._index = {name: idx for idx, name in enumerate(self._names)}
        if len(self._index) != len(self._names):
            raise SchemaMismatch(f"Duplicated column names in {self._names}")

        lengths = {len(column) for column in self._columns}
        if len(lengths) > 1:
            raise SchemaMismatch(
                "All columns must have the same length, got "
                + ", ".join(f"{n}={len(c)}" for n, c in zip(self._names, self._columns))
            )
        self._num_rows = lengths.pop() if lengths else 0

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, Any] | Iterable[tuple[str, Any]],
        types: Mapping[str, pa.DataType] | None = None,
    ) -> Self:
        """Build a table from data that is already available.

        This is the preferred way to create tables,
        each column is converted in a single pass
        and the table is assembled at once.

        The data of each column can be a :class:`Column`,
        a numpy array, a pyarrow array or a Python sequence.
        See :func:`tablepyground.table.column.as_column` for the
        rules used to pick the encoding of the column.

        :param columns: The data of the columns, as a ``{name: data}`` mapping
                        or a sequence of ``(name, data)`` pairs.
        :param types: The element type of some columns as ``{name: DataType}``.
                      Required for columns that are empty or only hold
                      absent values, as their type can't be detected.

        >>> Table.from_columns([("a", [1, 2]), ("b", ["x", None])]).schema
        [('a', ColumnKind(encoding='raw', type=DataType(int64), nullable=False)), ('b', ColumnKind(encoding='nullable', type=DataType(string), nullable=True))]
        """
        if isinstance(columns, Mapping):
            columns = columns.items()
        types = types or {}
        table = cls(
            [(name, as_column(values, type=types.get(name))) for name, values in columns]
        )
        logger.debug(
            "Built table with %d columns and %d rows", table.num_columns, table.num_rows
        )
        return table

    @classmethod
    def from_arrow(cls, table: pa.Table | pa.RecordBatch) -> Self:
        """Build a table from a :class:`pyarrow.Table` or :class:`pyarrow.RecordBatch`.

        Dictionary encoded arrow columns become categorical columns,
        columns containing nulls become nullable columns.
        """
        return cls.from_columns(zip(table.column_names, table.columns))

    def __str__(self) -> str:
        return tabulate(self)

    def __repr__(self) -> str:
        return f"Table(columns={self._names}, rows={self._num_rows})"

    def __len__(self) -> int:
        return self._num_rows

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __getitem__(self, key: int | str) -> Column:
        return self.get_column(key)

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_columns(self) -> int:
        return len(self._columns)

    @property
    def column_names(self) -> list[str]:
        return list(self._names)

    @property
    def columns(self) -> list[Column]:
        return list(self._columns)

    @property
    def schema(self) -> list[tuple[str, ColumnKind]]:
        """The name and kind of each column."""
        return [(name, column.kind) for name, column in zip(self._names, self._columns)]

    def column(self, index: int) -> Column:
        """The column at position ``index``.

        Positions start at 0, negative positions
        count from the last column.
        """
        try:
            return self._columns[index]
        except (IndexError, TypeError):
            raise OutOfRange(
                f"Column {index} out of range for a table of {len(self._columns)} columns"
            ) from None

    def column_index(self, name: str) -> int:
        """The position of the column named ``name``."""
        try:
            return self._index[name]
        except KeyError:
            raise OutOfRange(f"No column named {name!r}") from None

    def get_column(self, key: int | str) -> Column:
        """The column at a position or with the given name.

        >>> table = Table.from_columns({"a": [1], "b": [2]})
        >>> table.get_column(1) is table.get_column("b")
        True
        """
        if isinstance(key, str):
            return self.column(self.column_index(key))
        return self.column(key)

    def row(self, index: int) -> dict[str, Any]:
        """The values of a row as a ``{name: value}`` dictionary."""
        if not -self._num_rows <= index < self._num_rows:
            raise IndexError(f"Row {index} out of range for a table of {self._num_rows} rows")
        return {name: column[index] for name, column in zip(self._names, self._columns)}

    def to_pydict(self) -> dict[str, list[Any]]:
        return {name: column.to_pylist() for name, column in zip(self._names, self._columns)}

    def to_arrow(self) -> pa.Table:
        """Convert the table to a :class:`pyarrow.Table`."""
        return pa.table(
            [column.to_arrow() for column in self._columns], names=self._names
        )

    def equals(self, other: "Table") -> bool:
        """If both tables have the same columns with the same data."""
        return (
            isinstance(other, Table)
            and other._names == self._names
            and all(a.equals(b) for a, b in zip(self._columns, other._columns))
        )

    def copy(self) -> Self:
        """Copy the table and all its columns."""
        return self.__class__(
            [(name, column.copy()) for name, column in zip(self._names, self._columns)]
        )

    def append_rows(self, other: "Table") -> None:
        """Append all the rows of ``other`` at the end of this table.

        The table is extended in place, columns are matched by position
        and each column of ``other`` must be compatible with the column
        of this table at the same position.

        The incoming data is validated for all columns before
        any column is modified, so on failure the table is unchanged.
        """
        if not isinstance(other, Table):
            raise TypeError(f"Can only append rows of a Table, got {type(other).__name__}")
        if other.num_columns != self.num_columns:
            raise SchemaMismatch(
                f"Can't append {other.num_columns} columns to a table of {self.num_columns} columns"
            )

        added_rows = other.num_rows
        staged = []
        for name, target, source in zip(self._names, self._columns, other._columns):
            if not target.accepts(source):
                raise SchemaMismatch(
                    f"Can't append {source.kind} to column {name!r} of kind {target.kind}"
                )
            staged.append(target._stage_rows(source))

        for target, data in zip(self._columns, staged):
            target._commit_rows(data)
        self._num_rows += added_rows

    def append_row(self, values: Iterable[Any] | Mapping[str, Any]) -> None:
        """Append a single row at the end of the table.

        :param values: The values of the row, one for each column
                       in the order of the columns or as a mapping
                       of ``{column_name: value}``.
        """
        if isinstance(values, Mapping):
            unexpected = set(values) - set(self._index)
            if unexpected or len(values) != len(self._names):
                raise SchemaMismatch(
                    f"Row must provide exactly the columns {self._names}, got {list(values)}"
                )
            values = [values[name] for name in self._names]
        elif isinstance(values, (str, bytes)):
            raise TypeError("A row must be a sequence of values, not a string")
        else:
            values = list(values)

        if len(values) != len(self._columns):
            raise SchemaMismatch(
                f"Row has {len(values)} values, the table has {len(self._columns)} columns"
            )
        if not self._columns:
            raise SchemaMismatch("Can't append a row to a table without columns")

        staged = [
            column._stage_value(value) for column, value in zip(self._columns, values)
        ]
        for column, value in zip(self._columns, staged):
            column._commit_value(value)
        self._num_rows += 1


def concat_tables(table_a: Table, table_b: Table) -> Table:
    """A new table with the rows of ``table_a`` followed by the rows of ``table_b``.

    Both tables are left unmodified, all their data is copied
    into the new table. Prefer :meth:`Table.append_rows`
    when the first table can be modified in place.

    Columns are matched by position. A raw column concatenated with
    a nullable column of the same type produces a nullable column,
    and categorical columns produce a nullable column when either
    of them is nullable.

    >>> a = Table.from_columns({"n": [1, 2]})
    >>> b = Table.from_columns({"n": [3]})
    >>> concat_tables(a, b).get_column(0).to_pylist(), a.num_rows
    ([1, 2, 3], 2)
    """
    if table_a.num_columns != table_b.num_columns:
        raise SchemaMismatch(
            f"Can't concatenate a table of {table_b.num_columns} columns "
            f"to a table of {table_a.num_columns} columns"
        )
    for name, column_a, column_b in zip(
        table_a.column_names, table_a.columns, table_b.columns
    ):
        if not column_a.can_concat(column_b):
            raise SchemaMismatch(
                f"Can't concatenate {column_b.kind} to column {name!r} of kind {column_a.kind}"
            )

    logger.debug(
        "Copying %d + %d rows to concatenate tables",
        table_a.num_rows,
        table_b.num_rows,
    )
    return Table(
        [
            (name, column_a.concat(column_b))
            for name, column_a, column_b in zip(
                table_a.column_names, table_a.columns, table_b.columns
            )
        ]
    )
