"""Columns of a table.

A column is an homogeneous sequence of values of the same element
type, where the element type is a :class:`pyarrow.DataType`
(integers, floats, booleans and strings are supported).

The values of a column can be stored with three encodings:

* :class:`RawColumn` stores every value as is in a numpy array.
  Every slot must contain a value.
* :class:`NullableColumn` stores the values in a numpy array
  and keeps a second array of booleans that tells which slots
  hold a value and which ones are absent. Reading the column
  has to check the validity of every slot.
* :class:`CategoricalColumn` stores each distinct value only once
  in a dictionary, and for every slot keeps the integer code
  of the value in the dictionary. Reading the column has to
  look up every code in the dictionary.
  Categorical columns can also be nullable, absent slots
  are stored with the code ``-1``.

The more work is involved in reading a value, the slower the
column is to iterate. Raw columns are the fastest to read,
nullable columns pay a branch on every value, categorical
columns pay an indirection on every value:

>>> import pyarrow as pa
>>> CategoricalColumn(["red", "green", "red", "red"]).to_pylist()
['red', 'green', 'red', 'red']
>>> CategoricalColumn(["red", "green", "red", "red"]).buffers()
(array([0, 1, 0, 0], dtype=int32), array(['red', 'green'], dtype=object))
>>> NullableColumn([1, None, 3]).to_pylist()
[1, None, 3]
>>> RawColumn([1, None, 3])
Traceback (most recent call last):
    ...
tablepyground.table.errors.SchemaMismatch: Raw columns can't hold absent values, use a NullableColumn
"""

import abc
from dataclasses import dataclass
from typing import Any, Iterator, Self

import numpy as np
import pyarrow as pa
import pyarrow.compute as pc

from .buffers import GrowableBuffer
from .errors import SchemaMismatch

__all__ = (
    "Column",
    "ColumnKind",
    "RawColumn",
    "NullableColumn",
    "CategoricalColumn",
    "as_column",
)

RAW = "raw"
NULLABLE = "nullable"
CATEGORICAL = "categorical"

CODE_DTYPE = np.int32
"""The type of the codes of categorical columns, the same of arrow dictionary indices."""

_CONVERSION_ERRORS = (pa.ArrowException, TypeError, ValueError, OverflowError)


@dataclass(frozen=True)
class ColumnKind:
    """The element type and encoding of a column.

    Two columns with the same kind store the same type
    of values in the same way.

    >>> str(ColumnKind(CATEGORICAL, pa.string(), nullable=True))
    'categorical<nullable<string>>'
    """

    encoding: str
    type: pa.DataType
    nullable: bool

    def __str__(self) -> str:
        description = str(self.type)
        if self.nullable:
            description = f"nullable<{description}>"
        if self.encoding == CATEGORICAL:
            description = f"categorical<{description}>"
        return description


class Column(abc.ABC):
    """Base class for all the column encodings.

    Provides random access to the values by row position,
    iteration over the values as Python objects and
    the ``buffers()`` of the column: the concrete numpy
    arrays the values are stored into.

    Subclasses implement appending in two phases,
    ``_stage_*`` methods convert and validate the incoming
    data without touching the column, ``_commit_*`` methods
    store the staged data. This allows a table to validate
    the data for all its columns before modifying any of them.
    """

    encoding: str = ""
    nullable: bool = False

    def __init__(self, type: pa.DataType) -> None:
        """
        :param type: The type of the values stored in the column.
        """
        _check_supported(type)
        self.type = type
        self.dtype = np.dtype(type.to_pandas_dtype())

    @property
    def kind(self) -> ColumnKind:
        """Element type and encoding of the column."""
        return ColumnKind(self.encoding, self.type, self.nullable)

    @property
    def null_count(self) -> int:
        """How many slots of the column are absent."""
        return 0

    @abc.abstractmethod
    def __len__(self) -> int: ...

    @abc.abstractmethod
    def __iter__(self) -> Iterator[Any]:
        """Iterate over the values of the column as Python objects.

        Absent values are returned as ``None``.
        """
        ...

    def __getitem__(self, index: int) -> Any:
        length = len(self)
        if index < 0:
            index += length
        if not 0 <= index < length:
            raise IndexError(f"Row {index} is out of range for a column of {length} rows")
        return self._value_at(index)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}<{self.kind}>(length={len(self)})"

    @abc.abstractmethod
    def _value_at(self, index: int) -> Any: ...

    @abc.abstractmethod
    def buffers(self) -> tuple[np.ndarray, ...]:
        """The arrays where the data of the column is stored.

        The arrays are views over the column storage, no data is copied.
        They are meant to be passed to functions that loop over the
        values, so that the loop doesn't have to go through the column
        for each value. See :mod:`tablepyground.kernels`.
        """
        ...

    @abc.abstractmethod
    def to_arrow(self) -> pa.Array:
        """Convert the column to a :class:`pyarrow.Array`."""
        ...

    @abc.abstractmethod
    def copy(self, capacity: int | None = None) -> Self:
        """Copy the column and its data.

        :param capacity: How many rows the copy should have room for.
        """
        ...

    def to_pylist(self) -> list[Any]:
        return list(self)

    def accepts(self, other: "Column") -> bool:
        """If the rows of ``other`` can be appended to this column."""
        return other.kind == self.kind

    def equals(self, other: "Column") -> bool:
        """If two columns have the same kind and hold the same values."""
        return (
            isinstance(other, Column)
            and other.kind == self.kind
            and other.to_pylist() == self.to_pylist()
        )

    def can_concat(self, other: "Column") -> bool:
        """If a new column can hold the values of this column followed by ``other``."""
        return self.accepts(other)

    def concat(self, other: "Column") -> "Column":
        """A new column with the values of this column followed by those of ``other``."""
        if not self.can_concat(other):
            raise SchemaMismatch(f"Can't concatenate {other.kind} to {self.kind}")
        staged = self._stage_rows(other)
        result = self.copy(capacity=len(self) + len(other))
        result._commit_rows(staged)
        return result

    @abc.abstractmethod
    def _stage_rows(self, other: "Column") -> Any: ...

    @abc.abstractmethod
    def _commit_rows(self, staged: Any) -> None: ...

    @abc.abstractmethod
    def _stage_value(self, value: Any) -> Any: ...

    @abc.abstractmethod
    def _commit_value(self, staged: Any) -> None: ...


class RawColumn(Column):
    """A column where every slot holds a value.

    >>> column = RawColumn([1.5, 2.5])
    >>> column.kind
    ColumnKind(encoding='raw', type=DataType(double), nullable=False)
    >>> column[-1]
    2.5
    """

    encoding = RAW

    def __init__(self, values: Any, type: pa.DataType | None = None) -> None:
        """
        :param values: The values of the column, a sequence,
                       a numpy array or a pyarrow array.
        :param type: The element type of the column,
                     by default it's detected from the values.
        """
        array = _to_arrow(values, type)
        super().__init__(array.type)
        if array.null_count:
            raise SchemaMismatch(
                "Raw columns can't hold absent values, use a NullableColumn"
            )
        self._values = GrowableBuffer.from_array(_to_numpy(array), self.dtype)

    @classmethod
    def _wrap(cls, type: pa.DataType, values: GrowableBuffer) -> Self:
        column = cls.__new__(cls)
        Column.__init__(column, type)
        column._values = values
        return column

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values.view().tolist())

    def _value_at(self, index: int) -> Any:
        return _as_py(self._values[index])

    def buffers(self) -> tuple[np.ndarray]:
        """``(values,)``"""
        return (self._values.view(),)

    def to_arrow(self) -> pa.Array:
        return pa.array(self._values.view(), type=self.type)

    def copy(self, capacity: int | None = None) -> Self:
        return self._wrap(self.type, self._values.copy(capacity))

    def _stage_rows(self, other: Column) -> np.ndarray:
        return other.buffers()[0]

    def _commit_rows(self, staged: np.ndarray) -> None:
        self._values.extend(staged)

    def _stage_value(self, value: Any) -> Any:
        if value is None:
            raise SchemaMismatch(f"Absent value for a non nullable {self.kind} column")
        return _to_py(value, self.type)

    def can_concat(self, other: Column) -> bool:
        return self.accepts(other) or (
            other.encoding == NULLABLE and other.type == self.type
        )

    def concat(self, other: Column) -> Column:
        """Concatenate the values of ``other``.

        When ``other`` is a nullable column the result
        is a nullable column too.
        """
        if other.encoding != NULLABLE or other.type != self.type:
            return super().concat(other)

        widened = NullableColumn._wrap(
            self.type,
            self._values.copy(capacity=len(self) + len(other)),
            GrowableBuffer.from_array(np.ones(len(self), dtype=np.bool_), np.bool_),
        )
        widened._commit_rows(widened._stage_rows(other))
        return widened

    def _commit_value(self, staged: Any) -> None:
        self._values.append(staged)


class NullableColumn(Column):
    """A column where slots can hold a value or be absent.

    Absent slots still take space in the values array,
    they are filled with a placeholder (zero, ``False`` or an
    empty string) and marked as invalid in the validity array.

    >>> column = NullableColumn([1, None, 3])
    >>> column.null_count
    1
    >>> values, validity = column.buffers()
    >>> values.tolist(), validity.tolist()
    ([1, 0, 3], [True, False, True])
    """

    encoding = NULLABLE
    nullable = True

    def __init__(self, values: Any, type: pa.DataType | None = None) -> None:
        """
        :param values: The values of the column, ``None`` marks absent values.
        :param type: The element type of the column,
                     by default it's detected from the values.
        """
        array = _to_arrow(values, type)
        super().__init__(array.type)
        self._values = GrowableBuffer.from_array(
            _to_numpy(array.fill_null(_fill_value(self.type))), self.dtype
        )
        self._validity = GrowableBuffer.from_array(
            array.is_valid().to_numpy(zero_copy_only=False), np.bool_
        )

    @classmethod
    def _wrap(
        cls, type: pa.DataType, values: GrowableBuffer, validity: GrowableBuffer
    ) -> Self:
        column = cls.__new__(cls)
        Column.__init__(column, type)
        column._values = values
        column._validity = validity
        return column

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        values = self._values.view().tolist()
        validity = self._validity.view().tolist()
        for value, valid in zip(values, validity):
            yield value if valid else None

    def _value_at(self, index: int) -> Any:
        if not self._validity[index]:
            return None
        return _as_py(self._values[index])

    @property
    def null_count(self) -> int:
        return len(self) - int(np.count_nonzero(self._validity.view()))

    def buffers(self) -> tuple[np.ndarray, np.ndarray]:
        """``(values, validity)``"""
        return (self._values.view(), self._validity.view())

    def to_arrow(self) -> pa.Array:
        return pa.array(
            self._values.view(), type=self.type, mask=~self._validity.view()
        )

    def copy(self, capacity: int | None = None) -> Self:
        return self._wrap(
            self.type, self._values.copy(capacity), self._validity.copy(capacity)
        )

    def accepts(self, other: Column) -> bool:
        # A raw column is a nullable column with no absent values.
        return other.type == self.type and other.encoding in (RAW, NULLABLE)

    def _stage_rows(self, other: Column) -> tuple[np.ndarray, np.ndarray]:
        if other.encoding == RAW:
            (values,) = other.buffers()
            return values, np.ones(len(values), dtype=np.bool_)
        return other.buffers()

    def _commit_rows(self, staged: tuple[np.ndarray, np.ndarray]) -> None:
        values, validity = staged
        self._values.extend(values)
        self._validity.extend(validity)

    def _stage_value(self, value: Any) -> tuple[Any, bool]:
        if value is None:
            return _fill_value(self.type), False
        return _to_py(value, self.type), True

    def _commit_value(self, staged: tuple[Any, bool]) -> None:
        value, valid = staged
        self._values.append(value)
        self._validity.append(valid)


class CategoricalColumn(Column):
    """A column that stores its values as codes into a dictionary.

    The dictionary of the categories is built once,
    when the column is created, and can't change afterwards.
    All the values appended to the column must be one
    of the categories.

    When the categories are not explicitly provided they
    are the distinct values of the column in order of appearance:

    >>> column = CategoricalColumn(["b", "a", "b"])
    >>> column.categories
    ['b', 'a']
    >>> CategoricalColumn(["b", None], nullable=True, categories=["a", "b"]).buffers()[0]
    array([ 1, -1], dtype=int32)
    """

    encoding = CATEGORICAL

    def __init__(
        self,
        values: Any,
        type: pa.DataType | None = None,
        nullable: bool = False,
        categories: Any = None,
    ) -> None:
        """
        :param values: The values of the column.
        :param type: The element type of the column,
                     by default it's detected from the values.
        :param nullable: If the column can hold absent values.
        :param categories: The distinct values allowed in the column,
                           by default the distinct values in ``values``.
        """
        array = _to_arrow(values, type)
        super().__init__(array.type)
        self.nullable = nullable
        if array.null_count and not nullable:
            raise SchemaMismatch(
                "Absent values in a non nullable categorical column, use nullable=True"
            )

        if categories is None:
            # Dictionary encoding gives us the distinct values
            # and the position of each value in the distinct values.
            encoded = pc.dictionary_encode(array)
            dictionary = encoded.dictionary
            indices = encoded.indices
        else:
            dictionary = _to_arrow(categories, self.type)
            if dictionary.null_count:
                raise SchemaMismatch("Categories can't contain absent values")
            indices = pc.index_in(array, value_set=dictionary)
            unknown = indices.null_count - array.null_count
            if unknown:
                raise SchemaMismatch(f"{unknown} values are not among the categories")

        self._set_dictionary(_to_numpy(dictionary))
        self._codes = GrowableBuffer.from_array(
            _to_numpy(indices.fill_null(-1)), CODE_DTYPE
        )

    @classmethod
    def _wrap(
        cls,
        type: pa.DataType,
        nullable: bool,
        dictionary: np.ndarray,
        codes: GrowableBuffer,
    ) -> Self:
        column = cls.__new__(cls)
        Column.__init__(column, type)
        column.nullable = nullable
        column._set_dictionary(dictionary)
        column._codes = codes
        return column

    def _set_dictionary(self, dictionary: np.ndarray) -> None:
        dictionary = np.array(dictionary, dtype=self.dtype)
        dictionary.flags.writeable = False
        self._dictionary = dictionary
        self._categories = dictionary.tolist()
        self._lookup = {value: code for code, value in enumerate(self._categories)}
        if len(self._lookup) != len(self._categories):
            raise SchemaMismatch("Categories must be distinct values")

    @property
    def categories(self) -> list[Any]:
        """The distinct values the column can hold, in order of their code."""
        return list(self._categories)

    def code_of(self, value: Any) -> int:
        """The code used to store ``value`` in the column."""
        try:
            return self._lookup[value]
        except KeyError:
            raise SchemaMismatch(
                f"{value!r} is not one of the categories of the column"
            ) from None

    def __len__(self) -> int:
        return len(self._codes)

    def __iter__(self) -> Iterator[Any]:
        categories = self._categories
        for code in self._codes.view().tolist():
            yield categories[code] if code >= 0 else None

    def _value_at(self, index: int) -> Any:
        code = self._codes[index]
        if code < 0:
            return None
        return self._categories[code]

    @property
    def null_count(self) -> int:
        return int(np.count_nonzero(self._codes.view() < 0))

    def buffers(self) -> tuple[np.ndarray, np.ndarray]:
        """``(codes, dictionary)``, the dictionary is read only."""
        return (self._codes.view(), self._dictionary)

    def to_arrow(self) -> pa.Array:
        codes = self._codes.view()
        return pa.DictionaryArray.from_arrays(
            pa.array(codes, type=pa.int32(), mask=codes < 0),
            pa.array(self._dictionary, type=self.type),
        )

    def copy(self, capacity: int | None = None) -> Self:
        return self._wrap(
            self.type, self.nullable, self._dictionary, self._codes.copy(capacity)
        )

    def accepts(self, other: Column) -> bool:
        return (
            other.encoding == CATEGORICAL
            and other.type == self.type
            and (self.nullable or not other.nullable)
        )

    def can_concat(self, other: Column) -> bool:
        return other.encoding == CATEGORICAL and other.type == self.type

    def concat(self, other: Column) -> "CategoricalColumn":
        """Concatenate two categorical columns.

        The categories of the resulting column are the categories
        of this column followed by the ones only found in ``other``.
        The result is nullable when either column is nullable.
        """
        if not self.can_concat(other):
            raise SchemaMismatch(f"Can't concatenate {other.kind} to {self.kind}")
        missing = [value for value in other.categories if value not in self._lookup]
        result = self._wrap(
            self.type,
            self.nullable or other.nullable,
            np.array(self._categories + missing, dtype=self.dtype),
            self._codes.copy(capacity=len(self) + len(other)),
        )
        result._commit_rows(result._stage_rows(other))
        return result

    def _stage_rows(self, other: Column) -> np.ndarray:
        codes, _ = other.buffers()
        if other.categories == self._categories:
            return codes

        # Translate the codes of the other column into codes of this column,
        # categories that don't exist in this column are marked with -2.
        remap = np.array(
            [self._lookup.get(value, -2) for value in other.categories],
            dtype=CODE_DTYPE,
        )
        staged = np.full(len(codes), -1, dtype=CODE_DTYPE)
        present = codes >= 0
        staged[present] = remap[codes[present]]
        unknown = np.unique(codes[present][staged[present] == -2])
        if len(unknown):
            categories = other.categories
            values = [repr(categories[code]) for code in unknown.tolist()]
            raise SchemaMismatch(
                f"Values {', '.join(values)} are not among the categories of the column"
            )
        return staged

    def _commit_rows(self, staged: np.ndarray) -> None:
        self._codes.extend(staged)

    def _stage_value(self, value: Any) -> int:
        if value is None:
            if not self.nullable:
                raise SchemaMismatch(
                    f"Absent value for a non nullable {self.kind} column"
                )
            return -1
        return self.code_of(_to_py(value, self.type))

    def _commit_value(self, staged: int) -> None:
        self._codes.append(staged)


def as_column(
    values: Any,
    type: pa.DataType | None = None,
    nullable: bool | None = None,
    categorical: bool | None = None,
) -> Column:
    """Wrap data into the column that best fits it.

    Columns are returned as they are. Otherwise
    dictionary encoded arrow arrays become categorical
    columns, data with absent values becomes nullable
    columns and everything else becomes raw columns.

    >>> as_column([1, 2, None])
    NullableColumn<nullable<int64>>(length=3)
    >>> as_column(["x", "y"], categorical=True)
    CategoricalColumn<categorical<string>>(length=2)
    """
    if isinstance(values, Column):
        return values

    if categorical is None:
        categorical = isinstance(values, (pa.Array, pa.ChunkedArray)) and pa.types.is_dictionary(values.type)
    array = _to_arrow(values, type)
    if nullable is None:
        nullable = array.null_count > 0

    if categorical:
        return CategoricalColumn(array, nullable=nullable)
    elif nullable:
        return NullableColumn(array)
    return RawColumn(array)


def _check_supported(type: pa.DataType) -> None:
    if pa.types.is_null(type):
        raise SchemaMismatch(
            "Unable to detect the element type of a column that is empty "
            "or only holds absent values, provide its type"
        )
    if not (
        pa.types.is_integer(type)
        or pa.types.is_floating(type)
        or pa.types.is_boolean(type)
        or pa.types.is_string(type)
        or pa.types.is_large_string(type)
    ):
        raise SchemaMismatch(f"Unsupported element type: {type}")


def _to_arrow(values: Any, type: pa.DataType | None) -> pa.Array:
    """Convert ``values`` to a plain (not dictionary encoded) arrow array."""
    if isinstance(values, Column):
        values = values.to_arrow()
    try:
        if isinstance(values, pa.ChunkedArray):
            if pa.types.is_dictionary(values.type):
                values = values.cast(values.type.value_type)
            values = values.combine_chunks()
        if isinstance(values, pa.DictionaryArray):
            values = values.dictionary_decode()

        if isinstance(values, pa.Array):
            if type is not None and not values.type.equals(type):
                values = values.cast(type)
        else:
            values = pa.array(values, type=type)
    except _CONVERSION_ERRORS as e:
        raise SchemaMismatch(f"Unable to store values as {type or 'a column'}: {e}") from e
    return values


def _to_numpy(array: pa.Array) -> np.ndarray:
    return array.to_numpy(zero_copy_only=False)


def _to_py(value: Any, type: pa.DataType) -> Any:
    try:
        return pa.scalar(value, type=type).as_py()
    except _CONVERSION_ERRORS as e:
        raise SchemaMismatch(f"Unable to store {value!r} as {type}: {e}") from e


def _as_py(value: Any) -> Any:
    if isinstance(value, np.generic):
        return value.item()
    return value


def _fill_value(type: pa.DataType) -> Any:
    """Placeholder stored in the values array for absent slots."""
    if pa.types.is_string(type) or pa.types.is_large_string(type):
        return ""
    elif pa.types.is_boolean(type):
        return False
    return 0
