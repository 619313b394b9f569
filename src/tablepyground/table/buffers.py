"""Typed storage that grows in place.

Columns keep their data in :class:`GrowableBuffer` objects,
a contiguous numpy array paired with the number of slots
actually in use. The array is allocated with some spare
capacity, so appending rows usually only needs to write
the new values at the end of the array.

When the capacity is exhausted the buffer is reallocated
with a capacity that is a multiple of the previous one
(``GROWTH_FACTOR``). As the capacity grows geometrically,
the cost of the copies is amortized over the appended
values and appending ``n`` rows costs ``O(n)``
regardless of how many rows the buffer already contains.

>>> buffer = GrowableBuffer("int64", capacity=2)
>>> buffer.append(1)
>>> buffer.extend([2, 3])
>>> len(buffer), buffer.capacity
(3, 4)
>>> buffer.view().tolist()
[1, 2, 3]
"""

import logging
from typing import Any, Self

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 16
"""How many slots an empty buffer preallocates."""

GROWTH_FACTOR = 2
"""By how much the capacity is multiplied when the buffer is full."""


class GrowableBuffer:
    """A numpy array that can be extended in place.

    Only the first ``len(buffer)`` slots of the underlying
    array hold data, the rest is spare capacity reserved
    for future appends.
    """

    def __init__(
        self,
        dtype: Any,
        capacity: int | None = None,
        growth_factor: float | None = None,
    ) -> None:
        """
        :param dtype: The numpy dtype of the stored values.
        :param capacity: How many slots to preallocate,
                         defaults to ``DEFAULT_CAPACITY``.
        :param growth_factor: How much to grow when the buffer is full,
                              defaults to ``GROWTH_FACTOR``.
        """
        self.dtype = np.dtype(dtype)
        self.growth_factor = GROWTH_FACTOR if growth_factor is None else growth_factor
        if self.growth_factor <= 1:
            raise ValueError("The growth factor must be greater than 1")
        if capacity is None:
            capacity = DEFAULT_CAPACITY
        self._data = np.empty(capacity, dtype=self.dtype)
        self._length = 0

    @classmethod
    def from_array(cls, values: Any, dtype: Any, growth_factor: float | None = None) -> Self:
        """Create a buffer holding a copy of ``values``.

        The buffer is allocated exactly as big as ``values``,
        so the data is copied only once.
        """
        values = np.asarray(values, dtype=dtype)
        buffer = cls(dtype, capacity=len(values), growth_factor=growth_factor)
        buffer._data[:] = values
        buffer._length = len(values)
        return buffer

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"GrowableBuffer(dtype={self.dtype}, length={self._length}, capacity={self.capacity})"

    @property
    def capacity(self) -> int:
        """How many values the buffer can hold before reallocating."""
        return len(self._data)

    def __getitem__(self, index: int) -> Any:
        """Value at ``index``, the caller is in charge of bounds checking."""
        return self._data[index]

    def view(self) -> np.ndarray:
        """The values stored in the buffer.

        This is a view over the underlying array, no data is copied.
        The view is invalidated by the next reallocation, so it
        shouldn't be kept around while the buffer is extended.
        """
        return self._data[: self._length]

    def reserve(self, additional: int) -> None:
        """Make sure there is room for ``additional`` more values."""
        required = self._length + additional
        if required <= len(self._data):
            return

        capacity = max(required, int(len(self._data) * self.growth_factor), 1)
        logger.debug(
            "Growing %s buffer from %d to %d slots",
            self.dtype,
            len(self._data),
            capacity,
        )
        data = np.empty(capacity, dtype=self.dtype)
        data[: self._length] = self._data[: self._length]
        self._data = data

    def append(self, value: Any) -> None:
        """Append a single value at the end of the buffer."""
        self.reserve(1)
        self._data[self._length] = value
        self._length += 1

    def extend(self, values: Any) -> None:
        """Append all the ``values`` at the end of the buffer."""
        values = np.asarray(values, dtype=self.dtype)
        self.reserve(len(values))
        self._data[self._length : self._length + len(values)] = values
        self._length += len(values)

    def copy(self, capacity: int | None = None) -> Self:
        """Copy the buffer and its values.

        :param capacity: The capacity of the new buffer,
                         by default as many slots as the stored values.
        """
        if capacity is None:
            capacity = self._length
        copied = self.__class__(
            self.dtype,
            capacity=max(capacity, self._length),
            growth_factor=self.growth_factor,
        )
        copied._data[: self._length] = self.view()
        copied._length = self._length
        return copied
