"""
Growable Array Container

Owned, contiguous numpy-backed buffer with spare capacity, used for the
three backing arrays of a sparse matrix. Supports positional insert and
erase with amortized geometric growth, a vectorized range shift for row
offsets and binary search over sorted sub-ranges.
"""

import logging
from typing import Any, Iterable, List, Tuple, Union

import numpy as np

from ._config import config
from ._dtypes import DType, normalize_dtype, to_numpy_dtype

__all__ = ['Array', 'zeros', 'from_list']

logger = logging.getLogger("sparsemat.array")


class Array:
    """
    Contiguous growable array.

    Only the first ``size`` slots are live; the rest of the allocation is
    spare capacity for insertions.

    Attributes:
        dtype (str): Element type name ('float64', 'int64', 'object', ...)
        size (int): Number of live elements
        capacity (int): Number of allocated slots

    Example:
        >>> arr = Array.from_list([1, 3, 5], dtype='int64')
        >>> arr.insert(1, 2)
        >>> arr.tolist()
        [1, 2, 3, 5]
    """

    __slots__ = ('_data', '_size', '_dtype')

    def __init__(self, size: int = 0, dtype: Union[str, DType] = 'float64'):
        """
        Allocate a zero-filled array.

        Args:
            size: Number of live elements
            dtype: Element type (string or DType enum)
        """
        if size < 0:
            raise ValueError(f"Array size must be non-negative, got {size}")

        self._dtype = normalize_dtype(dtype)
        self._data = np.zeros(size, dtype=to_numpy_dtype(self._dtype))
        self._size = size

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def zeros(cls, size: int, dtype: Union[str, DType] = 'float64') -> 'Array':
        """Create zero-initialized array."""
        return cls(size, dtype)

    @classmethod
    def from_list(cls, data: Iterable[Any], dtype: Union[str, DType] = 'float64') -> 'Array':
        """Create array from a Python sequence (copied)."""
        values = list(data)
        arr = cls(0, dtype)
        if values:
            buf = np.empty(len(values), dtype=arr._data.dtype)
            buf[:] = values
            arr._data = buf
            arr._size = len(values)
        return arr

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of live elements."""
        return self._size

    @property
    def capacity(self) -> int:
        """Number of allocated slots."""
        return len(self._data)

    @property
    def dtype(self) -> str:
        """Element type name."""
        return self._dtype

    @property
    def nbytes(self) -> int:
        """Bytes held by live elements."""
        return self._size * self._data.itemsize

    def view(self) -> np.ndarray:
        """Read-only numpy view over the live elements."""
        out = self._data[:self._size]
        out.flags.writeable = False
        return out

    # -------------------------------------------------------------------------
    # Element Access
    # -------------------------------------------------------------------------

    def _check_index(self, idx: int) -> int:
        if idx < 0:
            idx += self._size
        if idx < 0 or idx >= self._size:
            raise IndexError(f"Index {idx} out of bounds [0, {self._size})")
        return idx

    def __getitem__(self, idx: Union[int, slice]):
        if isinstance(idx, slice):
            start, stop, step = idx.indices(self._size)
            return self._data[start:stop:step].tolist()
        return self._data[self._check_index(idx)]

    def __setitem__(self, idx: int, value):
        self._data[self._check_index(idx)] = value

    def __len__(self) -> int:
        return self._size

    def __iter__(self):
        return iter(self._data[:self._size].tolist())

    # -------------------------------------------------------------------------
    # Structural Mutation
    # -------------------------------------------------------------------------

    def reserve(self, capacity: int) -> None:
        """Ensure room for at least ``capacity`` elements."""
        if capacity <= len(self._data):
            return

        cfg = config.array
        new_capacity = max(
            capacity,
            cfg.initial_capacity,
            int(len(self._data) * cfg.growth_factor),
        )
        logger.debug(f"Growing {self._dtype} buffer: {len(self._data)} -> {new_capacity}")

        buf = np.zeros(new_capacity, dtype=self._data.dtype)
        buf[:self._size] = self._data[:self._size]
        self._data = buf

    def insert(self, index: int, value) -> None:
        """Insert ``value`` before position ``index`` (0 <= index <= size)."""
        if index < 0 or index > self._size:
            raise IndexError(f"Insert position {index} out of bounds [0, {self._size}]")

        self.reserve(self._size + 1)
        # numpy resolves the overlapping ranges
        self._data[index + 1:self._size + 1] = self._data[index:self._size]
        self._data[index] = value
        self._size += 1

    def erase(self, index: int) -> None:
        """Remove the element at ``index``."""
        index = self._check_index(index)
        self._data[index:self._size - 1] = self._data[index + 1:self._size]
        self._size -= 1
        # Drop the stale reference held in the vacated slot
        self._data[self._size] = 0

    def append(self, value) -> None:
        """Append one element."""
        self.reserve(self._size + 1)
        self._data[self._size] = value
        self._size += 1

    def extend(self, values: List[Any]) -> None:
        """Append several elements."""
        count = len(values)
        if count == 0:
            return
        self.reserve(self._size + count)
        self._data[self._size:self._size + count] = values
        self._size += count

    def add_range(self, start: int, delta: int) -> None:
        """Add ``delta`` to every element from ``start`` to the end."""
        if start < self._size:
            self._data[start:self._size] += delta

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, value, lo: int, hi: int) -> Tuple[int, bool]:
        """
        Binary search a sorted sub-range.

        Args:
            value: Element to look for
            lo: First position of the range
            hi: One past the last position of the range

        Returns:
            (position, found): ``position`` is the index of ``value`` when
            found, otherwise the index where it would be inserted.
        """
        pos = lo + int(np.searchsorted(self._data[lo:hi], value))
        return pos, bool(pos < hi and self._data[pos] == value)

    # -------------------------------------------------------------------------
    # Copy / Conversion
    # -------------------------------------------------------------------------

    def copy(self) -> 'Array':
        """Create a deep copy (spare capacity is not copied)."""
        new = Array(0, self._dtype)
        new._data = self._data[:self._size].copy()
        new._size = self._size
        return new

    def equals(self, other: 'Array') -> bool:
        """Element-wise equality of the live elements."""
        if self._size != other._size:
            return False
        return bool(np.array_equal(self._data[:self._size], other._data[:other._size]))

    def tolist(self) -> List:
        """Convert live elements to a Python list."""
        return self._data[:self._size].tolist()

    def to_numpy(self) -> np.ndarray:
        """Copy live elements into a new numpy array."""
        return self._data[:self._size].copy()

    # -------------------------------------------------------------------------
    # Representation
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        if self._size == 0:
            return f"Array([], dtype={self._dtype})"
        elif self._size <= 6:
            data_str = str(self.tolist())
        else:
            items = self.tolist()
            data_str = str(items[:3] + ['...'] + items[-3:])

        return f"Array({data_str}, dtype={self._dtype})"


# =============================================================================
# Factory Functions
# =============================================================================

def zeros(size: int, dtype: Union[str, DType] = 'float64') -> Array:
    """Create zero-initialized array."""
    return Array.zeros(size, dtype)


def from_list(data: Iterable[Any], dtype: Union[str, DType] = 'float64') -> Array:
    """Create array from Python list."""
    return Array.from_list(data, dtype)
