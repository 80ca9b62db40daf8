"""
Sparse Matrix Storage Engine

``SparseMatrix`` stores only the non-default elements of an m x n matrix
in compressed-row (CSR) form:

    values[nnz]      Stored elements, ordered by (row, column)
    col_index[nnz]   Column of each stored element
    row_start[m+1]   Offset of each row's first element; row_start[m] == nnz

The representation is canonical: columns are strictly increasing inside a
row and the default value is never stored. Two matrices holding the same
elements therefore have identical arrays, whatever order they were built in.

Example:
    >>> from sparsemat import SparseMatrix
    >>>
    >>> mat = SparseMatrix(3)
    >>> mat.set(1, 0, 0).set(2, 1, 1).set(3, 2, 2)
    >>> mat.multiply([1, 1, 1])
    array([1., 2., 3.])
    >>>
    >>> mat[1, 1]
    2.0
"""

import copy as _copy
import logging
import operator
from typing import Any, Generic, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from ._array import Array
from ._base import SparseBase
from ._dtypes import (
    DType,
    T,
    default_value,
    normalize_dtype,
    result_dtype,
    to_numpy_dtype,
    to_python,
    validate_dtype,
)
from ._errors import (
    DimensionMismatchError,
    InvalidDimensionsError,
    OutOfRangeError,
    SparseMatrixError,
)

__all__ = ['SparseMatrix', 'EntryView']

logger = logging.getLogger("sparsemat.matrix")


def _check_dimension(value: Any, name: str) -> int:
    try:
        value = operator.index(value)
    except TypeError:
        raise InvalidDimensionsError(
            f"Matrix {name} must be an integer, got {type(value).__name__}"
        ) from None
    if value < 1:
        raise InvalidDimensionsError(f"Matrix {name} must be >= 1, got {value}")
    return value


class EntryView:
    """Read-only, restartable sequence of stored ``(row, col, value)`` triples.

    Entries are produced lazily in (row, column) order. Each ``iter()``
    starts over from the first stored element.
    """

    __slots__ = ('_matrix',)

    def __init__(self, matrix: 'SparseMatrix'):
        self._matrix = matrix

    def __iter__(self) -> Iterator[Tuple[int, int, Any]]:
        mat = self._matrix
        row_start = mat._row_start
        for i in range(mat._m):
            for k in range(int(row_start[i]), int(row_start[i + 1])):
                yield i, int(mat._col_index[k]), to_python(mat._values[k])

    def __len__(self) -> int:
        return self._matrix.nnz

    def __repr__(self) -> str:
        return f"EntryView(nnz={len(self)})"


class SparseMatrix(SparseBase, Generic[T]):
    """
    Generic compressed-row sparse matrix.

    Elements are numeric (stored in native numpy buffers) or arbitrary
    Python objects (``dtype='object'``) that support ``==``, ``+`` and
    ``*`` together with a default value.

    Attributes:
        shape: Matrix dimensions (rows, cols)
        dtype: Element type name
        default: Value of every element that is not stored
        nnz: Number of stored elements

    Example:
        >>> from fractions import Fraction
        >>> mat = SparseMatrix(2, 3, dtype='object', default=Fraction(0))
        >>> mat.set(Fraction(1, 2), 0, 2)
        >>> mat.get(0, 2)
        Fraction(1, 2)
    """

    __slots__ = ('_m', '_n', '_dtype', '_default', '_values', '_col_index', '_row_start')

    def __init__(
        self,
        rows: int,
        columns: Optional[int] = None,
        *,
        dtype: Union[str, DType] = 'float64',
        default: Optional[T] = None,
    ):
        """Create an empty matrix (every element equals the default).

        Args:
            rows: Number of rows (and columns, when ``columns`` is omitted)
            columns: Number of columns
            dtype: Element type ('float64' unless given)
            default: Default element (zero of ``dtype`` unless given)

        Raises:
            InvalidDimensionsError: If a dimension is not a positive integer
        """
        self._m = _check_dimension(rows, "rows")
        self._n = self._m if columns is None else _check_dimension(columns, "columns")

        self._dtype = normalize_dtype(dtype)
        validate_dtype(self._dtype)
        self._default = default_value(self._dtype) if default is None else default

        self._values = Array(0, self._dtype)
        self._col_index = Array(0, 'int64')
        self._row_start = Array(self._m + 1, 'int64')

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        return (self._m, self._n)

    @property
    def dtype(self) -> str:
        return self._dtype

    @property
    def default(self) -> T:
        """Value of elements that are not stored."""
        return self._default

    @property
    def nnz(self) -> int:
        return self._values.size

    @property
    def values(self) -> np.ndarray:
        """Stored elements (read-only view)."""
        return self._values.view()

    @property
    def col_index(self) -> np.ndarray:
        """Column of each stored element (read-only view)."""
        return self._col_index.view()

    @property
    def row_start(self) -> np.ndarray:
        """Row offsets, length rows + 1 (read-only view)."""
        return self._row_start.view()

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate_row(self, row: int) -> int:
        row = operator.index(row)
        if row < 0 or row >= self._m:
            raise OutOfRangeError(f"Row {row} out of range [0, {self._m})")
        return row

    def _validate_coordinates(self, row: int, col: int) -> Tuple[int, int]:
        row = operator.index(row)
        col = operator.index(col)
        if row < 0 or row >= self._m or col < 0 or col >= self._n:
            raise OutOfRangeError(
                f"Coordinates ({row}, {col}) out of range for "
                f"{self._m}x{self._n} matrix"
            )
        return row, col

    def _row_bounds(self, row: int) -> Tuple[int, int]:
        return int(self._row_start[row]), int(self._row_start[row + 1])

    def _is_default(self, value: Any) -> bool:
        return bool(value == self._default)

    def _coerce(self, value: Any) -> Any:
        # Cast to the storage type first so the default check sees what
        # would actually be stored (e.g. 0.4 in an int64 matrix).
        if self._dtype == 'object':
            return value
        if value is None:
            raise TypeError(f"Cannot store None in a {self._dtype} matrix")
        return to_python(to_numpy_dtype(self._dtype).type(value))

    def check_format(self) -> None:
        """Verify the canonical CSR invariants.

        Raises:
            SparseMatrixError: Describing the first violated invariant
        """
        ptr = self._row_start.view()
        cols = self._col_index.view()
        nnz = self._values.size

        def fail(msg):
            raise SparseMatrixError(msg, SparseMatrixError.ERROR_INTERNAL)

        if len(ptr) != self._m + 1:
            fail(f"row_start length {len(ptr)} != rows + 1 = {self._m + 1}")
        if ptr[0] != 0 or ptr[-1] != nnz or len(cols) != nnz:
            fail(f"row_start bounds ({ptr[0]}, {ptr[-1]}) do not match nnz={nnz}")
        if np.any(np.diff(ptr) < 0):
            fail("row_start is not non-decreasing")
        if nnz and (cols.min() < 0 or cols.max() >= self._n):
            fail(f"column index outside [0, {self._n})")
        for i in range(self._m):
            lo, hi = int(ptr[i]), int(ptr[i + 1])
            if np.any(np.diff(cols[lo:hi]) <= 0):
                fail(f"columns of row {i} are not strictly increasing")
        for value in self._values:
            if self._is_default(value):
                fail("default value stored explicitly")

    # =========================================================================
    # Element Access
    # =========================================================================

    def get(self, row: int, col: int) -> T:
        """Element at (row, col).

        Returns:
            The stored element, or the default if none is stored

        Raises:
            OutOfRangeError: If the coordinates fall outside the matrix
        """
        row, col = self._validate_coordinates(row, col)
        lo, hi = self._row_bounds(row)
        pos, found = self._col_index.search(col, lo, hi)
        if found:
            return to_python(self._values[pos])
        return self._default

    def set(self, val: T, row: int, col: int) -> 'SparseMatrix[T]':
        """Set element at (row, col).

        Storing the default removes the element; nothing is materialized
        for a default written to an empty position.

        Returns:
            self, for chaining

        Raises:
            OutOfRangeError: If the coordinates fall outside the matrix
            TypeError: If ``val`` is None on a numeric matrix
        """
        row, col = self._validate_coordinates(row, col)
        val = self._coerce(val)

        lo, hi = self._row_bounds(row)
        pos, found = self._col_index.search(col, lo, hi)

        if found:
            if self._is_default(val):
                self._remove(pos, row)
            else:
                self._values[pos] = val
        elif not self._is_default(val):
            self._insert(pos, row, col, val)

        return self

    def _insert(self, index: int, row: int, col: int, val: Any) -> None:
        self._values.insert(index, val)
        self._col_index.insert(index, col)
        self._row_start.add_range(row + 1, 1)

    def _remove(self, index: int, row: int) -> None:
        self._values.erase(index)
        self._col_index.erase(index)
        self._row_start.add_range(row + 1, -1)

    def __getitem__(self, key: Tuple[int, int]) -> T:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError(f"Index must be a (row, col) pair, got {key!r}")
        return self.get(*key)

    def __setitem__(self, key: Tuple[int, int], value: T) -> None:
        if not (isinstance(key, tuple) and len(key) == 2):
            raise TypeError(f"Index must be a (row, col) pair, got {key!r}")
        self.set(value, *key)

    # =========================================================================
    # Stored Entries
    # =========================================================================

    def items(self) -> EntryView:
        """Stored ``(row, col, value)`` triples in (row, column) order."""
        return EntryView(self)

    def row_length(self, row: int) -> int:
        """Number of stored elements in ``row``."""
        lo, hi = self._row_bounds(self._validate_row(row))
        return hi - lo

    def row_entries(self, row: int) -> List[Tuple[int, Any]]:
        """Stored ``(col, value)`` pairs of ``row``."""
        lo, hi = self._row_bounds(self._validate_row(row))
        return [
            (int(c), to_python(v))
            for c, v in zip(self._col_index[lo:hi], self._values[lo:hi])
        ]

    # =========================================================================
    # Bulk Construction (internal)
    # =========================================================================

    def _append_row(self, row: int, cols: List[int], vals: List[Any]) -> None:
        """Append the stored elements of ``row``.

        Rows must be appended in order, every row exactly once, on a matrix
        that started empty. ``cols`` must be strictly increasing and
        ``vals`` free of defaults.
        """
        self._values.extend(vals)
        self._col_index.extend(cols)
        self._row_start[row + 1] = self._values.size

    def _result_default(self, out_dtype: str) -> Any:
        if self._dtype != 'object' and self._is_default(default_value(self._dtype)):
            return default_value(out_dtype)
        return self._default

    def _typed_values(self, out_dtype: str) -> List[Any]:
        """Stored values as scalars of ``out_dtype``."""
        if out_dtype == 'object':
            return self._values.tolist()
        return list(self._values.view().astype(to_numpy_dtype(out_dtype)))

    def _typed_default(self, out_dtype: Optional[str] = None) -> Any:
        out_dtype = self._dtype if out_dtype is None else out_dtype
        if out_dtype == 'object':
            return self._default
        return to_numpy_dtype(out_dtype).type(self._default)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def multiply(self, other: Union['SparseMatrix', Sequence[Any], np.ndarray]):
        """Matrix-matrix or matrix-vector product.

        Args:
            other: SparseMatrix with ``other.rows == self.cols``, or a 1-D
                vector of length ``self.cols``

        Returns:
            SparseMatrix (self.rows x other.cols) for a matrix operand,
            numpy array of length self.rows for a vector operand

        Raises:
            DimensionMismatchError: If the operand is not conformable
        """
        if isinstance(other, SparseMatrix):
            return self._multiply_matrix(other)
        return self._multiply_vector(other)

    def _multiply_vector(self, x) -> np.ndarray:
        vec = np.asarray(x)
        if vec.ndim != 1 or vec.shape[0] != self._n:
            raise DimensionMismatchError(
                f"Cannot multiply {self._m}x{self._n} matrix by vector of shape {vec.shape}"
            )

        out_dtype = result_dtype(self._dtype, vec.dtype)
        result = np.empty(self._m, dtype=to_numpy_dtype(out_dtype))
        result[:] = [self._result_default(out_dtype)] * self._m

        if self.nnz:
            products = self._values.view() * vec[self._col_index.view()]
            row_ids = np.repeat(np.arange(self._m), np.diff(self._row_start.view()))
            np.add.at(result, row_ids, products)

        return result

    def _multiply_matrix(self, other: 'SparseMatrix') -> 'SparseMatrix':
        if self._n != other._m:
            raise DimensionMismatchError(
                f"Cannot multiply {self._m}x{self._n} matrix by {other._m}x{other._n} matrix"
            )

        out_dtype = result_dtype(self._dtype, other._dtype)
        default = self._result_default(out_dtype)
        result = SparseMatrix(self._m, other._n, dtype=out_dtype, default=default)
        start = result._typed_default()

        a_ptr = self._row_start.tolist()
        a_cols = self._col_index.tolist()
        a_vals = self._typed_values(out_dtype)
        b_ptr = other._row_start.tolist()
        b_cols = other._col_index.tolist()
        b_vals = other._typed_values(out_dtype)

        # Integer results wrap like numpy array arithmetic.
        with np.errstate(over='ignore'):
            for i in range(self._m):
                acc = {}
                for k in range(a_ptr[i], a_ptr[i + 1]):
                    a = a_vals[k]
                    inner = a_cols[k]
                    for p in range(b_ptr[inner], b_ptr[inner + 1]):
                        j = b_cols[p]
                        acc[j] = acc.get(j, start) + a * b_vals[p]

                cols, vals = [], []
                for j in sorted(acc):
                    val = result._coerce(acc[j])
                    if not result._is_default(val):
                        cols.append(j)
                        vals.append(val)
                result._append_row(i, cols, vals)

        logger.debug(
            f"multiply: {self._m}x{self._n} (nnz={self.nnz}) @ "
            f"{other._m}x{other._n} (nnz={other.nnz}) -> nnz={result.nnz}"
        )
        return result

    def add(self, other: 'SparseMatrix') -> 'SparseMatrix':
        """Element-wise sum with a matrix of the same shape.

        Raises:
            DimensionMismatchError: If the shapes differ
        """
        if not isinstance(other, SparseMatrix):
            raise TypeError(f"Cannot add {type(other).__name__} to SparseMatrix")
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Cannot add {self._m}x{self._n} matrix and {other._m}x{other._n} matrix"
            )

        out_dtype = result_dtype(self._dtype, other._dtype)
        result = SparseMatrix(
            self._m, self._n, dtype=out_dtype, default=self._result_default(out_dtype)
        )

        a_ptr = self._row_start.tolist()
        a_cols = self._col_index.tolist()
        a_vals = self._typed_values(out_dtype)
        b_ptr = other._row_start.tolist()
        b_cols = other._col_index.tolist()
        b_vals = other._typed_values(out_dtype)
        a_default = self._typed_default(out_dtype)
        b_default = other._typed_default(out_dtype)

        with np.errstate(over='ignore'):
            for i in range(self._m):
                ia, ea = a_ptr[i], a_ptr[i + 1]
                ib, eb = b_ptr[i], b_ptr[i + 1]
                cols, vals = [], []

                while ia < ea or ib < eb:
                    if ib >= eb or (ia < ea and a_cols[ia] < b_cols[ib]):
                        col, val = a_cols[ia], a_vals[ia] + b_default
                        ia += 1
                    elif ia >= ea or b_cols[ib] < a_cols[ia]:
                        col, val = b_cols[ib], a_default + b_vals[ib]
                        ib += 1
                    else:
                        col, val = a_cols[ia], a_vals[ia] + b_vals[ib]
                        ia += 1
                        ib += 1

                    val = result._coerce(val)
                    if not result._is_default(val):
                        cols.append(col)
                        vals.append(val)

                result._append_row(i, cols, vals)

        logger.debug(
            f"add: {self._m}x{self._n} (nnz={self.nnz} + {other.nnz}) -> nnz={result.nnz}"
        )
        return result

    # =========================================================================
    # Operators
    # =========================================================================

    def __matmul__(self, other):
        if isinstance(other, (SparseMatrix, list, tuple, np.ndarray)):
            return self.multiply(other)
        return NotImplemented

    __mul__ = __matmul__

    def __add__(self, other):
        if isinstance(other, SparseMatrix):
            return self.add(other)
        return NotImplemented

    def __eq__(self, other) -> bool:
        if not isinstance(other, SparseMatrix):
            return NotImplemented
        return (
            self.shape == other.shape
            and self._row_start.equals(other._row_start)
            and self._col_index.equals(other._col_index)
            and self._values.equals(other._values)
        )

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    # =========================================================================
    # Copy
    # =========================================================================

    def copy(self) -> 'SparseMatrix[T]':
        """Create deep copy.

        Returns:
            New SparseMatrix sharing no storage with this one.
        """
        new = SparseMatrix(self._m, self._n, dtype=self._dtype, default=self._default)
        new._values = self._values.copy()
        new._col_index = self._col_index.copy()
        new._row_start = self._row_start.copy()
        return new

    def __copy__(self) -> 'SparseMatrix[T]':
        return self.copy()

    def __deepcopy__(self, memo) -> 'SparseMatrix[T]':
        new = self.copy()
        if self._dtype == 'object':
            new._values = Array.from_list(
                [_copy.deepcopy(v, memo) for v in self._values], 'object'
            )
            new._default = _copy.deepcopy(self._default, memo)
        return new

    # =========================================================================
    # Representation
    # =========================================================================

    def __repr__(self) -> str:
        return f"SparseMatrix(shape={self.shape}, nnz={self.nnz}, dtype={self.dtype})"

    def info(self) -> str:
        """Get detailed information string."""
        lines = [
            "SparseMatrix:",
            f"  shape: {self.shape}",
            f"  nnz: {self.nnz}",
            f"  density: {self.density:.4f}",
            f"  dtype: {self.dtype}",
            f"  default: {self.default!r}",
            f"  memory: {(self._values.nbytes + self._col_index.nbytes + self._row_start.nbytes) / 1024:.2f} KB",
        ]
        return '\n'.join(lines)
