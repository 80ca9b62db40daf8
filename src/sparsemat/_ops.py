"""High-Level Sparse Matrix Operations.

This module provides functional operations on sparse matrices:
- Bulk constructors (identity, dense rows, coordinate triples)
- Functional forms of the arithmetic methods
- Cross-platform conversions (scipy.sparse)

Bulk constructors fill the CSR arrays row by row, so building a matrix
with nnz elements costs O(nnz log nnz) instead of nnz separate
``set`` calls.

Example:
    >>> from sparsemat import from_dense, from_coo, identity
    >>>
    >>> a = from_dense([[1, 0, 2], [0, 3, 0]], dtype='int64')
    >>> b = from_coo([0, 1, 2], [0, 1, 0], [1, 1, 4], shape=(3, 2), dtype='int64')
    >>> print(a @ b)
    9 0
    0 3
"""

import logging
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from ._base import SparseBase
from ._dtypes import DType, normalize_dtype, validate_dtype
from ._errors import DimensionMismatchError, InvalidDimensionsError
from ._matrix import SparseMatrix

__all__ = [
    # Construction
    'identity',
    'from_dense',
    'from_coo',
    'zeros_like',

    # Arithmetic
    'multiply',
    'add',

    # Cross-platform
    'from_scipy',
    'to_scipy',

    # Type checking
    'is_sparse_like',
]

logger = logging.getLogger("sparsemat.ops")


# =============================================================================
# Construction
# =============================================================================

def identity(
    n: int,
    dtype: Union[str, DType] = 'float64',
    one: Any = None,
    default: Any = None,
) -> SparseMatrix:
    """Square matrix with ``one`` on the diagonal.

    Args:
        n: Number of rows and columns.
        dtype: Element type.
        one: Diagonal element (1 unless given).
        default: Default element (zero of ``dtype`` unless given).
    """
    result = SparseMatrix(n, dtype=dtype, default=default)
    one = result._coerce(1 if one is None else one)
    stored = not result._is_default(one)
    for i in range(n):
        if stored:
            result._append_row(i, [i], [one])
        else:
            result._append_row(i, [], [])
    return result


def from_dense(
    dense: Iterable[Sequence[Any]],
    dtype: Union[str, DType] = 'float64',
    default: Any = None,
) -> SparseMatrix:
    """Create from a dense 2D sequence.

    Elements equal to the default are skipped.

    Args:
        dense: Rows of equal, non-zero length (nested lists or a 2D ndarray).
        dtype: Element type.
        default: Default element (zero of ``dtype`` unless given).

    Raises:
        InvalidDimensionsError: If there are no rows, no columns, or the
            rows have different lengths.

    Example:
        >>> mat = from_dense([[1, 0, 2], [0, 3, 0]])
        >>> mat.shape
        (2, 3)
    """
    rows = [list(row) for row in dense]
    if not rows or not rows[0]:
        raise InvalidDimensionsError("Dense input must have at least one row and one column")

    width = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != width:
            raise InvalidDimensionsError(
                f"Dense input is ragged: row {i} has {len(row)} elements, expected {width}"
            )

    result = SparseMatrix(len(rows), width, dtype=dtype, default=default)
    for i, row in enumerate(rows):
        vals = [result._coerce(v) for v in row]
        cols = [j for j, v in enumerate(vals) if not result._is_default(v)]
        result._append_row(i, cols, [vals[j] for j in cols])

    logger.debug(f"from_dense: {result.rows}x{result.cols} -> nnz={result.nnz}")
    return result


def from_coo(
    rows: Sequence[int],
    cols: Sequence[int],
    values: Sequence[Any],
    shape: Tuple[int, int],
    dtype: Union[str, DType] = 'float64',
    default: Any = None,
) -> SparseMatrix:
    """Create from coordinate (row, col, value) triples.

    Duplicate coordinates are summed; positions whose final value equals
    the default are not stored.

    Args:
        rows: Row of each element.
        cols: Column of each element.
        values: Element values.
        shape: Matrix dimensions (rows, cols).
        dtype: Element type.
        default: Default element (zero of ``dtype`` unless given).

    Raises:
        DimensionMismatchError: If the three sequences differ in length.
        OutOfRangeError: If a coordinate falls outside ``shape``.
    """
    rows, cols, values = list(rows), list(cols), list(values)
    if not (len(rows) == len(cols) == len(values)):
        raise DimensionMismatchError(
            f"Coordinate lengths differ: rows={len(rows)}, cols={len(cols)}, values={len(values)}"
        )

    n_rows, n_cols = shape
    result = SparseMatrix(n_rows, n_cols, dtype=dtype, default=default)

    buckets = [{} for _ in range(result.rows)]
    for r, c, v in zip(rows, cols, values):
        r, c = result._validate_coordinates(r, c)
        v = result._coerce(v)
        bucket = buckets[r]
        bucket[c] = bucket[c] + v if c in bucket else v

    for i, bucket in enumerate(buckets):
        kept = [c for c in sorted(bucket) if not result._is_default(bucket[c])]
        result._append_row(i, kept, [bucket[c] for c in kept])

    logger.debug(
        f"from_coo: {len(values)} triples -> {result.rows}x{result.cols}, nnz={result.nnz}"
    )
    return result


def zeros_like(mat: SparseMatrix) -> SparseMatrix:
    """Empty matrix with the shape, dtype and default of ``mat``."""
    return SparseMatrix(mat.rows, mat.cols, dtype=mat.dtype, default=mat.default)


# =============================================================================
# Arithmetic
# =============================================================================

def multiply(a: SparseMatrix, b):
    """Product ``a @ b`` for a matrix or vector operand ``b``."""
    return a.multiply(b)


def add(a: SparseMatrix, b: SparseMatrix) -> SparseMatrix:
    """Sum ``a + b`` of two matrices of the same shape."""
    return a.add(b)


# =============================================================================
# Cross-Platform Conversion
# =============================================================================

def to_scipy(mat: SparseMatrix):
    """Convert to ``scipy.sparse.csr_matrix`` (arrays are copied).

    Raises:
        ImportError: If scipy is not installed.
        TypeError: If the matrix stores Python objects or uses a default
            other than zero.
    """
    try:
        import scipy.sparse as sp
    except ImportError:
        raise ImportError("scipy is required for to_scipy()")

    if mat.dtype == 'object':
        raise TypeError("Object-dtype matrices cannot be converted to scipy")
    if mat.default != 0:
        raise TypeError(f"scipy matrices require a zero default, got {mat.default!r}")

    return sp.csr_matrix(
        (mat.values.copy(), mat.col_index.copy(), mat.row_start.copy()),
        shape=mat.shape,
    )


def from_scipy(spmat: Any, dtype: Optional[Union[str, DType]] = None) -> SparseMatrix:
    """Create from any ``scipy.sparse`` matrix or array (data is copied).

    The input is canonicalized first: duplicates are summed, column
    indices sorted and explicit zeros dropped.

    Raises:
        ImportError: If scipy is not installed.
        TypeError: If ``spmat`` is not a scipy sparse object.
    """
    try:
        import scipy.sparse as sp
    except ImportError:
        raise ImportError("scipy is required for from_scipy()")

    if not sp.issparse(spmat):
        raise TypeError(f"Expected a scipy sparse matrix, got {type(spmat).__name__}")

    csr = sp.csr_matrix(spmat, copy=True)
    csr.sum_duplicates()
    csr.eliminate_zeros()
    csr.sort_indices()

    dtype = normalize_dtype(csr.dtype if dtype is None else dtype)
    validate_dtype(dtype)

    n_rows, n_cols = csr.shape
    result = SparseMatrix(n_rows, n_cols, dtype=dtype)
    indptr = csr.indptr.tolist()
    indices = csr.indices.tolist()
    data = csr.data.tolist()

    for i in range(n_rows):
        lo, hi = indptr[i], indptr[i + 1]
        vals = [result._coerce(v) for v in data[lo:hi]]
        kept = [k for k, v in enumerate(vals) if not result._is_default(v)]
        result._append_row(i, [indices[lo + k] for k in kept], [vals[k] for k in kept])

    return result


# =============================================================================
# Type Checking
# =============================================================================

def is_sparse_like(obj) -> bool:
    """Check if object is a sparse matrix-like type."""
    return isinstance(obj, SparseBase)
