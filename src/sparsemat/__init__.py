"""
sparsemat - Generic Sparse Matrix Engine

Compressed-row sparse matrices over any element type that supplies a
default value, equality, addition and multiplication:
- O(nnz) storage with a canonical (sorted, default-free) layout
- Element get/set with binary search inside a row
- Matrix-vector and matrix-matrix products, matrix addition
- Structural equality and dense-style printing

Architecture:
    ┌──────────────────────────────────────────────┐
    │         SparseMatrix (SparseBase)            │
    ├──────────────────────────────────────────────┤
    │ values[nnz] | col_index[nnz] | row_start[m+1]│
    │        (growable numpy-backed Array)         │
    └──────────────────────────────────────────────┘

Example:
    >>> import sparsemat as sm
    >>>
    >>> a = sm.from_dense([[1, 0], [0, 2]], dtype=sm.int64)
    >>> b = sm.from_dense([[0, 3], [4, 0]], dtype=sm.int64)
    >>> print(a + b)
    1 3
    4 2
    >>>
    >>> mat = sm.SparseMatrix(3)
    >>> mat.set(1.0, 0, 0).set(2.0, 1, 1).set(3.0, 2, 2)
    >>> mat @ [1, 1, 1]
    array([1., 2., 3.])
"""

__version__ = '0.1.0'

# Array (storage foundation)
from ._array import Array, zeros, from_list

# Element types
from ._dtypes import (
    DType,
    Ring,
    float32,
    float64,
    int32,
    int64,
    complex128,
    object_,
    normalize_dtype,
    validate_dtype,
)

# Errors
from ._errors import (
    SparseMatrixError,
    OutOfRangeError,
    DimensionMismatchError,
    InvalidDimensionsError,
)

# Configuration
from ._config import (
    ArrayConfig,
    PrintConfig,
    SparseConfig,
    config,
    get_config,
)

# Matrix
from ._base import SparseBase
from ._matrix import SparseMatrix, EntryView

# Operations
from ._ops import (
    identity,
    from_dense,
    from_coo,
    zeros_like,
    multiply,
    add,
    from_scipy,
    to_scipy,
    is_sparse_like,
)

__all__ = [
    # Version
    '__version__',

    # Core classes
    'SparseBase',
    'SparseMatrix',
    'EntryView',
    'Array',

    # Element types
    'DType',
    'Ring',
    'float32',
    'float64',
    'int32',
    'int64',
    'complex128',
    'object_',
    'normalize_dtype',
    'validate_dtype',

    # Errors
    'SparseMatrixError',
    'OutOfRangeError',
    'DimensionMismatchError',
    'InvalidDimensionsError',

    # Configuration
    'ArrayConfig',
    'PrintConfig',
    'SparseConfig',
    'config',
    'get_config',

    # Array functions
    'zeros',
    'from_list',

    # Operations
    'identity',
    'from_dense',
    'from_coo',
    'zeros_like',
    'multiply',
    'add',
    'from_scipy',
    'to_scipy',
    'is_sparse_like',
]
