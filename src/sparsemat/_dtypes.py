"""
Element Type Definitions

Provides the element-type descriptors a sparse matrix can be built over,
their default (zero) values and the ``Ring`` protocol that bounds the
generic element type.

Numeric element types are stored in native numpy buffers. Any other
Python type (``fractions.Fraction``, ``decimal.Decimal``, user classes)
is stored with the ``object`` dtype and only needs to satisfy ``Ring``.
"""

from typing import Any, Protocol, TypeVar, Union
from enum import Enum

import numpy as np

__all__ = [
    'DType',
    'Ring',
    'T',
    'float32',
    'float64',
    'int32',
    'int64',
    'complex128',
    'object_',
    'normalize_dtype',
    'validate_dtype',
    'to_numpy_dtype',
    'default_value',
    'result_dtype',
    'to_python',
]


class Ring(Protocol):
    """Capabilities required from a matrix element type.

    The element type needs a default value (supplied separately, see
    ``default_value``), equality, addition and multiplication.
    """

    def __add__(self, other: Any) -> Any: ...

    def __mul__(self, other: Any) -> Any: ...

    def __eq__(self, other: object) -> bool: ...


T = TypeVar('T', bound=Ring)


class DType(Enum):
    """
    Element Type Enumeration.

    Example:
        >>> from sparsemat import SparseMatrix, DType
        >>> mat = SparseMatrix(3, dtype=DType.int64)
        >>>
        >>> # Or use module-level constants
        >>> import sparsemat as sm
        >>> mat = SparseMatrix(3, dtype=sm.float32)
    """

    float32 = 'float32'
    float64 = 'float64'
    int32 = 'int32'
    int64 = 'int64'
    complex128 = 'complex128'
    object = 'object'

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"DType.{self.name}"


# =============================================================================
# Module-Level Constants
# =============================================================================

float32 = DType.float32
float64 = DType.float64
int32 = DType.int32
int64 = DType.int64
complex128 = DType.complex128
object_ = DType.object

_PYTHON_TYPES = {
    float: 'float64',
    int: 'int64',
    complex: 'complex128',
    object: 'object',
}

_DEFAULTS = {
    'float32': 0.0,
    'float64': 0.0,
    'int32': 0,
    'int64': 0,
    'complex128': 0j,
    'object': 0,
}


# =============================================================================
# Type Utilities
# =============================================================================

def normalize_dtype(dtype: Union[str, DType, type, np.dtype]) -> str:
    """
    Normalize dtype to its string name.

    Accepts a ``DType`` member, a dtype name, a numpy dtype or one of the
    builtin types ``float``, ``int``, ``complex`` and ``object``.

    Example:
        >>> normalize_dtype(DType.float32)
        'float32'
        >>> normalize_dtype(int)
        'int64'
    """
    if isinstance(dtype, DType):
        return dtype.value
    if isinstance(dtype, str):
        return dtype
    if isinstance(dtype, type) and dtype in _PYTHON_TYPES:
        return _PYTHON_TYPES[dtype]
    if isinstance(dtype, np.dtype) or (isinstance(dtype, type) and issubclass(dtype, np.generic)):
        return np.dtype(dtype).name
    raise TypeError(f"dtype must be str, DType or numpy dtype, got {type(dtype)}")


def validate_dtype(dtype: str) -> None:
    """
    Validate dtype string.

    Raises:
        ValueError: If dtype is not supported
    """
    valid = {e.value for e in DType}
    if dtype not in valid:
        raise ValueError(f"Invalid dtype: {dtype}. Valid: {sorted(valid)}")


def to_numpy_dtype(dtype: Union[str, DType]) -> np.dtype:
    """Get the numpy dtype backing an element type."""
    name = normalize_dtype(dtype)
    validate_dtype(name)
    return np.dtype(name)


def default_value(dtype: Union[str, DType]) -> Any:
    """Default (zero) element for a dtype, as a Python scalar."""
    name = normalize_dtype(dtype)
    validate_dtype(name)
    return _DEFAULTS[name]


def result_dtype(a: Union[str, DType], b: Union[str, DType, np.dtype]) -> str:
    """Dtype of an arithmetic result mixing two element types."""
    promoted = np.result_type(np.dtype(normalize_dtype(a)), np.dtype(normalize_dtype(b)))
    name = promoted.name
    if name not in _DEFAULTS:
        # Promotions outside the supported set are stored as objects
        return 'object'
    return name


def to_python(value: Any) -> Any:
    """Unwrap numpy scalars into the matching Python scalar."""
    if isinstance(value, np.generic):
        return value.item()
    return value
