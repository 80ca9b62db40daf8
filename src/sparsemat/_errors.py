"""
Error handling for sparsemat.

Every failure raised by the engine is a ``SparseMatrixError`` carrying an
integer error code. The concrete classes also derive from the builtin
exception a Python caller would expect (``IndexError``, ``ValueError``),
so ``except IndexError`` keeps working for out-of-range coordinates.
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# Error Codes
# =============================================================================

# Success
SPM_OK = 0

# General errors (1-9)
SPM_ERROR_UNKNOWN = 1
SPM_ERROR_INTERNAL = 2

# Argument errors (10-19)
SPM_ERROR_INVALID_ARGUMENT = 10
SPM_ERROR_DIMENSION_MISMATCH = 11
SPM_ERROR_INDEX_OUT_OF_BOUNDS = 14

# Type errors (20-29)
SPM_ERROR_TYPE_ERROR = 20


_ERROR_MESSAGES = {
    SPM_OK: "Success",
    SPM_ERROR_UNKNOWN: "Unknown error",
    SPM_ERROR_INTERNAL: "Internal error",
    SPM_ERROR_INVALID_ARGUMENT: "Invalid argument",
    SPM_ERROR_DIMENSION_MISMATCH: "Dimension mismatch",
    SPM_ERROR_INDEX_OUT_OF_BOUNDS: "Index out of bounds",
    SPM_ERROR_TYPE_ERROR: "Type error",
}


# =============================================================================
# Exception Classes
# =============================================================================

class SparseMatrixError(Exception):
    """
    Base exception for all sparsemat errors.
    """

    OK = SPM_OK
    ERROR_UNKNOWN = SPM_ERROR_UNKNOWN
    ERROR_INTERNAL = SPM_ERROR_INTERNAL
    ERROR_INVALID_ARGUMENT = SPM_ERROR_INVALID_ARGUMENT
    ERROR_DIMENSION_MISMATCH = SPM_ERROR_DIMENSION_MISMATCH
    ERROR_INDEX_OUT_OF_BOUNDS = SPM_ERROR_INDEX_OUT_OF_BOUNDS
    ERROR_TYPE_ERROR = SPM_ERROR_TYPE_ERROR

    default_code = SPM_ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        """
        Create exception.

        Args:
            message: Detailed message (canonical message for the code if omitted)
            code: Error code (class default if omitted)
        """
        if code is None:
            code = self.default_code
        self.code = code
        if message is None:
            message = _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")
        self.message = message
        super().__init__(message)

    @classmethod
    def from_code(cls, code: int, context: str = "") -> "SparseMatrixError":
        """Create exception from error code with optional context."""
        base_msg = _ERROR_MESSAGES.get(code, "Unknown error")
        msg = f"{context}: {base_msg}" if context else base_msg
        return cls(msg, code)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class OutOfRangeError(SparseMatrixError, IndexError):
    """Row or column coordinate outside the matrix."""

    default_code = SPM_ERROR_INDEX_OUT_OF_BOUNDS


class DimensionMismatchError(SparseMatrixError, ValueError):
    """Operand shapes are not conformable."""

    default_code = SPM_ERROR_DIMENSION_MISMATCH


class InvalidDimensionsError(SparseMatrixError, ValueError):
    """Matrix dimensions must be positive."""

    default_code = SPM_ERROR_INVALID_ARGUMENT


def error_message(code: int) -> str:
    """Canonical message for an error code."""
    return _ERROR_MESSAGES.get(code, f"Unknown error (code={code})")


__all__ = [
    'SPM_OK',
    'SPM_ERROR_UNKNOWN',
    'SPM_ERROR_INTERNAL',
    'SPM_ERROR_INVALID_ARGUMENT',
    'SPM_ERROR_DIMENSION_MISMATCH',
    'SPM_ERROR_INDEX_OUT_OF_BOUNDS',
    'SPM_ERROR_TYPE_ERROR',
    'SparseMatrixError',
    'OutOfRangeError',
    'DimensionMismatchError',
    'InvalidDimensionsError',
    'error_message',
]
