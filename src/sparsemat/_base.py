"""
Sparse Matrix Base Class

Defines the abstract interface shared by sparse matrices: shape
properties, element access and the dense-style textual grid, which is
expressed purely through ``get`` so it works for any storage layout.
"""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, Optional, TextIO, Tuple

from ._config import config

__all__ = ['SparseBase']

logger = logging.getLogger("sparsemat.base")


class SparseBase(ABC):
    """
    Abstract base class for sparse matrices.

    Required Properties (subclasses must implement):
        shape: Matrix dimensions (rows, cols)
        dtype: Element type name
        nnz: Number of stored (non-default) elements

    Required Methods (subclasses must implement):
        get(row, col): Element at a position
        copy(): Deep copy
    """

    # =========================================================================
    # Abstract Interface
    # =========================================================================

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        ...

    @property
    @abstractmethod
    def dtype(self) -> str:
        """Element type name."""
        ...

    @property
    @abstractmethod
    def nnz(self) -> int:
        """Number of stored elements."""
        ...

    @abstractmethod
    def get(self, row: int, col: int) -> Any:
        """Element at (row, col), or the default value if not stored."""
        ...

    @abstractmethod
    def copy(self) -> 'SparseBase':
        """Create a deep copy."""
        ...

    # =========================================================================
    # Derived Properties
    # =========================================================================

    @property
    def rows(self) -> int:
        """Number of rows."""
        return self.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns."""
        return self.shape[1]

    @property
    def ndim(self) -> int:
        return 2

    @property
    def size(self) -> int:
        """Total number of elements (rows * cols)."""
        return self.shape[0] * self.shape[1]

    @property
    def density(self) -> float:
        """Fraction of stored elements."""
        return self.nnz / self.size

    def get_row_count(self) -> int:
        return self.shape[0]

    def get_column_count(self) -> int:
        return self.shape[1]

    # =========================================================================
    # Printing
    # =========================================================================

    def _format_rows(self):
        rows, cols = self.shape
        cfg = config.printing
        if rows * cols > cfg.warn_threshold:
            logger.warning(
                f"Printing {rows}x{cols} sparse matrix as a dense grid "
                f"({rows * cols} cells, threshold {cfg.warn_threshold})"
            )
        sep = cfg.separator
        for i in range(rows):
            yield sep.join(str(self.get(i, j)) for j in range(cols))

    def __str__(self) -> str:
        return "\n".join(self._format_rows())

    def print_to(self, stream: Optional[TextIO] = None) -> TextIO:
        """Write the matrix as a dense grid, one line per row.

        Args:
            stream: Output sink (defaults to ``sys.stdout``)

        Returns:
            The stream, for chaining.
        """
        if stream is None:
            stream = sys.stdout
        for line in self._format_rows():
            stream.write(line)
            stream.write("\n")
        return stream
